"""Scene-level ray intersection and Taichi-side sphere storage.

The scene is stored in Taichi fields in a Structure-of-Arrays layout. A Scene
value is uploaded once with `load_scene()`; during rendering the fields are
read-only and shared by every thread.

`intersect_scene()` is a linear scan keeping the smallest positive distance.
That is O(n) per ray, which is fine for a handful of spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.intersection import load_scene, intersect_scene
    >>> from pathtracer.scene.cornell_box import create_cornell_box_scene
    >>> scene, _ = create_cornell_box_scene()
    >>> load_scene(scene)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging

import taichi as ti

from pathtracer.core.ray import real, vec3
from pathtracer.geometry.sphere import hit_sphere
from pathtracer.scene.scene import MAX_SPHERES, Scene

logger = logging.getLogger(__name__)

# Distance reported when nothing is hit
T_INFINITY = 1e20


@ti.dataclass
class SceneHit:
    """Result of a nearest-hit query.

    Attributes:
        hit: 1 if any sphere was hit, 0 otherwise.
        t: Distance to the nearest hit. T_INFINITY on a miss.
        sphere_id: Index of the nearest sphere, -1 on a miss.
    """

    hit: ti.i32
    t: real
    sphere_id: ti.i32


# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_emissions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_colours = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_materials = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count. The field data is overwritten by the next
    `load_scene()`.
    """
    num_spheres[None] = 0


def load_scene(scene: Scene) -> None:
    """Upload a scene into the Taichi fields.

    Replaces whatever was loaded before. Must not be called while a render
    kernel is running.

    Args:
        scene: The validated scene to upload.
    """
    clear_scene()
    for idx, sphere in enumerate(scene.spheres):
        sphere_centers[idx] = list(sphere.center)
        sphere_radii[idx] = sphere.radius
        sphere_emissions[idx] = list(sphere.emission)
        sphere_colours[idx] = list(sphere.colour)
        sphere_materials[idx] = int(sphere.material)
    num_spheres[None] = len(scene)
    logger.debug("Loaded scene with %d spheres (%d lights)", len(scene), len(scene.lights))


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHit:
    """Find the nearest sphere hit by a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (unit length).

    Returns:
        A SceneHit for the closest sphere, or a miss record.
    """
    closest_t = T_INFINITY
    closest_id = -1

    for i in range(num_spheres[None]):
        d = hit_sphere(ray_origin, ray_direction, sphere_centers[i], sphere_radii[i])
        if d > 0.0 and d < closest_t:
            closest_t = d
            closest_id = i

    did_hit = 0
    if closest_id >= 0:
        did_hit = 1

    return SceneHit(hit=did_hit, t=closest_t, sphere_id=closest_id)


# Host-side query results
_query_t = ti.field(dtype=ti.f64, shape=())
_query_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _intersect_kernel(ox: real, oy: real, oz: real, dx: real, dy: real, dz: real):
    # Single-iteration outer loop keeps the scan in intersect_scene serial
    for _ in range(1):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz))
        _query_t[None] = rec.t
        _query_id[None] = rec.sphere_id


def intersect_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, int]:
    """Host-side nearest-hit query against the loaded scene.

    Args:
        origin: Ray origin.
        direction: Unit ray direction.

    Returns:
        Tuple of (distance, sphere index). A miss is (0.0, -1).
    """
    _intersect_kernel(*origin, *direction)
    sphere_id = int(_query_id[None])
    if sphere_id < 0:
        return 0.0, -1
    return float(_query_t[None]), sphere_id
