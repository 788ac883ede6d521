"""Diffuse (Lambertian) material: bounce sampling and next-event estimation.

A diffuse surface scatters light equally in all directions; its BRDF is
colour / pi. Two pieces of sampling live here:

- `sample_diffuse_direction()` draws the indirect bounce from a
  cosine-weighted hemisphere around the oriented normal. With that density
  the cos / pdf factor cancels the 1/pi of the BRDF, so the bounce is
  weighted by the colour alone.
- `sample_direct_light()` performs next-event estimation: for every emissive
  sphere it samples a direction uniformly inside the cone the sphere
  subtends, traces a shadow ray, and adds the light's contribution when the
  shadow ray reaches that sphere first.

Because direct light is accounted for explicitly here, the indirect bounce
that follows a diffuse hit must not count emission again.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.diffuse import sample_diffuse_direction
    >>> # Use within a Taichi kernel:
    >>> # direction = sample_diffuse_direction(oriented_normal, stream)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import build_frame, local_to_world, normalize, vec3
from pathtracer.core.sampler import next_uniform
from pathtracer.scene.intersection import (
    intersect_scene,
    num_spheres,
    sphere_centers,
    sphere_emissions,
    sphere_radii,
)


@ti.func
def sample_diffuse_direction(w: vec3, stream: ti.i32) -> vec3:
    """Cosine-weighted hemisphere sample around w.

    Args:
        w: The oriented surface normal (unit length).
        stream: Random stream owned by the calling thread.

    Returns:
        A unit direction in the hemisphere of w with pdf cos(theta) / pi.
    """
    r1 = 2.0 * tm.pi * next_uniform(stream)
    r2 = next_uniform(stream)
    r2s = ti.sqrt(r2)

    u, v = build_frame(w)
    local_dir = vec3(ti.cos(r1) * r2s, ti.sin(r1) * r2s, ti.sqrt(1.0 - r2))
    return normalize(local_to_world(local_dir, u, v, w))


@ti.func
def sample_light_cone(point: vec3, light: ti.i32, stream: ti.i32):
    """Sample a direction toward a spherical light, uniform in its cone.

    Args:
        point: The shading point (outside the light).
        light: Index of the light sphere.
        stream: Random stream owned by the calling thread.

    Returns:
        A tuple (direction, solid_angle) where direction is a unit vector
        inside the cone subtended by the light and solid_angle is
        2 * pi * (1 - cos_a_max).
    """
    to_light = sphere_centers[light] - point
    radius = sphere_radii[light]
    cos_a_max = ti.sqrt(1.0 - radius * radius / tm.dot(to_light, to_light))

    eps1 = next_uniform(stream)
    eps2 = next_uniform(stream)
    cos_a = 1.0 - eps1 + eps1 * cos_a_max
    sin_a = ti.sqrt(1.0 - cos_a * cos_a)
    phi = 2.0 * tm.pi * eps2

    sw = normalize(to_light)
    su, sv = build_frame(sw)
    direction = normalize(su * ti.cos(phi) * sin_a + sv * ti.sin(phi) * sin_a + sw * cos_a)
    solid_angle = 2.0 * tm.pi * (1.0 - cos_a_max)
    return direction, solid_angle


@ti.func
def sample_direct_light(point: vec3, oriented_normal: vec3, colour: vec3, stream: ti.i32) -> vec3:
    """Next-event estimate of direct lighting at a diffuse surface point.

    Sums one shadow-ray sample per emissive sphere. A light contributes only
    if the nearest hit along the shadow ray is that same light; any other
    sphere in between occludes it.

    Args:
        point: The shading point.
        oriented_normal: Surface normal facing the incoming ray.
        colour: Surface reflectance (already Russian-roulette scaled).
        stream: Random stream owned by the calling thread.

    Returns:
        colour * Le * (l . n) * solid_angle / pi summed over visible lights.
    """
    direct = vec3(0.0, 0.0, 0.0)

    for i in range(num_spheres[None]):
        emission = sphere_emissions[i]
        if emission.x > 0.0 or emission.y > 0.0 or emission.z > 0.0:
            direction, solid_angle = sample_light_cone(point, i, stream)
            shadow = intersect_scene(point, direction)
            if shadow.hit == 1 and shadow.sphere_id == i:
                direct += colour * emission * (tm.dot(direction, oriented_normal) * solid_angle / tm.pi)

    return direct
