"""The fixed Cornell box scene built entirely from spheres.

The box walls are spheres of radius 1e5 whose surfaces approximate planes:

- Left wall: red diffuse
- Right wall: blue diffuse
- Back wall, floor, ceiling: white diffuse
- Front wall: black diffuse (behind the camera's near offset)

Inside the box sit two mirror spheres, one glass sphere, and a small
emissive sphere just below the ceiling which is the only light.

The box spans roughly x in [1, 99], y in [0, 81.6], z in [0, 170]; the
camera sits outside the open front at z = 295.6 looking down -z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.cornell_box import create_cornell_box_scene
    >>> scene, camera = create_cornell_box_scene()
    >>> len(scene)
    10
"""

from pathtracer.camera.pinhole import PinholeCamera
from pathtracer.scene.scene import MaterialType, Scene, Sphere

# =============================================================================
# Cornell Box Constants
# =============================================================================

WALL_RADIUS = 1e5

RED_WALL_COLOUR = (0.75, 0.25, 0.25)
BLUE_WALL_COLOUR = (0.25, 0.25, 0.75)
WHITE_WALL_COLOUR = (0.75, 0.75, 0.75)
BLACK = (0.0, 0.0, 0.0)

# Slightly below 1 so Russian roulette still terminates mirror/glass paths
GLASS_COLOUR = (0.999, 0.999, 0.999)
MIRROR_COLOUR = (0.999, 0.999, 0.999)

LIGHT_RADIUS = 1.5
LIGHT_CENTER = (50.0, 81.6 - 16.5, 81.6)
LIGHT_EMISSION = (400.0, 400.0, 400.0)

CAMERA_ORIGIN = (50.0, 52.0, 295.6)
CAMERA_DIRECTION = (0.0, -0.042612, -1.0)


# =============================================================================
# Cornell Box Factory
# =============================================================================


def create_cornell_box_spheres() -> tuple[Sphere, ...]:
    """Build the ten spheres of the Cornell box, in intersection order."""
    diffuse = MaterialType.DIFFUSE
    return (
        Sphere(WALL_RADIUS, (1e5 + 1, 40.8, 81.6), colour=RED_WALL_COLOUR, material=diffuse),
        Sphere(WALL_RADIUS, (-1e5 + 99, 40.8, 81.6), colour=BLUE_WALL_COLOUR, material=diffuse),
        Sphere(WALL_RADIUS, (50.0, 40.8, 1e5), colour=WHITE_WALL_COLOUR, material=diffuse),
        Sphere(WALL_RADIUS, (50.0, 40.8, -1e5 + 170), colour=BLACK, material=diffuse),
        Sphere(WALL_RADIUS, (50.0, 1e5, 81.6), colour=WHITE_WALL_COLOUR, material=diffuse),
        Sphere(WALL_RADIUS, (50.0, -1e5 + 81.6, 81.6), colour=WHITE_WALL_COLOUR, material=diffuse),
        Sphere(16.5, (27.0, 16.5, 47.0), colour=MIRROR_COLOUR, material=MaterialType.SPECULAR),
        Sphere(11.0, (55.0, 11.0, 95.0), colour=MIRROR_COLOUR, material=MaterialType.SPECULAR),
        Sphere(20.0, (73.0, 16.5, 55.0), colour=GLASS_COLOUR, material=MaterialType.REFRACTIVE),
        Sphere(LIGHT_RADIUS, LIGHT_CENTER, emission=LIGHT_EMISSION, colour=BLACK, material=diffuse),
    )


def create_cornell_box_camera() -> PinholeCamera:
    """Create the camera looking into the open front of the box."""
    return PinholeCamera(origin=CAMERA_ORIGIN, direction=CAMERA_DIRECTION)


def create_cornell_box_scene() -> tuple[Scene, PinholeCamera]:
    """Create the Cornell box scene and its camera.

    Returns:
        A tuple of (Scene, PinholeCamera). The scene is not uploaded; call
        `load_scene()` and `setup_camera()` (or use the Renderer) before
        rendering.
    """
    return Scene(create_cornell_box_spheres()), create_cornell_box_camera()
