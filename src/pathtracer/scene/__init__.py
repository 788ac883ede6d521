"""Scene module.

Components:
    scene: Validated sphere and scene descriptions
    intersection: Structure-of-Arrays scene storage and nearest-hit queries
    cornell_box: The fixed Cornell box sphere scene and camera
"""

from .cornell_box import (
    create_cornell_box_camera,
    create_cornell_box_scene,
    create_cornell_box_spheres,
)
from .intersection import (
    T_INFINITY,
    SceneHit,
    clear_scene,
    get_sphere_count,
    intersect_ray,
    intersect_scene,
    load_scene,
)
from .scene import MAX_SPHERES, MaterialType, Scene, Sphere

__all__ = [
    # Scene description
    "MAX_SPHERES",
    "MaterialType",
    "Scene",
    "Sphere",
    # Storage and intersection
    "T_INFINITY",
    "SceneHit",
    "clear_scene",
    "get_sphere_count",
    "intersect_ray",
    "intersect_scene",
    "load_scene",
    # Cornell box
    "create_cornell_box_camera",
    "create_cornell_box_scene",
    "create_cornell_box_spheres",
]
