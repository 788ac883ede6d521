"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera with 2x2 stratified, tent-filtered rays
"""

from .pinhole import (
    DEFAULT_FOV_SCALE,
    NEAR_OFFSET,
    PinholeCamera,
    get_camera_info,
    get_ray,
    get_ray_stratified,
    setup_camera,
)

__all__ = [
    "DEFAULT_FOV_SCALE",
    "NEAR_OFFSET",
    "PinholeCamera",
    "get_camera_info",
    "get_ray",
    "get_ray_stratified",
    "setup_camera",
]
