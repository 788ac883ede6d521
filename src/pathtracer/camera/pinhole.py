"""Pinhole camera with 2x2 stratified, tent-filtered primary rays.

The camera is a fixed origin and a viewing direction. The image plane is
spanned by two increment vectors:

- cx = (width * fov_scale / height, 0, 0) points right,
- cy = normalize(cx x direction) * fov_scale points up,

so fov_scale sets the vertical field of view (0.5135 is about 54 degrees)
and the horizontal extent follows the aspect ratio.

Each pixel is split into 2x2 sub-pixels. A sample inside sub-pixel (sx, sy)
is offset by a tent-filtered jitter (dx, dy) in [-1, 1), and the primary ray
direction is

    d = cx * (((sx + 0.5 + dx) / 2 + x) / width - 0.5)
      + cy * (((sy + 0.5 + dy) / 2 + y) / height - 0.5)
      + direction

Rays start 140 units along d from the camera origin, which places them
inside the box past the front wall. Pixel row y counts from the bottom of the
image plane.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.pinhole import PinholeCamera, setup_camera
    >>> camera = PinholeCamera(origin=(50.0, 52.0, 295.6), direction=(0.0, -0.042612, -1.0))
    >>> setup_camera(camera, 512, 384)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray, normalize, real
from pathtracer.core.sampler import next_uniform, tent_offset

# Distance from the camera origin to the start of primary rays
NEAR_OFFSET = 140.0

# Default image-plane scale (vertical field of view of about 54 degrees)
DEFAULT_FOV_SCALE = 0.5135


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        direction: Viewing direction; normalized by setup_camera().
        fov_scale: Half-height of the image plane at unit distance.
    """

    origin: tuple[float, float, float]
    direction: tuple[float, float, float]
    fov_scale: float = DEFAULT_FOV_SCALE

    @property
    def vertical_fov(self) -> float:
        """Vertical field of view in degrees."""
        return math.degrees(2.0 * math.atan(self.fov_scale))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_direction = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_cx = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right increment
_camera_cy = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up increment


def setup_camera(camera: PinholeCamera, width: int, height: int) -> None:
    """Initialize camera state for a given image size.

    Args:
        camera: Camera configuration.
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the image size is not positive or the direction is
            the zero vector.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    direction = np.asarray(camera.direction, dtype=np.float64)
    norm = np.linalg.norm(direction)
    if norm == 0.0:
        raise ValueError("Camera direction must be non-zero")
    direction = direction / norm

    cx = np.array([width * camera.fov_scale / height, 0.0, 0.0])
    cy = np.cross(cx, direction)
    cy = cy / np.linalg.norm(cy) * camera.fov_scale

    _camera_origin[None] = [float(c) for c in camera.origin]
    _camera_direction[None] = direction.tolist()
    _camera_cx[None] = cx.tolist()
    _camera_cy[None] = cy.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(
    x: ti.i32,
    y: ti.i32,
    sx: ti.i32,
    sy: ti.i32,
    dx: real,
    dy: real,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate the primary ray for a pixel, sub-pixel and filter offset.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row counted from the bottom (0 = bottom).
        sx: Sub-pixel column (0 or 1).
        sy: Sub-pixel row (0 or 1).
        dx: Horizontal filter offset in [-1, 1).
        dy: Vertical filter offset in [-1, 1).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray starting NEAR_OFFSET along the unnormalized direction, with a
        unit direction.
    """
    fx = ((ti.cast(sx, ti.f64) + 0.5 + dx) / 2.0 + ti.cast(x, ti.f64)) / ti.cast(width, ti.f64) - 0.5
    fy = ((ti.cast(sy, ti.f64) + 0.5 + dy) / 2.0 + ti.cast(y, ti.f64)) / ti.cast(height, ti.f64) - 0.5
    d = _camera_cx[None] * fx + _camera_cy[None] * fy + _camera_direction[None]
    return make_ray(_camera_origin[None] + d * NEAR_OFFSET, normalize(d))


@ti.func
def get_ray_stratified(
    x: ti.i32,
    y: ti.i32,
    sx: ti.i32,
    sy: ti.i32,
    stream: ti.i32,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate a tent-jittered primary ray inside sub-pixel (sx, sy).

    Draws two uniforms from the stream for the horizontal and vertical
    offsets, in that order.
    """
    dx = tent_offset(next_uniform(stream))
    dy = tent_offset(next_uniform(stream))
    return get_ray(x, y, sx, sy, dx, dy, width, height)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, direction, cx and cy.
    """
    fields = {
        "origin": _camera_origin,
        "direction": _camera_direction,
        "cx": _camera_cx,
        "cy": _camera_cy,
    }
    info = {}
    for name, field in fields.items():
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
