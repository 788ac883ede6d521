"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the rendering kernel. The
estimator is the classic recursive formulation

    L(ray, depth, E) = Le * E + direct + colour * L(next, depth + 1, E')

unrolled into a loop with a throughput accumulator. Wherever the recursive
form would evaluate two children (a glass surface near the camera), the
second child is pushed onto a small per-stream stack of pending rays and
traced after the first.

Key features:
    - Material dispatch (diffuse, specular, refractive)
    - Next-event estimation on diffuse surfaces, with emission switched off
      on the following bounce so lights are not counted twice
    - Russian roulette on the surface colour after `roulette_depth` bounces
      (and always on black surfaces), reweighted by 1/p to stay unbiased
    - Hard depth cap of MAX_DEPTH returning emission only
    - Both dielectric branches traced for depth <= SPLIT_DEPTH, one branch
      chosen stochastically deeper in the path

Every random number comes from the calling thread's own stream, so the
estimator is safe to run in parallel over rows.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.integrator import estimate_mean_radiance
    >>> from pathtracer.scene.cornell_box import create_cornell_box_scene
    >>> from pathtracer.scene.intersection import load_scene
    >>> scene, camera = create_cornell_box_scene()
    >>> load_scene(scene)
    >>> estimate_mean_radiance((50, 40, 100), (0, 1, 0), num_samples=64)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import get_ray_stratified
from pathtracer.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, SUBPIXELS_PER_PIXEL
from pathtracer.core.ray import vec3
from pathtracer.core.sampler import MAX_STREAMS, next_uniform, seed_streams
from pathtracer.geometry.sphere import orient_normal, sphere_normal
from pathtracer.materials.diffuse import sample_diffuse_direction, sample_direct_light
from pathtracer.materials.refractive import choose_dielectric_branch, refract_dielectric
from pathtracer.materials.specular import scatter_specular
from pathtracer.scene.intersection import (
    intersect_scene,
    sphere_centers,
    sphere_colours,
    sphere_emissions,
    sphere_materials,
)
from pathtracer.scene.scene import MaterialType

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Hard cap on path length; reaching it returns emission only
MAX_DEPTH = 100

# Default depth after which Russian roulette applies to every surface
DEFAULT_ROULETTE_DEPTH = 5

# Dielectric hits at this depth or shallower trace both branches
SPLIT_DEPTH = 2

# Pending-ray stack size per stream. Splits only happen for depth <= 2, so at
# most two rays are ever pending at once.
MAX_PENDING = 4

# =============================================================================
# Integrator Settings
# =============================================================================

_roulette_depth = ti.field(dtype=ti.i32, shape=())


def set_roulette_depth(depth: int) -> None:
    """Set the depth after which Russian roulette applies.

    Setting it to MAX_DEPTH or higher effectively disables roulette on
    non-black surfaces; paths are then only cut by the hard depth cap.

    Args:
        depth: Non-negative bounce count.

    Raises:
        ValueError: If depth is negative.
    """
    if depth < 0:
        raise ValueError(f"Roulette depth must be non-negative, got {depth}")
    _roulette_depth[None] = depth


def get_roulette_depth() -> int:
    """Get the depth after which Russian roulette applies."""
    return int(_roulette_depth[None])


def reset_integrator_settings() -> None:
    """Restore default integrator settings."""
    set_roulette_depth(DEFAULT_ROULETTE_DEPTH)


# =============================================================================
# Pending-Ray Stack (one per stream)
# =============================================================================

_pending_origin = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_STREAMS, MAX_PENDING))
_pending_direction = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_STREAMS, MAX_PENDING))
_pending_throughput = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_STREAMS, MAX_PENDING))
_pending_depth = ti.field(dtype=ti.i32, shape=(MAX_STREAMS, MAX_PENDING))
_pending_emissive = ti.field(dtype=ti.i32, shape=(MAX_STREAMS, MAX_PENDING))


@ti.func
def _push_pending(
    stream: ti.i32,
    slot: ti.i32,
    origin: vec3,
    direction: vec3,
    throughput: vec3,
    depth: ti.i32,
    emissive: ti.i32,
):
    _pending_origin[stream, slot] = origin
    _pending_direction[stream, slot] = direction
    _pending_throughput[stream, slot] = throughput
    _pending_depth[stream, slot] = depth
    _pending_emissive[stream, slot] = emissive


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Row-major, top row first
_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffer. The buffer is
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the rendered image as a NumPy array.

    Every pixel is an average of clamped sub-pixel estimates, so values lie
    in [0, 1].

    Returns:
        Array of shape (height, width, 3), top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return _color_buffer.to_numpy()[:height, :width, :].copy()


# =============================================================================
# Radiance Estimator
# =============================================================================


@ti.func
def estimate_radiance(ray_origin: vec3, ray_direction: vec3, stream: ti.i32) -> vec3:
    """Unbiased radiance estimate along a ray.

    Starts at depth 0 with emission counted. Each pending ray is traced
    until it escapes, is terminated by Russian roulette, or reaches the
    depth cap.

    Args:
        ray_origin: The ray origin.
        ray_direction: The ray direction (unit length).
        stream: Random stream owned by the calling thread; also selects the
            pending-ray stack.

    Returns:
        The estimated radiance (RGB). Escaped rays contribute nothing.
    """
    radiance = vec3(0.0, 0.0, 0.0)
    roulette_depth = _roulette_depth[None]

    _push_pending(stream, 0, ray_origin, ray_direction, vec3(1.0, 1.0, 1.0), 0, 1)
    pending = 1

    while pending > 0:
        pending -= 1
        origin = _pending_origin[stream, pending]
        direction = _pending_direction[stream, pending]
        throughput = _pending_throughput[stream, pending]
        depth = _pending_depth[stream, pending]
        emissive = _pending_emissive[stream, pending]

        active = 1
        while active == 1:
            rec = intersect_scene(origin, direction)

            if rec.hit == 0:
                # No environment light
                active = 0
            else:
                sid = rec.sphere_id
                hit_point = origin + direction * rec.t
                normal = sphere_normal(hit_point, sphere_centers[sid])
                oriented = orient_normal(normal, direction)
                colour = sphere_colours[sid]
                emission = sphere_emissions[sid]

                # Russian roulette on the maximum reflectance
                p = tm.max(colour.x, tm.max(colour.y, colour.z))
                depth += 1
                if depth > roulette_depth or p == 0.0:
                    if next_uniform(stream) < p:
                        colour = colour / p
                    else:
                        radiance += throughput * emission * ti.cast(emissive, ti.f64)
                        active = 0

                if active == 1 and depth > MAX_DEPTH:
                    radiance += throughput * emission
                    active = 0

                if active == 1:
                    material = sphere_materials[sid]

                    if material == int(MaterialType.DIFFUSE):
                        direct = sample_direct_light(hit_point, oriented, colour, stream)
                        radiance += throughput * (emission * ti.cast(emissive, ti.f64) + direct)
                        throughput = throughput * colour
                        direction = sample_diffuse_direction(oriented, stream)
                        emissive = 0

                    elif material == int(MaterialType.SPECULAR):
                        radiance += throughput * emission
                        throughput = throughput * colour
                        direction = scatter_specular(direction, normal)
                        emissive = 1

                    else:
                        radiance += throughput * emission
                        reflected, refracted, re, tr, total_internal = refract_dielectric(
                            direction, normal, oriented
                        )
                        throughput = throughput * colour
                        emissive = 1

                        if total_internal == 1:
                            direction = reflected
                        elif depth <= SPLIT_DEPTH:
                            _push_pending(
                                stream, pending, hit_point, refracted, throughput * tr, depth, 1
                            )
                            pending += 1
                            throughput = throughput * re
                            direction = reflected
                        else:
                            take_reflection, weight = choose_dielectric_branch(re, stream)
                            throughput = throughput * weight
                            direction = refracted
                            if take_reflection == 1:
                                direction = reflected

                    origin = hit_point

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
):
    """Render a band of rows.

    Rows are counted from the bottom of the image plane and each row is
    rendered by one thread using the stream with the row's index. Every
    pixel averages `samples` estimates in each of its 2x2 sub-pixels, clamps
    each sub-pixel mean to [0, 1] and weights it by 1/4.
    """
    for y in range(row_start, row_end):
        inv_samples = 1.0 / ti.cast(samples, ti.f64)
        for x in range(width):
            pixel = vec3(0.0, 0.0, 0.0)
            for sy in range(2):
                for sx in range(2):
                    subpixel = vec3(0.0, 0.0, 0.0)
                    for _ in range(samples):
                        ray = get_ray_stratified(x, y, sx, sy, y, width, height)
                        subpixel += estimate_radiance(ray.origin, ray.direction, y) * inv_samples
                    pixel += tm.clamp(subpixel, 0.0, 1.0) * 0.25
            _color_buffer[height - 1 - y, x] = pixel


def render_rows(row_start: int, row_end: int, samples_per_subpixel: int) -> None:
    """Render camera-space rows [row_start, row_end) into the render target.

    The scene, camera and random streams (one per row) must already be set
    up. Rows are independent, so bands may be rendered in any order and
    grouping without changing the result.

    Args:
        row_start: First row (counted from the bottom).
        row_end: One past the last row.
        samples_per_subpixel: Estimates averaged per sub-pixel.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row range or sample count is invalid.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) outside [0, {height})")
    if samples_per_subpixel <= 0:
        raise ValueError(f"Samples per sub-pixel must be positive, got {samples_per_subpixel}")
    if row_end > MAX_STREAMS:
        raise ValueError(f"Row {row_end} exceeds available streams ({MAX_STREAMS})")
    if row_start == row_end:
        return
    logger.debug("Rendering rows %d-%d at %d samples per sub-pixel", row_start, row_end, samples_per_subpixel)
    _render_rows(row_start, row_end, width, height, samples_per_subpixel)


# =============================================================================
# Inspection
# =============================================================================

_probe_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f64, shape=())
_probe_sum = ti.Vector.field(3, dtype=ti.f64, shape=MAX_STREAMS)
_probe_max = ti.Vector.field(3, dtype=ti.f64, shape=MAX_STREAMS)


@ti.kernel
def _estimate_kernel(num_streams: ti.i32, per_stream: ti.i32):
    for stream in range(num_streams):
        total = vec3(0.0, 0.0, 0.0)
        peak = vec3(0.0, 0.0, 0.0)
        for _ in range(per_stream):
            sample = estimate_radiance(_probe_origin[None], _probe_direction[None], stream)
            total += sample
            peak = tm.max(peak, sample)
        _probe_sum[stream] = total
        _probe_max[stream] = peak


def estimate_mean_radiance(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    num_samples: int = 1024,
    seed: int = 0,
    *,
    return_max: bool = False,
):
    """Average many independent radiance estimates along one ray.

    Samples are spread over up to MAX_STREAMS parallel streams; the total is
    rounded up to a multiple of the stream count. The loaded scene is used;
    the render target is not touched.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized here).
        num_samples: Requested number of estimates.
        seed: Seed for the streams.
        return_max: Also return the per-channel maximum single estimate.

    Returns:
        The mean radiance as an (r, g, b) tuple, or a tuple of
        (mean, max) when return_max is set.

    Raises:
        ValueError: If num_samples is not positive.
    """
    if num_samples <= 0:
        raise ValueError(f"num_samples must be positive, got {num_samples}")

    num_streams = min(num_samples, MAX_STREAMS)
    per_stream = -(-num_samples // num_streams)
    seed_streams(seed, num_streams)

    dir_array = np.asarray(direction, dtype=np.float64)
    _probe_origin[None] = [float(c) for c in origin]
    _probe_direction[None] = (dir_array / np.linalg.norm(dir_array)).tolist()

    _estimate_kernel(num_streams, per_stream)

    total = _probe_sum.to_numpy()[:num_streams].sum(axis=0)
    mean = tuple(float(c) for c in total / (num_streams * per_stream))
    if return_max:
        peak = _probe_max.to_numpy()[:num_streams].max(axis=0)
        return mean, tuple(float(c) for c in peak)
    return mean

