"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    sampler: Per-stream PCG32 random numbers and the tent filter
    integrator: Radiance estimator, render target and row kernel
    renderer: Row-banded rendering with progress reporting

Only the leaf modules are re-exported here; import the integrator and
renderer from their modules, since they depend on the camera, materials and
scene packages. All compute-intensive operations use Taichi kernels running
in f64.
"""

from .ray import (
    Ray,
    build_frame,
    cross,
    dot,
    length,
    local_to_world,
    make_ray,
    normalize,
    ray_at,
    real,
    reflect,
    vec3,
)
from .sampler import MAX_STREAMS, draw_uniforms, next_uniform, seed_streams, tent_offset

__all__ = [
    # Vector algebra
    "Ray",
    "build_frame",
    "cross",
    "dot",
    "length",
    "local_to_world",
    "make_ray",
    "normalize",
    "ray_at",
    "real",
    "reflect",
    "vec3",
    # Random streams
    "MAX_STREAMS",
    "draw_uniforms",
    "next_uniform",
    "seed_streams",
    "tent_offset",
]
