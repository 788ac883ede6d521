"""Sphere primitive with ray-sphere intersection.

The intersection solves |o + t d - c|^2 = r^2 for a unit direction d using the
half-b form:

    op = c - o
    b = op . d
    disc = b^2 - op . op + r^2

A negative discriminant is a miss. Otherwise the near root b - sqrt(disc) is
taken if it lies beyond EPSILON, else the far root b + sqrt(disc). Rays that
start on a surface therefore never re-hit that surface at t ~ 0, which keeps
shadow and bounce rays free of self-intersection acne without offsetting
their origins.

Valid distances are strictly positive, so 0 doubles as the miss sentinel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.geometry.sphere import hit_sphere, vec3
    >>> # Use hit_sphere within a Taichi kernel:
    >>> # t = hit_sphere(vec3(0, 0, 5), vec3(0, 0, -1), vec3(0, 0, 0), 1.0)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, real, vec3

# Minimum accepted hit distance
EPSILON = 1e-4

# Returned by hit_sphere when the ray misses
NO_HIT = 0.0


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: real,
) -> real:
    """Distance along a ray to the first sphere crossing beyond EPSILON.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (must be unit length).
        center: The sphere centre.
        radius: The sphere radius (positive).

    Returns:
        The hit distance, or NO_HIT (0.0) if the ray misses or both roots
        lie at or behind EPSILON.
    """
    op = center - ray_origin
    b = tm.dot(op, ray_direction)
    disc = b * b - tm.dot(op, op) + radius * radius

    t = NO_HIT
    if disc >= 0.0:
        sqrt_disc = ti.sqrt(disc)
        if b - sqrt_disc > EPSILON:
            t = b - sqrt_disc
        elif b + sqrt_disc > EPSILON:
            t = b + sqrt_disc

    return t


@ti.func
def sphere_normal(point: vec3, center: vec3) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return normalize(point - center)


@ti.func
def orient_normal(normal: vec3, ray_direction: vec3) -> vec3:
    """Flip a normal so that it faces against the incoming ray.

    Shading code uses the oriented normal to reason about the visible
    hemisphere whether the ray is entering or leaving a volume.
    """
    oriented = normal
    if tm.dot(normal, ray_direction) >= 0.0:
        oriented = -normal
    return oriented
