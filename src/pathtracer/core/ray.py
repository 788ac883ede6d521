"""Ray data structure and vector utilities for the path tracer.

This module provides the fundamental Ray dataclass and the vector algebra the
estimator is built from. Everything runs inside Taichi kernels; vectors are
double precision so that the large wall spheres of the Cornell scene
(radius 1e5) intersect without visible precision loss.

All vector helpers are pure: they return new values and never modify their
operands.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.ray import Ray, ray_at, vec3
    >>> # Use within a Taichi kernel:
    >>> # ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Scalar and 3D vector types. Vectors double as points, directions,
# RGB colours, radiance and path throughput.
real = ti.f64
vec3 = ti.types.vector(3, ti.f64)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Expected to be unit
            length where rays are intersected and shaded, but this is not
            enforced at construction.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Return v divided by its Euclidean norm.

    The operand is left untouched and a new vector is returned, so callers
    that still need the original value can keep using it.

    Args:
        v: A non-zero vector. Normalizing the zero vector is undefined and
            must be avoided by the caller.

    Returns:
        A unit vector parallel to v.
    """
    return v / ti.sqrt(tm.dot(v, v))


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes d - n * 2 * (n . d). The normal must be unit length; its
    orientation does not matter.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The mirrored direction vector.
    """
    return incident - normal * 2.0 * tm.dot(normal, incident)


@ti.func
def build_frame(w: vec3):
    """Build two vectors perpendicular to w.

    The helper axis is (0, 1, 0) when |w.x| > 0.1 and (1, 0, 0) otherwise.
    This branch is discontinuous across the sphere of directions but is kept
    as is so renders stay comparable with earlier output.

    Args:
        w: The frame axis. When w is unit length the result is an orthonormal
            basis (u, v, w); otherwise u is unit length and v has the length
            of w.

    Returns:
        A tuple (u, v) with u = normalize(a x w) and v = w x u.
    """
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(w.x) > 0.1:
        a = vec3(0.0, 1.0, 0.0)
    u = normalize(tm.cross(a, w))
    v = tm.cross(w, u)
    return u, v


@ti.func
def local_to_world(local_dir: vec3, u: vec3, v: vec3, w: vec3) -> vec3:
    """Transform a direction from frame (u, v, w) coordinates to world space."""
    return local_dir.x * u + local_dir.y * v + local_dir.z * w
