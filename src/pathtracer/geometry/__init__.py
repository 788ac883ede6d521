"""Geometry module for shape primitives.

Components:
    sphere: Ray-sphere intersection and normals

Intersection routines are Taichi functions (@ti.func) returning the hit
distance, with 0 meaning no hit beyond the self-intersection epsilon.
"""

from .sphere import EPSILON, NO_HIT, hit_sphere, orient_normal, sphere_normal

__all__ = [
    "EPSILON",
    "NO_HIT",
    "hit_sphere",
    "orient_normal",
    "sphere_normal",
]
