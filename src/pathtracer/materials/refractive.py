"""Refractive (dielectric/glass) material implementation.

This module implements the dielectric interface between air (n = 1) and
glass (n = 1.5).

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance:
        Re = R0 + (1 - R0) * (1 - cos(theta))^5,  R0 = ((n2 - n1) / (n2 + n1))^2
      where cos(theta) is taken on the air side of the interface
    - Total internal reflection when cos^2(theta_t) < 0

Which branches get traced is decided by the integrator: near the camera both
reflection and refraction are followed, deeper in the path one branch is
picked with `choose_dielectric_branch()` and reweighted to stay unbiased.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.refractive import refract_dielectric
    >>> # Use within a Taichi kernel:
    >>> # refl, refr, re, tr, tir = refract_dielectric(direction, n, nl)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, real, reflect, vec3
from pathtracer.core.sampler import next_uniform

# Refractive indices
AIR_IOR = 1.0
GLASS_IOR = 1.5


@ti.func
def refract_dielectric(incident_direction: vec3, normal: vec3, oriented_normal: vec3):
    """Split an incident ray at a glass surface.

    The reflection direction is always computed. Whether the ray enters or
    leaves the glass follows from comparing the true normal with the
    oriented normal.

    Args:
        incident_direction: The incoming ray direction (unit length).
        normal: The outward sphere normal (unit length).
        oriented_normal: The normal flipped to face the incoming ray.

    Returns:
        A tuple (reflected, refracted, re, tr, total_internal) where
        reflected/refracted are unit directions, re is the Schlick
        reflectance, tr = 1 - re, and total_internal is 1 when no
        refraction is possible. On total internal reflection refracted is
        the zero vector, re = 1 and tr = 0.
    """
    reflected = reflect(incident_direction, normal)
    into = tm.dot(normal, oriented_normal) > 0.0

    nc = AIR_IOR
    nt = GLASS_IOR
    nnt = nt / nc
    if into:
        nnt = nc / nt
    ddn = tm.dot(incident_direction, oriented_normal)
    cos2t = 1.0 - nnt * nnt * (1.0 - ddn * ddn)

    refracted = vec3(0.0, 0.0, 0.0)
    re = 1.0
    tr = 0.0
    total_internal = 1

    if cos2t >= 0.0:
        total_internal = 0
        side = -1.0
        if into:
            side = 1.0
        refracted = normalize(
            incident_direction * nnt - normal * (side * (ddn * nnt + ti.sqrt(cos2t)))
        )

        a = nt - nc
        b = nt + nc
        r0 = a * a / (b * b)
        c = 1.0 + ddn
        if not into:
            c = 1.0 - tm.dot(refracted, normal)
        re = r0 + (1.0 - r0) * c * c * c * c * c
        tr = 1.0 - re

    return reflected, refracted, re, tr, total_internal


@ti.func
def reflection_probability(re: real) -> real:
    """Probability of following the reflected branch: 0.25 + 0.5 * Re."""
    return 0.25 + 0.5 * re


@ti.func
def choose_dielectric_branch(re: real, stream: ti.i32):
    """Pick one of the two dielectric branches at random.

    Reflection is chosen with probability P = 0.25 + 0.5 * Re and weighted by
    Re / P; refraction otherwise, weighted by (1 - Re) / (1 - P). The expected
    contribution equals the Fresnel-weighted sum of both branches.

    Args:
        re: Schlick reflectance of the interface.
        stream: Random stream owned by the calling thread.

    Returns:
        A tuple (take_reflection, weight) with take_reflection 1 or 0.
    """
    p = reflection_probability(re)
    take_reflection = 0
    weight = (1.0 - re) / (1.0 - p)
    if next_uniform(stream) < p:
        take_reflection = 1
        weight = re / p
    return take_reflection, weight
