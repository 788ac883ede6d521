"""Specular (perfect mirror) material.

The mirror direction is

    R = D - 2(N . D)N

where D is the incident direction and N is the surface normal. A mirror has
no diffuse lobe, so it gets no direct-light sampling; light sources are
found only when the reflected path hits them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.specular import scatter_specular
    >>> # Use within a Taichi kernel:
    >>> # direction = scatter_specular(incident_dir, normal)
"""

import taichi as ti

from pathtracer.core.ray import reflect, vec3


@ti.func
def scatter_specular(incident_direction: vec3, normal: vec3) -> vec3:
    """Compute the mirror-reflected direction.

    Args:
        incident_direction: The incoming ray direction (unit length).
        normal: The surface normal (unit length, either orientation).

    Returns:
        The reflected direction (unit length).
    """
    return reflect(incident_direction, normal)
