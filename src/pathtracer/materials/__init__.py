"""Materials module.

Components:
    diffuse: Cosine-weighted bounces and direct light sampling
    specular: Perfect mirror reflection
    refractive: Air/glass interface with Schlick Fresnel
"""

from .diffuse import sample_diffuse_direction, sample_direct_light, sample_light_cone
from .refractive import (
    AIR_IOR,
    GLASS_IOR,
    choose_dielectric_branch,
    reflection_probability,
    refract_dielectric,
)
from .specular import scatter_specular

__all__ = [
    # Diffuse
    "sample_diffuse_direction",
    "sample_direct_light",
    "sample_light_cone",
    # Specular
    "scatter_specular",
    # Refractive
    "AIR_IOR",
    "GLASS_IOR",
    "choose_dielectric_branch",
    "reflection_probability",
    "refract_dielectric",
]
