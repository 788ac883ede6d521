"""Output module for rendered images.

Components:
    display: Clamping and gamma encoding
    export: 8-bit quantisation and PPM / Pillow file output
"""

from .display import apply_gamma, clamp_image
from .export import check_output_writable, encode_ppm, image_to_uint8, save_image, save_ppm

__all__ = [
    "apply_gamma",
    "check_output_writable",
    "clamp_image",
    "encode_ppm",
    "image_to_uint8",
    "save_image",
    "save_ppm",
]
