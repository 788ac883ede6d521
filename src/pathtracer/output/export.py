"""Image export utilities for rendered images.

This module converts linear images to 8-bit and writes them to disk.

Supported formats:
    - PPM (plain-text P3, written directly)
    - PNG and anything else Pillow can write, chosen by file suffix

Quantisation is round-to-nearest after gamma encoding:

    byte = floor(clamp(x)^(1/gamma) * 255 + 0.5)

Example:
    >>> from pathtracer.output.export import save_image
    >>> from pathtracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(64, 48)
    >>> renderer.render(4)
    >>> save_image(renderer.get_image_numpy(), "image.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.output.display import apply_gamma

logger = logging.getLogger(__name__)

PPM_SUFFIX = ".ppm"

# Maximum channel value written in the PPM header
PPM_MAX_VALUE = 255


def image_to_uint8(
    image: npt.NDArray[np.floating],
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Convert a linear image to uint8 with gamma correction.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value (default 2.2).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    encoded = apply_gamma(image, gamma)
    return np.floor(encoded * 255.0 + 0.5).astype(np.uint8)


def encode_ppm(image_uint8: npt.NDArray[np.uint8]) -> str:
    """Encode an 8-bit image as plain-text PPM (P3).

    The header is "P3\\n<width> <height>\\n255\\n", followed by one
    "r g b " group per pixel in row-major order, top row first.

    Args:
        image_uint8: Array of shape (H, W, 3).

    Returns:
        The PPM file contents.

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    if image_uint8.ndim != 3 or image_uint8.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image_uint8.shape}")

    height, width, _ = image_uint8.shape
    header = f"P3\n{width} {height}\n{PPM_MAX_VALUE}\n"
    body = "".join(f"{r} {g} {b} " for r, g, b in image_uint8.reshape(-1, 3).tolist())
    return header + body


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path, gamma: float = 2.2) -> None:
    """Save a linear image as plain-text PPM.

    Raises:
        OSError: If the file cannot be written.
    """
    contents = encode_ppm(image_to_uint8(image, gamma))
    with open(filepath, "w", encoding="ascii") as f:
        f.write(contents)


def check_output_writable(filepath: str | Path) -> None:
    """Open the output file for writing before any render work is done.

    The file is created (or truncated) and later overwritten by save_image().

    Raises:
        OSError: If the file cannot be opened for writing.
    """
    with open(filepath, "w", encoding="ascii"):
        pass


def save_image(image: npt.NDArray[np.floating], filepath: str | Path, gamma: float = 2.2) -> None:
    """Save a linear image, picking the format from the file suffix.

    ".ppm" is written as plain-text P3; any other suffix is handed to
    Pillow.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output path.
        gamma: Gamma correction value (default 2.2).

    Raises:
        OSError: If the file cannot be written.
        ValueError: If Pillow does not recognise the suffix.
    """
    path = Path(filepath)
    if path.suffix.lower() == PPM_SUFFIX:
        save_ppm(image, path, gamma)
    else:
        pil_image = PILImage.fromarray(image_to_uint8(image, gamma))
        pil_image.save(path)
    logger.info("Wrote %s", path)

