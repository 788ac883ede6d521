"""Display-space conversion of rendered images.

The renderer produces linear radiance already clamped per sub-pixel, so the
display pipeline is just a clamp followed by gamma encoding.

Example:
    >>> import numpy as np
    >>> from pathtracer.output.display import apply_gamma
    >>> image = np.full((2, 2, 3), 0.25)
    >>> encoded = apply_gamma(image, gamma=2.2)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def clamp_image(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Clamp an image to the [0, 1] range.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        A new float64 array with every channel in [0, 1].
    """
    return np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = 2.2,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2.2).

    Returns:
        Gamma encoded image, out = clamp(in)^(1/gamma).

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    # Clamp first so negative values cannot produce NaN
    image = clamp_image(image)
    if gamma == 1.0:
        return image

    return np.power(image, 1.0 / gamma)

