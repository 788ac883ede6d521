"""Render settings shared by the renderer and the command line."""

from dataclasses import dataclass

# Maximum supported image dimensions (the render target is preallocated)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

# Sub-pixels per pixel (2x2 stratification)
SUBPIXELS_PER_PIXEL = 4


def samples_per_subpixel(samples: int) -> int:
    """Split samples per pixel over the 2x2 sub-pixels, at least one each."""
    return max(1, samples // SUBPIXELS_PER_PIXEL)


@dataclass
class RenderSettings:
    """Configuration for one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Samples per pixel. Spread over the 2x2 sub-pixels, so the
            per-sub-pixel count is samples // 4 (at least 1).
        seed: Seed for the per-row random streams.
        roulette_depth: Depth after which Russian roulette applies.
        rows_per_batch: Rows rendered per kernel launch; only affects
            progress granularity.
        output: Output image path.
        gamma: Gamma used when writing the image.
    """

    width: int = 512
    height: int = 384
    samples: int = 4
    seed: int = 0
    roulette_depth: int = 5
    rows_per_batch: int = 16
    output: str = "image.ppm"
    gamma: float = 2.2

    @property
    def subpixel_samples(self) -> int:
        """Estimates averaged in each sub-pixel."""
        return samples_per_subpixel(self.samples)

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: On the first invalid field.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples <= 0:
            raise ValueError(f"Samples per pixel must be positive, got {self.samples}")
        if self.seed < 0:
            raise ValueError(f"Seed must be non-negative, got {self.seed}")
        if self.roulette_depth < 0:
            raise ValueError(f"Roulette depth must be non-negative, got {self.roulette_depth}")
        if self.rows_per_batch <= 0:
            raise ValueError(f"Rows per batch must be positive, got {self.rows_per_batch}")
        if self.gamma <= 0.0:
            raise ValueError(f"Gamma must be positive, got {self.gamma}")
        if not self.output:
            raise ValueError("Output path must not be empty")
