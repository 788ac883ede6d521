"""Row-banded renderer for the loaded scene.

This module provides a convenient wrapper around the core integrator that supports:
- Rendering the image in bands of rows
- Progress callbacks after each band
- A generator variant for iterative processing
- Conversion and saving of the result

Every row draws from its own random stream, seeded once per render, so the
image depends only on the seed and sample count, never on the band size.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.renderer import Renderer
    >>> from pathtracer.scene.cornell_box import create_cornell_box_scene
    >>> from pathtracer.scene.intersection import load_scene
    >>> from pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> load_scene(scene)
    >>> setup_camera(camera, 64, 48)
    >>>
    >>> renderer = Renderer(64, 48, seed=7)
    >>> renderer.render(4)
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from pathtracer.config import SUBPIXELS_PER_PIXEL, samples_per_subpixel
from pathtracer.core.integrator import (
    DEFAULT_ROULETTE_DEPTH,
    clear_render_target,
    get_image_numpy,
    render_rows,
    set_roulette_depth,
    setup_render_target,
)
from pathtracer.core.sampler import seed_streams
from pathtracer.output.export import image_to_uint8, save_image

logger = logging.getLogger(__name__)

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the loaded scene through the configured camera.

    The renderer owns the render target dimensions and delegates to the
    global integrator buffers (which are Taichi fields). The scene and camera
    must be uploaded with `load_scene()` and `setup_camera()` beforehand.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Seed for the per-row random streams.
        roulette_depth: Depth after which Russian roulette applies.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        seed: int = 0,
        roulette_depth: int = DEFAULT_ROULETTE_DEPTH,
    ) -> None:
        """Initialize the renderer.

        Raises:
            ValueError: If the dimensions are unsupported, or the seed or
                roulette depth is negative.
        """
        if seed < 0:
            raise ValueError(f"Seed must be non-negative, got {seed}")
        setup_render_target(width, height)
        set_roulette_depth(roulette_depth)
        self._width = width
        self._height = height
        self.seed = seed
        self.roulette_depth = roulette_depth

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    def reset(self) -> None:
        """Clear the image without changing the dimensions."""
        clear_render_target()

    def render(
        self,
        samples: int = 4,
        rows_per_batch: int = 16,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the whole image.

        Args:
            samples: Samples per pixel, split over the 2x2 sub-pixels
                (samples // 4 per sub-pixel, at least 1).
            rows_per_batch: Rows rendered per kernel launch.
            callback: Optional callback called after each band with
                (rows_done, total_rows).

        Example:
            >>> def progress(done, total):
            ...     print(f"Rendering {100.0 * done / total:5.2f}%")
            >>> renderer.render(16, rows_per_batch=8, callback=progress)
        """
        for done, total in self.render_progressive(samples, rows_per_batch):
            if callback is not None:
                callback(done, total)

    def render_progressive(
        self,
        samples: int = 4,
        rows_per_batch: int = 16,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        This is a generator-based alternative to render() with callbacks.

        Args:
            samples: Samples per pixel.
            rows_per_batch: Rows rendered before each yield.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If samples or rows_per_batch is not positive.
        """
        if samples <= 0:
            raise ValueError(f"Samples per pixel must be positive, got {samples}")
        if rows_per_batch <= 0:
            raise ValueError(f"Rows per batch must be positive, got {rows_per_batch}")

        subpixel_samples = samples_per_subpixel(samples)
        set_roulette_depth(self.roulette_depth)
        seed_streams(self.seed, self._height)
        clear_render_target()

        logger.info(
            "Rendering %dx%d at %d spp (%d per sub-pixel)",
            self._width,
            self._height,
            subpixel_samples * SUBPIXELS_PER_PIXEL,
            subpixel_samples,
        )
        start = time.perf_counter()

        row = 0
        while row < self._height:
            row_end = min(row + rows_per_batch, self._height)
            render_rows(row, row_end, subpixel_samples)
            row = row_end
            yield (row, self._height)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the rendered image as a NumPy array.

        Returns:
            Linear image of shape (height, width, 3) in [0, 1], top row first.
        """
        return get_image_numpy()

    def get_image_uint8(self, gamma: float = 2.2) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Args:
            gamma: Gamma correction value. Default 2.2.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        return image_to_uint8(self.get_image_numpy(), gamma)

    def save_image(self, filepath: str | Path, gamma: float = 2.2) -> None:
        """Save the rendered image; ".ppm" is written as P3, others via Pillow."""
        save_image(self.get_image_numpy(), filepath, gamma)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"seed={self.seed}, roulette_depth={self.roulette_depth})"
        )
