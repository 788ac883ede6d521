"""Render the Cornell box sphere scene from the command line.

Usage:
    pathtracer [samples] [options]
    python -m pathtracer [samples] [options]

Options:
    samples                 Samples per pixel (default: 4)
    --width WIDTH           Image width in pixels (default: 512)
    --height HEIGHT         Image height in pixels (default: 384)
    --seed SEED             Seed for the per-row random streams (default: 0)
    --roulette-depth DEPTH  Depth after which Russian roulette applies (default: 5)
    --rows-per-batch ROWS   Rows per progress update (default: 16)
    --output OUTPUT         Output file path; .ppm is written as P3 (default: image.ppm)
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --quiet                 Suppress progress output

Example:
    pathtracer 16 --width 256 --height 192 --output cornell.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import taichi as ti

from pathtracer.config import RenderSettings

logger = logging.getLogger(__name__)

ARCHES = {"cpu": ti.cpu, "gpu": ti.gpu}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderSettings()
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render the Cornell box sphere scene with Monte Carlo path tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "samples",
        type=int,
        nargs="?",
        default=defaults.samples,
        help=f"Samples per pixel (default: {defaults.samples})",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.width,
        help=f"Image width in pixels (default: {defaults.width})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=defaults.height,
        help=f"Image height in pixels (default: {defaults.height})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help=f"Seed for the per-row random streams (default: {defaults.seed})",
    )
    parser.add_argument(
        "--roulette-depth",
        type=int,
        default=defaults.roulette_depth,
        help=f"Depth after which Russian roulette applies (default: {defaults.roulette_depth})",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=defaults.rows_per_batch,
        help=f"Rows per progress update (default: {defaults.rows_per_batch})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=defaults.output,
        help=f"Output file path (default: {defaults.output})",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCHES),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Build validated render settings from parsed arguments.

    Raises:
        ValueError: If any setting is invalid.
    """
    settings = RenderSettings(
        width=args.width,
        height=args.height,
        samples=args.samples,
        seed=args.seed,
        roulette_depth=args.roulette_depth,
        rows_per_batch=args.rows_per_batch,
        output=args.output,
    )
    settings.validate()
    return settings


def render_scene(settings: RenderSettings, quiet: bool = False) -> Path:
    """Render the Cornell box scene and save it to settings.output.

    Taichi must already be initialised with default_fp=ti.f64.

    Args:
        settings: Validated render settings.
        quiet: If True, suppress the progress line.

    Returns:
        Path to the saved image file.

    Raises:
        OSError: If the output file cannot be opened, checked before rendering.
    """
    # Lazy imports so fields are created after Taichi initialization
    from pathtracer.camera.pinhole import setup_camera
    from pathtracer.core.renderer import Renderer
    from pathtracer.output.export import check_output_writable
    from pathtracer.scene.cornell_box import create_cornell_box_scene
    from pathtracer.scene.intersection import load_scene

    output_file = Path(settings.output)
    check_output_writable(output_file)

    scene, camera = create_cornell_box_scene()
    load_scene(scene)
    setup_camera(camera, settings.width, settings.height)

    renderer = Renderer(
        settings.width,
        settings.height,
        seed=settings.seed,
        roulette_depth=settings.roulette_depth,
    )

    start_time = time.perf_counter()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            print(
                f"\rRendering ({settings.samples} spp) {100.0 * done / total:5.2f}%",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(
        samples=settings.samples,
        rows_per_batch=settings.rows_per_batch,
        callback=progress_callback,
    )

    if not quiet:
        print(file=sys.stderr)  # Newline after progress

    renderer.save_image(output_file, gamma=settings.gamma)

    logger.info("Total time: %.2fs", time.perf_counter() - start_time)
    return output_file


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        logger.error("Invalid settings: %s", e)
        return 1

    ti.init(arch=ARCHES[args.arch], default_fp=ti.f64)

    try:
        output_file = render_scene(settings, quiet=args.quiet)
    except ValueError as e:
        logger.error("Invalid settings: %s", e)
        return 1
    except OSError as e:
        logger.error("Cannot write %s: %s", settings.output, e)
        return 1

    logger.info("Saved to: %s", output_file.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
