#!/usr/bin/env python3
"""Render the random sphere field scene.

Builds the random sphere field (or loads a scene from JSON), points the
thin-lens camera at it and renders the image row band by row band, writing
a plain-text PPM or a PNG.

Usage:
    python -m examples.render_random_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 1200)
    --aspect-ratio RATIO    Width / height (default: 1.5)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Maximum bounces per sample (default: 50)
    --seed SEED             Seed for scene layout and sampling (default: random)
    --scene FILE            Render a JSON scene file instead of the random scene
    --output OUTPUT         .ppm, .png, or - for PPM on stdout (default: -)
    --band-size ROWS        Rows rendered in parallel per progress update (default: 256)
    --arch {cpu,gpu}        Taichi backend (default: gpu, falling back to cpu)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_random_scene --width 400 --samples 20 --output spheres.png
"""

from __future__ import annotations

import argparse
import sys
import time

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random sphere field scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=3.0 / 2.0,
        help="Image width / height (default: 1.5)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per sample (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene layout and sampling (default: random)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to render instead of the random scene",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help="Output path ending in .ppm or .png, or - for PPM on stdout (default: -)",
    )
    parser.add_argument(
        "--band-size",
        type=int,
        default=256,
        help="Rows rendered in parallel between progress updates (default: 256)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="gpu",
        help="Taichi backend (default: gpu, falling back to cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def _status(message: str, quiet: bool, end: str = "\n") -> None:
    if not quiet:
        print(message, end=end, file=sys.stderr, flush=True)


def render_random_scene(
    width: int = 1200,
    aspect_ratio: float = 3.0 / 2.0,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
    seed: int | None = None,
    scene_path: str | None = None,
    output: str = "-",
    band_size: int = 256,
    quiet: bool = False,
):
    """Render the scene and write it to output.

    Args:
        width: Image width in pixels.
        aspect_ratio: Image width / height.
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum bounces per sample.
        seed: Seed for the scene layout and the render streams.
        scene_path: Optional JSON scene file replacing the random scene.
        output: Output path (.ppm or .png) or "-" for stdout.
        band_size: Rows rendered between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        The rendered uint8 image of shape (height, width, 3).
    """
    # Lazy imports to allow Taichi initialization first
    import numpy as np

    from src.pathtracer.camera.thin_lens import setup_camera
    from src.pathtracer.core.renderer import Renderer
    from src.pathtracer.preview.export import save_image
    from src.pathtracer.scene.manager import SceneManager
    from src.pathtracer.scene.random_scene import (
        create_random_scene,
        create_random_scene_camera,
    )

    if aspect_ratio <= 0:
        raise ValueError(f"aspect ratio must be positive, got {aspect_ratio}")
    height = int(width / aspect_ratio)

    if scene_path is not None:
        _status(f"Loading scene from {scene_path}...", quiet)
        scene = SceneManager()
        scene.load_json(scene_path)
    else:
        _status("Creating random sphere field...", quiet)
        scene = create_random_scene(np.random.default_rng(seed))
    _status(f"  {scene.get_sphere_count()} spheres", quiet)

    setup_camera(create_random_scene_camera(aspect_ratio=aspect_ratio))
    renderer = Renderer(width, height)

    _status(f"Rendering {width}x{height} at {samples_per_pixel} samples per pixel...", quiet)
    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        elapsed = time.time() - start_time
        _status(
            f"\r  Scanlines remaining: {total_rows - rows_done:5d} "
            f"({100.0 * rows_done / total_rows:.1f}%) - {elapsed:.1f}s",
            quiet,
            end="",
        )

    pixels = renderer.render(
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        seed=seed,
        band_size=band_size,
        callback=progress_callback,
    )
    _status("", quiet)

    save_image(pixels, output)

    total_time = time.time() - start_time
    if output != "-":
        _status(f"Saved to: {output}", quiet)
    _status(f"Done in {total_time:.2f}s (seed {renderer.seed})", quiet)

    return pixels


def init_taichi(arch: str) -> None:
    """Initialize Taichi, falling back to the CPU if no GPU backend is usable."""
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
        except Exception:
            ti.init(arch=ti.cpu)
    else:
        ti.init(arch=ti.cpu)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    init_taichi(args.arch)

    try:
        render_random_scene(
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            scene_path=args.scene,
            output=args.output,
            band_size=args.band_size,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
