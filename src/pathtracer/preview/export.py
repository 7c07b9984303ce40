"""Image export utilities for rendered images.

Supported formats:
    - PPM, plain-text P3 variant (header "P3", "width height", "255",
      then one "R G B" line per pixel, top row first)
    - PNG (8-bit RGB via Pillow)

Both writers take the uint8 (height, width, 3) array returned by
`Renderer.render()`; no further tone mapping or gamma is applied.

Example:
    >>> from src.pathtracer.preview.export import save_image
    >>> pixels = renderer.render(samples_per_pixel=16)
    >>> save_image(pixels, "spheres.ppm")
    >>> save_image(pixels, "spheres.png")
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

PPM_MAX_VALUE = 255


def _check_pixels(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {pixels.shape}")


def format_ppm(pixels: npt.NDArray[np.uint8]) -> str:
    """Format an image as plain-text PPM (P3).

    Args:
        pixels: uint8 array of shape (H, W, 3), top row first.

    Returns:
        The PPM document.

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    _check_pixels(pixels)
    height, width, _ = pixels.shape

    lines = [f"P3\n{width} {height}\n{PPM_MAX_VALUE}"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(pixels: npt.NDArray[np.uint8], target: str | Path | TextIO) -> None:
    """Write an image as plain-text PPM.

    Args:
        pixels: uint8 array of shape (H, W, 3), top row first.
        target: File path, or an open text stream such as sys.stdout.
    """
    document = format_ppm(pixels)
    if isinstance(target, (str, Path)):
        Path(target).write_text(document)
    else:
        target.write(document)


def save_png(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image as an 8-bit RGB PNG.

    Args:
        pixels: uint8 array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
    """
    _check_pixels(pixels)
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8), mode="RGB")
    pil_image.save(filepath)


def save_image(pixels: npt.NDArray[np.uint8], target: str | Path) -> None:
    """Save an image, choosing the format from the file extension.

    "-" writes PPM to standard output, ".png" writes PNG, anything else
    writes PPM.

    Args:
        pixels: uint8 array of shape (H, W, 3), top row first.
        target: Output path or "-".
    """
    if str(target) == "-":
        write_ppm(pixels, sys.stdout)
    elif Path(target).suffix.lower() == ".png":
        save_png(pixels, target)
    else:
        write_ppm(pixels, target)
