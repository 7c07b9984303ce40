"""Output utilities for rendered images.

Components:
    export: Plain-text PPM and PNG writers
"""

from .export import format_ppm, save_image, save_png, write_ppm

__all__ = [
    "format_ppm",
    "write_ppm",
    "save_png",
    "save_image",
]
