"""Parallel row-band renderer.

Each image row is an independent unit of work: the row's pixels are sampled
serially by one worker, which draws all of its randomness from the row's own
stream and writes only into that row of the output. The image is processed
in bands of rows; every band is one kernel launch in which all rows run in
parallel, and the progress callback fires between bands.

Per pixel, samples_per_pixel jittered camera rays are traced and averaged,
then each channel is gamma corrected with a square root, clamped to
[0, 0.9999] and quantized to 8 bits as int(256 * value).

Scan line y = 0 is the bottom of the image; the output array is ordered top
row first, as image files expect.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.renderer import Renderer
    >>> renderer = Renderer(400, 300)
    >>> pixels = renderer.render(samples_per_pixel=16, seed=1)
    >>> pixels.shape
    (300, 400, 3)
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.thin_lens import get_ray
from src.pathtracer.core.integrator import MAX_DEPTH, ray_color
from src.pathtracer.core.sampler import MAX_STREAMS, random_float, seed_streams

# Type alias for 3D vectors
vec3 = tm.vec3

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = MAX_STREAMS

# Rows per kernel launch; every row of a band is one parallel worker
DEFAULT_BAND_SIZE = 256

# Largest channel value before quantization
MAX_CHANNEL = 0.9999

# Output raster, row 0 = top of the image (preallocated to max size)
_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))


@ti.func
def _to_byte(value: ti.f32) -> ti.u8:
    """Quantize a gamma-corrected channel to [0, 255]."""
    return ti.cast(ti.cast(256.0 * tm.clamp(value, 0.0, MAX_CHANNEL), ti.i32), ti.u8)


@ti.func
def sample_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    stream: ti.i32,
) -> vec3:
    """Average samples_per_pixel jittered samples of one pixel.

    Args:
        x: Column, 0 = left.
        y: Scan line, 0 = bottom.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of samples to average.
        max_depth: Bounce budget per sample.
        stream: Random stream of this row.

    Returns:
        The mean linear radiance of the pixel.
    """
    u_span = ti.cast(ti.max(width - 1, 1), ti.f32)
    v_span = ti.cast(ti.max(height - 1, 1), ti.f32)

    pixel_color = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        u = (ti.cast(x, ti.f32) + random_float(stream)) / u_span
        v = (ti.cast(y, ti.f32) + random_float(stream)) / v_span
        ray = get_ray(u, v, stream)
        pixel_color += ray_color(ray, max_depth, stream)

    return pixel_color / ti.cast(samples_per_pixel, ti.f32)


@ti.kernel
def _render_band(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render image rows [row_start, row_end), one parallel worker per row."""
    for row in range(row_start, row_end):
        y = height - 1 - row
        for x in range(width):
            color = sample_pixel(x, y, width, height, samples_per_pixel, max_depth, y)

            # Gamma 2 correction
            color = tm.sqrt(tm.max(color, vec3(0.0, 0.0, 0.0)))

            # Check for NaN and replace with zero
            for c in ti.static(range(3)):
                if tm.isnan(color[c]):
                    color[c] = 0.0

            for c in ti.static(range(3)):
                _pixels[row, x][c] = _to_byte(color[c])


def _check_positive(name: str, value: int) -> None:
    if value < 1:
        raise ValueError(f"{name} = {value} must be a positive integer")


class Renderer:
    """Renders the current scene through the current camera.

    Scene and camera must be set up before calling render(); they are read
    by every worker and must not change during a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max MAX_IMAGE_WIDTH).
            height: Image height in pixels (max MAX_IMAGE_HEIGHT).

        Raises:
            ValueError: If a dimension is not positive or exceeds the maximum.
        """
        _check_positive("width", width)
        _check_positive("height", height)
        if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({width}x{height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        self._width = width
        self._height = height
        self._seed: int | None = None
        self._image: npt.NDArray[np.uint8] | None = None

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def seed(self) -> int | None:
        """Seed of the last render, or None before the first render."""
        return self._seed

    def render(
        self,
        samples_per_pixel: int,
        max_depth: int = MAX_DEPTH,
        seed: int | None = None,
        band_size: int = DEFAULT_BAND_SIZE,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the full image.

        Args:
            samples_per_pixel: Jittered samples averaged per pixel.
            max_depth: Bounce budget per sample.
            seed: Run seed for the per-row streams. None draws one from OS
                entropy; a fixed seed reproduces the image within a process.
            band_size: Number of rows rendered in parallel per kernel launch.
            callback: Called as callback(rows_done, total_rows) after each band.

        Returns:
            uint8 array of shape (height, width, 3), top row first.

        Raises:
            ValueError: If any parameter is not positive.
        """
        _check_positive("samples_per_pixel", samples_per_pixel)
        _check_positive("max_depth", max_depth)
        _check_positive("band_size", band_size)

        self._seed = seed_streams(seed, count=self._height)

        for row_start in range(0, self._height, band_size):
            row_end = min(row_start + band_size, self._height)
            _render_band(
                row_start,
                row_end,
                self._width,
                self._height,
                samples_per_pixel,
                max_depth,
            )
            if callback is not None:
                callback(row_end, self._height)

        # The pixel field is shared by all renderers; keep this image's own copy
        self._image = np.ascontiguousarray(
            _pixels.to_numpy()[: self._height, : self._width, :], dtype=np.uint8
        )
        return self.get_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the last rendered image.

        Returns:
            uint8 array of shape (height, width, 3), top row first.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if self._image is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return self._image.copy()
