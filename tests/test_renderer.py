"""Unit tests for the row-band renderer.

Tests cover:
- Output shape, dtype and row order
- Gamma correction and quantization of the sky
- Reproducibility for a fixed seed
- Progress callbacks between bands
- Parameter validation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _setup_camera(aspect_ratio=1.0):
    from src.pathtracer.camera.thin_lens import ThinLensCamera, setup_camera

    setup_camera(
        ThinLensCamera(
            look_from=(0.0, 0.0, 0.0),
            look_at=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=90.0,
            aspect_ratio=aspect_ratio,
        )
    )


class TestRenderOutput:
    """Tests for the rendered image."""

    def test_shape_and_dtype(self):
        from src.pathtracer.core.renderer import Renderer

        _setup_camera(aspect_ratio=2.0)
        pixels = Renderer(6, 3).render(samples_per_pixel=1, max_depth=1, seed=1)
        assert pixels.shape == (3, 6, 3)
        assert pixels.dtype == np.uint8

    def test_empty_scene_matches_sky_gradient(self):
        """Each pixel of a 2x2 sky render equals the gradient at its sampled ray.

        The sampled rays are replayed from the same seeded row streams: per
        sample, two jitter draws, then the aperture draws of get_ray.
        """
        from src.pathtracer.camera.thin_lens import get_ray
        from src.pathtracer.core.renderer import Renderer
        from src.pathtracer.core.sampler import random_float, seed_streams

        _setup_camera()
        seed = 2024
        pixels = Renderer(2, 2).render(samples_per_pixel=1, max_depth=1, seed=seed)

        directions = ti.Vector.field(3, dtype=ti.f32, shape=(2, 2))

        @ti.kernel
        def replay_kernel():
            for y in range(2):
                for x in range(2):
                    u = (ti.cast(x, ti.f32) + random_float(y)) / 1.0
                    v = (ti.cast(y, ti.f32) + random_float(y)) / 1.0
                    directions[y, x] = get_ray(u, v, y).direction

        seed_streams(seed, count=2)
        replay_kernel()

        for y in range(2):
            for x in range(2):
                d = directions[y, x]
                t = 0.5 * (d[1] / math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2) + 1.0)
                sky = ((1.0 - t) + 0.5 * t, (1.0 - t) + 0.7 * t, 1.0)
                expected = [int(256 * min(math.sqrt(c), 0.9999)) for c in sky]
                row = 1 - y
                for c in range(3):
                    assert abs(int(pixels[row, x, c]) - expected[c]) <= 1
                assert pixels[row, x, 2] == 255

    def test_top_row_is_bluer_than_bottom(self):
        """Row 0 of the output is the top of the image."""
        from src.pathtracer.core.renderer import Renderer

        _setup_camera()
        pixels = Renderer(8, 8).render(samples_per_pixel=1, max_depth=1, seed=4)
        # Top row looks above the horizon, bottom row below it
        assert pixels[0, :, 0].max() <= pixels[-1, :, 0].min()
        assert pixels[0, :, 0].max() <= 221

    def test_surface_with_no_budget_left_is_black(self):
        from src.pathtracer.core.renderer import Renderer
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 100.0, (0.9, 0.9, 0.9))
        _setup_camera()
        pixels = Renderer(4, 4).render(samples_per_pixel=2, max_depth=1, seed=5)
        assert np.all(pixels == 0)

    def test_single_pixel_image(self):
        from src.pathtracer.core.renderer import Renderer

        _setup_camera()
        pixels = Renderer(1, 1).render(samples_per_pixel=4, max_depth=1, seed=6)
        assert pixels.shape == (1, 1, 3)
        assert pixels[0, 0, 2] == 255

    def test_second_renderer_leaves_first_image_intact(self):
        from src.pathtracer.core.renderer import Renderer
        from src.pathtracer.scene.manager import SceneManager

        _setup_camera()
        sky_renderer = Renderer(4, 4)
        sky = sky_renderer.render(samples_per_pixel=1, max_depth=1, seed=8)
        assert sky.any()

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 100.0, (0.9, 0.9, 0.9))
        dark = Renderer(4, 4).render(samples_per_pixel=1, max_depth=1, seed=8)
        assert np.all(dark == 0)

        np.testing.assert_array_equal(sky_renderer.get_image_numpy(), sky)


class TestReproducibility:
    """Tests for seeded rendering."""

    def test_same_seed_same_image(self):
        from src.pathtracer.core.renderer import Renderer
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        scene.add_metal_sphere((0.5, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), 0.3)
        scene.add_dielectric_sphere((-0.5, 0.0, -1.0), 0.5, 1.5)
        _setup_camera()

        renderer = Renderer(8, 8)
        first = renderer.render(samples_per_pixel=4, max_depth=10, seed=1234)
        second = renderer.render(samples_per_pixel=4, max_depth=10, seed=1234)
        np.testing.assert_array_equal(first, second)

    def test_band_size_does_not_change_image(self):
        from src.pathtracer.core.renderer import Renderer
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.5, 0.5, 0.5))
        _setup_camera()

        renderer = Renderer(8, 8)
        banded = renderer.render(samples_per_pixel=2, max_depth=5, seed=77, band_size=3)
        whole = renderer.render(samples_per_pixel=2, max_depth=5, seed=77, band_size=8)
        np.testing.assert_array_equal(banded, whole)

    def test_seed_is_recorded(self):
        from src.pathtracer.core.renderer import Renderer

        _setup_camera()
        renderer = Renderer(2, 2)
        assert renderer.seed is None
        renderer.render(samples_per_pixel=1, max_depth=1, seed=99)
        assert renderer.seed == 99
        renderer.render(samples_per_pixel=1, max_depth=1)
        assert renderer.seed is not None


class TestProgress:
    """Tests for the progress callback."""

    def test_callback_after_each_band(self):
        from src.pathtracer.core.renderer import Renderer

        _setup_camera()
        calls = []
        Renderer(4, 8).render(
            samples_per_pixel=1,
            max_depth=1,
            seed=1,
            band_size=3,
            callback=lambda done, total: calls.append((done, total)),
        )
        assert calls == [(3, 8), (6, 8), (8, 8)]

    def test_default_band_covers_whole_image(self):
        from src.pathtracer.core.renderer import DEFAULT_BAND_SIZE, Renderer

        _setup_camera()
        calls = []
        Renderer(4, 8).render(
            samples_per_pixel=1,
            max_depth=1,
            seed=1,
            callback=lambda done, total: calls.append((done, total)),
        )
        assert DEFAULT_BAND_SIZE >= 256
        assert calls == [(8, 8)]


class TestValidation:
    """Tests for parameter validation."""

    @pytest.mark.parametrize("width,height", [(0, 4), (4, 0), (-1, 4), (4096, 4), (4, 4096)])
    def test_invalid_dimensions_raise(self, width, height):
        from src.pathtracer.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(width, height)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"samples_per_pixel": 0},
            {"samples_per_pixel": 1, "max_depth": 0},
            {"samples_per_pixel": 1, "band_size": 0},
        ],
    )
    def test_invalid_render_parameters_raise(self, kwargs):
        from src.pathtracer.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(2, 2).render(**kwargs)

    def test_image_before_render_raises(self):
        from src.pathtracer.core.renderer import Renderer

        with pytest.raises(RuntimeError):
            Renderer(2, 2).get_image_numpy()
