"""Unit tests for the Lambertian material.

Tests cover:
- Scattered directions stay in the hemisphere of the normal
- Attenuation equals the albedo
- Always scatters
- Cosine-weighted distribution of the scattered directions
"""

import taichi as ti


class TestLambertianScatter:
    """Tests for scatter_lambertian()."""

    def test_always_scatters_with_albedo(self):
        from src.pathtracer.core.sampler import seed_streams
        from src.pathtracer.materials.lambertian import scatter_lambertian

        n = 128
        scattered = ti.field(dtype=ti.i32, shape=n)
        atten = ti.Vector.field(3, dtype=ti.f32, shape=n)
        seed_streams(10, count=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                albedo = ti.math.vec3(0.8, 0.3, 0.1)
                normal = ti.math.vec3(0.0, 1.0, 0.0)
                _, attenuation, did_scatter = scatter_lambertian(albedo, normal, i)
                scattered[i] = did_scatter
                atten[i] = attenuation

        test_kernel()
        for i in range(n):
            assert scattered[i] == 1
            a = atten[i]
            assert abs(a[0] - 0.8) < 1e-6
            assert abs(a[1] - 0.3) < 1e-6
            assert abs(a[2] - 0.1) < 1e-6

    def test_direction_in_normal_hemisphere(self):
        """normal + point in unit ball never points below the surface."""
        from src.pathtracer.core.sampler import seed_streams
        from src.pathtracer.materials.lambertian import scatter_lambertian

        n = 512
        cosines = ti.field(dtype=ti.f32, shape=n)
        seed_streams(11, count=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                normal = ti.math.normalize(ti.math.vec3(1.0, 1.0, 0.0))
                direction, _, _ = scatter_lambertian(ti.math.vec3(1.0), normal, i)
                cosines[i] = ti.math.dot(direction, normal)

        test_kernel()
        for i in range(n):
            assert cosines[i] >= 0.0

    def test_cosine_weighted_mean(self):
        """normal + ball sample has a cos^3 density, so the mean cosine is about 0.8."""
        from src.pathtracer.core.sampler import seed_streams
        from src.pathtracer.materials.lambertian import scatter_lambertian

        n = 2048
        cosines = ti.field(dtype=ti.f32, shape=n)
        seed_streams(12, count=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                normal = ti.math.vec3(0.0, 0.0, 1.0)
                direction, _, _ = scatter_lambertian(ti.math.vec3(1.0), normal, i)
                cosines[i] = ti.math.normalize(direction).z

        test_kernel()
        mean = sum(cosines[i] for i in range(n)) / n
        assert 0.75 < mean < 0.85
