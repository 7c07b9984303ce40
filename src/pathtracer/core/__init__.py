"""Core rendering module.

Components:
    vector: Host-side tagged vectors (Vec3) with random sampling
    ray: Ray data structure and kernel-side vector/optics utilities
    sampler: Per-stream PCG random number generation
    integrator: Iterative path tracing (ray_color) and the sky background
    renderer: Row-band parallel renderer with gamma correction and 8-bit output

All compute-intensive operations use Taichi kernels; each image row draws from
its own random stream.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vector,
    ray_at,
    reflect,
    reflectance,
    refract,
    unit_vector,
    vec3,
)
from .sampler import (
    MAX_STREAMS,
    get_stream_count,
    get_stream_state,
    random_float,
    random_range,
    seed_streams,
)
from .vector import Vec3, VectorType, color, point, vector

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.integrator or src.pathtracer.core.renderer.

__all__ = [
    # Host vectors
    "Vec3",
    "VectorType",
    "vector",
    "point",
    "color",
    # Rays and kernel vector utilities
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "unit_vector",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "reflectance",
    "random_vector",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    # Random streams
    "MAX_STREAMS",
    "seed_streams",
    "random_float",
    "random_range",
    "get_stream_count",
    "get_stream_state",
]
