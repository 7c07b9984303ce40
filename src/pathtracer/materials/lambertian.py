"""Lambertian (ideal diffuse) material implementation.

The scattered direction is the surface normal plus a uniform random point in
the unit ball, which approximates a cosine-weighted distribution over the
hemisphere around the normal. A Lambertian surface always scatters and
attenuates by its albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(
    >>> #     albedo, normal, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import near_zero, random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, stream: ti.i32):
    """Sample a diffuse scatter direction.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point, facing the ray.
        stream: Random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: normal + random point in the unit ball, or the
          normal itself if that sum is degenerate. Not normalized.
        - attenuation: The albedo.
        - did_scatter: Always 1.
    """
    scattered_direction = normal + random_in_unit_sphere(stream)

    # The random point can nearly cancel the normal
    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, albedo, 1
