"""Metal (specular reflective) material implementation.

Metals mirror the incoming direction about the normal,

    R = D - 2 (D . N) N

and then perturb R by fuzz times a random point in the unit ball. The fuzz
parameter is in [0, 1]: 0 is a perfect mirror. If the perturbed direction
points into the surface the ray is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import random_in_unit_sphere, reflect, unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3

# Largest accepted fuzz; larger values are clamped
MAX_FUZZ = 1.0


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Compute the scattered direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: Roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        stream: Random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The fuzzed reflection (not normalized).
        - attenuation: The albedo.
        - did_scatter: 1 if the direction leaves the surface, 0 if absorbed.
    """
    reflected = reflect(unit_vector(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere(stream)

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, albedo, did_scatter
