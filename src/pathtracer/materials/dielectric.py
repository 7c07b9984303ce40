"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance, which grows toward grazing angles. Dielectrics
never absorb and never tint: attenuation is white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import reflect, reflectance, refract, unit_vector
from src.pathtracer.core.sampler import random_float

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """1 / ior when entering the material, ior when leaving it."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Return 1 if total internal reflection is unavoidable."""
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = tm.min(tm.dot(-unit_vector(incident_direction), normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick reflectance for this incidence, in [0, 1]."""
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = tm.min(tm.dot(-unit_vector(incident_direction), normal), 1.0)
    return reflectance(cos_theta, ratio)


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
):
    """Compute the scattered direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it leaves it.
        stream: Random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: White.
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    unit_direction = unit_vector(incident_direction)
    must_reflect = cannot_refract(ior, unit_direction, normal, front_face)

    # One uniform draw per scatter, also when reflection is forced
    draw = random_float(stream)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if must_reflect or draw < fresnel_reflectance(ior, unit_direction, normal, front_face):
        scattered_direction = reflect(unit_direction, normal)
    else:
        ratio = refraction_ratio_for(ior, front_face)
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, 1
