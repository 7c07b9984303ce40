"""Ray data structure and vector utilities for Taichi kernels.

This module provides the Ray dataclass and the vector, optics and random
sampling helpers used by the camera, the sphere intersection, the materials
and the integrator. Everything here is a `@ti.func` and runs inside kernels.

Random sampling helpers take the index of the random stream they consume
(see `src.pathtracer.core.sampler`); they never touch another stream.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # inside a kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.sampler import random_range

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components smaller than this are treated as zero by near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; consumers normalize where they need to.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector (no square root)."""
    return tm.dot(v, v)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The caller guarantees v is non-zero; a zero vector yields NaN/inf
    components.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Optics
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror reflection d - 2 (d . n) n.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_direction: vec3, normal: vec3, refraction_ratio: ti.f32) -> vec3:
    """Refract a unit direction through a surface with Snell's law.

    Uses the vector form split into the components perpendicular and
    parallel to the normal:
        r_perp = ratio * (d + cos_theta * n)
        r_parallel = -sqrt(|1 - |r_perp|^2|) * n

    The caller is responsible for handling total internal reflection before
    calling this function.

    Args:
        unit_direction: The unit incoming direction.
        normal: The unit normal, facing against unit_direction.
        refraction_ratio: eta_incident / eta_transmitted.

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    r_out_perp = refraction_ratio * (unit_direction + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Schlick's approximation of the Fresnel reflectance.

    Args:
        cosine: Cosine of the incident angle, in [0, 1].
        refraction_ratio: Ratio of refractive indices (> 0).

    Returns:
        r0 + (1 - r0) (1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vector(stream: ti.i32, low: ti.f32, high: ti.f32) -> vec3:
    """Vector with components drawn independently from [low, high)."""
    x = random_range(stream, low, high)
    y = random_range(stream, low, high)
    z = random_range(stream, low, high)
    return vec3(x, y, z)


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Uniform point strictly inside the unit ball.

    Rejection sampling from the cube [-1, 1]^3; about 1.9 draws are needed
    on average.
    """
    p = random_vector(stream, -1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_vector(stream, -1.0, 1.0)
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    return unit_vector(random_in_unit_sphere(stream))


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Uniform point (x, y, 0) with x^2 + y^2 < 1, by rejection sampling.

    Used to jitter ray origins across the camera aperture.
    """
    p = vec3(random_range(stream, -1.0, 1.0), random_range(stream, -1.0, 1.0), 0.0)
    while p.x * p.x + p.y * p.y >= 1.0:
        p = vec3(random_range(stream, -1.0, 1.0), random_range(stream, -1.0, 1.0), 0.0)
    return p
