"""Sphere primitive with analytic ray-sphere intersection.

The intersection solves |origin + t * direction - center|^2 = radius^2 with
the half-b form of the quadratic formula:

    a = dot(direction, direction)
    h = dot(direction, oc)          (half of the usual b)
    c = dot(oc, oc) - radius^2
    oc = origin - center
    discriminant = h^2 - a * c

which halves the rounding error compared to the b^2 - 4ac form. The nearer
root is tried first and the farther root only if the nearer one is outside
[t_min, t_max].

The stored normal always faces against the incoming ray; front_face records
whether the ray arrived from outside the sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 on a miss.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal facing against the ray. Only valid if
            hit == 1.
        front_face: 1 if the ray hit the outside of the sphere, 0 if it
            hit from inside. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def _outside(root: ti.f32, t_min: ti.f32, t_max: ti.f32) -> ti.i32:
    return root < t_min or t_max < root


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Intersect a ray with a sphere.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Smallest accepted ray parameter (inclusive).
        t_max: Largest accepted ray parameter (inclusive).

    Returns:
        A HitRecord; check its hit field. A tangent ray produces a single
        hit at the double root.
    """
    oc = ray.origin - sphere.center

    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root in range
        root = (-half_b - sqrt_d) / a
        valid = 1
        if _outside(root, t_min, t_max):
            root = (-half_b + sqrt_d) / a
            if _outside(root, t_min, t_max):
                valid = 0

        if valid == 1:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)

            outward_normal = (hit_point - sphere.center) / sphere.radius
            if tm.dot(ray.direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
