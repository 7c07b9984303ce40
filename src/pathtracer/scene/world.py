"""Scene storage and nearest-hit queries.

The scene is an ordered list of spheres held in Taichi fields, each sphere
with its own copy of a material. `hit_world` scans all spheres linearly and
shrinks t_max to the closest hit found so far, so the result is the globally
nearest intersection regardless of sphere order.

The scene is written from Python before rendering and is read-only while
kernels run.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.material import SurfaceMaterial
    >>> from src.pathtracer.scene.world import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0, 0, -1), 0.5, SurfaceMaterial.dielectric(1.5))
    >>> # Use hit_world within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.sphere import Sphere, hit_sphere
from src.pathtracer.materials.material import Material, SurfaceMaterial

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 on a miss.
        t: Ray parameter of the intersection.
        point: The intersection point.
        normal: Unit normal facing against the ray.
        front_face: 1 if the ray hit the outside of the sphere.
        surface_id: Index of the sphere that was hit, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    surface_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Owned material copy per sphere
material_kinds = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
material_fuzz = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
material_iors = ti.field(dtype=ti.f32, shape=MAX_SPHERES)


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Only the count is reset; stale field data is overwritten by later adds.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material: SurfaceMaterial,
) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (finite and positive).
        material: The material copied into the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not finite and positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not math.isfinite(radius) or radius <= 0.0:
        raise ValueError(f"Sphere radius = {radius} must be finite and positive")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    sphere_centers[idx] = (float(center[0]), float(center[1]), float(center[2]))
    sphere_radii[idx] = radius
    material_kinds[idx] = int(material.material_type)
    material_albedos[idx] = material.albedo.to_tuple()
    material_fuzz[idx] = material.fuzz
    material_iors[idx] = material.ior
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_surface_material(surface_id: ti.i32) -> Material:
    """Get the material copy of one sphere."""
    return Material(
        kind=material_kinds[surface_id],
        albedo=material_albedos[surface_id],
        fuzz=material_fuzz[surface_id],
        ior=material_iors[surface_id],
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        surface_id=-1,
    )


@ti.func
def hit_world(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Args:
        ray: The ray to test.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.

    Returns:
        The closest SceneHitRecord in [t_min, t_max], or a miss record.
    """
    closest_so_far = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                front_face=rec.front_face,
                surface_id=i,
            )

    return result
