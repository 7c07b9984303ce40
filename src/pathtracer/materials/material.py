"""Closed set of surface materials and the shared scatter contract.

A material is exactly one of Lambertian{albedo}, Metal{albedo, fuzz} or
Dielectric{ior}. On the Python side it is the immutable `SurfaceMaterial`
value; inside kernels it is the `Material` struct, tagged by `MaterialType`.
`scatter()` dispatches on the tag and returns either an absorption or a new
ray plus an attenuation color.

Materials are small values: every sphere owns its own copy.

Example:
    >>> from src.pathtracer.core.vector import color
    >>> glass = SurfaceMaterial.dielectric(1.5)
    >>> brushed = SurfaceMaterial.metal(color(0.7, 0.6, 0.6), fuzz=0.3)
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray
from src.pathtracer.core.vector import Vec3, VectorType, color
from src.pathtracer.materials.dielectric import scatter_dielectric
from src.pathtracer.materials.lambertian import scatter_lambertian
from src.pathtracer.materials.metal import MAX_FUZZ, scatter_metal

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


_TYPE_NAMES = {
    MaterialType.LAMBERTIAN: "lambertian",
    MaterialType.METAL: "metal",
    MaterialType.DIELECTRIC: "dielectric",
}


@dataclass(frozen=True)
class SurfaceMaterial:
    """Host-side material value.

    Only the attributes relevant to material_type are meaningful; the others
    keep their defaults.

    Attributes:
        material_type: Which scattering model to use.
        albedo: Surface color for Lambertian and Metal.
        fuzz: Metal roughness in [0, 1].
        ior: Dielectric index of refraction.
    """

    material_type: MaterialType
    albedo: Vec3 = field(default_factory=lambda: color(1.0, 1.0, 1.0))
    fuzz: float = 0.0
    ior: float = 1.0

    @classmethod
    def lambertian(cls, albedo: Vec3 | tuple[float, float, float]) -> "SurfaceMaterial":
        return cls(MaterialType.LAMBERTIAN, albedo=_as_color(albedo))

    @classmethod
    def metal(
        cls, albedo: Vec3 | tuple[float, float, float], fuzz: float = 0.0
    ) -> "SurfaceMaterial":
        """Create a metal; fuzz above 1 is clamped to 1.

        Raises:
            ValueError: If fuzz is not finite.
        """
        if not math.isfinite(fuzz):
            raise ValueError(f"Fuzz = {fuzz} must be finite")
        return cls(MaterialType.METAL, albedo=_as_color(albedo), fuzz=min(fuzz, MAX_FUZZ))

    @classmethod
    def dielectric(cls, ior: float) -> "SurfaceMaterial":
        """Create a dielectric.

        Raises:
            ValueError: If ior is not finite or not positive.
        """
        if not math.isfinite(ior) or ior <= 0.0:
            raise ValueError(f"Index of refraction = {ior} must be finite and positive")
        return cls(MaterialType.DIELECTRIC, ior=ior)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": _TYPE_NAMES[self.material_type]}
        if self.material_type == MaterialType.LAMBERTIAN:
            data["albedo"] = list(self.albedo.to_tuple())
        elif self.material_type == MaterialType.METAL:
            data["albedo"] = list(self.albedo.to_tuple())
            data["fuzz"] = self.fuzz
        else:
            data["ior"] = self.ior
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SurfaceMaterial":
        """Build a material from its dict form.

        Raises:
            ValueError: If data is not a dict, the type is unknown or a
                parameter is missing or malformed.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Material must be a dict, got {type(data).__name__}")

        mat_type = data.get("type")
        try:
            if mat_type == "lambertian":
                return cls.lambertian(tuple(data["albedo"]))
            if mat_type == "metal":
                return cls.metal(tuple(data["albedo"]), float(data.get("fuzz", 0.0)))
            if mat_type == "dielectric":
                return cls.dielectric(float(data["ior"]))
        except KeyError as e:
            raise ValueError(f"Material {mat_type!r} is missing parameter {e}") from e
        except TypeError as e:
            raise ValueError(f"Material {mat_type!r} has a malformed parameter: {e}") from e
        raise ValueError(f"Unknown material type: {mat_type}")


def _as_color(value: Vec3 | tuple[float, float, float]) -> Vec3:
    if isinstance(value, Vec3):
        return value.with_tag(VectorType.COLOR)
    if len(value) != 3:
        raise ValueError(f"Color must have 3 components, got {len(value)}")
    r, g, b = value
    return color(float(r), float(g), float(b))


# =============================================================================
# Kernel-side material
# =============================================================================


@ti.dataclass
class Material:
    """Material as stored for kernels.

    Attributes:
        kind: A MaterialType value.
        albedo: Color for Lambertian and Metal.
        fuzz: Metal roughness.
        ior: Dielectric index of refraction.
    """

    kind: ti.i32
    albedo: vec3
    fuzz: ti.f32
    ior: ti.f32


@ti.func
def scatter(
    material: Material,
    ray: Ray,
    hit_point: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
):
    """Scatter an incoming ray off a surface.

    Args:
        material: The surface material.
        ray: The incoming ray.
        hit_point: The intersection point; origin of the scattered ray.
        normal: The unit surface normal, facing against the ray.
        front_face: 1 if the ray hit the outside of the surface.
        stream: Random stream to draw from.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter). When
        did_scatter is 0 the ray was absorbed and the other values are
        meaningless.
    """
    direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if material.kind == int(MaterialType.LAMBERTIAN):
        direction, attenuation, did_scatter = scatter_lambertian(
            material.albedo, normal, stream
        )
    elif material.kind == int(MaterialType.METAL):
        direction, attenuation, did_scatter = scatter_metal(
            material.albedo, material.fuzz, ray.direction, normal, stream
        )
    elif material.kind == int(MaterialType.DIELECTRIC):
        direction, attenuation, did_scatter = scatter_dielectric(
            material.ior, ray.direction, normal, front_face, stream
        )

    return make_ray(hit_point, direction), attenuation, did_scatter
