"""Materials module: the three scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    material: MaterialType tag, host SurfaceMaterial values, kernel Material
        struct and the scatter() dispatcher

Every model shares one contract: given the incoming ray and the hit, either
absorb the ray or return a scattered ray and an attenuation color. All
scatter functions are Taichi functions that consume entropy only from the
random stream they are given.
"""

from .dielectric import (
    cannot_refract,
    fresnel_reflectance,
    refraction_ratio_for,
    scatter_dielectric,
)
from .lambertian import scatter_lambertian
from .material import Material, MaterialType, SurfaceMaterial, scatter
from .metal import MAX_FUZZ, scatter_metal

__all__ = [
    # Lambertian
    "scatter_lambertian",
    # Metal
    "MAX_FUZZ",
    "scatter_metal",
    # Dielectric
    "scatter_dielectric",
    "refraction_ratio_for",
    "cannot_refract",
    "fresnel_reflectance",
    # Shared
    "MaterialType",
    "SurfaceMaterial",
    "Material",
    "scatter",
]
