"""Taichi-accelerated recursive path tracer for sphere scenes.

This package renders analytic scenes made of spheres with Lambertian, metal
and dielectric surfaces through a thin-lens camera, using Monte Carlo path
tracing with one independent random stream per image row.

Subpackages:
    core: Tagged vectors, rays, random streams, integrator and renderer
    camera: Thin-lens camera with depth of field
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage, scene manager and the random demo scene
    preview: PPM and PNG export
"""

__version__ = "0.1.0"
