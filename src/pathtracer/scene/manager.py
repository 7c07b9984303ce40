"""Scene manager: validated host-side scene construction.

SceneManager wraps the field storage in `scene.world` with a Python record
of every sphere, convenience methods for each material kind, and dict/JSON
serialization of the scene as an ordered list of
(center, radius, material) records.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_lambertian_sphere(center=(0, -100.5, -1), radius=100, albedo=(0.8, 0.8, 0.0))
    >>> scene.add_dielectric_sphere(center=(0, 0, -1), radius=0.5, ior=1.5)
    >>> scene.save_json("scene.json")
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.pathtracer.core.vector import Vec3
from src.pathtracer.materials.material import SurfaceMaterial
from src.pathtracer.scene.world import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

Triple = tuple[float, float, float]


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The sphere's own material.
    """

    sphere_index: int
    center: Triple
    radius: float
    material: SurfaceMaterial

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "material": self.material.to_dict(),
        }


class SceneManager:
    """Builds the scene stored in the kernel-visible fields.

    Creating a SceneManager clears any previously stored scene. The scene is
    meant to be built once and then left untouched while rendering.
    """

    def __init__(self) -> None:
        self._spheres: list[SphereInfo] = []
        clear_scene()

    def clear(self) -> None:
        """Remove all spheres."""
        self._spheres.clear()
        clear_scene()

    @property
    def spheres(self) -> list[SphereInfo]:
        """Spheres in insertion order."""
        return list(self._spheres)

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    def add_sphere(
        self,
        center: Vec3 | Triple,
        radius: float,
        material: SurfaceMaterial,
    ) -> int:
        """Add a sphere with its own copy of material.

        Args:
            center: The center of the sphere.
            radius: The radius (finite and positive).
            material: The sphere's material.

        Returns:
            The sphere index.

        Raises:
            ValueError: If the radius is invalid.
            RuntimeError: If the scene is full.
        """
        center_t = tuple(float(c) for c in center)
        idx = add_sphere(center_t, radius, material)
        self._spheres.append(
            SphereInfo(sphere_index=idx, center=center_t, radius=float(radius), material=material)
        )
        return idx

    def add_lambertian_sphere(
        self, center: Vec3 | Triple, radius: float, albedo: Vec3 | Triple
    ) -> int:
        return self.add_sphere(center, radius, SurfaceMaterial.lambertian(albedo))

    def add_metal_sphere(
        self,
        center: Vec3 | Triple,
        radius: float,
        albedo: Vec3 | Triple,
        fuzz: float = 0.0,
    ) -> int:
        return self.add_sphere(center, radius, SurfaceMaterial.metal(albedo, fuzz))

    def add_dielectric_sphere(self, center: Vec3 | Triple, radius: float, ior: float = 1.5) -> int:
        return self.add_sphere(center, radius, SurfaceMaterial.dielectric(ior))

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as {"spheres": [...]}, in insertion order."""
        return {"spheres": [info.to_dict() for info in self._spheres]}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the current scene with the one described by data.

        Raises:
            ValueError: If a record is malformed or a parameter is invalid.
            RuntimeError: If the scene does not fit in MAX_SPHERES.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene must be a dict, got {type(data).__name__}")
        records = data.get("spheres", [])
        if not isinstance(records, list):
            raise ValueError("Scene \"spheres\" must be a list")
        if len(records) > MAX_SPHERES:
            raise RuntimeError(
                f"Scene has {len(records)} spheres, maximum is {MAX_SPHERES}"
            )

        # Parse everything first so a bad record leaves the current scene intact
        parsed = [_parse_sphere_record(i, record) for i, record in enumerate(records)]

        self.clear()
        for center, radius, material in parsed:
            self.add_sphere(center, radius, material)

    def save_json(self, path: str | Path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))

    def load_json(self, path: str | Path) -> None:
        """Load a scene file written by save_json().

        Raises:
            ValueError: If the file is not valid JSON or not a valid scene.
        """
        try:
            data = json.loads(Path(path).read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Scene file {path} is not valid JSON: {e}") from e
        self.from_dict(data)

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES


def _parse_sphere_record(index: int, record: Any) -> tuple[Triple, float, SurfaceMaterial]:
    """Validate one scene-file sphere record.

    Raises:
        ValueError: If the record is malformed or a parameter is invalid.
    """
    if not isinstance(record, dict):
        raise ValueError(f"Sphere record {index} must be a dict")
    try:
        center = record["center"]
        radius = float(record["radius"])
        material_data = record["material"]
    except KeyError as e:
        raise ValueError(f"Sphere record {index} is missing {e}") from e
    except TypeError as e:
        raise ValueError(f"Sphere record {index} radius is malformed: {e}") from e

    if not isinstance(center, (list, tuple)) or len(center) != 3:
        raise ValueError(f"Sphere record {index} center must be a list of 3 numbers")
    try:
        center_t = (float(center[0]), float(center[1]), float(center[2]))
    except TypeError as e:
        raise ValueError(f"Sphere record {index} center is malformed: {e}") from e
    if not math.isfinite(radius) or radius <= 0.0:
        raise ValueError(f"Sphere record {index} radius = {radius} must be finite and positive")

    return center_t, radius, SurfaceMaterial.from_dict(material_data)
