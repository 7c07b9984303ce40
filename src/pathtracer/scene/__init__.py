"""Scene module: sphere storage, scene building and demo scenes.

Components:
    world: Field storage of spheres and their materials, nearest-hit query
    manager: Validated scene construction and JSON serialization
    random_scene: The random sphere field demo scene and its camera

Scene data is written once from Python and then read by every render
worker without synchronization.
"""

from .manager import SceneManager, SphereInfo
from .random_scene import create_random_scene, create_random_scene_camera
from .world import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    get_surface_material,
    hit_world,
)

__all__ = [
    # World
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "get_surface_material",
    "hit_world",
    "MAX_SPHERES",
    # Manager
    "SceneManager",
    "SphereInfo",
    # Random scene
    "create_random_scene",
    "create_random_scene_camera",
]
