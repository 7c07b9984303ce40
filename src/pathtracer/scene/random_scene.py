"""Random sphere field demo scene.

The scene is a large grey ground sphere covered by a 22x22 grid of small
spheres with randomly chosen materials, plus three large feature spheres:

- Ground: Lambertian grey, radius 1000, centered at (0, -1000, 0)
- Small spheres: radius 0.2 at jittered grid positions, skipped near the
  metal feature sphere. 80% diffuse, 15% metal, 5% glass.
- Glass sphere at (0, 1, 0), diffuse brown sphere at (-4, 1, 0) and a
  polished metal sphere at (4, 1, 0), each of radius 1

The camera looks at the origin from (13, 2, 3) with a narrow field of view
and a small aperture focused at distance 10.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>> from src.pathtracer.scene.random_scene import (
    ...     create_random_scene, create_random_scene_camera
    ... )
    >>> scene = create_random_scene(np.random.default_rng(7))
    >>> setup_camera(create_random_scene_camera(aspect_ratio=3.0 / 2.0))
"""

import numpy as np

from src.pathtracer.camera.thin_lens import ThinLensCamera
from src.pathtracer.core.vector import Vec3, color, point
from src.pathtracer.scene.manager import SceneManager

# =============================================================================
# Scene Parameters
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed on the grid [-GRID_EXTENT, GRID_EXTENT)^2
GRID_EXTENT = 11
SMALL_RADIUS = 0.2
SMALL_JITTER = 0.9

# Small spheres closer than this to KEEP_CLEAR_POINT are skipped
KEEP_CLEAR_POINT = (4.0, 0.2, 0.0)
KEEP_CLEAR_DISTANCE = 0.9

# Material choice thresholds on a uniform draw
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

GLASS_IOR = 1.5
FEATURE_RADIUS = 1.0
BROWN_ALBEDO = (0.4, 0.2, 0.1)
POLISHED_METAL_ALBEDO = (0.7, 0.6, 0.6)

# Camera
LOOK_FROM = (13.0, 2.0, 3.0)
LOOK_AT = (0.0, 0.0, 0.0)
VUP = (0.0, 1.0, 0.0)
VFOV = 20.0
APERTURE = 0.1
FOCUS_DISTANCE = 10.0


def _add_small_sphere(scene: SceneManager, center: Vec3, rng: np.random.Generator) -> None:
    choose_material = rng.random()

    if choose_material < DIFFUSE_PROBABILITY:
        albedo = Vec3.random(rng) * Vec3.random(rng)
        scene.add_lambertian_sphere(center, SMALL_RADIUS, albedo)
    elif choose_material < METAL_PROBABILITY:
        albedo = Vec3.random(rng, 0.5, 1.0)
        fuzz = float(rng.random())
        scene.add_metal_sphere(center, SMALL_RADIUS, albedo, fuzz)
    else:
        scene.add_dielectric_sphere(center, SMALL_RADIUS, GLASS_IOR)


def create_random_scene(rng: np.random.Generator | None = None) -> SceneManager:
    """Create the random sphere field scene.

    Args:
        rng: Random generator for positions and materials. A fresh
            unseeded generator is used if None.

    Returns:
        A SceneManager holding the populated scene.
    """
    if rng is None:
        rng = np.random.default_rng()

    scene = SceneManager()
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, color(*GROUND_ALBEDO))

    keep_clear = point(*KEEP_CLEAR_POINT)
    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            center = point(
                a + SMALL_JITTER * float(rng.random()),
                SMALL_RADIUS,
                b + SMALL_JITTER * float(rng.random()),
            )
            if (center - keep_clear).length() > KEEP_CLEAR_DISTANCE:
                _add_small_sphere(scene, center, rng)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), FEATURE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), FEATURE_RADIUS, color(*BROWN_ALBEDO))
    scene.add_metal_sphere((4.0, 1.0, 0.0), FEATURE_RADIUS, color(*POLISHED_METAL_ALBEDO), 0.0)

    return scene


def create_random_scene_camera(aspect_ratio: float = 3.0 / 2.0) -> ThinLensCamera:
    """Camera framing the random sphere field."""
    return ThinLensCamera(
        look_from=LOOK_FROM,
        look_at=LOOK_AT,
        vup=VUP,
        vfov=VFOV,
        aspect_ratio=aspect_ratio,
        aperture=APERTURE,
        focus_distance=FOCUS_DISTANCE,
    )
