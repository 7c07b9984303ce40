"""Path tracing integrator for Monte Carlo light transport.

`ray_color` estimates the radiance carried back along a ray. At each bounce
the nearest surface is found, its material either absorbs the ray (black) or
scatters it with an attenuation color, and the product of attenuations is
carried to the next bounce. A ray that escapes the scene picks up the sky
gradient. After max_depth bounces the path contributes black.

This is the iterative form of the recursion

    color(ray, depth) = 0                                  if depth == 0
                      = attenuation * color(scattered, depth - 1)   on hit
                      = 0                                  on absorption
                      = sky(ray.direction)                 on miss

so the bounce budget is a loop bound and no call stack is involved.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.integrator import trace_ray
    >>> trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=50)
    (0.5, 0.7, 1.0)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray, unit_vector
from src.pathtracer.materials.material import scatter
from src.pathtracer.scene.world import get_surface_material, hit_world

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# t_min and t_max for ray intersection; T_MIN avoids self-intersection
T_MIN = 1e-4
T_MAX = float("inf")

# Sky gradient endpoints
HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


@ti.func
def background(direction: vec3) -> vec3:
    """Sky color for a ray that left the scene.

    Linear blend from white (unit direction y = -1) to sky blue
    (unit direction y = 1); depends only on the vertical direction.
    """
    t = 0.5 * (unit_vector(direction).y + 1.0)
    return (1.0 - t) * HORIZON_COLOR + t * ZENITH_COLOR


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Bounce budget. 0 returns black.
        stream: Random stream for all scattering decisions of this path.

    Returns:
        The radiance estimate (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)

    # Product of attenuations along the path
    throughput = vec3(1.0, 1.0, 1.0)

    origin = ray.origin
    direction = ray.direction

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            current = make_ray(origin, direction)
            rec = hit_world(current, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance = throughput * background(direction)
                active = 0
            else:
                material = get_surface_material(rec.surface_id)
                scattered, attenuation, did_scatter = scatter(
                    material, current, rec.point, rec.normal, rec.front_face, stream
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = scattered.origin
                    direction = scattered.direction

    return radiance


_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single(origin: vec3, direction: vec3, depth: ti.i32, stream: ti.i32):
    # Single-iteration outer loop keeps the bounce and scene loops serial
    for _ in range(1):
        _trace_result[None] = ray_color(make_ray(origin, direction), depth, stream)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray against the current scene.

    Python-callable for tests and debugging. Random streams must have been
    seeded with at least stream + 1 streams.

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero).
        depth: Bounce budget.
        stream: Random stream to use.

    Returns:
        Tuple of (R, G, B) linear radiance.

    Raises:
        ValueError: If depth is negative.
    """
    if depth < 0:
        raise ValueError(f"depth = {depth} must be non-negative")

    _trace_single(vec3(*origin), vec3(*direction), depth, stream)
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
