"""Thin-lens camera model with depth of field.

The camera maps normalized image coordinates (s, t) in [0, 1] to rays. Ray
origins are spread over a disk-shaped aperture of radius aperture / 2 in the
lens plane, and every ray through (s, t) passes through the same point on
the focus plane. Objects off the focus plane are blurred in proportion to
their distance from it. An aperture of zero gives a pinhole camera.

The basis (u, v, w) is built from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The basis and viewport are derived once on the Python side with tagged
vectors and stored in Taichi fields that kernels read without locking.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>> camera = ThinLensCamera(
    ...     look_from=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_distance=10.0,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import taichi as ti

from src.pathtracer.core.ray import Ray, make_ray, random_in_unit_disk, vec3
from src.pathtracer.core.vector import Vec3, point, vector

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens perspective camera.

    Attributes:
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at (x, y, z).
        vup: Up hint for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_distance: Distance from look_from to the plane in focus.
    """

    look_from: tuple[float, float, float]
    look_at: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_distance: float = 1.0

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If any parameter is outside its valid range or the
                view direction is degenerate.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.aperture < 0.0:
            raise ValueError(f"aperture = {self.aperture} must be non-negative")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance = {self.focus_distance} must be positive")

        view = point(*self.look_from) - point(*self.look_at)
        if view.length_squared() == 0.0:
            raise ValueError("look_from and look_at must be different points")
        if vector(*self.vup).cross(view).near_zero():
            raise ValueError("vup must not be parallel to the view direction")


@dataclass(frozen=True)
class CameraFrame:
    """Derived, immutable camera geometry.

    Attributes:
        origin: Eye position.
        u, v, w: Orthonormal camera basis.
        horizontal: Full viewport width vector on the focus plane.
        vertical: Full viewport height vector on the focus plane.
        lower_left_corner: Lower-left corner of the viewport on the focus plane.
        lens_radius: Aperture radius.
    """

    origin: Vec3
    u: Vec3
    v: Vec3
    w: Vec3
    horizontal: Vec3
    vertical: Vec3
    lower_left_corner: Vec3
    lens_radius: float


def compute_camera_frame(camera: ThinLensCamera) -> CameraFrame:
    """Derive the camera basis and viewport from its configuration.

    Args:
        camera: A validated camera configuration.

    Returns:
        The derived CameraFrame.
    """
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    look_from = point(*camera.look_from)
    look_at = point(*camera.look_at)
    vup = vector(*camera.vup)

    w = (look_from - look_at).unit_vector()
    u = vup.cross(w).unit_vector()
    v = w.cross(u)

    focus = camera.focus_distance
    horizontal = focus * viewport_width * u
    vertical = focus * viewport_height * v
    lower_left_corner = look_from - horizontal / 2.0 - vertical / 2.0 - focus * w

    return CameraFrame(
        origin=look_from,
        u=u,
        v=v,
        w=w,
        horizontal=horizontal,
        vertical=vertical,
        lower_left_corner=lower_left_corner,
        lens_radius=camera.aperture / 2.0,
    )


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

# Viewport vectors on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> CameraFrame:
    """Validate a camera, derive its frame and upload it for kernels.

    Must be called before rendering. The stored state is read-only for the
    rest of the render.

    Args:
        camera: Camera configuration.

    Returns:
        The derived CameraFrame.

    Raises:
        ValueError: If the configuration is invalid.
    """
    camera.validate()
    frame = compute_camera_frame(camera)

    _camera_origin[None] = frame.origin.to_tuple()
    _camera_u[None] = frame.u.to_tuple()
    _camera_v[None] = frame.v.to_tuple()
    _camera_w[None] = frame.w.to_tuple()
    _viewport_horizontal[None] = frame.horizontal.to_tuple()
    _viewport_vertical[None] = frame.vertical.to_tuple()
    _lower_left_corner[None] = frame.lower_left_corner.to_tuple()
    _lens_radius[None] = frame.lens_radius

    return frame


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, stream: ti.i32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    The origin is offset inside the aperture by a point sampled on the unit
    disk; the direction is not normalized.

    Args:
        s: Horizontal coordinate in [0, 1].
        t: Vertical coordinate in [0, 1].
        stream: Random stream used for the aperture sample.

    Returns:
        The sampled camera ray.
    """
    rd = _lens_radius[None] * random_in_unit_disk(stream)
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - _camera_origin[None]
        - offset
    )
    return make_ray(origin, direction)


@ti.func
def get_camera_origin() -> vec3:
    return _camera_origin[None]


@ti.func
def get_camera_basis():
    """Get the camera's orthonormal basis vectors (u, v, w)."""
    return _camera_u[None], _camera_v[None], _camera_w[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and lens_radius.
    """

    def _read(f) -> tuple[float, float, float]:
        value = f[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _read(_camera_origin),
        "u": _read(_camera_u),
        "v": _read(_camera_v),
        "w": _read(_camera_w),
        "horizontal": _read(_viewport_horizontal),
        "vertical": _read(_viewport_vertical),
        "lower_left": _read(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
