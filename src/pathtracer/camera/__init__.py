"""Camera module for primary ray generation.

Components:
    thin_lens: Perspective camera with a finite aperture (depth of field)

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import (
    CameraFrame,
    ThinLensCamera,
    compute_camera_frame,
    get_camera_basis,
    get_camera_info,
    get_camera_origin,
    get_ray,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "CameraFrame",
    "compute_camera_frame",
    "setup_camera",
    "get_ray",
    "get_camera_origin",
    "get_camera_basis",
    "get_camera_info",
]
