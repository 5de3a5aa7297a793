"""Camera models.

Components:
    thin_lens: Thin-lens camera with depth of field and yaw/pitch orientation

Importing this package declares Taichi fields, so Taichi must be
initialized first.
"""

from .thin_lens import ThinLensCamera, camera_ray, get_ray, setup_camera

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "camera_ray",
]
