"""Scene storage, management and presets.

Components:
    intersection: Sphere and light storage fields and nearest-hit queries
    manager: The Scene class (materials, spheres, lights, camera, background)
    presets: Named demo scenes ("box", "spheres")

Importing this package declares Taichi fields, so Taichi must be
initialized first.
"""

from .intersection import SceneHitRecord, intersect_scene
from .manager import Intersection, Scene, SceneConfig, SphereInfo
from .presets import available_scenes, load_scene

__all__ = [
    "SceneHitRecord",
    "intersect_scene",
    "Scene",
    "SceneConfig",
    "SphereInfo",
    "Intersection",
    "load_scene",
    "available_scenes",
]
