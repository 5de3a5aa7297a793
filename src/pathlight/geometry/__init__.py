"""Geometry primitives.

Components:
    sphere: Sphere primitive and robust ray-sphere intersection
"""

from .sphere import HitRecord, Sphere, hit_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
]
