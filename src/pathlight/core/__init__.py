"""Core rendering module.

Components:
    ray: Ray data structure, vector utilities and random direction sampling
    sensor: Per-pixel exposure buffer and tone mapping
    settings: Render settings
    tracer: Bounce-loop integrator and the incremental Tracer
    parallel: Lane-partitioned producer/consumer sampling

Only the field-free modules are imported here. Import tracer and parallel
directly (from pathlight.core.tracer import Tracer) once Taichi is
initialized.
"""

from .ray import (
    Ray,
    angle_axis,
    build_onb_from_normal,
    component_average,
    is_zero,
    lerp,
    make_ray,
    random_in_cone,
    random_in_cos_hemisphere,
    random_in_unit_disk,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    vec3,
)
from .sensor import Sensor, SensorDimensions, tone_map
from .settings import RenderSettings

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "is_zero",
    "lerp",
    "component_average",
    "reflect",
    "refract",
    "angle_axis",
    "build_onb_from_normal",
    "random_unit_vector",
    "random_in_cos_hemisphere",
    "random_in_cone",
    "random_in_unit_disk",
    "Sensor",
    "SensorDimensions",
    "tone_map",
    "RenderSettings",
]
