"""Direction sampling strategies for diffuse scattering.

Three strategies form a closed set, selected by ``PdfKind``:

- COSINE: cosine-weighted hemisphere around the surface normal
- LIGHT: directions toward the scene's light spheres (next-event estimation)
- MIXTURE: an even blend of the two

Each strategy exposes a density ``pdf_value(kind, ...)`` and a generator
``pdf_generate(kind, ...)``. The light strategy samples a point on the disk
of the light sphere facing the shading point, and its density is the exact
solid-angle density of that disk sampler. With several lights one is chosen
uniformly and the density is the average over lights.

Example:
    >>> from pathlight.materials.pdf import PdfKind, pdf_generate, pdf_value
    >>> # Inside a Taichi kernel:
    >>> # d = pdf_generate(int(PdfKind.MIXTURE), p, n, u, v, r_mix, r_light)
    >>> # p = pdf_value(int(PdfKind.MIXTURE), p, n, d)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import (
    build_onb_from_normal,
    local_to_world,
    random_in_cos_hemisphere,
    random_in_unit_disk,
    vec3,
)
from pathlight.scene.intersection import get_light_count_func, get_light_sphere


class PdfKind(IntEnum):
    """Direction sampling strategy."""

    COSINE = 0
    LIGHT = 1
    MIXTURE = 2


# Weight of the light strategy inside the mixture
LIGHT_MIX_WEIGHT = 0.5

# Distances below this are treated as degenerate light geometry
_DEGENERATE_DISTANCE = 1e-9


# =============================================================================
# Cosine-weighted hemisphere
# =============================================================================


@ti.func
def cosine_pdf(normal: vec3, direction: vec3) -> ti.f64:
    """Density of the cosine strategy: max(cos(theta), 0) / pi."""
    cosine = tm.dot(tm.normalize(direction), normal)
    result = 0.0
    if cosine > 0.0:
        result = cosine / tm.pi
    return result


@ti.func
def cosine_generate(normal: vec3, u: ti.f64, v: ti.f64) -> vec3:
    """Cosine-weighted direction in the hemisphere around the normal."""
    s, t, w = build_onb_from_normal(normal)
    local = random_in_cos_hemisphere(u, v)
    return tm.normalize(local_to_world(local, s, t, w))


# =============================================================================
# Light sphere sampling
# =============================================================================


@ti.func
def light_half_angle(point: vec3, center: vec3, radius: ti.f64) -> ti.f64:
    """Half-angle of the cone a light sphere subtends from a point.

    Returns pi/2 when the point is inside the sphere.
    """
    distance = tm.length(center - point)
    result = 0.5 * tm.pi
    if distance > radius:
        result = ti.asin(radius / distance)
    return result


@ti.func
def light_pdf(point: vec3, center: vec3, radius: ti.f64, direction: vec3) -> ti.f64:
    """Solid-angle density of light_generate() for one light.

    The generator picks a uniform point on a disk of radius ``radius`` at
    ``center`` facing ``point``. Seen from ``point`` at distance D, a
    direction at angle alpha off the axis reaches the disk plane at
    D * tan(alpha), and the density is D^2 / (pi R^2 cos^3 alpha) inside the
    disk and within the subtended cone, zero elsewhere.
    """
    axis = center - point
    distance = tm.length(axis)
    result = 0.0
    if distance > _DEGENERATE_DISTANCE and radius > 0.0:
        d = tm.normalize(direction)
        cos_a = tm.dot(d, axis / distance)
        if cos_a > 0.0:
            alpha = ti.acos(tm.min(cos_a, 1.0))
            if alpha <= light_half_angle(point, center, radius):
                tan2 = (1.0 - cos_a * cos_a) / (cos_a * cos_a)
                if distance * distance * tan2 <= radius * radius:
                    result = (distance * distance) / (tm.pi * radius * radius * cos_a * cos_a * cos_a)
    return result


@ti.func
def light_generate(point: vec3, center: vec3, radius: ti.f64) -> vec3:
    """Direction from point toward a random point on the light's facing disk.

    The disk point is rejection sampled with the per-thread generator.
    Returns the zero vector when the point coincides with the center.
    """
    axis = center - point
    result = vec3(0.0, 0.0, 0.0)
    if tm.length(axis) > _DEGENERATE_DISTANCE:
        s, t, _ = build_onb_from_normal(axis)
        disk = random_in_unit_disk()
        target = center + (s * disk.x + t * disk.y) * radius
        result = tm.normalize(target - point)
    return result


@ti.func
def lights_pdf(point: vec3, direction: vec3) -> ti.f64:
    """Density of the light strategy averaged over every light."""
    n = get_light_count_func()
    total = 0.0
    for i in range(n):
        center, radius = get_light_sphere(i)
        total += light_pdf(point, center, radius, direction)
    result = 0.0
    if n > 0:
        result = total / n
    return result


@ti.func
def lights_generate(point: vec3, r_choice: ti.f64) -> vec3:
    """Pick a light uniformly with r_choice and sample a direction toward it."""
    n = get_light_count_func()
    result = vec3(0.0, 0.0, 0.0)
    if n > 0:
        index = ti.min(ti.cast(r_choice * n, ti.i32), n - 1)
        center, radius = get_light_sphere(index)
        result = light_generate(point, center, radius)
    return result


# =============================================================================
# Dispatch
# =============================================================================


@ti.func
def mixture_weight() -> ti.f64:
    """Weight of the light strategy in the mixture (0 without lights)."""
    result = 0.0
    if get_light_count_func() > 0:
        result = LIGHT_MIX_WEIGHT
    return result


@ti.func
def pdf_value(kind: ti.i32, point: vec3, normal: vec3, direction: vec3) -> ti.f64:
    """Density of a sampling strategy for a direction.

    Args:
        kind: A PdfKind value.
        point: Shading point.
        normal: Unit surface normal at the shading point.
        direction: Candidate direction.

    Returns:
        The solid-angle density (0 for impossible directions).
    """
    result = 0.0
    if kind == int(PdfKind.COSINE):
        result = cosine_pdf(normal, direction)
    elif kind == int(PdfKind.LIGHT):
        result = lights_pdf(point, direction)
    else:
        m = mixture_weight()
        result = (1.0 - m) * cosine_pdf(normal, direction)
        if m > 0.0:
            result += m * lights_pdf(point, direction)
    return result


@ti.func
def pdf_generate(
    kind: ti.i32,
    point: vec3,
    normal: vec3,
    u: ti.f64,
    v: ti.f64,
    r_mix: ti.f64,
    r_choice: ti.f64,
) -> vec3:
    """Sample a direction from a strategy.

    Args:
        kind: A PdfKind value.
        point: Shading point.
        normal: Unit surface normal at the shading point.
        u: First uniform for the cosine strategy.
        v: Second uniform for the cosine strategy.
        r_mix: Uniform choosing the light component of the mixture
            (chosen when r_mix < weight).
        r_choice: Uniform choosing which light to sample.

    Returns:
        A unit direction, or zero if a light direction is undefined.
    """
    result = vec3(0.0, 0.0, 0.0)
    if kind == int(PdfKind.COSINE):
        result = cosine_generate(normal, u, v)
    elif kind == int(PdfKind.LIGHT):
        result = lights_generate(point, r_choice)
    else:
        if r_mix < mixture_weight():
            result = lights_generate(point, r_choice)
        else:
            result = cosine_generate(normal, u, v)
    return result
