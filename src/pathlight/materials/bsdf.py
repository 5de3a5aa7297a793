"""Probabilistic scattering for the blended material model.

Scattering picks exactly one event per surface interaction. When the
outgoing direction ``wo`` (pointing away from the surface, toward where the
path came from) lies on the outward side of the normal, a single uniform
``r`` walks a sequential filter over the candidate events:

1. specular reflection, with probability avg(Schlick(fresnel, wo, n))
2. refraction into the interior, with probability ``transparency``
3. absorption, with probability ``metalness``
4. diffuse scattering with the remaining probability

Each test only sees the mass the earlier tests left, so the events occur
with frequencies p1, (1 - p1) p2, (1 - p1)(1 - p2) p3 and the remainder.

When ``wo`` lies on the inner side the path is leaving a transmissive
interior: it refracts out through Snell's law or, on total internal
reflection, dies.

Every function takes its uniforms as explicit arguments.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import component_average, lerp, random_in_cone, reflect, refract, vec3
from pathlight.materials.material import (
    material_colors,
    material_fresnel,
    material_glossiness,
    material_metalness,
    material_refraction,
    material_transparency,
)
from pathlight.materials.pdf import PdfKind, cosine_pdf, pdf_generate, pdf_value


class ScatterEvent(IntEnum):
    """Outcome of a scattering decision."""

    REFLECT = 0
    REFRACT_ENTRY = 1
    ABSORB = 2
    DIFFUSE = 3
    REFRACT_EXIT = 4
    DEAD = 5


# Index of refraction outside every object
EXTERIOR_INDEX = 1.0


@ti.func
def schlick(fresnel: vec3, wo: vec3, normal: vec3) -> vec3:
    """Schlick's approximation: F0 + (1 - F0)(1 - cos(theta))^5 per channel.

    Args:
        fresnel: Reflectance at normal incidence (F0).
        wo: Unit direction away from the surface.
        normal: Unit surface normal.
    """
    cosine = tm.dot(wo, normal)
    return fresnel + (1.0 - fresnel) * ((1.0 - cosine) ** 5)


@ti.func
def select_scatter_event(r: ti.f64, p_reflect: ti.f64, p_refract: ti.f64, p_absorb: ti.f64) -> ti.i32:
    """Sequential filtered probability test with a single uniform.

    The cumulative threshold grows by each event's probability scaled by
    the mass not yet claimed; the first threshold exceeding r wins.

    Args:
        r: Uniform in [0, 1), drawn once per selection.
        p_reflect: Reflection probability.
        p_refract: Refraction probability given no reflection.
        p_absorb: Absorption probability given neither of the above.

    Returns:
        A ScatterEvent value (REFLECT, REFRACT_ENTRY, ABSORB or DIFFUSE).
    """
    event = int(ScatterEvent.DIFFUSE)
    threshold = p_reflect
    if r < threshold:
        event = int(ScatterEvent.REFLECT)
    else:
        threshold += (1.0 - threshold) * p_refract
        if r < threshold:
            event = int(ScatterEvent.REFRACT_ENTRY)
        else:
            threshold += (1.0 - threshold) * p_absorb
            if r < threshold:
                event = int(ScatterEvent.ABSORB)
    return event


# =============================================================================
# Per-event sampling
# =============================================================================


@ti.func
def reflected(material_id: ti.i32, wo: vec3, normal: vec3, u: ti.f64, v: ti.f64):
    """Glossy specular reflection.

    Mirrors -wo about the normal and perturbs it inside a cone of width
    (1 - glossiness).

    Returns:
        A tuple (direction, throughput).
    """
    mirror = reflect(-wo, normal)
    direction = random_in_cone(mirror, 1.0 - material_glossiness[material_id], u, v)
    white = vec3(1.0, 1.0, 1.0)
    throughput = lerp(white, material_fresnel[material_id], material_metalness[material_id])
    return direction, throughput


@ti.func
def refracted_entry(material_id: ti.i32, wo: vec3, normal: vec3):
    """Refraction from the exterior into the material.

    Returns:
        A tuple (direction, throughput, ok). ok is 0 when Snell's law has no
        solution (only possible for an index below the exterior's).
    """
    direction, ok = refract(-wo, normal, EXTERIOR_INDEX, material_refraction[material_id])
    return direction, vec3(1.0, 1.0, 1.0), ok


@ti.func
def refracted_exit(material_id: ti.i32, distance: ti.f64) -> vec3:
    """Throughput of a path leaving the interior after travelling distance.

    The interior tints toward the material color as the travelled volume
    grows: lerp(white, color, min((1 - transparency) * distance^2, 1)).
    """
    volume = tm.min((1.0 - material_transparency[material_id]) * distance * distance, 1.0)
    return lerp(vec3(1.0, 1.0, 1.0), material_colors[material_id], volume)


@ti.func
def diffused(
    material_id: ti.i32,
    point: vec3,
    normal: vec3,
    u: ti.f64,
    v: ti.f64,
    r_mix: ti.f64,
    r_choice: ti.f64,
):
    """Diffuse scattering with light sampling.

    The direction comes from the cosine/light mixture and the throughput is
    the material color scaled by the mixture density at that direction.
    Directions below the surface are replaced by the normal with zero
    throughput.

    Returns:
        A tuple (direction, throughput).
    """
    direction = pdf_generate(int(PdfKind.MIXTURE), point, normal, u, v, r_mix, r_choice)
    throughput = vec3(0.0, 0.0, 0.0)
    if cosine_pdf(normal, direction) > 0.0:
        mix_density = pdf_value(int(PdfKind.MIXTURE), point, normal, direction)
        if mix_density > 0.0:
            throughput = material_colors[material_id] * mix_density
    else:
        direction = normal
    return direction, throughput


# =============================================================================
# Scatter dispatch
# =============================================================================


@ti.func
def scatter(
    material_id: ti.i32,
    wo: vec3,
    point: vec3,
    normal: vec3,
    distance: ti.f64,
    u: ti.f64,
    v: ti.f64,
    r_event: ti.f64,
    r_mix: ti.f64,
    r_choice: ti.f64,
):
    """Choose and sample one scattering event.

    Args:
        material_id: Material of the hit surface.
        wo: Unit direction away from the surface (negated ray direction).
        point: Hit point.
        normal: Unit outward normal.
        distance: Length of the segment that reached the hit point.
        u: First uniform for direction sampling.
        v: Second uniform for direction sampling.
        r_event: Uniform for the event selection.
        r_mix: Uniform for the mixture component choice.
        r_choice: Uniform for the light choice.

    Returns:
        A tuple (direction, throughput, event). Absorbed and dead events
        return a zero direction and zero throughput.
    """
    zero = vec3(0.0, 0.0, 0.0)
    direction = zero
    throughput = zero
    event = int(ScatterEvent.DEAD)

    if tm.dot(wo, normal) > 0.0:
        p_reflect = component_average(schlick(material_fresnel[material_id], wo, normal))
        event = select_scatter_event(
            r_event,
            p_reflect,
            material_transparency[material_id],
            material_metalness[material_id],
        )
        if event == int(ScatterEvent.REFLECT):
            reflect_dir, reflect_throughput = reflected(material_id, wo, normal, u, v)
            direction = reflect_dir
            throughput = reflect_throughput
        elif event == int(ScatterEvent.REFRACT_ENTRY):
            entry_dir, entry_throughput, ok = refracted_entry(material_id, wo, normal)
            if ok == 1:
                direction = entry_dir
                throughput = entry_throughput
            else:
                event = int(ScatterEvent.DEAD)
        elif event == int(ScatterEvent.DIFFUSE):
            diffuse_dir, diffuse_throughput = diffused(material_id, point, normal, u, v, r_mix, r_choice)
            direction = diffuse_dir
            throughput = diffuse_throughput
    else:
        exit_dir, ok = refract(-wo, -normal, material_refraction[material_id], EXTERIOR_INDEX)
        if ok == 1:
            direction = exit_dir
            throughput = refracted_exit(material_id, distance)
            event = int(ScatterEvent.REFRACT_EXIT)

    return direction, throughput, event
