"""Ray data structure and vector utilities for Monte Carlo path tracing.

This module provides the Ray dataclass and the vector helpers shared by the
camera, the intersection code and the material model. Everything here is a
pure Taichi function: random-direction generators take their uniform
numbers as explicit arguments so that callers (and tests) control the
random stream.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlight.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def demo() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# 3D vector type (64-bit components)
vec3 = ti.types.vector(3, ti.f64)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Unit length when
            produced by the camera or by scattering; not re-validated.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def is_zero(v: vec3) -> ti.i32:
    """Check whether every component of v is exactly zero.

    Used to detect terminated paths: dead and absorbed events return an
    exact zero throughput.
    """
    return v.x == 0.0 and v.y == 0.0 and v.z == 0.0


@ti.func
def component_average(v: vec3) -> ti.f64:
    """Average of the three components (used to collapse RGB to a probability)."""
    return (v.x + v.y + v.z) / 3.0


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f64) -> vec3:
    """Linearly interpolate from a (t = 0) to b (t = 1)."""
    return a + (b - a) * t


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal.

    Args:
        incident: The direction of travel (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The reflected direction.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, exterior_index: ti.f64, interior_index: ti.f64):
    """Refract a direction through an interface using Snell's law.

    The normal must face against the incident direction (dot < 0). Light
    travels from the medium with ``exterior_index`` into the medium with
    ``interior_index``.

    Args:
        incident: Unit direction of travel.
        normal: Unit normal on the incident side of the interface.
        exterior_index: Index of refraction the ray is leaving.
        interior_index: Index of refraction the ray is entering.

    Returns:
        A tuple (direction, ok). ``ok`` is 0 on total internal reflection,
        in which case direction is the zero vector.
    """
    ratio = exterior_index / interior_index
    n_dot_i = tm.dot(normal, incident)
    k = 1.0 - ratio * ratio * (1.0 - n_dot_i * n_dot_i)

    result = vec3(0.0, 0.0, 0.0)
    ok = 0
    if k >= 0.0:
        result = tm.normalize(incident * ratio - normal * (ratio * n_dot_i + ti.sqrt(k)))
        ok = 1
    return result, ok


@ti.func
def angle_axis(direction: vec3, angle_degrees: ti.f64, axis: vec3) -> vec3:
    """Rotate a vector about a unit axis (Rodrigues' rotation formula).

    Args:
        direction: The vector to rotate.
        angle_degrees: Rotation angle in degrees.
        axis: Unit rotation axis.

    Returns:
        The rotated vector.
    """
    theta = tm.radians(angle_degrees)
    cos_t = ti.cos(theta)
    return (
        direction * cos_t
        + tm.cross(axis, direction) * ti.sin(theta)
        + axis * tm.dot(axis, direction) * (1.0 - cos_t)
    )


# =============================================================================
# Orthonormal Basis
# =============================================================================


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis whose third axis is the given normal.

    Args:
        normal: The axis to align with (need not be normalized).

    Returns:
        A tuple (u, v, w) of unit vectors, with w = normalize(normal).
    """
    w = tm.normalize(normal)
    helper = vec3(1.0, 0.0, 0.0)
    if ti.abs(w.x) > 0.7:
        helper = vec3(0.0, 1.0, 0.0)
    v = tm.normalize(tm.cross(w, helper))
    u = tm.cross(w, v)
    return u, v, w


@ti.func
def local_to_world(local_dir: vec3, u: vec3, v: vec3, w: vec3) -> vec3:
    """Transform a direction from basis-local (z-up) to world coordinates."""
    return local_dir.x * u + local_dir.y * v + local_dir.z * w


# =============================================================================
# Random Direction Generation
# =============================================================================


@ti.func
def random_unit_vector(u: ti.f64, v: ti.f64) -> vec3:
    """Map two uniforms in [0, 1) to a direction uniform on the unit sphere.

    Args:
        u: Uniform sample selecting the azimuth.
        v: Uniform sample selecting the elevation.

    Returns:
        A unit vector.
    """
    theta = 2.0 * tm.pi * u
    phi = ti.asin(tm.clamp(2.0 * v - 1.0, -1.0, 1.0))
    return vec3(ti.cos(theta) * ti.cos(phi), ti.sin(phi), ti.sin(theta) * ti.cos(phi))


@ti.func
def random_in_cos_hemisphere(u: ti.f64, v: ti.f64) -> vec3:
    """Cosine-weighted direction in the local z-up hemisphere.

    The density is cos(theta) / pi.

    Args:
        u: Uniform sample selecting the azimuth.
        v: Uniform sample selecting the radius on the projected disk.

    Returns:
        A unit vector with z >= 0.
    """
    phi = 2.0 * tm.pi * u
    r = ti.sqrt(v)
    return vec3(ti.cos(phi) * r, ti.sin(phi) * r, ti.sqrt(tm.max(0.0, 1.0 - v)))


@ti.func
def random_in_cone(direction: vec3, width: ti.f64, u: ti.f64, v: ti.f64) -> vec3:
    """Perturb a unit direction inside a cone.

    The cone's half-angle reaches ``width * pi / 2`` so a width of 0 returns
    the direction unchanged and a width of 1 spans the whole hemisphere.

    Args:
        direction: Unit axis of the cone.
        width: Cone width in [0, 1].
        u: Uniform sample selecting the polar offset.
        v: Uniform sample selecting the azimuth around the axis.

    Returns:
        A unit vector inside the cone.
    """
    theta = width * 0.5 * tm.pi * (1.0 - (2.0 * ti.acos(tm.clamp(u, 0.0, 1.0)) / tm.pi))
    m1 = ti.sin(theta)
    m2 = ti.cos(theta)
    a = v * 2.0 * tm.pi
    s, t, axis = build_onb_from_normal(direction)
    d = s * (m1 * ti.cos(a)) + t * (m1 * ti.sin(a)) + axis * m2
    return tm.normalize(d)


@ti.func
def random_in_unit_disk() -> vec3:
    """Uniform point inside the unit disk in the xy-plane.

    Rejection samples Taichi's per-thread generator.

    Returns:
        A point (x, y, 0) with x^2 + y^2 <= 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(64):  # bounded rejection loop
        if not found:
            x = ti.random(ti.f64) * 2.0 - 1.0
            y = ti.random(ti.f64) * 2.0 - 1.0
            if x * x + y * y <= 1.0:
                p = vec3(x, y, 0.0)
                found = True
    return p
