"""Sphere primitive with robust ray-sphere intersection.

Spheres are the only primitive the renderer models. The intersection uses
the robust quadratic formulation from Ray Tracing Gems, which avoids
catastrophic cancellation when b^2 is nearly equal to 4ac. That matters for
the scenes this renderer is built for: walls, floors and ceilings are
modeled as spheres with a radius of a thousand units.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlight.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The 3D point where the ray intersected the sphere.
        normal: Unit outward normal at the intersection point. It is never
            flipped toward the ray; materials decide entry versus exit from
            the sign of dot(-direction, normal).
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3


@ti.func
def _solve_quadratic_robust(h: ti.f64, a: ti.f64, c: ti.f64, sqrt_d: ti.f64):
    """Solve a*t^2 + 2*h*t + c = 0 with the numerically stable formula.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-12:
        # Tangent ray through the origin of the quadratic
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Solves |origin + t * direction - center|^2 = radius^2 using the half-b
    form (a = d.d, h = d.oc, c = oc.oc - r^2) and returns the nearest root
    strictly inside (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test intersection against.
        t_min: Minimum distance for a valid hit (self-intersection bias).
        t_max: Maximum distance for a valid hit (closest hit so far).

    Returns:
        A HitRecord. Check the hit field to determine if an intersection
        occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = (hit_point - sphere.center) / sphere.radius

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)
