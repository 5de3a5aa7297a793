"""Scene storage and nearest-surface intersection.

Spheres live in module-level Taichi fields (structure of arrays), together
with the light set (indices of spheres whose material can emit) and the
background radiance. Every sample reads these fields; nothing writes them
while a render is in progress.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlight.scene.intersection import add_sphere, clear_scene, intersect_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -5.0), 1.0, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from pathlight.core.ray import vec3
from pathlight.geometry.sphere import Sphere, hit_sphere

# Minimum hit distance; rays leave surfaces from the exact hit point
EPSILON = 1e-6
# Upper bound for hit distances
T_MAX = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if any sphere was hit, 0 if the ray escaped.
        t: Hit distance along the ray.
        point: Hit point.
        normal: Unit outward normal of the hit sphere.
        sphere_index: Index of the hit sphere, -1 on a miss.
        material_id: Material of the hit sphere, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    sphere_index: ti.i32
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Light set: indices into the sphere arrays
light_sphere_indices = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_lights = ti.field(dtype=ti.i32, shape=())

# Radiance returned for rays that escape the scene
background_color = ti.Vector.field(3, dtype=ti.f64, shape=())


def clear_scene() -> None:
    """Remove all spheres and lights and reset the background to black.

    The field data itself is not cleared; it is overwritten as new
    primitives are added.
    """
    num_spheres[None] = 0
    num_lights[None] = 0
    background_color[None] = (0.0, 0.0, 0.0)


def add_sphere(center, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere (x, y, z).
        radius: The radius of the sphere (positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_light(sphere_index: int) -> int:
    """Register an existing sphere as a light source.

    Args:
        sphere_index: Index returned by add_sphere().

    Returns:
        The position of the sphere in the light set.

    Raises:
        ValueError: If the sphere index does not exist.
    """
    if not 0 <= sphere_index < num_spheres[None]:
        raise ValueError(f"Sphere index {sphere_index} out of range (have {num_spheres[None]} spheres)")
    idx = num_lights[None]
    light_sphere_indices[idx] = sphere_index
    num_lights[None] = idx + 1
    return idx


def set_background(color) -> None:
    """Set the radiance returned for rays that miss every sphere."""
    background_color[None] = color


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_light_count() -> int:
    """Get the number of spheres in the light set."""
    return int(num_lights[None])


# =============================================================================
# Taichi-side queries
# =============================================================================


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        sphere_index=-1,
        material_id=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest sphere hit along a ray.

    Linear scan over all spheres. Only hits farther than EPSILON count, and
    a later sphere replaces the current one only when strictly closer, so
    the first sphere seen wins ties.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the closest hit, or a miss record.
    """
    closest_t = T_MAX
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, EPSILON, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                sphere_index=i,
                material_id=sphere_material_ids[i],
            )

    return result


@ti.func
def get_light_count_func() -> ti.i32:
    """Number of lights (Taichi-side)."""
    return num_lights[None]


@ti.func
def get_light_sphere(light_index: ti.i32):
    """Look up the center and radius of a light.

    Args:
        light_index: Position in the light set, in [0, num_lights).

    Returns:
        A tuple (center, radius).
    """
    sphere_index = light_sphere_indices[light_index]
    return sphere_centers[sphere_index], sphere_radii[sphere_index]


@ti.func
def background(ray_direction: vec3) -> vec3:
    """Radiance arriving along a ray that escaped the scene.

    The background is a constant color, so the direction is unused.
    """
    return background_color[None]


# =============================================================================
# Python-side query
# =============================================================================

_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f64, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_sphere = ti.field(dtype=ti.i32, shape=())
_query_material = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _intersect_query(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
    rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz))
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_sphere[None] = rec.sphere_index
    _query_material[None] = rec.material_id


def query_intersection(origin, direction) -> dict | None:
    """Intersect a single ray against the scene from Python.

    Args:
        origin: Ray origin (x, y, z).
        direction: Unit ray direction (x, y, z).

    Returns:
        None on a miss, otherwise a dict with keys ``t``, ``point``,
        ``normal``, ``sphere_index`` and ``material_id``.
    """
    _intersect_query(*[float(c) for c in origin], *[float(c) for c in direction])
    if _query_hit[None] == 0:
        return None
    point = _query_point[None]
    normal = _query_normal[None]
    return {
        "t": float(_query_t[None]),
        "point": (float(point[0]), float(point[1]), float(point[2])),
        "normal": (float(normal[0]), float(normal[1]), float(normal[2])),
        "sphere_index": int(_query_sphere[None]),
        "material_id": int(_query_material[None]),
    }
