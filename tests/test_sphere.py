"""Tests for ray-sphere intersection.

Tests cover:
- Basic hits and misses
- Outward normals from outside and from inside the sphere
- Hit interval bounds
- Large-radius spheres (walls modeled as spheres)
"""

import numpy as np
import taichi as ti


def _run_hit(origin, direction, center, radius, t_min=1e-6, t_max=1e30):
    from pathlight.core.ray import vec3
    from pathlight.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f64, shape=())
    point = ti.Vector.field(3, dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f64, oy: ti.f64, oz: ti.f64,
        dx: ti.f64, dy: ti.f64, dz: ti.f64,
        cx: ti.f64, cy: ti.f64, cz: ti.f64,
        r: ti.f64, lo: ti.f64, hi: ti.f64,
    ):
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        rec = hit_sphere(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere, lo, hi)
        hit[None] = rec.hit
        t[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal

    test_kernel(*origin, *direction, *center, radius, t_min, t_max)
    return hit[None], t[None], point[None].to_numpy(), normal[None].to_numpy()


class TestSphereHit:
    """Tests for hit_sphere."""

    def test_hit_from_outside(self):
        hit, t, point, normal = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)

        assert hit == 1
        assert abs(t - 4.0) < 1e-12
        np.testing.assert_allclose(point, [0.0, 0.0, -4.0], atol=1e-12)
        np.testing.assert_allclose(normal, [0.0, 0.0, 1.0], atol=1e-12)

    def test_miss(self):
        hit, _, _, _ = _run_hit((0.0, 2.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 0

    def test_sphere_behind_ray_is_missed(self):
        hit, _, _, _ = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 0

    def test_inside_hit_keeps_outward_normal(self):
        hit, t, point, normal = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 2.0)

        assert hit == 1
        assert abs(t - 2.0) < 1e-12
        np.testing.assert_allclose(point, [0.0, 0.0, 2.0], atol=1e-12)
        # The normal points away from the center even though the ray is inside
        np.testing.assert_allclose(normal, [0.0, 0.0, 1.0], atol=1e-12)

    def test_t_max_excludes_far_hits(self):
        hit, _, _, _ = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0, t_max=3.5)
        assert hit == 0

    def test_t_min_skips_to_far_root(self):
        # Origin on the near surface: the near root is below t_min
        hit, t, _, normal = _run_hit((0.0, 0.0, -4.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)

        assert hit == 1
        assert abs(t - 2.0) < 1e-12
        np.testing.assert_allclose(normal, [0.0, 0.0, -1.0], atol=1e-12)

    def test_large_sphere_is_stable(self):
        # A floor modeled as a sphere of radius 1000
        direction = np.array([0.0, -1.0, -1.0]) / np.sqrt(2.0)
        hit, t, point, normal = _run_hit((0.0, 0.0, 0.0), tuple(direction), (0.0, -1003.0, -8.0), 1000.0)

        assert hit == 1
        assert abs(np.linalg.norm(point - np.array([0.0, -1003.0, -8.0])) - 1000.0) < 1e-9
        np.testing.assert_allclose(np.linalg.norm(normal), 1.0, atol=1e-12)
        assert normal[1] > 0.99
