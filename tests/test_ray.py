"""Unit tests for ray and vector utilities.

Tests cover:
- Ray evaluation
- Reflection, refraction and total internal reflection
- Axis-angle rotation and orthonormal bases
- Random direction generators (sphere, cosine hemisphere, cone, disk)
"""

import math

import numpy as np
import pytest
import taichi as ti

# Samples drawn by the statistical tests
N = 4096


class TestRayBasics:
    """Tests for the Ray dataclass."""

    def test_ray_at(self):
        from pathlight.core.ray import Ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [1.0, 2.0, 0.5], atol=1e-12)


class TestVectorHelpers:
    """Tests for small vector helpers."""

    def test_lerp_and_average(self):
        from pathlight.core.ray import component_average, lerp, vec3

        mixed = ti.Vector.field(3, dtype=ti.f64, shape=())
        average = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            mixed[None] = lerp(vec3(1.0, 1.0, 1.0), vec3(0.0, 0.5, 3.0), 0.25)
            average[None] = component_average(vec3(0.3, 0.6, 0.9))

        test_kernel()
        np.testing.assert_allclose(mixed[None].to_numpy(), [0.75, 0.875, 1.5], atol=1e-12)
        assert abs(average[None] - 0.6) < 1e-12

    def test_is_zero(self):
        from pathlight.core.ray import is_zero, vec3

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = is_zero(vec3(0.0, 0.0, 0.0))
            result[1] = is_zero(vec3(0.0, 1e-300, 0.0))

        test_kernel()
        assert result[0] == 1
        assert result[1] == 0


class TestReflectRefract:
    """Tests for reflection and Snell refraction."""

    def test_reflect(self):
        from pathlight.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [1.0, 1.0, 0.0], atol=1e-12)

    def test_refract_normal_incidence_passes_straight(self):
        from pathlight.core.ray import refract, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())
        ok = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, flag = refract(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0), 1.0, 1.5)
            result[None] = d
            ok[None] = flag

        test_kernel()
        assert ok[None] == 1
        np.testing.assert_allclose(result[None].to_numpy(), [0.0, 0.0, -1.0], atol=1e-12)

    def test_refract_obeys_snell(self):
        from pathlight.core.ray import refract, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        theta_i = math.radians(40.0)

        @ti.kernel
        def test_kernel(sin_i: ti.f64, cos_i: ti.f64):
            d, _ = refract(vec3(sin_i, -cos_i, 0.0), vec3(0.0, 1.0, 0.0), 1.0, 1.5)
            result[None] = d

        test_kernel(math.sin(theta_i), math.cos(theta_i))
        d = result[None].to_numpy()
        assert abs(np.linalg.norm(d) - 1.0) < 1e-12
        # sin(theta_t) = sin(theta_i) / 1.5, bending toward the normal
        assert abs(d[0] - math.sin(theta_i) / 1.5) < 1e-12
        assert d[1] < 0.0

    def test_refract_total_internal_reflection(self):
        from pathlight.core.ray import refract, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())
        ok = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # 60 degrees from inside glass exceeds the critical angle (~41.8)
            d, flag = refract(vec3(0.8660254037844386, -0.5, 0.0), vec3(0.0, 1.0, 0.0), 1.5, 1.0)
            result[None] = d
            ok[None] = flag

        test_kernel()
        assert ok[None] == 0
        np.testing.assert_allclose(result[None].to_numpy(), [0.0, 0.0, 0.0])


class TestRotationAndBasis:
    """Tests for angle_axis and build_onb_from_normal."""

    def test_angle_axis_quarter_turn(self):
        from pathlight.core.ray import angle_axis, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = angle_axis(vec3(1.0, 0.0, 0.0), 90.0, vec3(0.0, 0.0, 1.0))

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [0.0, 1.0, 0.0], atol=1e-12)

    @pytest.mark.parametrize(
        "normal",
        [(0.0, 0.0, 1.0), (1.0, 0.0, 0.0), (-1.0, 0.0, 0.0), (0.3, -0.8, 0.52)],
    )
    def test_onb_is_orthonormal(self, normal):
        from pathlight.core.ray import build_onb_from_normal, vec3

        axes = ti.Vector.field(3, dtype=ti.f64, shape=3)

        @ti.kernel
        def test_kernel(x: ti.f64, y: ti.f64, z: ti.f64):
            u, v, w = build_onb_from_normal(vec3(x, y, z))
            axes[0] = u
            axes[1] = v
            axes[2] = w

        test_kernel(*normal)
        basis = axes.to_numpy()
        np.testing.assert_allclose(basis @ basis.T, np.eye(3), atol=1e-12)
        expected_w = np.array(normal) / np.linalg.norm(normal)
        np.testing.assert_allclose(basis[2], expected_w, atol=1e-12)


class TestRandomDirections:
    """Tests for the random direction generators."""

    def test_unit_vector_is_unit(self):
        from pathlight.core.ray import random_unit_vector

        out = ti.Vector.field(3, dtype=ti.f64, shape=N)

        @ti.kernel
        def test_kernel():
            for i in range(N):
                out[i] = random_unit_vector(ti.random(ti.f64), ti.random(ti.f64))

        test_kernel()
        norms = np.linalg.norm(out.to_numpy(), axis=1)
        np.testing.assert_allclose(norms, 1.0, atol=1e-12)

    def test_cos_hemisphere_is_unit_and_upper(self):
        from pathlight.core.ray import random_in_cos_hemisphere

        out = ti.Vector.field(3, dtype=ti.f64, shape=N)

        @ti.kernel
        def test_kernel():
            for i in range(N):
                out[i] = random_in_cos_hemisphere(ti.random(ti.f64), ti.random(ti.f64))

        test_kernel()
        dirs = out.to_numpy()
        np.testing.assert_allclose(np.linalg.norm(dirs, axis=1), 1.0, atol=1e-12)
        assert np.all(dirs[:, 2] >= 0.0)
        # E[cos(theta)] = 2/3 for a cosine-weighted hemisphere
        assert abs(dirs[:, 2].mean() - 2.0 / 3.0) < 0.02

    def test_cone_zero_width_returns_axis(self):
        from pathlight.core.ray import random_in_cone, vec3

        out = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            out[None] = random_in_cone(vec3(0.0, 0.6, 0.8), 0.0, 0.3, 0.7)

        test_kernel()
        np.testing.assert_allclose(out[None].to_numpy(), [0.0, 0.6, 0.8], atol=1e-12)

    @pytest.mark.parametrize("width", [0.2, 0.5, 1.0])
    def test_cone_stays_within_half_angle(self, width):
        from pathlight.core.ray import random_in_cone, vec3

        out = ti.Vector.field(3, dtype=ti.f64, shape=N)

        @ti.kernel
        def test_kernel(w: ti.f64):
            for i in range(N):
                out[i] = random_in_cone(vec3(0.0, 0.0, 1.0), w, ti.random(ti.f64), ti.random(ti.f64))

        test_kernel(width)
        dirs = out.to_numpy()
        np.testing.assert_allclose(np.linalg.norm(dirs, axis=1), 1.0, atol=1e-12)
        min_cos = math.cos(width * math.pi / 2.0)
        assert np.all(dirs[:, 2] >= min_cos - 1e-9)

    def test_unit_disk(self):
        from pathlight.core.ray import random_in_unit_disk

        out = ti.Vector.field(3, dtype=ti.f64, shape=N)

        @ti.kernel
        def test_kernel():
            for i in range(N):
                out[i] = random_in_unit_disk()

        test_kernel()
        points = out.to_numpy()
        assert np.all(points[:, 0] ** 2 + points[:, 1] ** 2 <= 1.0)
        assert np.all(points[:, 2] == 0.0)
        # Rejection sampling should essentially never exhaust its attempts
        assert np.count_nonzero(np.all(points == 0.0, axis=1)) <= 1
