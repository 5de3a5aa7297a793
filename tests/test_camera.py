"""Tests for the thin-lens camera.

Tests cover:
- Derived lens quantities and configuration validation
- Ray generation through the image center
- Image orientation (top row looks up, left column looks left)
- Pitch and yaw rotation
- Depth of field: rays through different lens points meet on the focus plane
"""

import math

import numpy as np
import pytest


class TestThinLensConfig:
    """Tests for the ThinLensCamera dataclass."""

    def test_derived_values(self):
        from pathlight.camera.thin_lens import ThinLensCamera

        camera = ThinLensCamera(position=(0.0, 0.0, 7.0), focal_length=0.040, focus=15.0, f_stop=1.4)

        assert camera.aperture == pytest.approx(0.040 / 1.4)
        assert camera.object_distance == -15.0
        assert camera.image_distance == pytest.approx(1.0 / (1.0 / 0.040 - 1.0 / 15.0))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sensor": 0.0},
            {"focal_length": -0.01},
            {"focus": 0.01},
            {"f_stop": 0.0},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        from pathlight.camera.thin_lens import ThinLensCamera

        with pytest.raises(ValueError):
            ThinLensCamera(position=(0.0, 0.0, 0.0), **kwargs)

    def test_dict_round_trip(self):
        from pathlight.camera.thin_lens import ThinLensCamera

        camera = ThinLensCamera(position=(0.0, 6.0, 8.0), focal_length=0.055, focus=14.0, pitch=25.0)
        assert ThinLensCamera.from_dict(camera.to_dict()) == camera

    def test_setup_uploads_fields(self):
        from pathlight.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        camera = ThinLensCamera(position=(1.0, 2.0, 3.0), yaw=10.0, pitch=-5.0)
        setup_camera(camera)
        info = get_camera_info()

        assert info["image_distance"] == pytest.approx(camera.image_distance)
        assert info["aperture_radius"] == pytest.approx(camera.aperture / 2.0)
        assert info["yaw"] == 10.0
        assert info["pitch"] == -5.0


class TestRayGeneration:
    """Tests for get_ray via the Python-side camera_ray helper."""

    def test_center_ray_looks_down_negative_z(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        setup_camera(ThinLensCamera(position=(0.0, 0.0, 7.0)))
        origin, direction = camera_ray(0, 0, 1, 1)

        np.testing.assert_allclose(origin, [0.0, 0.0, 7.0], atol=1e-12)
        np.testing.assert_allclose(direction, [0.0, 0.0, -1.0], atol=1e-12)

    def test_directions_are_unit(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        setup_camera(ThinLensCamera(position=(0.0, 6.0, 8.0), yaw=15.0, pitch=25.0))
        rng = np.random.default_rng(3)
        for _ in range(20):
            x, y = rng.integers(0, 64, size=2)
            _, direction = camera_ray(int(x), int(y), 64, 48, tuple(rng.random(2)), tuple(rng.random(2)))
            assert abs(np.linalg.norm(direction) - 1.0) < 1e-12

    def test_top_row_looks_up_and_left_column_looks_left(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        setup_camera(ThinLensCamera(position=(0.0, 0.0, 0.0)))
        _, top_left = camera_ray(0, 0, 3, 3)
        _, bottom_right = camera_ray(2, 2, 3, 3)

        assert top_left[0] < 0.0 and top_left[1] > 0.0
        assert bottom_right[0] > 0.0 and bottom_right[1] < 0.0

    def test_pitch_tilts_down(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        setup_camera(ThinLensCamera(position=(0.0, 0.0, 0.0), pitch=90.0))
        _, direction = camera_ray(0, 0, 1, 1)

        np.testing.assert_allclose(direction, [0.0, -1.0, 0.0], atol=1e-12)

    def test_yaw_turns_right(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        setup_camera(ThinLensCamera(position=(0.0, 0.0, 0.0), yaw=90.0))
        _, direction = camera_ray(0, 0, 1, 1)

        np.testing.assert_allclose(direction, [1.0, 0.0, 0.0], atol=1e-12)

    def test_lens_rays_converge_on_focus_plane(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        camera = ThinLensCamera(position=(0.0, 0.0, 7.0), focal_length=0.040, focus=15.0, f_stop=1.4)
        setup_camera(camera)

        points = []
        for lens in [(0.0, 0.0), (1.0, 0.0), (1.0, 0.25), (0.5, 0.6)]:
            origin, direction = camera_ray(5, 2, 16, 16, jitter=(0.3, 0.7), lens=lens)
            # Intersect with the focus plane z = 7 - 15
            t = (7.0 - 15.0 - origin[2]) / direction[2]
            points.append(np.array(origin) + t * np.array(direction))

        for p in points[1:]:
            np.testing.assert_allclose(p, points[0], atol=1e-9)

    def test_lens_offsets_origin_within_aperture(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        camera = ThinLensCamera(position=(0.0, 0.0, 7.0))
        setup_camera(camera)
        origin, _ = camera_ray(0, 0, 1, 1, lens=(1.0, 0.0))

        offset = np.array(origin) - np.array([0.0, 0.0, 7.0])
        assert math.isclose(np.linalg.norm(offset), camera.aperture / 2.0, rel_tol=1e-12)

    def test_camera_ray_method_uses_its_own_configuration(self):
        from pathlight.camera.thin_lens import ThinLensCamera, camera_ray, setup_camera

        setup_camera(ThinLensCamera(position=(9.0, 9.0, 9.0), yaw=45.0))
        camera = ThinLensCamera(position=(0.0, 0.0, 0.0), yaw=90.0)

        origin, direction = camera.ray(0, 0, 1, 1)

        np.testing.assert_allclose(origin, [0.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(direction, [1.0, 0.0, 0.0], atol=1e-12)
        assert camera_ray(0, 0, 1, 1) == (origin, direction)
