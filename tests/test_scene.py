"""Tests for scene storage, the Scene manager and the named presets.

Tests cover:
- Sphere and light registration, capacity and validation
- Nearest-hit intersection with first-seen tie breaking
- Scene serialization
- Preset scene contents and the wall-sphere normal through the box camera
"""

import numpy as np
import pytest


class TestSceneStorage:
    """Tests for the module-level scene fields."""

    def test_add_sphere_and_light(self):
        from pathlight.scene.intersection import add_light, add_sphere, get_light_count, get_sphere_count

        first = add_sphere((0.0, 0.0, -5.0), 1.0, 0)
        second = add_sphere((0.0, 3.0, -5.0), 0.5, 1)
        add_light(second)

        assert (first, second) == (0, 1)
        assert get_sphere_count() == 2
        assert get_light_count() == 1

    def test_add_light_rejects_unknown_sphere(self):
        from pathlight.scene.intersection import add_light

        with pytest.raises(ValueError):
            add_light(0)

    def test_clear_scene(self):
        from pathlight.scene.intersection import (
            add_light,
            add_sphere,
            background_color,
            clear_scene,
            get_light_count,
            get_sphere_count,
            set_background,
        )

        add_light(add_sphere((0.0, 0.0, 0.0), 1.0, 0))
        set_background((1.0, 2.0, 3.0))
        clear_scene()

        assert get_sphere_count() == 0
        assert get_light_count() == 0
        np.testing.assert_allclose(background_color[None].to_numpy(), [0.0, 0.0, 0.0])


class TestIntersection:
    """Tests for intersect_scene via query_intersection."""

    def test_miss_returns_none(self):
        from pathlight.scene.intersection import add_sphere, query_intersection

        add_sphere((0.0, 0.0, -5.0), 1.0, 0)
        assert query_intersection((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) is None

    def test_empty_scene_misses(self):
        from pathlight.scene.intersection import query_intersection

        assert query_intersection((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_nearest_sphere_wins(self):
        from pathlight.scene.intersection import add_sphere, query_intersection

        add_sphere((0.0, 0.0, -10.0), 1.0, 3)
        add_sphere((0.0, 0.0, -5.0), 1.0, 7)
        rec = query_intersection((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["sphere_index"] == 1
        assert rec["material_id"] == 7
        assert abs(rec["t"] - 4.0) < 1e-12

    def test_first_sphere_wins_ties(self):
        from pathlight.scene.intersection import add_sphere, query_intersection

        add_sphere((0.0, 0.0, -5.0), 1.0, 0)
        add_sphere((0.0, 0.0, -5.0), 1.0, 1)
        rec = query_intersection((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["sphere_index"] == 0

    def test_hits_closer_than_epsilon_are_ignored(self):
        from pathlight.scene.intersection import add_sphere, query_intersection

        add_sphere((0.0, 0.0, -5.0), 1.0, 0)
        # Leaving the sphere from its surface must not re-hit the same point
        rec = query_intersection((0.0, 0.0, -4.0), (0.0, 0.0, 1.0))
        assert rec is None


class TestSceneManager:
    """Tests for the Scene class."""

    def test_emitters_join_light_set(self):
        from pathlight.materials.material import Material
        from pathlight.scene.manager import Scene

        scene = Scene()
        diffuse = scene.add_material(Material(color=(0.5, 0.5, 0.5)))
        lamp = scene.add_material(Material(emission=(10.0, 10.0, 10.0), transparency=1.0))
        scene.add_sphere((0.0, 0.0, -5.0), 1.0, diffuse)
        light_index = scene.add_sphere((0.0, 5.0, -5.0), 0.5, lamp)

        assert scene.get_sphere_count() == 2
        assert scene.get_light_count() == 1
        assert [s.sphere_index for s in scene.lights()] == [light_index]

    def test_invalid_sphere_raises(self):
        from pathlight.materials.material import Material
        from pathlight.scene.manager import Scene

        scene = Scene()
        mat = scene.add_material(Material())

        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), 0.0, mat)
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, mat + 1)

    def test_negative_background_raises(self):
        from pathlight.scene.manager import Scene

        with pytest.raises(ValueError):
            Scene(background=(0.0, -1.0, 0.0))

    def test_intersect(self):
        from pathlight.materials.material import Material
        from pathlight.scene.manager import Scene

        scene = Scene()
        mat = scene.add_material(Material(color=(1.0, 0.0, 0.0)))
        scene.add_sphere((0.0, 0.0, -5.0), 1.0, mat)

        hit = scene.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.material_id == mat
        assert hit.sphere_index == 0
        assert abs(hit.distance - 4.0) < 1e-12
        np.testing.assert_allclose(hit.normal, [0.0, 0.0, 1.0], atol=1e-12)

        assert scene.intersect((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)) is None

    def test_background_for_escaped_ray(self):
        from pathlight.scene.manager import Scene

        scene = Scene(background=(0.2, 0.3, 0.4))

        assert scene.background_for((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == (0.2, 0.3, 0.4)
        assert scene.background_for((5.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == (0.2, 0.3, 0.4)

    def test_clear_keeps_background(self):
        from pathlight.materials.material import Material
        from pathlight.scene.intersection import background_color
        from pathlight.scene.manager import Scene

        scene = Scene(background=(0.2, 0.3, 0.4))
        scene.add_sphere_with_material((0.0, 0.0, 0.0), 1.0, Material())
        scene.clear()

        assert scene.get_sphere_count() == 0
        assert scene.materials == []
        np.testing.assert_allclose(background_color[None].to_numpy(), [0.2, 0.3, 0.4])

    def test_dict_round_trip(self):
        from pathlight.camera.thin_lens import ThinLensCamera
        from pathlight.materials.material import Material
        from pathlight.scene.manager import Scene

        scene = Scene(camera=ThinLensCamera(position=(0.0, 1.0, 5.0)), background=(0.1, 0.1, 0.1))
        scene.add_sphere_with_material((0.0, 0.0, -5.0), 1.0, Material(color=(0.5, 0.2, 0.1)))
        scene.add_sphere_with_material((0.0, 4.0, -5.0), 0.5, Material(emission=(5.0, 5.0, 5.0)))
        data = scene.to_dict()

        rebuilt = Scene.from_dict(data)

        assert rebuilt.to_dict() == data
        assert rebuilt.get_light_count() == 1
        assert rebuilt.camera == scene.camera


class TestPresets:
    """Tests for the named demo scenes."""

    def test_available_scenes(self):
        from pathlight.scene.presets import available_scenes

        assert available_scenes() == ["box", "spheres"]

    def test_unknown_scene_returns_none(self):
        from pathlight.scene.presets import load_scene

        assert load_scene("cathedral") is None

    @pytest.mark.parametrize("name, spheres, lights", [("box", 8, 1), ("spheres", 6, 1)])
    def test_scene_contents(self, name, spheres, lights):
        from pathlight.scene.presets import load_scene

        scene = load_scene(name)

        assert scene.get_sphere_count() == spheres
        assert scene.get_light_count() == lights
        assert scene.camera is not None
        assert scene.background == (1.0, 0.0, 0.0)

    def test_box_ceiling_normal(self):
        from pathlight.scene.presets import load_scene

        scene = load_scene("box")
        origin = np.array([0.0, 0.0, 7.0])
        direction = np.array([-0.1313, 0.2386, -0.9622])
        direction /= np.linalg.norm(direction)

        hit = scene.intersect(tuple(origin), tuple(direction))

        # The ray reaches the ceiling wall (radius 1000) just beside the light
        center = np.array([0.0, 1003.0, -8.0])
        oc = origin - center
        h = direction @ oc
        t = -h - np.sqrt(h * h - (oc @ oc - 1000.0**2))
        expected = (origin + t * direction - center) / 1000.0

        assert hit is not None
        assert hit.sphere_index == 3
        np.testing.assert_allclose(hit.normal, expected, atol=1e-9)
        np.testing.assert_allclose(hit.normal, [-0.001654, -0.999994, 0.002879], atol=1e-5)
