"""Named demo scenes.

Two scenes are available:

- ``"box"``: a closed room built from five large wall spheres (blue left,
  red right, white floor, ceiling and back), lit by a large light sphere
  sunk into the ceiling, with a silver and a glass sphere on the floor
- ``"spheres"``: gold, blue plastic, silver and green glass spheres on a
  white floor, lit by a single light sphere to the left

Example:
    >>> from pathlight.scene.presets import load_scene
    >>> scene = load_scene("box")
    >>> scene.get_light_count()
    1
"""

from collections.abc import Callable

from pathlight.camera.thin_lens import ThinLensCamera
from pathlight.materials.material import Material
from pathlight.scene.manager import Scene

# =============================================================================
# Shared materials
# =============================================================================

WHITE_LAMBERT = Material(color=(1.0, 1.0, 1.0), fresnel=(0.03, 0.03, 0.03))
BLUE_PLASTIC = Material(color=(0.1, 0.1, 1.0), fresnel=(0.04, 0.04, 0.04), glossiness=0.2)
RED_PLASTIC = Material(color=(1.0, 0.0, 0.0), fresnel=(0.04, 0.04, 0.04), glossiness=0.2)
SILVER = Material(
    color=(0.972, 0.960, 0.915),
    fresnel=(0.972, 0.960, 0.915),
    metalness=0.9,
    glossiness=1.0,
)
GOLD = Material(fresnel=(1.022, 0.782, 0.344), metalness=1.0, glossiness=0.7)
GLASS = Material(refraction_index=1.6, transparency=1.0, fresnel=(0.04, 0.04, 0.04))
GREEN_GLASS = Material(
    color=(0.0, 1.0, 0.0),
    refraction_index=1.52,
    transparency=0.95,
    fresnel=(0.05, 0.05, 0.05),
    glossiness=1.0,
)

# Dim red sky shared by both scenes
PRESET_BACKGROUND = (1.0, 0.0, 0.0)


def light(intensity: float) -> Material:
    """A white emitter with the given radiance per channel."""
    return Material(transparency=1.0, emission=(intensity, intensity, intensity), fresnel=(0.0, 0.0, 0.0))


# =============================================================================
# Scenes
# =============================================================================


def build_box_scene() -> Scene:
    """The closed room scene."""
    camera = ThinLensCamera(
        position=(0.0, 0.0, 7.0),
        sensor=0.024,
        focal_length=0.040,
        focus=15.0,
        f_stop=1.4,
    )
    scene = Scene(camera=camera, background=PRESET_BACKGROUND)

    bright_light = scene.add_material(light(355.0))
    white = scene.add_material(WHITE_LAMBERT)
    blue = scene.add_material(BLUE_PLASTIC)
    red = scene.add_material(RED_PLASTIC)
    silver = scene.add_material(SILVER)
    glass = scene.add_material(GLASS)

    scene.add_sphere((-1005.0, 0.0, -8.0), 1000.0, blue)
    scene.add_sphere((1005.0, 0.0, -8.0), 1000.0, red)
    scene.add_sphere((0.0, -1003.0, -8.0), 1000.0, white)
    scene.add_sphere((0.0, 1003.0, -8.0), 1000.0, white)
    scene.add_sphere((0.0, 0.0, -1010.0), 1000.0, white)
    scene.add_sphere((0.0, 13.0, -8.0), 10.5, bright_light)
    scene.add_sphere((1.0, -2.0, -7.0), 1.0, silver)
    scene.add_sphere((-0.75, -2.0, -5.0), 1.0, glass)

    return scene


def build_spheres_scene() -> Scene:
    """Four material spheres on a floor."""
    camera = ThinLensCamera(
        position=(0.0, 6.0, 8.0),
        sensor=0.024,
        focal_length=0.055,
        focus=14.0,
        f_stop=1.4,
        yaw=0.0,
        pitch=25.0,
    )
    scene = Scene(camera=camera, background=PRESET_BACKGROUND)

    bright_light = scene.add_material(light(700.0))
    white = scene.add_material(WHITE_LAMBERT)
    blue = scene.add_material(BLUE_PLASTIC)
    silver = scene.add_material(SILVER)
    gold = scene.add_material(GOLD)
    green_glass = scene.add_material(GREEN_GLASS)

    scene.add_sphere((-3.3, 1.0, -4.3), 1.0, gold)
    scene.add_sphere((-1.1, 1.0, -5.0), 1.0, blue)
    scene.add_sphere((1.0, 1.0, -5.0), 1.0, silver)
    scene.add_sphere((3.2, 1.0, -4.6), 1.0, green_glass)
    scene.add_sphere((0.5, -1000.0, -8.0), 1000.0, white)
    scene.add_sphere((-8.0, 3.0, -1.0), 2.0, bright_light)

    return scene


SCENES: dict[str, Callable[[], Scene]] = {
    "box": build_box_scene,
    "spheres": build_spheres_scene,
}


def available_scenes() -> list[str]:
    """Names accepted by load_scene()."""
    return sorted(SCENES)


def load_scene(name: str) -> Scene | None:
    """Build a named scene.

    Args:
        name: One of available_scenes().

    Returns:
        The populated Scene, or None for an unknown name.
    """
    builder = SCENES.get(name)
    if builder is None:
        return None
    scene = builder()
    scene.log_summary()
    return scene
