"""Scene manager coordinating spheres, materials, lights and the camera.

The Scene is the Python-side owner of everything a render reads: it
registers materials, uploads spheres into the intersection fields, derives
the light set at insertion time (every sphere whose material can emit), and
holds the camera and background configuration.

Scene storage lives in module-level Taichi fields, so only one Scene is live
at a time: constructing a Scene resets the device-side storage.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlight.camera.thin_lens import ThinLensCamera
    >>> from pathlight.materials.material import Material
    >>> from pathlight.scene.manager import Scene
    >>> scene = Scene(camera=ThinLensCamera(position=(0.0, 0.0, 7.0)))
    >>> white = scene.add_material(Material(color=(1.0, 1.0, 1.0)))
    >>> scene.add_sphere((0.0, 0.0, -5.0), 1.0, white)
    >>> scene.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pathlight.camera.thin_lens import ThinLensCamera, setup_camera
from pathlight.materials.material import Material, add_material, clear_materials
from pathlight.scene.intersection import (
    add_light,
    add_sphere,
    clear_scene,
    get_light_count,
    get_sphere_count,
    query_intersection,
    set_background,
)

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: Vec3
    radius: float
    material_id: int


@dataclass
class Intersection:
    """Nearest hit of a ray against the scene.

    Attributes:
        point: Hit point.
        normal: Unit outward normal of the hit sphere.
        material_id: Material of the hit sphere.
        sphere_index: Index of the hit sphere.
        distance: Distance along the ray.
    """

    point: Vec3
    normal: Vec3
    material_id: int
    sphere_index: int
    distance: float


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material parameter dicts.
        spheres: List of sphere dicts (center, radius, material_id).
        camera: Camera parameter dict, or None.
        background: Background radiance.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    camera: dict[str, Any] | None = None
    background: Vec3 = (0.0, 0.0, 0.0)


class Scene:
    """A collection of spheres with materials, a camera and a background.

    Attributes:
        materials: Registered materials, indexed by material ID.
        spheres: All spheres, indexed by sphere index.
        camera: The camera, or None until set_camera() is called.
        background: Radiance of rays that escape the scene.
    """

    def __init__(
        self,
        camera: ThinLensCamera | None = None,
        background: Vec3 = (0.0, 0.0, 0.0),
    ) -> None:
        self.materials: list[Material] = []
        self.spheres: list[SphereInfo] = []
        self._lights: list[int] = []
        self.camera: ThinLensCamera | None = None
        self.background: Vec3 = (0.0, 0.0, 0.0)
        self._clear_all()
        self.set_background(background)
        if camera is not None:
            self.set_camera(camera)

    def _clear_all(self) -> None:
        clear_scene()
        clear_materials()
        self.materials.clear()
        self.spheres.clear()
        self._lights.clear()

    def clear(self) -> None:
        """Remove all materials and spheres. Camera and background are kept."""
        self._clear_all()
        set_background(self.background)

    # =========================================================================
    # Materials
    # =========================================================================

    def add_material(self, material: Material) -> int:
        """Register a material and return its ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
        """
        material_id = add_material(material)
        self.materials.append(material)
        return material_id

    def get_material(self, material_id: int) -> Material:
        """Look up a registered material.

        Raises:
            ValueError: If the material ID is unknown.
        """
        if not 0 <= material_id < len(self.materials):
            raise ValueError(f"Unknown material ID {material_id}")
        return self.materials[material_id]

    # =========================================================================
    # Primitives
    # =========================================================================

    def add_sphere(self, center: Vec3, radius: float, material_id: int) -> int:
        """Add a sphere referencing a registered material.

        Spheres whose material can emit join the light set.

        Args:
            center: Sphere center.
            radius: Sphere radius (> 0).
            material_id: ID returned by add_material().

        Returns:
            The sphere index.

        Raises:
            ValueError: If the radius is not positive or the material is unknown.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        material = self.get_material(material_id)

        center = (float(center[0]), float(center[1]), float(center[2]))
        sphere_index = add_sphere(center, float(radius), material_id)
        self.spheres.append(SphereInfo(sphere_index, center, float(radius), material_id))

        if material.can_emit:
            add_light(sphere_index)
            self._lights.append(sphere_index)

        return sphere_index

    def add_sphere_with_material(self, center: Vec3, radius: float, material: Material) -> int:
        """Register a material and add a sphere using it in one call."""
        return self.add_sphere(center, radius, self.add_material(material))

    def lights(self) -> list[SphereInfo]:
        """Spheres whose material can emit, in insertion order."""
        return [self.spheres[i] for i in self._lights]

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    def get_light_count(self) -> int:
        return get_light_count()

    # =========================================================================
    # Camera and background
    # =========================================================================

    def set_camera(self, camera: ThinLensCamera) -> None:
        """Set the camera and upload it to the camera fields."""
        self.camera = camera
        setup_camera(camera)

    def set_background(self, color: Vec3) -> None:
        """Set the radiance returned for escaped rays.

        Raises:
            ValueError: If any channel is negative.
        """
        color = (float(color[0]), float(color[1]), float(color[2]))
        if any(c < 0.0 for c in color):
            raise ValueError(f"Background channels must be non-negative, got {color}")
        self.background = color
        set_background(color)

    def background_for(self, origin: Vec3, direction: Vec3) -> Vec3:
        """Radiance of a ray that escapes the scene.

        The background is constant, so the ray only selects it.
        """
        return self.background

    # =========================================================================
    # Queries
    # =========================================================================

    def intersect(self, origin: Vec3, direction: Vec3) -> Intersection | None:
        """Find the nearest sphere along a ray.

        Args:
            origin: Ray origin.
            direction: Unit ray direction.

        Returns:
            The nearest Intersection, or None if the ray escapes.
        """
        rec = query_intersection(origin, direction)
        if rec is None:
            return None
        return Intersection(
            point=rec["point"],
            normal=rec["normal"],
            material_id=rec["material_id"],
            sphere_index=rec["sphere_index"],
            distance=rec["t"],
        )

    def log_summary(self) -> None:
        """Log the scene contents at info level."""
        logger.info(
            f"Scene: {len(self.spheres)} spheres, {len(self.materials)} materials, "
            f"{len(self._lights)} lights, background={self.background}"
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        return SceneConfig(
            materials=[m.to_dict() for m in self.materials],
            spheres=[
                {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
                for s in self.spheres
            ],
            camera=self.camera.to_dict() if self.camera is not None else None,
            background=self.background,
        )

    @classmethod
    def from_config(cls, config: SceneConfig) -> "Scene":
        """Build a scene from a configuration object.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        camera = ThinLensCamera.from_dict(config.camera) if config.camera is not None else None
        scene = cls(camera=camera, background=tuple(config.background))
        for mat_config in config.materials:
            scene.add_material(Material.from_dict(mat_config))
        for sphere_config in config.spheres:
            scene.add_sphere(
                tuple(sphere_config["center"]),
                sphere_config["radius"],
                sphere_config["material_id"],
            )
        return scene

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "camera": config.camera,
            "background": list(config.background),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a scene from to_dict() output."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            camera=data.get("camera"),
            background=tuple(data.get("background", (0.0, 0.0, 0.0))),
        )
        return cls.from_config(config)
