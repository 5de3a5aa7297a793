"""Surface material description and material storage.

A single material model covers every surface in the renderer. Its
parameters blend between behaviours instead of selecting a material type:

- ``fresnel`` sets the specular reflectance at normal incidence (Schlick)
- ``transparency`` is the chance that light entering the surface refracts
- ``metalness`` absorbs what is neither reflected nor refracted and tints
  specular reflections toward ``fresnel``
- ``glossiness`` narrows the reflection cone (1.0 is a perfect mirror)
- ``emission`` turns the surface into a light source

Materials are registered into Taichi fields (structure of arrays) and
referenced by integer material ID from the sphere storage.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlight.materials.material import Material, add_material
    >>> glass = Material(refraction_index=1.6, transparency=1.0)
    >>> mat_id = add_material(glass)
"""

import math
from dataclasses import asdict, dataclass
from typing import Any

import taichi as ti

from pathlight.core.ray import vec3

Color = tuple[float, float, float]


@dataclass(frozen=True)
class Material:
    """Parameters of the blended surface model.

    Attributes:
        color: Diffuse albedo, also the tint of light travelling through a
            transmissive interior. Non-negative channels.
        refraction_index: Index of refraction of the interior (> 0).
        transparency: Probability of refraction on entry, in [0, 1].
        emission: Emitted radiance. Non-zero only for light sources.
        fresnel: Specular reflectance at normal incidence, per channel.
            May exceed 1 for saturated metals.
        metalness: Absorption probability and specular tint weight, in [0, 1].
        glossiness: Specular sharpness in [0, 1]; 1 reflects as a mirror.
    """

    color: Color = (0.0, 0.0, 0.0)
    refraction_index: float = 1.0
    transparency: float = 0.0
    emission: Color = (0.0, 0.0, 0.0)
    fresnel: Color = (0.04, 0.04, 0.04)
    metalness: float = 0.0
    glossiness: float = 0.0

    def __post_init__(self):
        for name in ("color", "emission", "fresnel"):
            value = getattr(self, name)
            if len(value) != 3:
                raise ValueError(f"Material {name} must have 3 channels, got {value}")
            if any(c < 0.0 or not math.isfinite(c) for c in value):
                raise ValueError(f"Material {name} channels must be finite and non-negative, got {value}")
        if not self.refraction_index > 0.0:
            raise ValueError(f"Material refraction_index must be > 0, got {self.refraction_index}")
        for name in ("transparency", "metalness", "glossiness"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Material {name} must be in [0, 1], got {value}")

    @property
    def can_emit(self) -> bool:
        """Whether the material is a light source (non-zero emission)."""
        return any(c > 0.0 for c in self.emission)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the material parameters."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Material":
        """Rebuild a material from to_dict() output."""
        values = dict(data)
        for name in ("color", "emission", "fresnel"):
            if name in values:
                values[name] = tuple(float(c) for c in values[name])
        return cls(**values)


# =============================================================================
# Material Storage (Taichi fields)
# =============================================================================

MAX_MATERIALS = 256

material_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_refraction = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_transparency = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_emission = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_fresnel = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_metalness = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_glossiness = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Reset the material count to zero."""
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Register a material.

    Args:
        material: The material parameters.

    Returns:
        The material ID to reference from spheres.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_colors[idx] = material.color
    material_refraction[idx] = material.refraction_index
    material_transparency[idx] = material.transparency
    material_emission[idx] = material.emission
    material_fresnel[idx] = material.fresnel
    material_metalness[idx] = material.metalness
    material_glossiness[idx] = material.glossiness

    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


@ti.func
def get_material_emission(material_id: ti.i32) -> vec3:
    """Emitted radiance of a material (zero for non-emitters)."""
    return material_emission[material_id]
