"""Material model and scattering.

Components:
    material: Material parameters and the material storage fields
    pdf: Cosine, light and mixture direction sampling strategies
    bsdf: Event selection and per-event scattering

Importing this package declares Taichi fields, so Taichi must be
initialized first (see pathlight.runtime.init).
"""

from .bsdf import ScatterEvent, scatter, schlick, select_scatter_event
from .material import Material, add_material, clear_materials, get_material_count
from .pdf import PdfKind, pdf_generate, pdf_value

__all__ = [
    "Material",
    "add_material",
    "clear_materials",
    "get_material_count",
    "PdfKind",
    "pdf_value",
    "pdf_generate",
    "ScatterEvent",
    "scatter",
    "schlick",
    "select_scatter_event",
]
