"""Material tags.

Primitives carry a material tag by value and never interpret it; the tag is
resolved by shading code outside this package.
"""

from .material import Material, MaterialKind, make_material, material_from

__all__ = [
    "Material",
    "MaterialKind",
    "make_material",
    "material_from",
]
