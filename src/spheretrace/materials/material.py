"""Opaque material tag carried by primitives.

A primitive only stores and hands back its material; it never looks inside.
The tag is a (kind, index) pair: ``kind`` names the material family and
``index`` points into that family's own parameter registry, which lives with
the shading code outside this package.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.material import MaterialKind, material_from
    >>> tag = material_from(MaterialKind.METAL, 2)
"""

from enum import IntEnum

import taichi as ti


class MaterialKind(IntEnum):
    """Material families a tag can refer to.

    The numeric values are what ends up in ``Material.kind`` on the device.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2
    EMISSIVE = 3


@ti.dataclass
class Material:
    """Material tag held by value on each primitive.

    Attributes:
        kind: A ``MaterialKind`` value.
        index: Index into the registry for that kind.
    """

    kind: ti.i32
    index: ti.i32


@ti.func
def make_material(kind: ti.i32, index: ti.i32) -> Material:
    """Create a material tag within a Taichi kernel."""
    return Material(kind=kind, index=index)


def material_from(kind: int, index: int) -> Material:
    """Build a material tag from Python scope.

    Args:
        kind: A ``MaterialKind`` (or its integer value).
        index: Non-negative registry index for that kind.

    Returns:
        A Python-scope ``Material`` instance.

    Raises:
        ValueError: If ``kind`` is not a known material kind or ``index``
            is negative.
    """
    try:
        kind = MaterialKind(kind)
    except ValueError:
        raise ValueError(f"Unknown material kind: {kind}") from None
    if index < 0:
        raise ValueError(f"Material index = {index} is negative.")
    return Material(kind=int(kind), index=int(index))
