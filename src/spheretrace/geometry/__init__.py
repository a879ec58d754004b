"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with line-distance hit test and near
        intersection point

All queries are Taichi functions (@ti.func) and are inlined into the
calling kernel, whichever backend it targets.

Ray-object queries follow the pattern:
    if hits_ray(sphere, ray) == 1:
        point = get_intersection_point(sphere, ray)
"""

from .sphere import (
    Sphere,
    get_intersection_point,
    get_material,
    get_position,
    get_radius,
    hits_ray,
    make_sphere,
)

__all__ = [
    "Sphere",
    "get_radius",
    "get_position",
    "get_material",
    "hits_ray",
    "get_intersection_point",
    "make_sphere",
]
