"""Core module.

Components:
    ray: Ray data structure and the vector helpers used by primitives
    batch: Python-scope batch queries of one sphere against many rays
    runtime: Taichi backend selection and initialization
"""

from .ray import (
    Ray,
    cross,
    displacement,
    dot,
    length,
    make_ray,
    ray_at,
    vec3,
)
from .runtime import current_backend, init_runtime

# Note: batch is NOT imported here to avoid a circular import with
# geometry.sphere, which depends on core.ray.
# Import it directly: from src.spheretrace.core.batch import RayBatch

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "displacement",
    "length",
    "dot",
    "cross",
    "init_runtime",
    "current_backend",
]
