"""Sphere primitive for Taichi-based ray tracing.

The same Taichi functions compile for the CPU backend and for GPU backends,
so a renderer can call the sphere queries from any kernel it launches.

Subpackages:
    core: Ray type, vector helpers, batch queries and runtime setup
    geometry: The Sphere primitive and its hit/intersection queries
    materials: The opaque material tag stored on primitives
"""

__version__ = "0.1.0"
