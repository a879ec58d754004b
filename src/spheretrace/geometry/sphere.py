"""Sphere primitive with line-distance hit testing.

This module provides a Sphere dataclass and the two per-ray queries a
renderer's intersection loop needs:

- ``hits_ray``: does the line through the ray pass strictly within
  ``radius`` of the center?
- ``get_intersection_point``: the near surface point along the ray.

Both are closed-form. The hit test measures the perpendicular distance from
the center to the ray's line as ``|oc x d|``, which assumes a unit-length
direction ``d``. The intersection point walks ``dot(oc, d)`` to the foot of
that perpendicular and backs off by the half-chord
``sqrt(radius^2 - center_distance^2)``.

Two behaviors are kept on purpose and covered by tests:

- The test is against the infinite line, so a sphere entirely behind the
  ray origin still counts as hit.
- The comparison is strict; a line exactly tangent to the sphere misses.

``get_intersection_point`` requires ``hits_ray`` to have returned 1. It does
not check this: with a negative discriminant the square root yields NaN and
so does the returned point. Under ``ti.init(debug=True)`` the discriminant
is asserted instead.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.spheretrace.geometry.sphere import Sphere, hits_ray
    >>> # Use hits_ray / get_intersection_point within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray, cross, displacement, dot, length
from src.spheretrace.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material tag.

    Attributes:
        position: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float, not validated).
        material: Opaque material tag, stored and returned by value.
    """

    position: vec3
    radius: ti.f32
    material: Material


@ti.func
def get_radius(sphere: Sphere) -> ti.f32:
    return sphere.radius


@ti.func
def get_position(sphere: Sphere) -> vec3:
    return sphere.position


@ti.func
def get_material(sphere: Sphere) -> Material:
    return sphere.material


@ti.func
def _center_distance(sphere: Sphere, ray: Ray) -> ti.f32:
    """Perpendicular distance from the sphere center to the ray's line."""
    oc = displacement(ray.origin, sphere.position)
    return length(cross(oc, ray.direction))


@ti.func
def hits_ray(sphere: Sphere, ray: Ray) -> ti.i32:
    """Test whether the line through the ray passes inside the sphere.

    Args:
        sphere: The sphere to test.
        ray: The ray to test. Direction must be unit length.

    Returns:
        1 if the perpendicular distance from the center to the line is
        strictly less than the radius, 0 otherwise. Where along the line
        the sphere lies (in front of or behind the origin) is not considered.
    """
    return ti.select(_center_distance(sphere, ray) < sphere.radius, 1, 0)


@ti.func
def get_intersection_point(sphere: Sphere, ray: Ray) -> vec3:
    """Compute the near intersection point of the ray's line with the sphere.

    Only meaningful when ``hits_ray(sphere, ray)`` is 1.

    Args:
        sphere: The sphere to intersect.
        ray: The ray to intersect. Direction must be unit length.

    Returns:
        ray.origin + ray.direction * (position_distance - offset), where
        position_distance is the projection of the center onto the ray
        direction and offset is the half-chord length. NaN components if
        the line misses the sphere.
    """
    center_distance = _center_distance(sphere, ray)
    position_distance = dot(displacement(ray.origin, sphere.position), ray.direction)

    discriminant = sphere.radius * sphere.radius - center_distance * center_distance
    # Only evaluated when the runtime is initialized with debug=True
    assert discriminant >= 0.0, "get_intersection_point: ray does not hit the sphere"
    offset = ti.sqrt(discriminant)

    return ray.origin + ray.direction * (position_distance - offset)


@ti.func
def make_sphere(position: vec3, radius: ti.f32, material: Material) -> Sphere:
    """Create a sphere from center, radius and material tag.

    This is a convenience function for creating spheres within Taichi kernels.

    Args:
        position: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material: The material tag to store on the sphere.

    Returns:
        A new Sphere instance.
    """
    return Sphere(position=position, radius=radius, material=material)
