"""Batch evaluation of one sphere against many rays.

The sphere queries are Taichi functions meant to be inlined into a caller's
kernel. This module is the Python-scope entry point for the common case of
testing a single sphere against an array of rays: ray data goes in as NumPy
arrays, one kernel launch evaluates every ray in parallel on the active
backend, and results come back as NumPy arrays.

Buffers are preallocated to a fixed capacity per ``RayBatch`` so that
repeated queries reuse the same fields and the same compiled kernels. Each
query copies only its own rays in and its own results out, so transfer cost
follows the batch size rather than the capacity.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.batch import RayBatch, SphereParams
    >>> batch = RayBatch(capacity=1024)
    >>> sphere = SphereParams(position=(0.0, 0.0, 5.0), radius=1.0)
    >>> origins = np.zeros((2, 3), dtype=np.float32)
    >>> directions = np.array([[0, 0, 1], [0, 1, 0]], dtype=np.float32)
    >>> result = batch.intersect(sphere, origins, directions)
    >>> result.hits
    array([ True, False])
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray
from src.spheretrace.geometry.sphere import (
    get_intersection_point,
    hits_ray,
    make_sphere,
)
from src.spheretrace.materials.material import MaterialKind, make_material, material_from

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class SphereParams:
    """Python-scope description of a sphere.

    Attributes:
        position: Center of the sphere as (x, y, z).
        radius: Radius of the sphere (assumed positive, not validated).
        material_kind: Material family of the sphere's tag.
        material_index: Registry index of the sphere's tag.

    Raises:
        ValueError: If the material kind is unknown or the index negative.
    """

    position: tuple[float, float, float]
    radius: float
    material_kind: int = MaterialKind.LAMBERTIAN
    material_index: int = 0

    def __post_init__(self) -> None:
        material_from(self.material_kind, self.material_index)


@dataclass
class BatchResult:
    """Per-ray results of a batch intersection query.

    Attributes:
        hits: Boolean array of shape (N,), True where ``hits_ray`` is 1.
        points: Float32 array of shape (N, 3). Intersection points for hit
            rays, NaN rows for missed rays.
    """

    hits: npt.NDArray[np.bool_]
    points: npt.NDArray[np.float32]

    @property
    def hit_count(self) -> int:
        """Number of rays that hit the sphere."""
        return int(np.count_nonzero(self.hits))


@ti.kernel
def _upload_rays(
    count: ti.i32,
    src_origins: ti.types.ndarray(dtype=ti.f32, ndim=2),
    src_directions: ti.types.ndarray(dtype=ti.f32, ndim=2),
    origins: ti.template(),
    directions: ti.template(),
):
    for i in range(count):
        origins[i] = vec3(src_origins[i, 0], src_origins[i, 1], src_origins[i, 2])
        directions[i] = vec3(src_directions[i, 0], src_directions[i, 1], src_directions[i, 2])


@ti.kernel
def _download_hits(
    count: ti.i32,
    hits: ti.template(),
    out: ti.types.ndarray(dtype=ti.i32, ndim=1),
):
    for i in range(count):
        out[i] = hits[i]


@ti.kernel
def _download_points(
    count: ti.i32,
    points: ti.template(),
    out: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    for i in range(count):
        for j in ti.static(range(3)):
            out[i, j] = points[i][j]


@ti.kernel
def _hits_kernel(
    position: vec3,
    radius: ti.f32,
    material_kind: ti.i32,
    material_index: ti.i32,
    count: ti.i32,
    origins: ti.template(),
    directions: ti.template(),
    hits: ti.template(),
):
    sphere = make_sphere(position, radius, make_material(material_kind, material_index))
    for i in range(count):
        ray = Ray(origin=origins[i], direction=directions[i])
        hits[i] = hits_ray(sphere, ray)


@ti.kernel
def _intersect_kernel(
    position: vec3,
    radius: ti.f32,
    material_kind: ti.i32,
    material_index: ti.i32,
    count: ti.i32,
    origins: ti.template(),
    directions: ti.template(),
    hits: ti.template(),
    points: ti.template(),
    gated: ti.template(),
):
    """Evaluate hits and intersection points for the first ``count`` rays.

    With ``gated`` set, points are only computed for rays that hit, which
    keeps the precondition of ``get_intersection_point``. Without it every
    ray is evaluated.
    """
    sphere = make_sphere(position, radius, make_material(material_kind, material_index))
    for i in range(count):
        ray = Ray(origin=origins[i], direction=directions[i])
        hit = hits_ray(sphere, ray)
        hits[i] = hit
        if ti.static(gated):
            if hit == 1:
                points[i] = get_intersection_point(sphere, ray)
        else:
            points[i] = get_intersection_point(sphere, ray)


class RayBatch:
    """Reusable buffers for evaluating a sphere against batches of rays.

    Attributes:
        capacity: Maximum number of rays per query.
    """

    def __init__(self, capacity: int = 65536) -> None:
        """Allocate the ray and result buffers.

        Args:
            capacity: Maximum number of rays a single query may contain.

        Raises:
            ValueError: If capacity is less than 1.
        """
        if capacity < 1:
            raise ValueError(f"Batch capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self._origins = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self._directions = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self._hits = ti.field(dtype=ti.i32, shape=capacity)
        self._points = ti.Vector.field(3, dtype=ti.f32, shape=capacity)

    def _load_rays(
        self,
        origins: npt.ArrayLike,
        directions: npt.ArrayLike,
    ) -> int:
        """Validate ray arrays and upload them to the device buffers.

        Returns:
            The number of rays loaded.

        Raises:
            ValueError: If the arrays are not (N, 3), disagree on N, or N
                exceeds the batch capacity.
        """
        origins = np.asarray(origins, dtype=np.float32)
        directions = np.asarray(directions, dtype=np.float32)

        for name, arr in (("origins", origins), ("directions", directions)):
            if arr.ndim != 2 or arr.shape[1] != 3:
                raise ValueError(f"{name} must have shape (N, 3), got {arr.shape}")
        if origins.shape[0] != directions.shape[0]:
            raise ValueError(
                f"Got {origins.shape[0]} origins but {directions.shape[0]} directions"
            )

        count = origins.shape[0]
        if count > self.capacity:
            raise ValueError(f"Batch of {count} rays exceeds capacity ({self.capacity})")

        # Only the first count rows are copied; the tail keeps stale data
        if count > 0:
            _upload_rays(
                count,
                np.ascontiguousarray(origins),
                np.ascontiguousarray(directions),
                self._origins,
                self._directions,
            )
        return count

    def _read_hits(self, count: int) -> npt.NDArray[np.bool_]:
        out = np.empty(count, dtype=np.int32)
        _download_hits(count, self._hits, out)
        return out.astype(bool)

    def _read_points(self, count: int) -> npt.NDArray[np.float32]:
        out = np.empty((count, 3), dtype=np.float32)
        _download_points(count, self._points, out)
        return out

    def hits(
        self,
        sphere: SphereParams,
        origins: npt.ArrayLike,
        directions: npt.ArrayLike,
    ) -> npt.NDArray[np.bool_]:
        """Run ``hits_ray`` for every ray.

        Args:
            sphere: The sphere to test against.
            origins: Ray origins, shape (N, 3).
            directions: Unit ray directions, shape (N, 3).

        Returns:
            Boolean array of shape (N,).
        """
        count = self._load_rays(origins, directions)
        if count == 0:
            return np.zeros(0, dtype=bool)

        _hits_kernel(
            vec3(*sphere.position),
            sphere.radius,
            int(sphere.material_kind),
            sphere.material_index,
            count,
            self._origins,
            self._directions,
            self._hits,
        )
        return self._read_hits(count)

    def intersect(
        self,
        sphere: SphereParams,
        origins: npt.ArrayLike,
        directions: npt.ArrayLike,
    ) -> BatchResult:
        """Run ``hits_ray`` and, for hit rays, ``get_intersection_point``.

        Args:
            sphere: The sphere to intersect.
            origins: Ray origins, shape (N, 3).
            directions: Unit ray directions, shape (N, 3).

        Returns:
            A BatchResult; rows of ``points`` for missed rays are NaN.
        """
        hits, points = self._run_intersect(sphere, origins, directions, gated=True)
        points[~hits] = np.nan
        return BatchResult(hits=hits, points=points)

    def intersection_points_unchecked(
        self,
        sphere: SphereParams,
        origins: npt.ArrayLike,
        directions: npt.ArrayLike,
    ) -> npt.NDArray[np.float32]:
        """Run ``get_intersection_point`` on every ray without a hit test.

        Rays that miss the sphere violate the precondition and produce NaN
        (or trip the kernel assertion when Taichi runs in debug mode).

        Returns:
            Float32 array of shape (N, 3).
        """
        _, points = self._run_intersect(sphere, origins, directions, gated=False)
        return points

    def _run_intersect(
        self,
        sphere: SphereParams,
        origins: npt.ArrayLike,
        directions: npt.ArrayLike,
        gated: bool,
    ) -> tuple[npt.NDArray[np.bool_], npt.NDArray[np.float32]]:
        count = self._load_rays(origins, directions)
        if count == 0:
            return np.zeros(0, dtype=bool), np.zeros((0, 3), dtype=np.float32)

        _intersect_kernel(
            vec3(*sphere.position),
            sphere.radius,
            int(sphere.material_kind),
            sphere.material_index,
            count,
            self._origins,
            self._directions,
            self._hits,
            self._points,
            gated,
        )
        hits = self._read_hits(count)
        points = self._read_points(count)
        return hits, points
