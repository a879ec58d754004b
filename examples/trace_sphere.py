#!/usr/bin/env python3
"""Trace rays against a single sphere.

This script exercises the sphere primitive from the command line. It either
traces one ray and reports whether it hits and where, or fires an N x N grid
of parallel rays along +z and prints the sphere's silhouette as ASCII art.

Usage:
    python -m examples.trace_sphere [options]

Options:
    --center X Y Z      Sphere center (default: 0 0 5)
    --radius R          Sphere radius (default: 1)
    --origin X Y Z      Ray origin for single-ray mode (default: 0 0 0)
    --direction X Y Z   Ray direction for single-ray mode (default: 0 0 1)
    --grid N            Trace an N x N grid of rays instead of a single ray
    --backend NAME      Taichi backend: auto, cpu, gpu, cuda, vulkan, metal
    --debug             Run Taichi in debug mode (checks kernel assertions)
    --quiet             Suppress status output

Example:
    python -m examples.trace_sphere --grid 24 --radius 2
"""

from __future__ import annotations

import argparse
import sys

import numpy as np


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Trace rays against a single sphere.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--center",
        type=float,
        nargs=3,
        default=[0.0, 0.0, 5.0],
        metavar=("X", "Y", "Z"),
        help="Sphere center (default: 0 0 5)",
    )
    parser.add_argument(
        "--radius",
        type=float,
        default=1.0,
        help="Sphere radius (default: 1)",
    )
    parser.add_argument(
        "--origin",
        type=float,
        nargs=3,
        default=[0.0, 0.0, 0.0],
        metavar=("X", "Y", "Z"),
        help="Ray origin for single-ray mode (default: 0 0 0)",
    )
    parser.add_argument(
        "--direction",
        type=float,
        nargs=3,
        default=[0.0, 0.0, 1.0],
        metavar=("X", "Y", "Z"),
        help="Ray direction for single-ray mode (default: 0 0 1)",
    )
    parser.add_argument(
        "--grid",
        type=int,
        default=0,
        help="Trace an N x N grid of rays along +z instead of a single ray",
    )
    parser.add_argument(
        "--backend",
        type=str,
        default="auto",
        help="Taichi backend (default: auto)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run Taichi in debug mode",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress status output",
    )
    return parser.parse_args(argv)


def trace_single(
    center: tuple[float, float, float],
    radius: float,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[bool, tuple[float, float, float] | None]:
    """Trace one ray against the sphere.

    The direction is used as given; it should be unit length.

    Returns:
        Tuple of (hit, point). ``point`` is None when the ray misses.
    """
    from src.spheretrace.core.batch import RayBatch, SphereParams

    batch = RayBatch(capacity=1)
    result = batch.intersect(
        SphereParams(position=tuple(center), radius=radius),
        np.array([origin], dtype=np.float32),
        np.array([direction], dtype=np.float32),
    )
    if not result.hits[0]:
        return False, None
    return True, tuple(float(c) for c in result.points[0])


def trace_grid(
    center: tuple[float, float, float],
    radius: float,
    size: int,
) -> list[str]:
    """Fire a size x size grid of +z rays covering the sphere's extent.

    Each grid cell is marked ``#`` when its ray hits and ``.`` otherwise.

    Returns:
        The silhouette, one string per row, top row first.
    """
    from src.spheretrace.core.batch import RayBatch, SphereParams

    if size < 1:
        raise ValueError(f"Grid size must be positive, got {size}")

    # Cover 1.5x the radius so the silhouette has a visible border
    half_extent = 1.5 * radius
    steps = (np.arange(size, dtype=np.float32) + 0.5) / size * 2.0 - 1.0
    xs = center[0] + steps * half_extent
    ys = center[1] - steps * half_extent

    origins = np.zeros((size * size, 3), dtype=np.float32)
    origins[:, 0] = np.tile(xs, size)
    origins[:, 1] = np.repeat(ys, size)
    origins[:, 2] = center[2] - 2.0 * radius
    directions = np.tile(np.array([0.0, 0.0, 1.0], dtype=np.float32), (size * size, 1))

    batch = RayBatch(capacity=size * size)
    hits = batch.hits(SphereParams(position=tuple(center), radius=radius), origins, directions)

    rows = hits.reshape(size, size)
    return ["".join("#" if h else "." for h in row) for row in rows]


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    from src.spheretrace.core.runtime import init_runtime

    try:
        backend = init_runtime(args.backend, debug=args.debug)
        if not args.quiet:
            print(f"Using {backend} backend")

        if args.grid > 0:
            if not args.quiet:
                print(f"Tracing {args.grid}x{args.grid} rays...")
            for line in trace_grid(tuple(args.center), args.radius, args.grid):
                print(line)
        else:
            hit, point = trace_single(
                tuple(args.center), args.radius, tuple(args.origin), tuple(args.direction)
            )
            if hit:
                print(f"hit: ({point[0]:.6f}, {point[1]:.6f}, {point[2]:.6f})")
            else:
                print("miss")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
