"""Performance benchmarks for point-in-polygon joins."""

import time
from typing import Dict, Optional

import numba
import numpy as np
import pandas as pd

from regionsmith import PointSet, PolygonSet
from regionsmith.primitives.overlay import (
    filter_points_within,
    flatten_join,
    join_points_to_polygons,
)


def make_polygon_grid(n_side: int = 6, n_vertices: int = 64, size: float = 1000.0) -> PolygonSet:
    """Tile the square [0, size]^2 with n_side x n_side star-shaped polygons.

    Each polygon has ``n_vertices`` vertices on a jittered circle, so joins
    exercise realistic per-ring edge counts.
    """
    rng = np.random.default_rng(0)
    cell = size / n_side
    angles = np.linspace(0, 2 * np.pi, n_vertices, endpoint=False)
    rings = []
    names = []
    for i in range(n_side):
        for j in range(n_side):
            cx, cy = (i + 0.5) * cell, (j + 0.5) * cell
            radius = cell * 0.5 * rng.uniform(0.8, 1.1, size=n_vertices)
            ring = np.column_stack([cx + radius * np.cos(angles), cy + radius * np.sin(angles)])
            rings.append([ring])
            names.append(f"eco_{i}_{j}")
    return PolygonSet(
        rings=rings, attributes=pd.DataFrame({"name": names}), crs="EPSG:5070"
    )


def benchmark_join(
    n_points: int = 10_000,
    n_side: int = 6,
    n_vertices: int = 64,
    n_threads: Optional[int] = None,
) -> Dict[str, float]:
    """Benchmark join and flatten.

    Args:
        n_points: Number of random points.
        n_side: Polygons per grid side (n_side ** 2 polygons).
        n_vertices: Vertices per polygon ring.
        n_threads: Numba threads, None for the default.

    Returns:
        Dictionary with timing results.
    """
    polygons = make_polygon_grid(n_side, n_vertices)
    rng = np.random.default_rng(42)
    points = PointSet(coordinates=rng.uniform(0, 1000, size=(n_points, 2)), crs="EPSG:5070")

    if n_threads is not None:
        numba.set_num_threads(n_threads)
    # Warm up the compiled kernel
    join_points_to_polygons(points.take(np.arange(10)), polygons)

    start = time.perf_counter()
    result = join_points_to_polygons(points, polygons)
    join_time = time.perf_counter() - start

    start = time.perf_counter()
    flatten_join(result)
    flatten_time = time.perf_counter() - start

    if n_threads is not None:
        numba.set_num_threads(numba.config.NUMBA_NUM_THREADS)

    return {
        "n_points": n_points,
        "n_polygons": len(polygons),
        "n_threads": n_threads or numba.get_num_threads(),
        "join_time_seconds": join_time,
        "flatten_time_seconds": flatten_time,
        "matched_fraction": result.n_matched / n_points,
        "points_per_second": n_points / join_time if join_time > 0 else 0,
    }


def benchmark_region_filter(n_points: int = 50_000) -> Dict[str, float]:
    """Benchmark joining with and without a region pre-filter."""
    polygons = make_polygon_grid()
    region = PolygonSet(
        rings=[[np.array([[0, 0], [300, 0], [300, 300], [0, 300]])]], crs="EPSG:5070"
    )
    rng = np.random.default_rng(7)
    points = PointSet(coordinates=rng.uniform(0, 1000, size=(n_points, 2)), crs="EPSG:5070")
    join_points_to_polygons(points.take(np.arange(10)), polygons)

    start = time.perf_counter()
    join_points_to_polygons(points, polygons)
    direct_time = time.perf_counter() - start

    start = time.perf_counter()
    kept = filter_points_within(points, region)
    join_points_to_polygons(kept, polygons)
    filtered_time = time.perf_counter() - start

    return {
        "n_points": n_points,
        "n_kept": len(kept),
        "direct_time_seconds": direct_time,
        "filtered_time_seconds": filtered_time,
    }


def benchmark_join_scalability() -> Dict[str, Dict[str, float]]:
    """Benchmark joins across different point counts and thread counts."""
    results = {}

    sizes = [
        ("small", 1_000),
        ("medium", 10_000),
        ("large", 100_000),
    ]

    for size_name, n_points in sizes:
        print(f"  Benchmarking {size_name} ({n_points} points)...")
        results[f"{size_name}_1thread"] = benchmark_join(n_points, n_threads=1)
        results[size_name] = benchmark_join(n_points)

    return results


def run_all_join_benchmarks() -> Dict[str, Dict]:
    """Run all join benchmarks and return results."""
    results = {}

    print("Benchmarking join scalability...")
    results["join_scalability"] = benchmark_join_scalability()

    print("Benchmarking region pre-filter...")
    results["region_filter"] = benchmark_region_filter()

    return results


if __name__ == "__main__":
    """Run benchmarks and print results."""
    results = run_all_join_benchmarks()

    print("\n" + "=" * 60)
    print("SPATIAL JOIN PERFORMANCE BENCHMARKS")
    print("=" * 60)

    print("\nJoin Scalability:")
    for name, data in results["join_scalability"].items():
        print(f"  {name:14s}: {data['n_points']:6d} points, {data['n_threads']} threads")
        print(f"            Join: {data['join_time_seconds']*1000:8.2f} ms")
        print(f"            Flatten: {data['flatten_time_seconds']*1000:8.2f} ms")
        print(f"            Throughput: {data['points_per_second']:10.0f} points/s")

    rf = results["region_filter"]
    print("\nRegion Pre-filter:")
    print(f"  Points: {rf['n_points']} (kept {rf['n_kept']})")
    print(f"  Direct join: {rf['direct_time_seconds']*1000:8.2f} ms")
    print(f"  Filter + join: {rf['filtered_time_seconds']*1000:8.2f} ms")
