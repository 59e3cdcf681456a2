"""Planar geometry kernels: ray-casting point-in-polygon tests.

The per-point loops are compiled with Numba. Points are independent, so the
outer loop runs under ``prange`` and each worker writes only its own output
slot, which keeps results in input order for any thread count.

Layer 2: Primitives - Pure operations.
"""

import math
from typing import Sequence

import numpy as np
from numba import njit, prange

OUTSIDE = 0
INSIDE = 1
BOUNDARY = 2


@njit(cache=True)
def _on_segment(x, y, x1, y1, x2, y2, tol):
    dx = x2 - x1
    dy = y2 - y1
    seg_len = math.sqrt(dx * dx + dy * dy)
    if seg_len == 0.0:
        return math.sqrt((x - x1) ** 2 + (y - y1) ** 2) <= tol
    cross = (x - x1) * dy - (y - y1) * dx
    if abs(cross) > tol * seg_len:
        return False
    dot = (x - x1) * dx + (y - y1) * dy
    return -tol * seg_len <= dot <= seg_len * seg_len + tol * seg_len


@njit(cache=True)
def _ring_position(x, y, coords, start, stop, tol):
    """Classify a point against the closed ring coords[start:stop]."""
    inside = False
    for i in range(start, stop - 1):
        x1 = coords[i, 0]
        y1 = coords[i, 1]
        x2 = coords[i + 1, 0]
        y2 = coords[i + 1, 1]
        if _on_segment(x, y, x1, y1, x2, y2, tol):
            return BOUNDARY
        if (y1 > y) != (y2 > y):
            x_cross = (x2 - x1) * (y - y1) / (y2 - y1) + x1
            if x < x_cross:
                inside = not inside
    if inside:
        return INSIDE
    return OUTSIDE


@njit(parallel=True, cache=True)
def _points_in_rings_kernel(xs, ys, coords, offsets, tol):
    n = xs.shape[0]
    n_rings = offsets.shape[0] - 1
    out = np.zeros(n, dtype=np.bool_)
    for k in prange(n):
        enclosing = 0
        on_edge = False
        for r in range(n_rings):
            position = _ring_position(xs[k], ys[k], coords, offsets[r], offsets[r + 1], tol)
            if position == BOUNDARY:
                on_edge = True
                break
            enclosing += position
        out[k] = on_edge or (enclosing % 2 == 1)
    return out


def pack_rings(rings: Sequence[np.ndarray]) -> tuple[np.ndarray, np.ndarray]:
    """Concatenate rings into one vertex array plus ring start offsets.

    Returns:
        Tuple (coords, offsets): coords is (m, 2) float64, and ring r spans
        coords[offsets[r]:offsets[r + 1]].
    """
    coords = np.ascontiguousarray(np.vstack([np.asarray(r)[:, :2] for r in rings]), dtype=np.float64)
    offsets = np.zeros(len(rings) + 1, dtype=np.int64)
    offsets[1:] = np.cumsum([len(r) for r in rings])
    return coords, offsets


def points_in_polygon(
    xy: np.ndarray,
    rings: Sequence[np.ndarray],
    boundary_tolerance: float = 0.0,
) -> np.ndarray:
    """Test which points a polygon contains.

    A point is contained when it lies on the boundary of any ring (within
    ``boundary_tolerance``) or inside an odd number of rings. Rings must be
    closed.

    Args:
        xy: Point coordinates, shape (n, 2).
        rings: Closed rings of one polygon, each (k, 2).
        boundary_tolerance: Distance within which a point counts as on an edge.

    Returns:
        Boolean array of shape (n,).

    Example:
        >>> square = np.array([[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]])
        >>> points_in_polygon(np.array([[5, 5], [10, 5], [15, 15]]), [square])
        array([ True,  True, False])
    """
    if boundary_tolerance < 0:
        raise ValueError(f"boundary_tolerance must be >= 0, got {boundary_tolerance}")
    xy = np.asarray(xy, dtype=np.float64)
    if len(xy) == 0:
        return np.zeros(0, dtype=bool)
    coords, offsets = pack_rings(rings)
    xs = np.ascontiguousarray(xy[:, 0])
    ys = np.ascontiguousarray(xy[:, 1])
    return _points_in_rings_kernel(xs, ys, coords, offsets, float(boundary_tolerance))


def point_in_polygon(
    x: float,
    y: float,
    rings: Sequence[np.ndarray],
    boundary_tolerance: float = 0.0,
) -> bool:
    """Scalar form of points_in_polygon."""
    return bool(points_in_polygon(np.array([[x, y]]), rings, boundary_tolerance)[0])


def ring_position(x: float, y: float, ring: np.ndarray, boundary_tolerance: float = 0.0) -> int:
    """Classify a point against one closed ring as OUTSIDE, INSIDE or BOUNDARY."""
    coords, offsets = pack_rings([ring])
    return int(_ring_position(float(x), float(y), coords, 0, offsets[1], float(boundary_tolerance)))


def within_bounds(
    xy: np.ndarray,
    bounds: Sequence[float],
    boundary_tolerance: float = 0.0,
) -> np.ndarray:
    """Mask of points inside the closed envelope (minx, miny, maxx, maxy)."""
    minx, miny, maxx, maxy = bounds
    x = xy[:, 0]
    y = xy[:, 1]
    return (
        (x >= minx - boundary_tolerance)
        & (x <= maxx + boundary_tolerance)
        & (y >= miny - boundary_tolerance)
        & (y <= maxy + boundary_tolerance)
    )


def polygon_centroid(ring: np.ndarray) -> tuple[float, float]:
    """Area-weighted centroid of a closed, non-degenerate ring (shoelace formula)."""
    ring = np.asarray(ring, dtype=np.float64)
    x = ring[:-1, 0]
    y = ring[:-1, 1]
    x_next = ring[1:, 0]
    y_next = ring[1:, 1]
    cross = x * y_next - x_next * y
    area = cross.sum() / 2.0
    if area == 0:
        raise ValueError("Ring has zero area; centroid is undefined")
    cx = ((x + x_next) * cross).sum() / (6.0 * area)
    cy = ((y + y_next) * cross).sum() / (6.0 * area)
    return float(cx), float(cy)
