"""Point/polygon overlay: spatial filtering, point-in-polygon joins and flattening.

Layer 2: Primitives - Pure operations. Inputs must already share a CRS (see
``regionsmith.primitives.crs.normalize_crs``); a mismatch raises
CRSMismatchError rather than producing a meaningless join.
"""

from typing import Any

import numpy as np
import pandas as pd

from regionsmith.objects.joinresult import UNMATCHED, JoinResult
from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet
from regionsmith.primitives.crs import require_same_crs
from regionsmith.primitives.geometry import points_in_polygon, within_bounds
from regionsmith.utils.errors import raise_validation_error

POLYGON_ID_COLUMN = "polygon_id"


def contained_mask(
    points: PointSet,
    polygons: PolygonSet,
    boundary_tolerance: float = 0.0,
) -> np.ndarray:
    """Mask of points contained by at least one polygon (boundary inclusive)."""
    require_same_crs(points, polygons)
    xy = points.xy
    mask = np.zeros(len(points), dtype=bool)
    for j, rings in enumerate(polygons.rings):
        candidates = np.flatnonzero(
            ~mask & within_bounds(xy, polygons.bounds[j], boundary_tolerance)
        )
        if candidates.size == 0:
            continue
        hit = points_in_polygon(xy[candidates], rings, boundary_tolerance)
        mask[candidates[hit]] = True
    return mask


def filter_points_within(
    points: PointSet,
    region: PolygonSet,
    boundary_tolerance: float = 0.0,
) -> PointSet:
    """Keep the points that lie inside or on the boundary of a region.

    The region is the union of all polygons in ``region``. Retained points
    keep their original relative order and record ids.

    Args:
        points: Candidate points.
        region: Boundary polygon(s), same CRS as ``points``.
        boundary_tolerance: Distance within which a point counts as on an edge.

    Returns:
        PointSet with the retained points.

    Raises:
        CRSMismatchError: If ``points`` and ``region`` use different CRS.
    """
    mask = contained_mask(points, region, boundary_tolerance)
    return points.take(np.flatnonzero(mask))


def join_points_to_polygons(
    points: PointSet,
    polygons: PolygonSet,
    boundary_tolerance: float = 0.0,
) -> JoinResult:
    """Assign every point to the first polygon that contains it.

    Polygons are scanned in order and a point, once assigned, is not tested
    again, so where polygons overlap the earliest one wins. Each polygon only
    tests points within its bounding box.

    Args:
        points: Points to classify.
        polygons: Candidate polygons, same CRS as ``points``.
        boundary_tolerance: Distance within which a point counts as on an edge.

    Returns:
        JoinResult with exactly one entry per input point, in input order.

    Raises:
        CRSMismatchError: If ``points`` and ``polygons`` use different CRS.

    Example:
        >>> square = PolygonSet(
        ...     rings=[[np.array([[0, 0], [10, 0], [10, 10], [0, 10]])]],
        ...     attributes=pd.DataFrame({"name": ["Square"]}),
        ... )
        >>> points = PointSet(coordinates=np.array([[5, 5], [15, 15]]))
        >>> join_points_to_polygons(points, square).polygon_positions
        array([ 0, -1])
    """
    require_same_crs(points, polygons)
    xy = points.xy
    positions = np.full(len(points), UNMATCHED, dtype=np.int64)

    for j, rings in enumerate(polygons.rings):
        unassigned = positions == UNMATCHED
        if not unassigned.any():
            break
        candidates = np.flatnonzero(
            unassigned & within_bounds(xy, polygons.bounds[j], boundary_tolerance)
        )
        if candidates.size == 0:
            continue
        hit = points_in_polygon(xy[candidates], rings, boundary_tolerance)
        positions[candidates[hit]] = j

    return JoinResult(points=points, polygons=polygons, polygon_positions=positions)


COORDINATE_COLUMNS = ("x", "y")


def _suffixed(name: Any, taken: set, suffix: str) -> Any:
    """First of ``name``, ``name_<suffix>``, ``name_<suffix>_<suffix>``, ... not in ``taken``."""
    candidate = name
    for _ in range(len(taken) + 1):
        if candidate not in taken:
            return candidate
        candidate = f"{candidate}_{suffix}"
    raise_validation_error(
        f"Cannot find a free column name for {name!r}",
        expected=f"a name not in {sorted(map(str, taken))}",
        received=str(candidate),
    )


def flatten_join(result: JoinResult, suffix: str = "right") -> pd.DataFrame:
    """Flatten a JoinResult into a uniform attribute table.

    Columns are ``x``, ``y``, the point attributes, ``polygon_id`` and the
    polygon attributes. ``x``, ``y`` and ``polygon_id`` always hold the
    coordinates and the polygon id; point attributes with those names are
    renamed ``<name>_left``. Polygon columns that collide with an existing
    column name are renamed ``<name>_<suffix>``. Suffixes repeat until the
    name is unused, so no column is ever overwritten. Rows without a containing polygon
    keep their place and carry ``pd.NA`` in every polygon-derived column.

    Args:
        result: Output of join_points_to_polygons.
        suffix: Suffix for colliding polygon column names.

    Returns:
        DataFrame indexed by point id, one row per point in input order.
        Polygon-derived columns use pandas nullable dtypes.
    """
    points = result.points
    positions = result.polygon_positions
    matched = positions != UNMATCHED

    table = pd.DataFrame(
        {"x": points.coordinates[:, 0], "y": points.coordinates[:, 1]},
        index=points.index,
    )
    # x, y and polygon_id are reserved; point columns using them move aside.
    reserved = {*COORDINATE_COLUMNS, POLYGON_ID_COLUMN}
    taken = reserved | set(points.attributes.columns)
    for column in points.attributes.columns:
        name = column
        if column in reserved:
            name = _suffixed(column, taken, "left")
            taken.add(name)
        table[name] = points.attributes[column].to_numpy()

    polygon_ids = np.empty(len(points), dtype=object)
    polygon_ids[:] = None
    polygon_ids[matched] = np.asarray(result.polygons.index, dtype=object)[positions[matched]]

    taken = set(table.columns) | {POLYGON_ID_COLUMN}
    polygon_columns: dict[Any, Any] = {POLYGON_ID_COLUMN: polygon_ids}

    # Positional take with -1 for misses; RangeIndex has no -1 so those rows are NaN.
    polygon_rows = result.polygons.attributes.reset_index(drop=True).reindex(positions)
    for column in polygon_rows.columns:
        name = _suffixed(column, taken, suffix)
        taken.add(name)
        polygon_columns[name] = polygon_rows[column].to_numpy()

    polygon_part = pd.DataFrame(polygon_columns, index=points.index).convert_dtypes()
    polygon_part = polygon_part.where(polygon_part.notna(), pd.NA)
    return pd.concat([table, polygon_part], axis=1)


def summarize_points_by_polygon(
    table: pd.DataFrame,
    polygons: PolygonSet,
    value_column: str,
    func: str = "mean",
    id_column: str = POLYGON_ID_COLUMN,
) -> pd.DataFrame:
    """Aggregate a flattened join table per polygon, joined back by polygon id.

    Args:
        table: Output of flatten_join.
        polygons: The polygons used in the join.
        value_column: Column of ``table`` to aggregate.
        func: Pandas aggregation name ('mean', 'median', 'sum', 'min', 'max', ...).
        id_column: Column of ``table`` holding polygon ids.

    Returns:
        DataFrame indexed by polygon id with the polygon attributes, the
        aggregate in ``<value_column>_<func>`` and the point count in
        ``n_points``. Polygons without points get a missing aggregate and a
        count of 0.

    Raises:
        KeyError: If ``value_column`` or ``id_column`` is not in ``table``.
    """
    for column in (value_column, id_column):
        if column not in table.columns:
            raise KeyError(
                f"Column '{column}' not found. Available columns: {list(table.columns)}"
            )

    matched = table[table[id_column].notna()]
    grouped = matched.groupby(id_column)[value_column]
    summary = pd.DataFrame(
        {
            f"{value_column}_{func}": grouped.agg(func),
            "n_points": grouped.size(),
        }
    )
    summary.index = pd.Index(summary.index.tolist(), dtype=object)
    summary = summary.reindex(pd.Index(polygons.index.tolist(), dtype=object))
    summary.index = polygons.index
    summary["n_points"] = summary["n_points"].fillna(0).astype("int64")

    result = pd.concat([polygons.attributes, summary], axis=1)
    result.index.name = id_column
    return result
