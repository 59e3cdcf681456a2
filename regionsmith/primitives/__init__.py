"""Layer 2: Primitives - Algorithm interfaces and pure operations.

This layer defines pure operations over the objects layer. It can import
numpy, pandas, pyproj and numba. No file I/O, no logging, no plotting.
"""

from regionsmith.primitives.crs import (
    describe_crs,
    normalize_crs,
    reproject,
    require_same_crs,
    resolve_crs,
    same_crs,
    transform_coordinates,
)
from regionsmith.primitives.geometry import (
    BOUNDARY,
    INSIDE,
    OUTSIDE,
    point_in_polygon,
    points_in_polygon,
    polygon_centroid,
    ring_position,
    within_bounds,
)
from regionsmith.primitives.overlay import (
    POLYGON_ID_COLUMN,
    contained_mask,
    filter_points_within,
    flatten_join,
    join_points_to_polygons,
    summarize_points_by_polygon,
)

__all__ = [
    # CRS
    "describe_crs",
    "normalize_crs",
    "reproject",
    "require_same_crs",
    "resolve_crs",
    "same_crs",
    "transform_coordinates",
    # Geometry
    "BOUNDARY",
    "INSIDE",
    "OUTSIDE",
    "point_in_polygon",
    "points_in_polygon",
    "polygon_centroid",
    "ring_position",
    "within_bounds",
    # Overlay
    "POLYGON_ID_COLUMN",
    "contained_mask",
    "filter_points_within",
    "flatten_join",
    "join_points_to_polygons",
    "summarize_points_by_polygon",
]
