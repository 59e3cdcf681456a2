"""Layer 1: Objects - Immutable data representations.

This layer contains only data structures. No I/O libraries, no geopandas,
no shapely, no rasterio. Only standard library + numpy + pandas.
"""

from regionsmith.objects.joinresult import UNMATCHED, JoinedRecord, JoinResult
from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet

__all__ = [
    "JoinedRecord",
    "JoinResult",
    "PointSet",
    "PolygonSet",
    "UNMATCHED",
]
