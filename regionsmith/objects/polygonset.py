"""Polygon collections with attributes, record ids and a CRS."""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from regionsmith.objects._records import CRSLike, coerce_attributes
from regionsmith.utils.errors import raise_validation_error


def _close_ring(ring: np.ndarray, position: str) -> np.ndarray:
    coords = np.array(ring, dtype=np.float64)
    if coords.ndim != 2 or coords.shape[1] < 2 or len(coords) == 0:
        raise_validation_error(
            f"Ring {position} must be an array of (x, y) vertices",
            received=f"shape {coords.shape}",
        )
    coords = coords[:, :2]
    if not np.array_equal(coords[0], coords[-1]):
        coords = np.vstack([coords, coords[:1]])
    if len(np.unique(coords[:-1], axis=0)) < 3:
        raise_validation_error(
            f"Ring {position} needs at least three distinct vertices",
            received=f"{len(coords) - 1} vertices",
        )
    coords.setflags(write=False)
    return coords


@dataclass(frozen=True, eq=False)
class PolygonSet:
    """Ordered, immutable set of polygons sharing one CRS.

    Each polygon is a list of closed rings. A point belongs to a polygon when
    it lies on any ring's boundary or inside an odd number of its rings, so
    holes and multi-part regions are both plain lists of rings.

    Attributes:
        rings: One list of (k, 2) vertex arrays per polygon. Open rings are
            closed on construction.
        attributes: Per-polygon attribute table, indexed by record id.
        index: Stable record ids for the polygons.
        crs: Coordinate reference system, or None when unknown.
    """

    rings: Sequence[Sequence[np.ndarray]]
    attributes: Optional[pd.DataFrame] = None
    index: Optional[Union[pd.Index, list, np.ndarray]] = field(default=None, repr=False)
    crs: Optional[CRSLike] = None

    def __post_init__(self) -> None:
        """Validate ring geometry and freeze PolygonSet contents."""
        polygons = []
        for i, polygon in enumerate(self.rings):
            if isinstance(polygon, np.ndarray) and polygon.ndim == 2:
                polygon = [polygon]
            if len(polygon) == 0:
                raise_validation_error(f"Polygon {i} has no rings")
            polygons.append(
                tuple(_close_ring(ring, f"{j} of polygon {i}") for j, ring in enumerate(polygon))
            )
        object.__setattr__(self, "rings", tuple(polygons))

        table = coerce_attributes(self.attributes, self.index, len(polygons), "PolygonSet")
        object.__setattr__(self, "attributes", table)
        object.__setattr__(self, "index", table.index)

        bounds = np.full((len(polygons), 4), np.nan)
        for i, polygon in enumerate(polygons):
            stacked = np.vstack(polygon)
            bounds[i] = [
                stacked[:, 0].min(),
                stacked[:, 1].min(),
                stacked[:, 0].max(),
                stacked[:, 1].max(),
            ]
        bounds.setflags(write=False)
        object.__setattr__(self, "_bounds", bounds)

    def __len__(self) -> int:
        return len(self.rings)

    @property
    def bounds(self) -> np.ndarray:
        """Per-polygon (minx, miny, maxx, maxy), shape (n, 4)."""
        return self._bounds

    def total_bounds(self) -> tuple[float, float, float, float]:
        if len(self) == 0:
            return (np.nan, np.nan, np.nan, np.nan)
        b = self._bounds
        return (
            float(b[:, 0].min()),
            float(b[:, 1].min()),
            float(b[:, 2].max()),
            float(b[:, 3].max()),
        )

    def with_rings(self, rings: Sequence[Sequence[np.ndarray]], crs: Optional[CRSLike]) -> "PolygonSet":
        """Return a copy carrying new ring geometry and CRS, same ids and attributes."""
        return PolygonSet(rings=rings, attributes=self.attributes, crs=crs)

    def __repr__(self) -> str:
        """String representation."""
        n_rings = sum(len(p) for p in self.rings)
        columns = list(self.attributes.columns)
        return (
            f"PolygonSet(n_polygons={len(self)}, n_rings={n_rings}, "
            f"columns={columns}, crs={self.crs!r})"
        )
