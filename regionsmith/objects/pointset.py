"""Point collections with attributes, record ids and a CRS."""

from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np
import pandas as pd

from regionsmith.objects._records import CRSLike, coerce_attributes
from regionsmith.utils.errors import raise_validation_error


@dataclass(frozen=True, eq=False)
class PointSet:
    """Ordered, immutable set of points sharing one CRS.

    Attributes:
        coordinates: Array of shape (n, 2) or (n, 3). Only x and y take part
            in spatial operations; z is carried through untouched.
        attributes: Per-point attribute table, indexed by record id.
        index: Stable record ids. Defaults to the attribute table's index, or
            a RangeIndex when no attributes are given.
        crs: Coordinate reference system (EPSG code, CRS string, pyproj CRS),
            or None when unknown.
    """

    coordinates: np.ndarray
    attributes: Optional[pd.DataFrame] = None
    index: Optional[Union[pd.Index, list, np.ndarray]] = field(default=None, repr=False)
    crs: Optional[CRSLike] = None

    def __post_init__(self) -> None:
        """Validate and freeze PointSet contents."""
        coords = np.array(self.coordinates, dtype=np.float64)
        if coords.ndim == 1 and coords.size == 0:
            coords = coords.reshape(0, 2)
        if coords.ndim != 2 or coords.shape[1] not in (2, 3):
            raise_validation_error(
                "Point coordinates must be a 2D array",
                expected="shape (n, 2) or (n, 3)",
                received=f"shape {coords.shape}",
            )
        coords.setflags(write=False)
        object.__setattr__(self, "coordinates", coords)

        table = coerce_attributes(self.attributes, self.index, len(coords), "PointSet")
        object.__setattr__(self, "attributes", table)
        object.__setattr__(self, "index", table.index)

    def __len__(self) -> int:
        return len(self.coordinates)

    @property
    def x(self) -> np.ndarray:
        return self.coordinates[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.coordinates[:, 1]

    @property
    def xy(self) -> np.ndarray:
        """Planar (n, 2) coordinates."""
        return self.coordinates[:, :2]

    def bounds(self) -> tuple[float, float, float, float]:
        """Return (minx, miny, maxx, maxy), NaN for an empty set."""
        if len(self) == 0:
            return (np.nan, np.nan, np.nan, np.nan)
        xy = self.xy
        return (
            float(np.nanmin(xy[:, 0])),
            float(np.nanmin(xy[:, 1])),
            float(np.nanmax(xy[:, 0])),
            float(np.nanmax(xy[:, 1])),
        )

    def take(self, positions: np.ndarray) -> "PointSet":
        """Return a new PointSet holding the points at ``positions``, in order."""
        positions = np.asarray(positions)
        return PointSet(
            coordinates=self.coordinates[positions],
            attributes=self.attributes.iloc[positions],
            crs=self.crs,
        )

    def with_coordinates(self, coordinates: np.ndarray, crs: Optional[CRSLike]) -> "PointSet":
        """Return a copy carrying new coordinates and CRS, same ids and attributes."""
        return PointSet(coordinates=coordinates, attributes=self.attributes, crs=crs)

    def __repr__(self) -> str:
        """String representation."""
        columns = list(self.attributes.columns)
        return f"PointSet(n_points={len(self)}, columns={columns}, crs={self.crs!r})"
