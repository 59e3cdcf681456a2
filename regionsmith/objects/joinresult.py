"""Point-to-polygon join results.

A JoinResult is the columnar form of a sequence of JoinedRecords: the joined
points, the candidate polygons, and for every point the position of the
polygon that contains it (-1 when none does).
"""

from dataclasses import dataclass
from typing import Any, Hashable, Iterator, Optional

import numpy as np

from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet
from regionsmith.utils.errors import raise_validation_error

UNMATCHED = -1


@dataclass(frozen=True)
class JoinedRecord:
    """One point extended with the attributes of its containing polygon.

    Attributes:
        point_id: Record id of the point.
        x: Point x coordinate.
        y: Point y coordinate.
        attributes: Point attribute record.
        polygon_id: Record id of the containing polygon, or None.
        polygon_attributes: Attribute record of that polygon, or None.
    """

    point_id: Hashable
    x: float
    y: float
    attributes: dict[str, Any]
    polygon_id: Optional[Hashable] = None
    polygon_attributes: Optional[dict[str, Any]] = None

    @property
    def matched(self) -> bool:
        return self.polygon_attributes is not None


@dataclass(frozen=True, eq=False)
class JoinResult:
    """Result of joining points to the polygons that contain them.

    Attributes:
        points: Joined points, in input order.
        polygons: Polygons the points were tested against.
        polygon_positions: Integer array with one entry per point: the
            position in ``polygons`` of the containing polygon, or -1.
    """

    points: PointSet
    polygons: PolygonSet
    polygon_positions: np.ndarray

    def __post_init__(self) -> None:
        """Validate JoinResult parameters."""
        positions = np.asarray(self.polygon_positions, dtype=np.int64)
        if positions.shape != (len(self.points),):
            raise_validation_error(
                "polygon_positions must hold one entry per point",
                expected=f"shape ({len(self.points)},)",
                received=f"shape {positions.shape}",
            )
        if positions.size and (positions.min() < UNMATCHED or positions.max() >= len(self.polygons)):
            raise_validation_error(
                "polygon_positions out of range",
                expected=f"-1 <= position < {len(self.polygons)}",
            )
        positions.setflags(write=False)
        object.__setattr__(self, "polygon_positions", positions)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def matched(self) -> np.ndarray:
        """Boolean mask of points that fell inside some polygon."""
        return self.polygon_positions != UNMATCHED

    @property
    def n_matched(self) -> int:
        return int(self.matched.sum())

    def polygon_ids(self) -> list[Optional[Hashable]]:
        """Record id of the containing polygon for each point (None if unmatched)."""
        ids = self.polygons.index
        return [ids[p] if p != UNMATCHED else None for p in self.polygon_positions]

    def records(self) -> Iterator[JoinedRecord]:
        """Iterate the result as JoinedRecords, in point order."""
        point_rows = self.points.attributes.to_dict(orient="records")
        polygon_rows = self.polygons.attributes.to_dict(orient="records")
        polygon_ids = self.polygons.index
        for i, point_id in enumerate(self.points.index):
            position = self.polygon_positions[i]
            matched = position != UNMATCHED
            yield JoinedRecord(
                point_id=point_id,
                x=float(self.points.coordinates[i, 0]),
                y=float(self.points.coordinates[i, 1]),
                attributes=point_rows[i],
                polygon_id=polygon_ids[position] if matched else None,
                polygon_attributes=polygon_rows[position] if matched else None,
            )

    def __iter__(self) -> Iterator[JoinedRecord]:
        return self.records()

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"JoinResult(n_points={len(self)}, n_matched={self.n_matched}, "
            f"n_polygons={len(self.polygons)})"
        )
