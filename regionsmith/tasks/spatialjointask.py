"""Spatial join task: CRS normalization, region filtering, point-in-polygon join.

Layer 3: Tasks - User intent translation.
"""

import logging
from typing import Any, Optional

import numba
import pandas as pd

from regionsmith.objects.joinresult import JoinResult
from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet
from regionsmith.primitives.crs import describe_crs, normalize_crs, reproject
from regionsmith.primitives.overlay import (
    filter_points_within,
    flatten_join,
    join_points_to_polygons,
    summarize_points_by_polygon,
)
from regionsmith.utils.errors import raise_parameter_error

logger = logging.getLogger(__name__)


class SpatialJoinTask:
    """Assign points to the polygons that contain them and tabulate the result.

    Runs the stages in order: CRS normalization, optional region filter,
    point-in-polygon join, flattening. Stages keep no state between calls.

    Example:
        >>> from regionsmith.tasks import SpatialJoinTask
        >>>
        >>> task = SpatialJoinTask()
        >>> table = task.run(points, ecoregions, region=state_boundary)
        >>> summary = task.summarize(table, ecoregions, value_column="precip")
    """

    def __init__(
        self,
        boundary_tolerance: float = 0.0,
        n_threads: Optional[int] = None,
        polygon_suffix: str = "right",
        target_crs: Optional[Any] = None,
    ) -> None:
        """Initialize the spatial join task.

        Args:
            boundary_tolerance: Distance within which a point counts as on a
                polygon edge, default 0.0 (exact).
            n_threads: Numba threads for the containment kernel. None keeps
                Numba's default.
            polygon_suffix: Suffix for polygon columns that collide with point
                columns, default 'right'.
            target_crs: CRS to run the join in. None uses the polygons' CRS.
        """
        if boundary_tolerance < 0:
            raise_parameter_error(
                "boundary_tolerance", boundary_tolerance, constraint="must be >= 0"
            )
        if n_threads is not None and not 1 <= n_threads <= numba.config.NUMBA_NUM_THREADS:
            raise_parameter_error(
                "n_threads",
                n_threads,
                constraint=f"1 <= n_threads <= {numba.config.NUMBA_NUM_THREADS}",
            )
        self.boundary_tolerance = float(boundary_tolerance)
        self.n_threads = n_threads
        self.polygon_suffix = polygon_suffix
        self.target_crs = target_crs

    @classmethod
    def from_context(cls, context) -> "SpatialJoinTask":
        """Build a task from a PipelineContext."""
        return cls(
            boundary_tolerance=context.boundary_tolerance,
            n_threads=context.n_threads,
            polygon_suffix=context.polygon_suffix,
            target_crs=context.target_crs,
        )

    def normalize(
        self,
        points: PointSet,
        polygons: PolygonSet,
        region: Optional[PolygonSet] = None,
    ) -> tuple[PointSet, PolygonSet, Optional[PolygonSet]]:
        """Bring points and region into the working CRS.

        The working CRS is ``target_crs`` when set (polygons are reprojected
        too), otherwise the polygons' CRS.
        """
        if self.target_crs is not None:
            polygons = reproject(polygons, self.target_crs)
        points, polygons = normalize_crs(points, polygons)
        if region is not None:
            region, polygons = normalize_crs(region, polygons)
        logger.info(f"Working CRS: {describe_crs(polygons.crs)}")
        return points, polygons, region

    def filter(self, points: PointSet, region: PolygonSet) -> PointSet:
        """Restrict points to those inside or on the boundary of ``region``."""
        kept = filter_points_within(points, region, self.boundary_tolerance)
        logger.info(f"Region filter kept {len(kept)} of {len(points)} points")
        return kept

    def join(self, points: PointSet, polygons: PolygonSet) -> JoinResult:
        """Join each point to the first polygon (in order) that contains it."""
        # The numba thread count is process-wide; restore it after the join.
        previous_threads = numba.get_num_threads()
        if self.n_threads is not None:
            numba.set_num_threads(self.n_threads)
        try:
            result = join_points_to_polygons(points, polygons, self.boundary_tolerance)
        finally:
            numba.set_num_threads(previous_threads)
        logger.info(
            f"Joined {len(result)} points to {len(polygons)} polygons: "
            f"{result.n_matched} matched, {len(result) - result.n_matched} unmatched"
        )
        return result

    def flatten(self, result: JoinResult) -> pd.DataFrame:
        """Convert a JoinResult into a flat table, one row per point."""
        return flatten_join(result, suffix=self.polygon_suffix)

    def run(
        self,
        points: PointSet,
        polygons: PolygonSet,
        region: Optional[PolygonSet] = None,
    ) -> pd.DataFrame:
        """Run normalize -> filter -> join -> flatten.

        Args:
            points: Point measurements.
            polygons: Polygons whose attributes are attached to points.
            region: Optional boundary; points outside it are dropped before
                the join.

        Returns:
            Flat table indexed by point id.

        Raises:
            UndefinedCRSError: If an input has no CRS.
            UnsupportedProjectionError: If inputs cannot be brought into one CRS.
        """
        points, polygons, region = self.normalize(points, polygons, region)
        if region is not None:
            points = self.filter(points, region)
        return self.flatten(self.join(points, polygons))

    def summarize(
        self,
        table: pd.DataFrame,
        polygons: PolygonSet,
        value_column: str,
        func: str = "mean",
    ) -> pd.DataFrame:
        """Aggregate ``value_column`` per polygon, keyed by polygon id."""
        summary = summarize_points_by_polygon(table, polygons, value_column, func=func)
        logger.info(
            f"Summarized '{value_column}' ({func}) over {len(summary)} polygons"
        )
        return summary
