"""RegionSmith: point-in-polygon joins for spatial data wrangling.

Layered like its siblings: objects hold data, primitives hold pure
operations, tasks translate intent, workflows do I/O.
"""

from regionsmith.config import DataSource, PipelineContext, load_config
from regionsmith.objects import (
    UNMATCHED,
    JoinedRecord,
    JoinResult,
    PointSet,
    PolygonSet,
)
from regionsmith.primitives import (
    filter_points_within,
    flatten_join,
    join_points_to_polygons,
    normalize_crs,
    summarize_points_by_polygon,
)
from regionsmith.tasks import SpatialJoinTask
from regionsmith.utils.errors import (
    CRSError,
    CRSMismatchError,
    DataValidationError,
    DependencyError,
    ParameterError,
    RegionSmithError,
    UndefinedCRSError,
    UnsupportedProjectionError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Objects
    "JoinedRecord",
    "JoinResult",
    "PointSet",
    "PolygonSet",
    "UNMATCHED",
    # Primitives
    "filter_points_within",
    "flatten_join",
    "join_points_to_polygons",
    "normalize_crs",
    "summarize_points_by_polygon",
    # Tasks
    "SpatialJoinTask",
    # Config
    "DataSource",
    "PipelineContext",
    "load_config",
    # Errors
    "CRSError",
    "CRSMismatchError",
    "DataValidationError",
    "DependencyError",
    "ParameterError",
    "RegionSmithError",
    "UndefinedCRSError",
    "UnsupportedProjectionError",
]
