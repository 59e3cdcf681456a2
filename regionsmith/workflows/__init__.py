"""Layer 4: Workflows - Public entry points.

Workflows provide the public entry points users call. Workflows can import
I/O libraries. Put file loading and saving here.
"""

from regionsmith.utils.optional_imports import optional_import
from regionsmith.workflows.orchestrator import (
    STEP_REGISTRY,
    WorkflowOrchestrator,
    register_step,
    run_workflow,
)
from regionsmith.workflows.pipeline import load_source, run_spatial_join

# Optional vector I/O support (requires geopandas, shapely)
IO_AVAILABLE, _io = optional_import(
    "regionsmith.workflows.io",
    [
        "from_geodataframe",
        "polygons_to_geodataframe",
        "read_vector",
        "to_geodataframe",
        "write_table",
    ],
)
from_geodataframe = _io["from_geodataframe"]  # type: ignore
polygons_to_geodataframe = _io["polygons_to_geodataframe"]  # type: ignore
read_vector = _io["read_vector"]  # type: ignore
to_geodataframe = _io["to_geodataframe"]  # type: ignore
write_table = _io["write_table"]  # type: ignore

# Optional raster support (requires rasterio)
RASTER_AVAILABLE, _raster = optional_import(
    "regionsmith.workflows.raster", ["read_raster_points"]
)
read_raster_points = _raster["read_raster_points"]  # type: ignore

__all__ = [
    "IO_AVAILABLE",
    "RASTER_AVAILABLE",
    "STEP_REGISTRY",
    "WorkflowOrchestrator",
    "from_geodataframe",
    "load_source",
    "polygons_to_geodataframe",
    "read_raster_points",
    "read_vector",
    "register_step",
    "run_spatial_join",
    "run_workflow",
    "to_geodataframe",
    "write_table",
]
