"""End-to-end spatial join driven by a PipelineContext."""

import logging
from typing import Union

import pandas as pd

from regionsmith.config import DataSource, PipelineContext
from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet
from regionsmith.tasks.spatialjointask import SpatialJoinTask
from regionsmith.utils.errors import (
    raise_dependency_error,
    raise_parameter_error,
    raise_validation_error,
)
from regionsmith.utils.optional_imports import missing_dependency, optional_import_single

logger = logging.getLogger(__name__)


def load_source(
    source: DataSource, context: PipelineContext
) -> Union[PointSet, PolygonSet]:
    """Load one configured data source.

    Raises:
        DependencyError: If geopandas (vector) or rasterio (raster) is missing.
    """
    path = context.resolve_path(source)
    if source.kind == "raster":
        available, read_raster_points = optional_import_single(
            "regionsmith.workflows.raster", "read_raster_points"
        )
        if not available:
            raise_dependency_error(
                missing_dependency("regionsmith.workflows.raster") or "rasterio",
                optional_group="geo",
            )
        return read_raster_points(
            path,
            band=source.band,
            value_column=source.value_column,
            sample_step=source.sample_step,
            crs=source.crs,
        )

    available, read_vector = optional_import_single("regionsmith.workflows.io", "read_vector")
    if not available:
        raise_dependency_error(
            missing_dependency("regionsmith.workflows.io") or "geopandas",
            optional_group="geo",
        )
    return read_vector(path, layer=source.layer, crs=source.crs)


def _load_as(source: DataSource, context: PipelineContext, expected: type, role: str):
    collection = load_source(source, context)
    if not isinstance(collection, expected):
        raise_validation_error(
            f"The '{role}' source must contain {expected.__name__} geometries",
            received=type(collection).__name__,
        )
    return collection


def run_spatial_join(context: PipelineContext) -> pd.DataFrame:
    """
    Load the sources named in ``context`` and run the spatial join.

    Parameters
    ----------
    context : PipelineContext
        Must name ``points`` and ``polygons``; ``region`` is optional.

    Returns
    -------
    pandas.DataFrame
        Flat table, one row per (region-filtered) point.

    Example
    -------
    >>> from regionsmith.config import load_config
    >>> from regionsmith.workflows import run_spatial_join
    >>> table = run_spatial_join(load_config("ecoregions.yaml"))
    """
    for role in ("points", "polygons"):
        if getattr(context, role) is None:
            raise_parameter_error(role, None, constraint="a data source is required")

    points = _load_as(context.points, context, PointSet, "points")
    polygons = _load_as(context.polygons, context, PolygonSet, "polygons")
    region = None
    if context.region is not None:
        region = _load_as(context.region, context, PolygonSet, "region")

    logger.info(
        f"Running spatial join: {len(points)} points, {len(polygons)} polygons"
        + (f", region of {len(region)} polygons" if region is not None else "")
    )
    return SpatialJoinTask.from_context(context).run(points, polygons, region=region)
