"""Vector file I/O and GeoDataFrame conversion.

Converts between geopandas GeoDataFrames and RegionSmith PointSet/PolygonSet
objects, and writes flattened tables to disk.
"""

import logging
from functools import reduce
from pathlib import Path
from typing import Any, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd
from shapely.geometry import MultiPolygon, Polygon

from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet
from regionsmith.utils.errors import raise_parameter_error, raise_validation_error

logger = logging.getLogger(__name__)


def _polygon_rings(geometry: Union[Polygon, MultiPolygon]) -> list[np.ndarray]:
    parts = geometry.geoms if isinstance(geometry, MultiPolygon) else [geometry]
    rings = []
    for part in parts:
        rings.append(np.asarray(part.exterior.coords)[:, :2])
        rings.extend(np.asarray(interior.coords)[:, :2] for interior in part.interiors)
    return rings


def from_geodataframe(
    gdf: gpd.GeoDataFrame,
    crs: Optional[Any] = None,
) -> Union[PointSet, PolygonSet]:
    """Convert a GeoDataFrame into a PointSet or PolygonSet.

    Point layers become a PointSet; Polygon/MultiPolygon layers become a
    PolygonSet whose polygons hold every exterior and interior ring. The
    GeoDataFrame index becomes the record id.

    Args:
        gdf: Input GeoDataFrame.
        crs: CRS to assume when ``gdf.crs`` is None.

    Returns:
        PointSet or PolygonSet.

    Raises:
        DataValidationError: On empty, missing or mixed geometry types.
    """
    geometry = gdf.geometry
    if geometry.isna().any() or geometry.is_empty.any():
        raise_validation_error(
            "GeoDataFrame contains missing or empty geometries",
            suggestion="Drop them first, e.g. gdf[~gdf.geometry.is_empty].",
        )

    attributes = pd.DataFrame(gdf.drop(columns=gdf.geometry.name))
    layer_crs = gdf.crs if gdf.crs is not None else crs
    kinds = set(geometry.geom_type)

    if kinds <= {"Point"}:
        coords = np.column_stack([geometry.x.to_numpy(), geometry.y.to_numpy()])
        return PointSet(coordinates=coords, attributes=attributes, crs=layer_crs)
    if kinds <= {"Polygon", "MultiPolygon"}:
        rings = [_polygon_rings(geom) for geom in geometry]
        return PolygonSet(rings=rings, attributes=attributes, crs=layer_crs)

    raise_validation_error(
        "Unsupported geometry types",
        expected="only Point, or only Polygon/MultiPolygon",
        received=", ".join(sorted(kinds)),
    )


def read_vector(
    file_path: Union[str, Path],
    layer: Optional[str] = None,
    crs: Optional[Any] = None,
) -> Union[PointSet, PolygonSet]:
    """Read a vector file (Shapefile, GeoPackage, GeoJSON, ...).

    Args:
        file_path: Path to the file.
        layer: Layer name for multi-layer sources.
        crs: CRS to assume when the file has none.

    Returns:
        PointSet or PolygonSet, depending on the geometry type.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Vector file not found: {file_path}")

    gdf = gpd.read_file(file_path, layer=layer) if layer else gpd.read_file(file_path)
    collection = from_geodataframe(gdf, crs=crs)
    logger.info(f"Read {collection!r} from {file_path}")
    return collection


def to_geodataframe(
    data: Union[PointSet, pd.DataFrame],
    crs: Optional[Any] = None,
) -> gpd.GeoDataFrame:
    """Convert a PointSet, or a flattened table with x/y columns, to points.

    Args:
        data: PointSet or DataFrame holding ``x`` and ``y`` columns.
        crs: CRS for the result. Defaults to the PointSet's CRS.

    Returns:
        GeoDataFrame of Point geometries indexed by record id.
    """
    if isinstance(data, PointSet):
        frame = data.attributes.copy()
        x, y = data.x, data.y
        crs = crs if crs is not None else data.crs
    else:
        if "x" not in data.columns or "y" not in data.columns:
            raise_validation_error(
                "Table needs 'x' and 'y' columns",
                received=str(list(data.columns)),
            )
        frame = data.copy()
        x = data["x"].to_numpy(dtype=np.float64)
        y = data["y"].to_numpy(dtype=np.float64)
    return gpd.GeoDataFrame(frame, geometry=gpd.points_from_xy(x, y), crs=crs)


def polygons_to_geodataframe(polygons: PolygonSet) -> gpd.GeoDataFrame:
    """Convert a PolygonSet to a GeoDataFrame, e.g. for choropleth rendering.

    Each polygon becomes the symmetric difference of its rings, which matches
    the odd-parity containment rule for holes and multi-part regions.
    """
    geometries = [
        reduce(lambda a, b: a.symmetric_difference(b), (Polygon(ring) for ring in rings))
        for rings in polygons.rings
    ]
    return gpd.GeoDataFrame(
        polygons.attributes.copy(), geometry=geometries, crs=polygons.crs
    )


def write_table(table: pd.DataFrame, file_path: Union[str, Path]) -> Path:
    """Write a flattened table to .csv or .parquet.

    Returns:
        The written path.
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()
    if suffix not in (".csv", ".parquet"):
        raise_parameter_error("file_path", file_path.name, valid_values=[".csv", ".parquet"])

    file_path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        table.to_csv(file_path)
    else:
        table.to_parquet(file_path)
    logger.info(f"Wrote {len(table)} rows to {file_path}")
    return file_path

