"""Raster to point conversion.

Turns raster cells into cell-centre points so gridded measurements can be
joined to polygons like any other point data.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
import pandas as pd
import rasterio
from rasterio.transform import xy as transform_xy

from regionsmith.objects.pointset import PointSet
from regionsmith.utils.errors import raise_parameter_error

logger = logging.getLogger(__name__)


def read_raster_points(
    file_path: Union[str, Path],
    band: int = 1,
    value_column: str = "value",
    sample_step: int = 1,
    crs: Optional[Any] = None,
) -> PointSet:
    """Read one raster band as a PointSet of valid cell centres.

    Nodata and masked cells are dropped. Each point's record id is the flat
    cell index ``row * width + col``, so ids stay stable under subsampling.

    Args:
        file_path: Path to a raster readable by rasterio (GeoTIFF, ...).
        band: Band number (1-based).
        value_column: Attribute name for the cell values.
        sample_step: Keep every n-th row and column.
        crs: CRS to assume when the raster has none.

    Returns:
        PointSet with attributes ``row``, ``col`` and ``value_column``.
    """
    if sample_step < 1:
        raise_parameter_error("sample_step", sample_step, constraint="sample_step >= 1")

    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Raster file not found: {file_path}")

    with rasterio.open(file_path) as src:
        if not 1 <= band <= src.count:
            raise_parameter_error(
                "band", band, constraint=f"1 <= band <= {src.count}"
            )
        data = src.read(band, masked=True)
        transform = src.transform
        width = src.width
        if src.crs is not None:
            raster_crs = src.crs.to_epsg() or src.crs.to_wkt()
            if isinstance(raster_crs, int):
                raster_crs = f"EPSG:{raster_crs}"
        else:
            raster_crs = crs

    rows, cols = np.mgrid[0 : data.shape[0] : sample_step, 0 : data.shape[1] : sample_step]
    rows = rows.ravel()
    cols = cols.ravel()
    values = data[rows, cols]
    valid = ~np.ma.getmaskarray(values)
    if np.issubdtype(values.dtype, np.floating):
        valid &= ~np.isnan(np.ma.getdata(values))
    rows = rows[valid]
    cols = cols[valid]

    if rows.size:
        xs, ys = transform_xy(transform, rows, cols, offset="center")
        coords = np.column_stack(
            [np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)]
        )
    else:
        coords = np.empty((0, 2))
    attributes = pd.DataFrame(
        {
            "row": rows,
            "col": cols,
            value_column: np.ma.getdata(values)[valid],
        },
        index=pd.Index(rows * width + cols, name="cell"),
    )
    points = PointSet(coordinates=coords, attributes=attributes, crs=raster_crs)
    logger.info(
        f"Read {len(points)} valid cells from band {band} of {file_path} "
        f"(sample_step={sample_step})"
    )
    return points
