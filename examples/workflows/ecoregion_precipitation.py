"""Ecoregion Precipitation Workflow Demo.

Runs the file-based pipeline end to end:

1. Write a synthetic precipitation raster and ecoregion / state layers
2. Describe the run in a pipeline config (sources, CRS, tolerance)
3. Execute a YAML workflow: spatial join, per-ecoregion summary, CSV output

Requires the ``geo`` extra (geopandas, shapely, rasterio).
"""

import logging
import tempfile
from pathlib import Path

import geopandas as gpd
import numpy as np
import rasterio
from rasterio.transform import from_origin
from shapely.geometry import Polygon

from regionsmith.workflows import run_workflow

PIPELINE_CONFIG = """\
target_crs: EPSG:5070
points:
  path: data/precip.tif
  kind: raster
  value_column: precip_mm
  sample_step: 2
polygons: data/ecoregions.geojson
region: data/state.geojson
"""

WORKFLOW = """\
config: pipeline.yaml
steps:
  - name: table
    type: spatial_join
  - name: ecoregions
    type: read_vector
    params: {file_path: data/ecoregions.geojson}
  - name: summary
    type: summarize_by_polygon
    params: {table: "${table}", polygons: "${ecoregions}", value_column: precip_mm}
  - name: saved
    type: write_table
    params: {table: "${summary}", file_path: out/precip_by_ecoregion.csv}
"""


def write_synthetic_inputs(data_dir: Path) -> None:
    """Create a lon/lat precipitation grid and two layers of polygons."""
    data_dir.mkdir(parents=True, exist_ok=True)

    # 0.1 degree grid over 110W-98W, 40N-44N; wetter towards the east
    height, width = 40, 120
    cols = np.arange(width)
    precip = np.tile(300 + 4 * cols, (height, 1)).astype(np.float32)
    precip[:5, :5] = -9999.0
    with rasterio.open(
        data_dir / "precip.tif",
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=1,
        dtype="float32",
        crs="EPSG:4326",
        transform=from_origin(-110, 44, 0.1, 0.1),
        nodata=-9999.0,
    ) as dst:
        dst.write(precip, 1)

    ecoregions = gpd.GeoDataFrame(
        {"name": ["Mountains", "High Plains", "Prairie"]},
        geometry=[
            Polygon([(-110, 40), (-106, 40), (-106, 44), (-110, 44)]),
            Polygon([(-106, 40), (-102, 40), (-102, 44), (-106, 44)]),
            Polygon([(-102, 40), (-98, 40), (-98, 44), (-102, 44)]),
        ],
        crs="EPSG:4326",
    )
    ecoregions.to_file(data_dir / "ecoregions.geojson", driver="GeoJSON")

    state = gpd.GeoDataFrame(
        {"state": ["Example"]},
        geometry=[Polygon([(-109, 41), (-99, 41), (-99, 43), (-109, 43)])],
        crs="EPSG:4326",
    )
    state.to_file(data_dir / "state.geojson", driver="GeoJSON")


def main():
    """Run the ecoregion precipitation workflow."""
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        write_synthetic_inputs(root / "data")
        (root / "pipeline.yaml").write_text(PIPELINE_CONFIG)
        (root / "workflow.yaml").write_text(WORKFLOW)

        results = run_workflow(root / "workflow.yaml")

        table = results["table"]
        print(f"\nJoined {len(table)} raster cells inside the state boundary")
        print(results["summary"][["name", "n_points", "precip_mm_mean"]])
        print(f"\nSummary written to {results['saved']}")


if __name__ == "__main__":
    main()
