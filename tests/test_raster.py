"""Tests for raster to point conversion."""

import numpy as np
import pytest

rasterio = pytest.importorskip("rasterio")

from rasterio.transform import from_origin  # noqa: E402

from regionsmith.utils.errors import ParameterError  # noqa: E402
from regionsmith.workflows.raster import read_raster_points  # noqa: E402

NODATA = -9999.0


@pytest.fixture
def raster_path(tmp_path):
    """A 3 x 4 one-band GeoTIFF with one nodata cell, 1 m cells from (0, 3)."""
    data = np.arange(12, dtype=np.float32).reshape(3, 4)
    data[1, 2] = NODATA
    path = tmp_path / "precip.tif"
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=3,
        width=4,
        count=1,
        dtype="float32",
        crs="EPSG:3857",
        transform=from_origin(0, 3, 1, 1),
        nodata=NODATA,
    ) as dst:
        dst.write(data, 1)
    return path


class TestReadRasterPoints:
    """Tests for read_raster_points."""

    def test_cell_centres(self, raster_path):
        """Test that valid cells become cell-centre points."""
        points = read_raster_points(raster_path, value_column="precip")
        assert len(points) == 11
        assert points.crs == "EPSG:3857"
        np.testing.assert_allclose(points.xy[0], [0.5, 2.5])
        assert points.attributes["precip"].iloc[0] == 0.0

    def test_nodata_dropped(self, raster_path):
        """Test that nodata cells are dropped and ids are flat cell indices."""
        points = read_raster_points(raster_path)
        assert 6 not in points.index
        assert points.index.name == "cell"
        assert list(points.index[:6]) == [0, 1, 2, 3, 4, 5]

    def test_sample_step(self, raster_path):
        """Test subsampling every other row and column."""
        points = read_raster_points(raster_path, sample_step=2)
        assert list(points.index) == [0, 2, 8, 10]
        assert list(points.attributes["row"]) == [0, 0, 2, 2]

    def test_invalid_band(self, raster_path):
        """Test that band numbers are validated."""
        with pytest.raises(ParameterError, match="band"):
            read_raster_points(raster_path, band=2)

    def test_invalid_sample_step(self, raster_path):
        """Test that sample_step is validated."""
        with pytest.raises(ParameterError):
            read_raster_points(raster_path, sample_step=0)

    def test_missing_file(self, tmp_path):
        """Test that a missing raster raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_raster_points(tmp_path / "missing.tif")
