"""Tests for the configured pipeline runner that need no file I/O libraries."""

import pytest

from regionsmith.config import DataSource, PipelineContext
from regionsmith.utils.errors import DependencyError, ParameterError
from regionsmith.workflows import pipeline


class TestRunSpatialJoin:
    """Tests for run_spatial_join argument handling."""

    @pytest.mark.parametrize("missing", ["points", "polygons"])
    def test_sources_required(self, missing):
        """Test that points and polygons must be configured."""
        sources = {"points": DataSource("p.tif", kind="raster"), "polygons": DataSource("e.shp")}
        sources[missing] = None
        with pytest.raises(ParameterError, match=missing):
            pipeline.run_spatial_join(PipelineContext(**sources))


class TestLoadSource:
    """Tests for load_source dependency handling."""

    @pytest.mark.parametrize("kind", ["vector", "raster"])
    def test_missing_reader(self, monkeypatch, kind):
        """Test that an unavailable reader raises DependencyError naming the extra."""
        monkeypatch.setattr(
            pipeline, "optional_import_single", lambda module_path, name: (False, None)
        )
        with pytest.raises(DependencyError, match=r"regionsmith\[geo\]"):
            pipeline.load_source(DataSource("x", kind=kind), PipelineContext())
