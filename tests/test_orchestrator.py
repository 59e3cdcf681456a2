"""Tests for the config-driven workflow orchestrator."""

import json

import numpy as np
import pandas as pd
import pytest

from regionsmith.config import PipelineContext
from regionsmith.objects import PointSet, PolygonSet
from regionsmith.utils.errors import ParameterError, UnsupportedProjectionError
from regionsmith.workflows import orchestrator
from regionsmith.workflows.orchestrator import (
    STEP_REGISTRY,
    WorkflowOrchestrator,
    register_step,
    run_workflow,
)


def make_points(crs="EPSG:3857"):
    return PointSet(
        coordinates=np.array([[0, 0], [5, 5], [15, 15], [-1, -1]]),
        attributes=pd.DataFrame({"precip": [1.0, 2.0, 3.0, 4.0]}),
        crs=crs,
    )


def make_polygons(crs="EPSG:3857"):
    return PolygonSet(
        rings=[[np.array([[0, 0], [10, 0], [10, 10], [0, 10]])]],
        attributes=pd.DataFrame({"name": ["Square"]}, index=["sq"]),
        crs=crs,
    )


@pytest.fixture
def in_memory_steps(monkeypatch):
    """Register steps that build the square scenario in memory."""
    monkeypatch.setitem(STEP_REGISTRY, "make_points", make_points)
    monkeypatch.setitem(STEP_REGISTRY, "make_polygons", make_polygons)


JOIN_WORKFLOW = {
    "steps": [
        {"name": "points", "type": "make_points"},
        {"name": "ecoregions", "type": "make_polygons"},
        {
            "name": "aligned",
            "type": "normalize_crs",
            "params": {"points": "${points}", "polygons": "${ecoregions}"},
        },
        {
            "name": "joined",
            "type": "join_points",
            "params": {
                "points": "${aligned.points}",
                "polygons": "${aligned.polygons}",
                "boundary_tolerance": "${config.boundary_tolerance}",
            },
        },
        {"name": "table", "type": "flatten_join", "params": {"result": "${joined}"}},
        {
            "name": "summary",
            "type": "summarize_by_polygon",
            "params": {
                "table": "${table}",
                "polygons": "${ecoregions}",
                "value_column": "precip",
            },
        },
    ]
}


class TestWorkflowOrchestrator:
    """Tests for WorkflowOrchestrator."""

    def test_default_steps_registered(self):
        """Test that the core steps are always available."""
        for name in (
            "normalize_crs",
            "filter_points",
            "join_points",
            "flatten_join",
            "summarize_by_polygon",
            "spatial_join",
        ):
            assert name in STEP_REGISTRY

    def test_join_workflow(self, in_memory_steps):
        """Test a full join workflow with references between steps."""
        orchestrator = WorkflowOrchestrator(config=PipelineContext())
        results = orchestrator.execute(JOIN_WORKFLOW)
        table = results["table"]
        assert len(table) == 4
        assert table["name"].isna().tolist() == [False, False, True, True]
        summary = results["summary"]
        assert summary.loc["sq", "n_points"] == 2
        assert summary.loc["sq", "precip_mean"] == pytest.approx(1.5)

    def test_column_reference(self, in_memory_steps, monkeypatch):
        """Test referencing a column of a DataFrame result."""
        monkeypatch.setitem(STEP_REGISTRY, "count_missing", lambda series: int(series.isna().sum()))
        workflow = {
            "steps": JOIN_WORKFLOW["steps"][:5]
            + [
                {
                    "name": "missing",
                    "type": "count_missing",
                    "params": {"series": "${table.name}"},
                }
            ]
        }
        results = WorkflowOrchestrator(config=PipelineContext()).execute(workflow)
        assert results["missing"] == 2

    def test_nested_reference(self, in_memory_steps, monkeypatch):
        """Test dotted references through mappings and attributes."""
        monkeypatch.setitem(STEP_REGISTRY, "constant", lambda value: value)
        workflow = {
            "steps": JOIN_WORKFLOW["steps"][:3]
            + [{"name": "crs", "type": "constant", "params": {"value": "${aligned.points.crs}"}}]
        }
        results = WorkflowOrchestrator().execute(workflow)
        assert results["crs"] == "EPSG:3857"

    def test_unresolvable_reference(self, in_memory_steps, monkeypatch):
        """Test that a dotted reference to a missing part is reported."""
        monkeypatch.setitem(STEP_REGISTRY, "constant", lambda value: value)
        workflow = {
            "steps": JOIN_WORKFLOW["steps"][:3]
            + [{"name": "bad", "type": "constant", "params": {"value": "${aligned.lines}"}}]
        }
        with pytest.raises(ValueError, match="key 'lines'"):
            WorkflowOrchestrator().execute(workflow)

    def test_config_reference_without_config(self, in_memory_steps):
        """Test that ${config.*} needs a loaded config."""
        with pytest.raises(ValueError, match="no config"):
            WorkflowOrchestrator().execute(JOIN_WORKFLOW)

    def test_unknown_step_type(self):
        """Test that unknown step types are reported."""
        with pytest.raises(ValueError, match="Unknown step type"):
            WorkflowOrchestrator().execute({"steps": [{"name": "x", "type": "buffer"}]})

    def test_missing_reference(self):
        """Test that references to unknown steps are reported."""
        workflow = {
            "steps": [
                {"name": "table", "type": "flatten_join", "params": {"result": "${joined}"}}
            ]
        }
        with pytest.raises(ValueError, match="'joined' not found"):
            WorkflowOrchestrator().execute(workflow)

    def test_empty_workflow(self):
        """Test that a workflow needs steps."""
        with pytest.raises(ValueError, match="steps"):
            WorkflowOrchestrator().execute({"steps": []})

    def test_step_errors_propagate(self, monkeypatch):
        """Test that CRS failures inside a step propagate unchanged."""
        monkeypatch.setitem(STEP_REGISTRY, "points_a", lambda: make_points(crs="A"))
        monkeypatch.setitem(STEP_REGISTRY, "polygons_b", lambda: make_polygons(crs="B"))
        workflow = {
            "steps": [
                {"name": "p", "type": "points_a"},
                {"name": "r", "type": "polygons_b"},
                {
                    "name": "aligned",
                    "type": "normalize_crs",
                    "params": {"points": "${p}", "polygons": "${r}"},
                },
            ]
        }
        with pytest.raises(UnsupportedProjectionError):
            WorkflowOrchestrator().execute(workflow)

    def test_continue_on_error(self, monkeypatch):
        """Test that stop_on_error: false keeps going."""
        monkeypatch.setitem(STEP_REGISTRY, "constant", lambda value: value)
        workflow = {
            "stop_on_error": False,
            "steps": [
                {"name": "broken", "type": "flatten_join", "params": {"result": "${nope}"}},
                {"name": "ok", "type": "constant", "params": {"value": 3}},
            ],
        }
        results = WorkflowOrchestrator().execute(workflow)
        assert results == {"ok": 3}

    def test_file_paths_resolved(self, tmp_path, monkeypatch):
        """Test that file_path parameters resolve against the working dir."""
        monkeypatch.setitem(STEP_REGISTRY, "echo_path", lambda file_path: file_path)
        orchestrator = WorkflowOrchestrator(working_dir=tmp_path)
        results = orchestrator.execute(
            {"steps": [{"name": "p", "type": "echo_path", "params": {"file_path": "data/eco.shp"}}]}
        )
        assert results["p"] == tmp_path / "data" / "eco.shp"

    def test_spatial_join_step_needs_config(self):
        """Test that the spatial_join step requires a config."""
        with pytest.raises(ValueError, match="pipeline config"):
            WorkflowOrchestrator().execute({"steps": [{"name": "j", "type": "spatial_join"}]})

    def test_spatial_join_step_validates_sources(self):
        """Test that the spatial_join step requires points and polygons."""
        with pytest.raises(ParameterError, match="points"):
            WorkflowOrchestrator(config=PipelineContext()).execute(
                {"steps": [{"name": "j", "type": "spatial_join"}]}
            )

    def test_register_step(self, monkeypatch):
        """Test registering a custom step."""
        monkeypatch.setattr(orchestrator, "STEP_REGISTRY", dict(STEP_REGISTRY))
        register_step("double", lambda value: 2 * value)
        assert orchestrator.STEP_REGISTRY["double"](2) == 4
        assert "double" not in STEP_REGISTRY


class TestWorkflowFiles:
    """Tests for loading workflows from disk."""

    def test_run_yaml_workflow(self, tmp_path, in_memory_steps):
        """Test running a YAML workflow with a config file beside it."""
        (tmp_path / "pipeline.yaml").write_text("boundary_tolerance: 0.0\n")
        lines = ["config: pipeline.yaml", "steps:"]
        lines += [
            "  - name: points",
            "    type: make_points",
            "  - name: ecoregions",
            "    type: make_polygons",
            "  - name: joined",
            "    type: join_points",
            "    params:",
            '      points: "${points}"',
            '      polygons: "${ecoregions}"',
            '      boundary_tolerance: "${config.boundary_tolerance}"',
        ]
        workflow_file = tmp_path / "workflow.yaml"
        workflow_file.write_text("\n".join(lines) + "\n")
        results = run_workflow(workflow_file)
        assert results["joined"].n_matched == 2

    def test_json_workflow(self, tmp_path, in_memory_steps):
        """Test loading a JSON workflow."""
        workflow_file = tmp_path / "workflow.json"
        workflow_file.write_text(json.dumps({"steps": [{"name": "p", "type": "make_points"}]}))
        results = run_workflow(workflow_file)
        assert len(results["p"]) == 4

    def test_unsupported_suffix(self, tmp_path):
        """Test that other workflow formats are rejected."""
        workflow_file = tmp_path / "workflow.txt"
        workflow_file.write_text("steps: []")
        with pytest.raises(ValueError, match="Unsupported workflow file format"):
            run_workflow(workflow_file)

    def test_missing_file(self, tmp_path):
        """Test that a missing workflow file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            run_workflow(tmp_path / "missing.yaml")
