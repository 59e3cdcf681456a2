"""
Config-driven spatial join workflows.

A workflow is a YAML/JSON document with an optional ``config`` (path to a
pipeline config) and an ordered ``steps`` list. Each step names a registered
step ``type`` and its ``params``. A string parameter of the form
``${name}`` or ``${name.path.to.attr}`` is replaced by an earlier step's
result (or a part of it), and ``${config.key}`` by a pipeline context value.

Example workflow
----------------
::

    config: pipeline.yaml
    steps:
      - name: ecoregions
        type: read_vector
        params: {file_path: data/ecoregions.shp}
      - name: precip
        type: read_raster_points
        params: {file_path: data/precip.tif, value_column: precip}
      - name: aligned
        type: normalize_crs
        params: {points: "${precip}", polygons: "${ecoregions}"}
      - name: joined
        type: join_points
        params:
          points: "${aligned.points}"
          polygons: "${aligned.polygons}"
          boundary_tolerance: "${config.boundary_tolerance}"
      - name: table
        type: flatten_join
        params: {result: "${joined}"}
"""

import inspect
import logging
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd

from regionsmith.config import PipelineContext, load_config, read_mapping
from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet
from regionsmith.primitives.crs import normalize_crs, reproject
from regionsmith.primitives.overlay import (
    filter_points_within,
    flatten_join,
    join_points_to_polygons,
    summarize_points_by_polygon,
)
from regionsmith.utils.optional_imports import optional_import
from regionsmith.workflows.pipeline import run_spatial_join

logger = logging.getLogger(__name__)

# Registry of available workflow steps
STEP_REGISTRY: dict[str, Callable] = {}

# Step parameters holding file paths; relative values resolve against working_dir
PATH_PARAMETERS = ("file_path",)

_REFERENCE = re.compile(r"^\$\{([^{}]+)\}$")


def register_step(name: str, func: Callable):
    """Register a function as a workflow step."""
    STEP_REGISTRY[name] = func
    logger.debug(f"Registered workflow step: {name}")


def _normalize_step(points: PointSet, polygons: PolygonSet) -> dict[str, Any]:
    points, polygons = normalize_crs(points, polygons)
    return {"points": points, "polygons": polygons}


def _spatial_join_step(config: PipelineContext) -> pd.DataFrame:
    if config is None:
        raise ValueError("spatial_join step requires a pipeline config")
    return run_spatial_join(config)


def _register_default_steps():
    """Register the built-in steps; file readers only when their libraries import."""
    for module_path, names in (
        ("regionsmith.workflows.io", ["read_vector", "write_table"]),
        ("regionsmith.workflows.raster", ["read_raster_points"]),
    ):
        available, steps = optional_import(module_path, names)
        if not available:
            logger.debug(f"Skipping steps {names}: {module_path} unavailable")
            continue
        for name in names:
            register_step(name, steps[name])

    register_step("reproject", reproject)
    register_step("normalize_crs", _normalize_step)
    register_step("filter_points", filter_points_within)
    register_step("join_points", join_points_to_polygons)
    register_step("flatten_join", flatten_join)
    register_step("summarize_by_polygon", summarize_points_by_polygon)
    register_step("spatial_join", _spatial_join_step)


_register_default_steps()


def _lookup(value: Any, attr: str) -> Any:
    """One step of a dotted reference: DataFrame column, mapping key or attribute."""
    if isinstance(value, pd.DataFrame):
        if attr in value.columns:
            return value[attr]
        raise KeyError(f"column '{attr}' (available: {list(value.columns)})")
    if isinstance(value, dict):
        if attr in value:
            return value[attr]
        raise KeyError(f"key '{attr}' (available: {sorted(value)})")
    if hasattr(value, attr):
        return getattr(value, attr)
    raise KeyError(f"attribute '{attr}' on {type(value).__name__}")


class WorkflowOrchestrator:
    """
    Execute workflow definitions step by step.

    Results are kept by step name in ``results`` so later steps can
    reference them.

    Parameters
    ----------
    config : PipelineContext, optional
        Context available to steps as ``${config.<key>}`` and passed to any
        step function that takes a ``config`` argument. A workflow's own
        ``config`` entry replaces it.
    working_dir : str or Path, optional
        Base for relative config and ``file_path`` values. Defaults to cwd.
    """

    def __init__(
        self,
        config: PipelineContext | None = None,
        working_dir: str | Path | None = None,
    ):
        self.config = config
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.results: dict[str, Any] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_workflow_file(self, file_path: str | Path) -> dict[str, Any]:
        """Read a workflow definition from a .yaml, .yml or .json file."""
        workflow = read_mapping(file_path, kind="workflow")
        self.logger.info(f"Loaded workflow from {file_path}")
        return workflow

    def _resolve_reference(self, ref: str, step_name: str) -> Any:
        head, *path = ref.split(".")
        if head == "config":
            if self.config is None:
                raise ValueError(
                    f"Step '{step_name}' references ${{{ref}}} but no config is loaded"
                )
            return self.config.get(".".join(path))

        if head not in self.results:
            raise ValueError(
                f"Step '{head}' not found in results (referenced by ${{{ref}}} "
                f"in step '{step_name}')"
            )
        value = self.results[head]
        for attr in path:
            try:
                value = _lookup(value, attr)
            except KeyError as e:
                raise ValueError(f"Cannot resolve ${{{ref}}}: no {e.args[0]}") from e
        return value

    def _resolve(self, value: Any, step_name: str) -> Any:
        """Resolve references inside a parameter value, recursing into containers."""
        if isinstance(value, dict):
            return {k: self._resolve(v, step_name) for k, v in value.items()}
        if isinstance(value, list):
            return [self._resolve(item, step_name) for item in value]
        if isinstance(value, str):
            match = _REFERENCE.match(value)
            if match:
                return self._resolve_reference(match.group(1), step_name)
        return value

    def _resolve_paths(self, params: dict[str, Any]) -> dict[str, Any]:
        for key in PATH_PARAMETERS:
            if isinstance(params.get(key), (str, Path)):
                path = Path(params[key])
                params[key] = path if path.is_absolute() else self.working_dir / path
        return params

    def _execute_step(self, step: dict[str, Any], step_index: int) -> Any:
        """Run one step and store its result under the step name."""
        step_name = step.get("name") or f"step_{step_index}"
        step_type = step.get("type")
        if not step_type:
            raise ValueError(f"Step {step_name} missing 'type' field")

        func = STEP_REGISTRY.get(step_type)
        if func is None:
            raise ValueError(
                f"Unknown step type: {step_type}. "
                f"Available: {sorted(STEP_REGISTRY)}"
            )

        self.logger.info(f"Executing step {step_index + 1}: {step_name} ({step_type})")
        params = self._resolve_paths(self._resolve(step.get("params") or {}, step_name))
        if "config" in inspect.signature(func).parameters:
            params["config"] = self.config

        try:
            result = func(**params)
        except Exception as e:
            self.logger.error(f"Step {step_name} failed: {e}")
            raise
        self.results[step_name] = result
        self.logger.info(f"Step {step_name} completed")
        return result

    def execute(self, workflow: dict[str, Any]) -> dict[str, Any]:
        """
        Execute a workflow definition.

        Parameters
        ----------
        workflow : dict
            ``steps`` list, optional ``config`` path and optional
            ``stop_on_error`` flag (default True). With ``stop_on_error``
            False a failing step is logged and skipped.

        Returns
        -------
        dict
            Results of the steps that ran, keyed by step name.
        """
        steps = workflow.get("steps") or []
        if not steps:
            raise ValueError("Workflow must contain 'steps' list")

        if workflow.get("config"):
            config_path = Path(workflow["config"])
            if not config_path.is_absolute():
                config_path = self.working_dir / config_path
            self.config = load_config(config_path)

        stop_on_error = workflow.get("stop_on_error", True)
        self.logger.info(f"Starting workflow execution ({len(steps)} steps)")
        for i, step in enumerate(steps):
            try:
                self._execute_step(step, i)
            except Exception as e:
                self.logger.error(f"Workflow failed at step {i + 1}: {e}")
                if stop_on_error:
                    raise

        self.logger.info(f"Workflow completed: {len(self.results)} of {len(steps)} steps")
        return self.results

    def execute_file(self, file_path: str | Path) -> dict[str, Any]:
        """Load and execute a workflow file."""
        return self.execute(self.load_workflow_file(file_path))


def run_workflow(
    workflow_file: str | Path,
    config: PipelineContext | None = None,
    working_dir: str | Path | None = None,
) -> dict[str, Any]:
    """
    Run a workflow file.

    Relative paths resolve against ``working_dir``, which defaults to the
    workflow file's directory.

    Example
    -------
    >>> from regionsmith.workflows import run_workflow
    >>> results = run_workflow("ecoregions_workflow.yaml")
    >>> table = results["table"]
    """
    workflow_file = Path(workflow_file)
    if working_dir is None:
        working_dir = workflow_file.parent
    orchestrator = WorkflowOrchestrator(config=config, working_dir=working_dir)
    return orchestrator.execute_file(workflow_file)
