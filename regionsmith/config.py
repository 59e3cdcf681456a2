"""
Pipeline configuration.

A PipelineContext names every data source and CRS decision explicitly, so a
run depends only on the context it is given. Contexts can be built in code
or loaded from YAML/JSON files.

Example YAML
------------
::

    target_crs: EPSG:5070
    boundary_tolerance: 0.0
    points:
      path: data/precip.tif
      kind: raster
      value_column: precip
      sample_step: 4
    polygons:
      path: data/ecoregions.shp
    region:
      path: data/state_boundary.shp
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from regionsmith.utils.errors import ParameterError, raise_parameter_error

logger = logging.getLogger(__name__)

SOURCE_KINDS = ("vector", "raster")


@dataclass
class DataSource:
    """
    A file to load as points or polygons.

    Parameters
    ----------
    path : str or Path
        File path. Relative paths resolve against the context's working_dir.
    kind : str
        'vector' (read with geopandas) or 'raster' (cells become points).
    layer : str, optional
        Layer name for multi-layer vector files.
    band : int
        Raster band to read (1-based).
    value_column : str
        Attribute name for raster cell values.
    sample_step : int
        Keep every n-th raster row and column.
    crs : str, optional
        CRS to assume when the file carries none.
    """

    path: Path
    kind: str = "vector"
    layer: Optional[str] = None
    band: int = 1
    value_column: str = "value"
    sample_step: int = 1
    crs: Optional[str] = None

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if self.kind not in SOURCE_KINDS:
            raise_parameter_error("kind", self.kind, valid_values=list(SOURCE_KINDS))
        if int(self.band) < 1:
            raise_parameter_error("band", self.band, constraint="band >= 1")
        if int(self.sample_step) < 1:
            raise_parameter_error("sample_step", self.sample_step, constraint="sample_step >= 1")

    @classmethod
    def from_dict(cls, data: Any) -> "DataSource":
        if isinstance(data, (str, Path)):
            return cls(path=data)
        if not isinstance(data, dict):
            raise_parameter_error(
                "source", data, constraint="must be a path or a mapping with 'path'"
            )
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise_parameter_error(
                "source", sorted(unknown), valid_values=sorted(known),
                suggestion="Remove unknown keys from the source definition.",
            )
        if "path" not in data:
            raise_parameter_error("source", data, constraint="'path' is required")
        return cls(**data)


@dataclass
class PipelineContext:
    """
    Explicit configuration for one spatial join run.

    Parameters
    ----------
    points, polygons, region : DataSource, optional
        Inputs. ``region`` restricts points before the join.
    target_crs : str, optional
        CRS for the join. Defaults to the polygons' CRS.
    boundary_tolerance : float
        Distance within which a point counts as on a polygon edge.
    n_threads : int, optional
        Numba thread count for the containment kernel.
    polygon_suffix : str
        Suffix for polygon columns that collide with point columns.
    working_dir : Path
        Base directory for relative source paths.
    """

    points: Optional[DataSource] = None
    polygons: Optional[DataSource] = None
    region: Optional[DataSource] = None
    target_crs: Optional[str] = None
    boundary_tolerance: float = 0.0
    n_threads: Optional[int] = None
    polygon_suffix: str = "right"
    working_dir: Path = field(default_factory=Path.cwd)

    def __post_init__(self) -> None:
        self.working_dir = Path(self.working_dir)
        self.boundary_tolerance = float(self.boundary_tolerance)
        if self.boundary_tolerance < 0:
            raise_parameter_error(
                "boundary_tolerance", self.boundary_tolerance, constraint="must be >= 0"
            )
        if self.n_threads is not None and int(self.n_threads) < 1:
            raise_parameter_error("n_threads", self.n_threads, constraint="must be >= 1")
        if not self.polygon_suffix:
            raise_parameter_error("polygon_suffix", self.polygon_suffix, constraint="non-empty")

    def resolve_path(self, source: DataSource) -> Path:
        """Absolute path of a source, relative to working_dir."""
        if source.path.is_absolute():
            return source.path
        return self.working_dir / source.path

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as 'points.path' or 'target_crs'."""
        value: Any = self
        for part in key.split("."):
            if value is None:
                return default
            if isinstance(value, dict):
                value = value.get(part, default)
            else:
                value = getattr(value, part, default)
        return value

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["working_dir"] = str(self.working_dir)
        for name in ("points", "polygons", "region"):
            if data[name] is not None:
                data[name]["path"] = str(data[name]["path"])
        return data

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], working_dir: Optional[Path] = None
    ) -> "PipelineContext":
        """Build a context from a plain mapping (as parsed from YAML/JSON)."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise_parameter_error(
                "config", sorted(unknown), valid_values=sorted(known),
                suggestion="Check the configuration keys for typos.",
            )
        for name in ("points", "polygons", "region"):
            if data.get(name) is not None:
                data[name] = DataSource.from_dict(data[name])
        if working_dir is not None and "working_dir" not in data:
            data["working_dir"] = working_dir
        elif "working_dir" in data and working_dir is not None:
            path = Path(data["working_dir"])
            data["working_dir"] = path if path.is_absolute() else working_dir / path
        return cls(**data)


def read_mapping(file_path: str | Path, kind: str = "config") -> dict[str, Any]:
    """
    Read a YAML (.yaml/.yml) or JSON (.json) file holding a mapping.

    An empty YAML file reads as an empty mapping.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist.
    ParameterError
        If the suffix is unsupported or the document is not a mapping.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"{kind.capitalize()} file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in (".yaml", ".yml", ".json"):
        raise ParameterError(
            f"Unsupported {kind} file format: {suffix or file_path.name}",
            suggestion="Use .yaml, .yml, or .json",
        )
    with open(file_path) as f:
        data = json.load(f) if suffix == ".json" else yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise_parameter_error(
            kind, type(data).__name__, constraint="top level must be a mapping"
        )
    return data


def load_config(file_path: str | Path) -> PipelineContext:
    """
    Load a PipelineContext from a YAML or JSON file.

    Relative paths in the file resolve against the file's directory.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist.
    ParameterError
        If the format or any value is invalid.
    """
    file_path = Path(file_path)
    data = read_mapping(file_path, kind="config")
    context = PipelineContext.from_dict(data, working_dir=file_path.parent.resolve())
    logger.info(f"Loaded pipeline config from {file_path}")
    return context
