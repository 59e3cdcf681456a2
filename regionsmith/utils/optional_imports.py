"""Helper for optional dependency imports.

Workflow modules that need geopandas or rasterio are imported through these
helpers so the core pipeline stays importable without them. Failed imports
are remembered so callers can name the library that is actually missing.
"""

import importlib
from typing import Any, Optional

_import_errors: dict[str, ImportError] = {}


def optional_import(
    module_path: str,
    names: list[str],
) -> tuple[bool, dict[str, Any]]:
    """Import names from a module whose dependencies may be missing.

    Args:
        module_path: Full import path (e.g., 'regionsmith.workflows.io')
        names: Names to fetch from the module

    Returns:
        Tuple (available, imports). ``imports`` maps each name to the imported
        object, or to None when the module could not be imported.

    Example:
        >>> RASTER_AVAILABLE, _raster = optional_import(
        ...     'regionsmith.workflows.raster', ['read_raster_points']
        ... )
        >>> read_raster_points = _raster['read_raster_points']
    """
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        _import_errors[module_path] = e
        return False, dict.fromkeys(names)
    _import_errors.pop(module_path, None)
    return True, {name: getattr(module, name) for name in names}


def optional_import_single(
    module_path: str,
    name: str,
) -> tuple[bool, Any]:
    """Import a single optional name; see optional_import."""
    available, imports = optional_import(module_path, [name])
    return available, imports[name]


def missing_dependency(module_path: str) -> Optional[str]:
    """Top-level package whose absence made ``module_path`` fail to import.

    Returns None if the module imported (or was never tried).
    """
    error = _import_errors.get(module_path)
    if error is None:
        return None
    return (error.name or module_path).split(".")[0]
