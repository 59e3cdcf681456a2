"""Utility modules for RegionSmith."""

from regionsmith.utils.errors import (
    CRSError,
    CRSMismatchError,
    DataValidationError,
    DependencyError,
    ParameterError,
    RegionSmithError,
    UndefinedCRSError,
    UnsupportedProjectionError,
    format_dependency_error,
    format_parameter_error,
    format_validation_error,
    raise_dependency_error,
    raise_parameter_error,
    raise_validation_error,
)
from regionsmith.utils.optional_imports import (
    missing_dependency,
    optional_import,
    optional_import_single,
)

__all__ = [
    "missing_dependency",
    "optional_import",
    "optional_import_single",
    "RegionSmithError",
    "DataValidationError",
    "ParameterError",
    "DependencyError",
    "CRSError",
    "UndefinedCRSError",
    "UnsupportedProjectionError",
    "CRSMismatchError",
    "format_validation_error",
    "format_parameter_error",
    "format_dependency_error",
    "raise_validation_error",
    "raise_parameter_error",
    "raise_dependency_error",
]
