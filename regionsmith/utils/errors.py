"""Standardized errors for RegionSmith.

Every failure raised by the library derives from RegionSmithError. Messages
are built once by the ``format_*`` helpers; the structured pieces (expected
value, offending parameter, CRS pair, ...) stay available in ``details``.
"""

from typing import Any, NoReturn, Optional, Sequence


class RegionSmithError(Exception):
    """Base exception for RegionSmith errors.

    Args:
        message: Primary error message.
        suggestion: Optional hint for fixing the problem, shown after the
            message.
        details: Optional machine-readable context.
    """

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class DataValidationError(RegionSmithError, ValueError):
    """Malformed objects or input data."""


class ParameterError(RegionSmithError, ValueError):
    """Invalid argument or configuration value."""


class DependencyError(RegionSmithError, ImportError):
    """An optional library needed for this operation is not installed."""


class CRSError(RegionSmithError):
    """Base class for coordinate reference system failures."""


class UndefinedCRSError(CRSError):
    """A collection carries no CRS where one is required."""


class UnsupportedProjectionError(CRSError):
    """No transformation can be computed between two CRS definitions."""


class CRSMismatchError(CRSError):
    """Two collections compared geometrically do not share a CRS."""


def _compose(head: str, *lines: Optional[str]) -> str:
    return "\n".join([head, *(line for line in lines if line)])


def format_validation_error(
    message: str,
    expected: Optional[str] = None,
    received: Optional[str] = None,
) -> str:
    """Format a data validation message.

    Examples:
        >>> print(format_validation_error("Bad shape", "(n, 2)", "(3,)"))
        Bad shape
        Expected: (n, 2), Received: (3,)
    """
    pieces = []
    if expected:
        pieces.append(f"Expected: {expected}")
    if received:
        pieces.append(f"Received: {received}")
    return _compose(message, ", ".join(pieces))


def format_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[Sequence[Any]] = None,
    constraint: Optional[str] = None,
) -> str:
    """Format an invalid-parameter message naming the parameter and value."""
    return _compose(
        f"Invalid value for parameter '{parameter_name}': {value}",
        f"Valid values: {', '.join(map(str, valid_values))}" if valid_values else None,
        f"Constraint: {constraint}" if constraint else None,
    )


def format_dependency_error(
    dependency_name: str,
    optional_group: Optional[str] = None,
) -> str:
    """Format a missing-dependency message with an install hint.

    When the dependency ships in one of the package extras, the hint installs
    the extra rather than the bare library.
    """
    target = f"regionsmith[{optional_group}]" if optional_group else dependency_name
    return _compose(
        f"Missing required dependency: {dependency_name}",
        f"Install with: pip install {target}",
    )


def raise_validation_error(
    message: str,
    expected: Optional[str] = None,
    received: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> NoReturn:
    """Raise DataValidationError with a formatted message."""
    raise DataValidationError(
        format_validation_error(message, expected, received),
        suggestion=suggestion,
        details={"expected": expected, "received": received},
    )


def raise_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[Sequence[Any]] = None,
    constraint: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> NoReturn:
    """Raise ParameterError with a formatted message."""
    raise ParameterError(
        format_parameter_error(parameter_name, value, valid_values, constraint),
        suggestion=suggestion,
        details={"parameter": parameter_name, "value": value},
    )


def raise_dependency_error(
    dependency_name: str,
    optional_group: Optional[str] = None,
) -> NoReturn:
    """Raise DependencyError with an install hint."""
    raise DependencyError(
        format_dependency_error(dependency_name, optional_group),
        details={"dependency": dependency_name, "extra": optional_group},
    )
