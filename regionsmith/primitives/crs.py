"""Coordinate Reference System (CRS) handling for spatial operations.

Provides CRS comparison, coordinate transformation and collection
reprojection using pyproj. These are pure functions: they neither log nor
touch the filesystem.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Union

import numpy as np
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError as ProjCRSError
from pyproj.exceptions import ProjError

from regionsmith.objects.pointset import PointSet
from regionsmith.objects.polygonset import PolygonSet
from regionsmith.utils.errors import (
    CRSMismatchError,
    UndefinedCRSError,
    UnsupportedProjectionError,
)

Collection = Union[PointSet, PolygonSet]


def resolve_crs(value: Any) -> CRS:
    """Resolve a CRS definition to a pyproj CRS.

    Args:
        value: EPSG code (int or 'EPSG:xxxx'), WKT, PROJ string, or CRS object.

    Returns:
        pyproj CRS object.

    Raises:
        UndefinedCRSError: If value is None or empty.
        UnsupportedProjectionError: If pyproj cannot interpret the definition.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise UndefinedCRSError("CRS definition is missing")
    try:
        return CRS.from_user_input(value)
    except ProjCRSError as e:
        raise UnsupportedProjectionError(
            f"Cannot interpret CRS definition {value!r}: {e}",
            suggestion="Use an EPSG code, WKT or PROJ string understood by pyproj.",
        ) from e


def same_crs(a: Any, b: Any) -> bool:
    """Check whether two CRS definitions describe the same system.

    Identical definitions are equal without consulting pyproj, so opaque
    labels compare by value. Two missing CRS values count as equal.

    Examples:
        >>> same_crs("EPSG:4326", 4326)
        True
    """
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, type(b)) and a == b:
        return True
    try:
        return CRS.from_user_input(a) == CRS.from_user_input(b)
    except ProjCRSError:
        return False


def describe_crs(value: Any) -> str:
    """Short human-readable label for a CRS definition (e.g. 'EPSG:4326')."""
    if value is None:
        return "undefined"
    try:
        crs = CRS.from_user_input(value)
    except ProjCRSError:
        return str(value)
    epsg = crs.to_epsg()
    if epsg:
        return f"EPSG:{epsg}"
    return crs.name


def transform_coordinates(
    coordinates: np.ndarray,
    source_crs: Any,
    target_crs: Any,
) -> np.ndarray:
    """Transform coordinates between CRS.

    Args:
        coordinates: Input coordinates [N, 2] or [N, 3]; z is passed through.
        source_crs: Source CRS (EPSG code, CRS object, or string)
        target_crs: Target CRS (EPSG code, CRS object, or string)

    Returns:
        Transformed coordinates with the input's shape.

    Raises:
        UndefinedCRSError: If either CRS is missing.
        UnsupportedProjectionError: If no transformation can be computed.

    Examples:
        >>> coords = np.array([[100000, 200000], [101000, 201000]])
        >>> # Transform from UTM Zone 33N to WGS84
        >>> coords_wgs84 = transform_coordinates(coords, 'EPSG:32633', 'EPSG:4326')
    """
    coordinates = np.asarray(coordinates, dtype=np.float64)
    source = resolve_crs(source_crs)
    target = resolve_crs(target_crs)

    result = coordinates.copy()
    if len(coordinates) == 0:
        return result

    try:
        transformer = Transformer.from_crs(source, target, always_xy=True)
        x_new, y_new = transformer.transform(
            coordinates[:, 0], coordinates[:, 1], errcheck=True
        )
    except ProjError as e:
        raise UnsupportedProjectionError(
            f"Cannot transform from {describe_crs(source)} to {describe_crs(target)}: {e}"
        ) from e

    result[:, 0] = x_new
    result[:, 1] = y_new
    return result


def reproject(collection: Collection, target_crs: Any) -> Collection:
    """Reproject a PointSet or PolygonSet into ``target_crs``.

    The collection is returned unchanged when it already uses ``target_crs``.
    Record ids and attributes are preserved.

    Raises:
        UndefinedCRSError: If the collection or target has no CRS.
        UnsupportedProjectionError: If no transformation can be computed.
    """
    if collection.crs is None:
        raise UndefinedCRSError(
            f"{type(collection).__name__} has no CRS; cannot reproject",
            suggestion="Set crs on the collection or in the data source configuration.",
        )
    if target_crs is None:
        raise UndefinedCRSError("Target CRS is missing")
    if same_crs(collection.crs, target_crs):
        return collection

    if isinstance(collection, PointSet):
        coords = transform_coordinates(collection.coordinates, collection.crs, target_crs)
        return collection.with_coordinates(coords, crs=target_crs)

    flat = [ring for polygon in collection.rings for ring in polygon]
    if not flat:
        # Nothing to transform, but both definitions must still be usable.
        resolve_crs(collection.crs)
        resolve_crs(target_crs)
        return replace(collection, crs=target_crs)
    stacked = transform_coordinates(np.vstack(flat), collection.crs, target_crs)
    sizes = np.cumsum([len(ring) for ring in flat])[:-1]
    pieces = iter(np.split(stacked, sizes))
    rings = [[next(pieces) for _ in polygon] for polygon in collection.rings]
    return collection.with_rings(rings, crs=target_crs)


def normalize_crs(a: Collection, b: Collection) -> tuple[Collection, Collection]:
    """Bring ``a`` into ``b``'s CRS; ``b`` is canonical and never altered.

    Args:
        a: Collection to reproject if needed.
        b: Reference collection.

    Returns:
        Tuple (a', b) where a' shares b's CRS. Equal CRS definitions return
        the inputs unchanged.

    Raises:
        UndefinedCRSError: If either collection lacks a CRS.
        UnsupportedProjectionError: If the transform is not computable.
    """
    for name, collection in (("first", a), ("second", b)):
        if collection.crs is None:
            raise UndefinedCRSError(
                f"The {name} collection ({type(collection).__name__}) has no CRS",
                suggestion="Set crs on both collections before normalizing.",
            )
    if same_crs(a.crs, b.crs):
        return a, b
    return reproject(a, b.crs), b


def require_same_crs(a: Collection, b: Collection) -> None:
    """Raise CRSMismatchError unless ``a`` and ``b`` share a CRS."""
    if not same_crs(a.crs, b.crs):
        raise CRSMismatchError(
            f"CRS mismatch: {describe_crs(a.crs)} vs {describe_crs(b.crs)}",
            suggestion="Run normalize_crs on the inputs first.",
            details={"left": a.crs, "right": b.crs},
        )
