"""Shared fixtures for RegionSmith tests."""

import numpy as np
import pandas as pd
import pytest

from regionsmith.objects import PointSet, PolygonSet


@pytest.fixture
def square():
    """The 10 x 10 'Square' polygon anchored at the origin."""
    return PolygonSet(
        rings=[[np.array([[0, 0], [10, 0], [10, 10], [0, 10]])]],
        attributes=pd.DataFrame({"name": ["Square"]}),
        crs="EPSG:3857",
    )


@pytest.fixture
def four_points():
    """Points inside, on the corner of, and outside the square."""
    return PointSet(
        coordinates=np.array([[0, 0], [5, 5], [15, 15], [-1, -1]]),
        attributes=pd.DataFrame({"precip": [1.0, 2.0, 3.0, 4.0]}),
        crs="EPSG:3857",
    )


@pytest.fixture
def overlapping():
    """Two overlapping squares, A listed first."""
    a = np.array([[0, 0], [6, 0], [6, 6], [0, 6], [0, 0]])
    b = np.array([[4, 4], [10, 4], [10, 10], [4, 10], [4, 4]])
    return PolygonSet(
        rings=[[a], [b]],
        attributes=pd.DataFrame({"name": ["A", "B"]}, index=["eco-a", "eco-b"]),
        crs="EPSG:3857",
    )
