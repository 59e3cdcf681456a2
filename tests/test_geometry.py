"""Tests for the ray-casting containment kernels."""

import numpy as np
import pytest

from regionsmith.primitives.geometry import (
    BOUNDARY,
    INSIDE,
    OUTSIDE,
    point_in_polygon,
    points_in_polygon,
    polygon_centroid,
    ring_position,
    within_bounds,
)

SQUARE = np.array([[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]], dtype=float)
HOLE = np.array([[3, 3], [7, 3], [7, 7], [3, 7], [3, 3]], dtype=float)


class TestRingPosition:
    """Tests for single-ring classification."""

    def test_inside_outside(self):
        """Test interior and exterior points."""
        assert ring_position(5, 5, SQUARE) == INSIDE
        assert ring_position(15, 5, SQUARE) == OUTSIDE

    @pytest.mark.parametrize("x,y", [(0, 0), (10, 5), (5, 10), (0, 7.5), (10, 10)])
    def test_boundary(self, x, y):
        """Test edge and vertex points."""
        assert ring_position(x, y, SQUARE) == BOUNDARY

    def test_ray_through_vertex(self):
        """Test a point whose ray passes exactly through vertices."""
        assert ring_position(-1, 0, SQUARE) == OUTSIDE
        assert ring_position(-1, 10, SQUARE) == OUTSIDE

    def test_concave(self):
        """Test an L-shaped ring."""
        ring = np.array([[0, 0], [10, 0], [10, 4], [4, 4], [4, 10], [0, 10], [0, 0]])
        assert ring_position(2, 8, ring) == INSIDE
        assert ring_position(8, 8, ring) == OUTSIDE


class TestPointsInPolygon:
    """Tests for polygon containment."""

    def test_square(self):
        """Test interior, edge and exterior points of a square."""
        xy = np.array([[5, 5], [10, 5], [15, 15]])
        np.testing.assert_array_equal(points_in_polygon(xy, [SQUARE]), [True, True, False])

    def test_hole(self):
        """Test that points inside a hole are excluded and its edge included."""
        xy = np.array([[5, 5], [1, 1], [3, 5], [8, 8]])
        np.testing.assert_array_equal(
            points_in_polygon(xy, [SQUARE, HOLE]), [False, True, True, True]
        )

    def test_multi_part(self):
        """Test a polygon made of two disjoint rings."""
        other = SQUARE + 20
        xy = np.array([[5, 5], [25, 25], [15, 15]])
        np.testing.assert_array_equal(
            points_in_polygon(xy, [SQUARE, other]), [True, True, False]
        )

    def test_boundary_tolerance(self):
        """Test that tolerance widens the boundary band."""
        xy = np.array([[10.05, 5.0]])
        assert not points_in_polygon(xy, [SQUARE])[0]
        assert points_in_polygon(xy, [SQUARE], boundary_tolerance=0.1)[0]

    def test_negative_tolerance(self):
        """Test that negative tolerance is rejected."""
        with pytest.raises(ValueError, match="boundary_tolerance"):
            points_in_polygon(np.array([[0, 0]]), [SQUARE], boundary_tolerance=-1)

    def test_empty_points(self):
        """Test containment of no points."""
        assert points_in_polygon(np.empty((0, 2)), [SQUARE]).shape == (0,)

    def test_centroid_contained(self):
        """Test that a convex polygon contains its centroid."""
        triangle = np.array([[0, 0], [6, 0], [0, 6], [0, 0]], dtype=float)
        cx, cy = polygon_centroid(triangle)
        assert (cx, cy) == pytest.approx((2.0, 2.0))
        assert point_in_polygon(cx, cy, [triangle])

    def test_far_point(self):
        """Test that a point far outside the bounding box is never contained."""
        assert not point_in_polygon(1e9, -1e9, [SQUARE, HOLE])

    def test_matches_scalar_form(self):
        """Test that vector and scalar tests agree on random points."""
        rng = np.random.default_rng(7)
        xy = rng.uniform(-2, 12, size=(200, 2))
        vector = points_in_polygon(xy, [SQUARE, HOLE])
        scalar = [point_in_polygon(x, y, [SQUARE, HOLE]) for x, y in xy]
        np.testing.assert_array_equal(vector, scalar)


class TestHelpers:
    """Tests for bounds and centroid helpers."""

    def test_within_bounds(self):
        """Test the closed envelope mask."""
        xy = np.array([[0, 0], [10, 10], [10.5, 5]])
        np.testing.assert_array_equal(within_bounds(xy, (0, 0, 10, 10)), [True, True, False])
        assert within_bounds(xy, (0, 0, 10, 10), boundary_tolerance=1.0).all()

    def test_centroid_square(self):
        """Test the centroid of a square."""
        assert polygon_centroid(SQUARE) == pytest.approx((5.0, 5.0))

    def test_centroid_degenerate(self):
        """Test that zero-area rings have no centroid."""
        line = np.array([[0, 0], [1, 1], [2, 2], [0, 0]], dtype=float)
        with pytest.raises(ValueError, match="zero area"):
            polygon_centroid(line)
