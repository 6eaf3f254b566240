"""
Tests for the hit-testing geometry helpers.
"""

import math

import pytest

from mindmap.geometry import (
    distance,
    is_near_segment,
    point_in_rect,
    point_to_segment_distance,
)


class TestPointToSegment:
    """Distance from a point to a finite segment."""

    def test_point_on_segment_is_zero(self):
        assert point_to_segment_distance((5, 0), (0, 0), (10, 0)) == 0

    def test_perpendicular_distance(self):
        assert point_to_segment_distance((5, 5), (0, 0), (10, 0)) == pytest.approx(5)

    def test_projection_clamped_to_start(self):
        """Beyond the start the nearest point is the endpoint itself."""
        assert point_to_segment_distance((-3, 4), (0, 0), (10, 0)) == pytest.approx(5)

    def test_projection_clamped_to_end(self):
        assert point_to_segment_distance((13, -4), (0, 0), (10, 0)) == pytest.approx(5)

    def test_diagonal_segment(self):
        d = point_to_segment_distance((0, 10), (0, 0), (10, 10))
        assert d == pytest.approx(math.sqrt(50))

    def test_degenerate_segment_uses_endpoint(self):
        assert point_to_segment_distance((3, 4), (0, 0), (0, 0)) == pytest.approx(5)


class TestThresholds:

    def test_threshold_is_inclusive(self):
        assert is_near_segment((5, 5), (0, 0), (10, 0), 5)

    def test_just_outside_threshold(self):
        assert not is_near_segment((5, 5.01), (0, 0), (10, 0), 5)

    def test_rect_contains_edges(self):
        assert point_in_rect((40, 20), (0, 0), 80, 40)
        assert not point_in_rect((41, 0), (0, 0), 80, 40)

    def test_distance(self):
        assert distance((0, 0), (3, 4)) == 5
