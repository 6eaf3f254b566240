"""
Planar geometry helpers for hit-testing.

Points are plain (x, y) tuples in content-local units.
"""

import math
from typing import Tuple

Point = Tuple[float, float]


def distance_sq(p: Point, q: Point) -> float:
    dx = p[0] - q[0]
    dy = p[1] - q[1]
    return dx * dx + dy * dy


def distance(p: Point, q: Point) -> float:
    return math.sqrt(distance_sq(p, q))


def point_to_segment_distance_sq(p: Point, a: Point, b: Point) -> float:
    """
    Squared distance from p to the segment a-b.

    p is projected onto the infinite line through a and b, the projection
    parameter t is clamped to [0, 1], and the distance to that clamped point
    is returned. A zero-length segment degenerates to the distance to a.
    """
    px, py = p
    x1, y1 = a
    x2, y2 = b
    dx, dy = x2 - x1, y2 - y1
    length_sq = dx * dx + dy * dy

    if length_sq == 0:
        return distance_sq(p, a)

    t = ((px - x1) * dx + (py - y1) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance_sq(p, (x1 + t * dx, y1 + t * dy))


def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Euclidean distance from p to the segment a-b."""
    return math.sqrt(point_to_segment_distance_sq(p, a, b))


def is_near_segment(p: Point, a: Point, b: Point, threshold: float) -> bool:
    """True when p lies within threshold (inclusive) of the segment a-b."""
    return point_to_segment_distance_sq(p, a, b) <= threshold * threshold


def point_in_rect(p: Point, center: Point, width: float, height: float) -> bool:
    """Axis-aligned hit test against a rectangle centred on `center`."""
    return (abs(p[0] - center[0]) <= width / 2
            and abs(p[1] - center[1]) <= height / 2)
