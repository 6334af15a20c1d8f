"""Shared geometry utilities for quadrilateral boxes."""

from __future__ import annotations

import math
from typing import Sequence

# Box as list of 4 [x, y] points (top-left, top-right, bottom-right, bottom-left)
Bbox = list[list[int]]

Point = Sequence[float]


def polygon_area(points: Sequence[Point]) -> float:
    """Area of a simple polygon using the shoelace formula.

    The result is always non-negative, regardless of winding order.
    """
    n = len(points)
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i][0] * points[j][1]
        area -= points[j][0] * points[i][1]
    return abs(area) / 2.0


def edge_length(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def polygon_perimeter(points: Sequence[Point]) -> float:
    """Sum of the edge lengths of a closed polygon."""
    n = len(points)
    return sum(edge_length(points[i], points[(i + 1) % n]) for i in range(n))


def turn_directions(points: Sequence[Point]) -> list[float]:
    """Cross products of consecutive edge vectors of a closed polygon.

    In image coordinates (y pointing down) a clockwise traversal yields
    non-negative values.
    """
    n = len(points)
    crosses = []
    for i in range(n):
        a, b, c = points[i], points[(i + 1) % n], points[(i + 2) % n]
        e1 = (b[0] - a[0], b[1] - a[1])
        e2 = (c[0] - b[0], c[1] - b[1])
        crosses.append(e1[0] * e2[1] - e1[1] * e2[0])
    return crosses


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value to the closed interval [low, high]."""
    return min(max(value, low), high)


def round_half_away(value: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    return math.copysign(math.floor(abs(value) + 0.5), value)
