"""
Box expansion ("unclip") by round-joined polygon offsetting.

The DB model predicts shrunk text kernels; each accepted box is grown back
by a distance proportional to its area/perimeter ratio.
"""

import cv2
import numpy as np
import pyclipper

from config import DEGENERATE_RECT_SIZE
from geometry import polygon_area, polygon_perimeter

from .errors import DegenerateGeometryError
from .types import Corners, RotatedRect

# Returned when the offset produces no points; later size checks reject it
EMPTY_OFFSET_RECT: RotatedRect = ((0.0, 0.0), (1.0, 1.0), 0.0)


def unclip_distance(corners: Corners, unclip_ratio: float) -> float:
    """Offset distance for a box: area * unclip_ratio / perimeter.

    Raises:
        DegenerateGeometryError: If the box has zero perimeter.
    """
    perimeter = polygon_perimeter(corners)
    if perimeter <= 0:
        raise DegenerateGeometryError(f"Box {corners} has zero perimeter")
    return polygon_area(corners) * unclip_ratio / perimeter


def offset_polygon(corners: Corners, distance: float) -> list[list[int]]:
    """Grow a closed polygon outward with round joins.

    Corners are truncated to integer coordinates before offsetting.

    Returns:
        All points of all resulting paths, possibly empty.
    """
    path = [(int(x), int(y)) for x, y in corners]
    offset = pyclipper.PyclipperOffset()
    offset.AddPath(path, pyclipper.JT_ROUND, pyclipper.ET_CLOSEDPOLYGON)
    solution = offset.Execute(distance)
    return [list(point) for polygon in solution for point in polygon]


def unclip(corners: Corners, unclip_ratio: float) -> RotatedRect:
    """Expand a box and refit its minimum-area rectangle.

    Args:
        corners: 4 [x, y] box corners.
        unclip_ratio: Expansion ratio (> 0).

    Returns:
        Rotated rectangle enclosing the expanded polygon, or a 1x1
        rectangle at the origin if the offset is empty.

    Raises:
        DegenerateGeometryError: If the box has zero perimeter.
    """
    distance = unclip_distance(corners, unclip_ratio)
    points = offset_polygon(corners, distance)
    if not points:
        return EMPTY_OFFSET_RECT
    return cv2.minAreaRect(np.array(points, dtype=np.float32).reshape(-1, 1, 2))


def is_degenerate_rect(rect: RotatedRect) -> bool:
    """True if both sides of the rectangle are below DEGENERATE_RECT_SIZE."""
    (_, _), (width, height), _ = rect
    return width < DEGENERATE_RECT_SIZE and height < DEGENERATE_RECT_SIZE
