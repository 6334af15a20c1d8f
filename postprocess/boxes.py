"""
Box fitting and scoring for region outlines.

A region outline is reduced to its minimum-area rectangle, whose corners
are put in a fixed (top-left, top-right, bottom-right, bottom-left) order,
and scored by the mean probability inside it.
"""

import math

import cv2
import numpy as np

from geometry import clamp

from .types import Corners, OrientedBox, RotatedRect


def order_box_corners(points) -> Corners:
    """Put 4 rectangle corners in canonical order.

    Points are sorted by x, and equal x is broken by y rather than by input
    order. Of the two leftmost points the one with the smaller y is
    top-left; of the two rightmost the one with the smaller y is top-right.
    On equal y the later point in sort order is taken as the top one.
    Because ties never depend on input order, the result depends only on
    the point set: a 45 degree box with two corners on the same x orders
    the same way every time, and re-ordering an ordered box is a no-op.

    Args:
        points: 4 [x, y] points in any order.

    Returns:
        List of 4 [x, y] float points.
    """
    pts = sorted(([float(p[0]), float(p[1])] for p in points), key=lambda p: (p[0], p[1]))

    if pts[3][1] <= pts[2][1]:
        top_right, bottom_right = pts[3], pts[2]
    else:
        top_right, bottom_right = pts[2], pts[3]

    if pts[1][1] <= pts[0][1]:
        top_left, bottom_left = pts[1], pts[0]
    else:
        top_left, bottom_left = pts[0], pts[1]

    return [top_left, top_right, bottom_right, bottom_left]


def box_from_rect(rect: RotatedRect) -> OrientedBox:
    """Convert a rotated rectangle to an OrientedBox.

    short_side is max(width, height); it is used only as a size floor.
    """
    (_, _), (width, height), _ = rect
    corners = order_box_corners(cv2.boxPoints(rect).tolist())
    return OrientedBox(corners=corners, short_side=float(max(width, height)))


def get_mini_box(points: np.ndarray) -> OrientedBox:
    """Fit the minimum-area rectangle of a point set.

    Args:
        points: Contour or point cloud, shape (N, 1, 2) or (N, 2).

    Returns:
        OrientedBox with canonically ordered corners (unscored).
    """
    rect = cv2.minAreaRect(np.asarray(points, dtype=np.float32).reshape(-1, 1, 2))
    return box_from_rect(rect)


def _crop_bounds(xs, ys, width: int, height: int) -> tuple[int, int, int, int]:
    xmin = int(clamp(math.floor(min(xs)), 0, width - 1))
    xmax = int(clamp(math.ceil(max(xs)), 0, width - 1))
    ymin = int(clamp(math.floor(min(ys)), 0, height - 1))
    ymax = int(clamp(math.ceil(max(ys)), 0, height - 1))
    return xmin, xmax, ymin, ymax


def _masked_mean(pred: np.ndarray, polygon: np.ndarray) -> float:
    """Mean of pred inside a polygon, computed over the polygon's bounding crop."""
    height, width = pred.shape[:2]
    xmin, xmax, ymin, ymax = _crop_bounds(polygon[:, 0], polygon[:, 1], width, height)

    mask = np.zeros((ymax - ymin + 1, xmax - xmin + 1), dtype=np.uint8)
    local = polygon.astype(np.int32) - np.array([xmin, ymin], dtype=np.int32)
    cv2.fillPoly(mask, [local.reshape(-1, 1, 2)], 1)

    crop = pred[ymin:ymax + 1, xmin:xmax + 1]
    return float(cv2.mean(crop, mask)[0])


def box_score_fast(pred: np.ndarray, corners: Corners) -> float:
    """Mean probability inside a box.

    Corners are truncated to integers, shifted into the clamped bounding
    crop and filled as a polygon; pixels outside the polygon are excluded.

    Args:
        pred: float32 probability grid (H, W).
        corners: 4 [x, y] box corners.

    Returns:
        Score in [0, 1] for a grid with values in [0, 1]; 0.0 if the
        polygon covers no pixel.
    """
    return _masked_mean(pred, np.array(corners, dtype=np.float32))


def box_score_slow(pred: np.ndarray, outline: np.ndarray) -> float:
    """Mean probability inside the raw region outline."""
    return _masked_mean(pred, np.asarray(outline, dtype=np.float32).reshape(-1, 2))
