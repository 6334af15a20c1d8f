"""
Coordinate mapping from mask space back to the original image.

Boxes go mask -> probability grid -> original image; the last step undoes
the resize that was applied before inference and drops boxes that end up
too small.
"""

from config import MIN_DETECTION_SIDE
from geometry import Bbox, clamp, edge_length, round_half_away

from .types import Corners, ImageShapeInfo


def scale_box_to_grid(
    corners: Corners,
    mask_size: tuple[int, int],
    grid_size: tuple[int, int],
) -> Bbox:
    """Rescale corners from mask coordinates to probability grid coordinates.

    Each coordinate is scaled, rounded half away from zero and clamped to
    [0, grid size] (inclusive).

    Args:
        corners: 4 [x, y] float corners in mask coordinates.
        mask_size: (width, height) of the mask.
        grid_size: (width, height) of the probability grid.

    Returns:
        4 integer [x, y] corners.
    """
    width, height = mask_size
    dest_width, dest_height = grid_size
    return [
        [
            int(clamp(round_half_away(x / width * dest_width), 0, dest_width)),
            int(clamp(round_half_away(y / height * dest_height), 0, dest_height)),
        ]
        for x, y in corners
    ]


def order_points_clockwise(points: Bbox) -> Bbox:
    """Order 4 points clockwise starting at the top-left.

    Points are sorted by x (ties by y) and split into a left and a right
    pair; each pair is sorted by y. Result: (left-top, right-top,
    right-bottom, left-bottom).
    """
    pts = sorted((list(p) for p in points), key=lambda p: (p[0], p[1]))
    left = sorted(pts[:2], key=lambda p: p[1])
    right = sorted(pts[2:], key=lambda p: p[1])
    return [left[0], right[0], right[1], left[1]]


def rescale_to_original(points: Bbox, shape_info: ImageShapeInfo) -> Bbox:
    """Undo the inference resize and clamp to the original image.

    Coordinates are divided by the resize ratio, clamped to
    [0, size - 1] and truncated to integers.
    """
    max_x = shape_info.original_width - 1
    max_y = shape_info.original_height - 1
    return [
        [
            int(clamp(x / shape_info.ratio_w, 0, max_x)),
            int(clamp(y / shape_info.ratio_h, 0, max_y)),
        ]
        for x, y in points
    ]


def box_side_lengths(points: Bbox) -> tuple[int, int]:
    """Return (top edge, left edge) lengths, truncated to whole pixels."""
    width = int(edge_length(points[0], points[1]))
    height = int(edge_length(points[0], points[3]))
    return width, height


def is_large_enough(points: Bbox, min_side: int | None = None) -> bool:
    """Both the top and left edge must be longer than min_side pixels."""
    if min_side is None:
        min_side = MIN_DETECTION_SIDE
    width, height = box_side_lengths(points)
    return width > min_side and height > min_side


def map_to_original(points: Bbox, shape_info: ImageShapeInfo) -> Bbox:
    """Order a grid-space box clockwise and map it to original pixels."""
    return rescale_to_original(order_points_clockwise(points), shape_info)
