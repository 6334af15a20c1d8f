"""
Region outline extraction from the binary mask.

Each connected foreground region is traced into a contour; contours are
the candidates for text boxes.
"""

import cv2
import numpy as np

from config import MAX_CANDIDATES, MIN_OUTLINE_POINTS

from .types import BinaryMask, RegionOutline


def find_region_outlines(
    bitmap: BinaryMask,
    max_candidates: int | None = None,
) -> list[RegionOutline]:
    """Trace the boundaries of foreground regions in a binary mask.

    Args:
        bitmap: uint8 mask, non-zero pixels are foreground.
        max_candidates: Maximum number of outlines to return (defaults to
                        MAX_CANDIDATES). Outlines beyond the cap are dropped.

    Returns:
        Outlines in extraction order, each an (N, 1, 2) int32 array.
    """
    if max_candidates is None:
        max_candidates = MAX_CANDIDATES

    if bitmap.dtype != np.uint8:
        bitmap = (bitmap > 0).astype(np.uint8) * 255

    contours, _ = cv2.findContours(bitmap, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours[:max_candidates])


def is_valid_outline(outline: RegionOutline) -> bool:
    """Check the outline has enough points to form a polygon."""
    return len(outline) >= MIN_OUTLINE_POINTS
