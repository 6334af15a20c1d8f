"""
Binarization of the DB probability map.

Pure functions: the probability grid is never modified.
"""

import cv2
import numpy as np

from config import DILATION_KERNEL_SIZE

from .types import BinaryMask, ProbabilityGrid


def validate_grid(pred: ProbabilityGrid) -> None:
    """Validate a single-image probability grid.

    Raises:
        TypeError: If pred is not a numpy array.
        ValueError: If pred is not a non-empty 2D array.
    """
    if not isinstance(pred, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(pred).__name__}")

    if pred.ndim != 2:
        raise ValueError(
            f"Probability grid must be a 2D array, got {pred.ndim}D array with shape {pred.shape}"
        )

    if pred.size == 0:
        raise ValueError("Probability grid is empty")


def binarize(
    pred: ProbabilityGrid,
    thresh: float,
    use_dilation: bool = True,
) -> BinaryMask:
    """Threshold a probability grid into a dilated binary mask.

    The grid is scaled to 8 bits (values truncated), thresholded at
    ``thresh * 255`` and dilated with a 2x2 rectangle so strokes a pixel
    apart merge into one region.

    Args:
        pred: Probability grid (H, W) with values in [0, 1].
        thresh: Binarization threshold in (0, 1).
        use_dilation: Whether to dilate the thresholded mask.

    Returns:
        uint8 mask of the same shape with values {0, 255}.

    Examples:
        >>> pred = np.zeros((4, 4), dtype=np.float32)
        >>> pred[1:3, 1:3] = 0.9
        >>> int(binarize(pred, 0.3)[1:4, 1:4].min())
        255
    """
    validate_grid(pred)

    scaled = (np.clip(pred, 0.0, 1.0) * 255).astype(np.uint8)
    _, bitmap = cv2.threshold(scaled, thresh * 255, 255, cv2.THRESH_BINARY)

    if not use_dilation:
        return bitmap

    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, DILATION_KERNEL_SIZE)
    return cv2.dilate(bitmap, kernel)
