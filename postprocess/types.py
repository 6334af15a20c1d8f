"""
Type definitions for the postprocessing module.

This module defines the core data structures passed between the pipeline
stages: fitted boxes, candidate lineage records, image shape metadata and
the final detections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from geometry import Bbox

from .errors import ShapeMismatchError

# Per-image probability map, float values in [0, 1], shape (H, W)
ProbabilityGrid = np.ndarray

# Thresholded and dilated mask, uint8 {0, 255}, same shape as the grid
BinaryMask = np.ndarray

# Contour as returned by cv2.findContours, shape (N, 1, 2), int32
RegionOutline = np.ndarray

# Rotated rectangle as returned by cv2.minAreaRect: ((cx, cy), (w, h), angle)
RotatedRect = tuple[tuple[float, float], tuple[float, float], float]

# Four float corners (top-left, top-right, bottom-right, bottom-left)
Corners = list[list[float]]


@dataclass
class OrientedBox:
    """A minimum-area rectangle with canonically ordered corners.

    Attributes:
        corners: 4 [x, y] float points (top-left, top-right, bottom-right,
                 bottom-left).
        short_side: max(width, height) of the fitted rectangle. Despite the
                    name this is only used as a minimum-size gate.
        score: Mean probability inside the box, None until scored.
    """

    corners: Corners
    short_side: float
    score: float | None = None


@dataclass(frozen=True)
class ImageShapeInfo:
    """Original and resized dimensions of one image in the batch.

    The model ran on the resized image; detections are mapped back to the
    original.
    """

    original_width: int
    original_height: int
    resize_width: int
    resize_height: int

    def __post_init__(self) -> None:
        sizes = (
            self.original_width,
            self.original_height,
            self.resize_width,
            self.resize_height,
        )
        if any(size <= 0 for size in sizes):
            raise ShapeMismatchError(f"Image sizes must be positive, got {sizes}")

    @property
    def ratio_w(self) -> float:
        return self.resize_width / self.original_width

    @property
    def ratio_h(self) -> float:
        return self.resize_height / self.original_height

    @classmethod
    def from_nested(cls, shape: Sequence[Sequence[int]]) -> ImageShapeInfo:
        """Build from the ``[[origW, origH], [resizeW, resizeH]]`` form.

        Raises:
            ShapeMismatchError: If the nested structure is malformed.
        """
        try:
            (orig_w, orig_h), (resize_w, resize_h) = shape
            sizes = (int(orig_w), int(orig_h), int(resize_w), int(resize_h))
        except (TypeError, ValueError) as e:
            raise ShapeMismatchError(
                f"Shape info must be [[origW, origH], [resizeW, resizeH]], got {shape!r}"
            ) from e
        return cls(*sizes)

    @classmethod
    def unscaled(cls, width: int, height: int) -> ImageShapeInfo:
        """Shape info for an image the model saw at its original size."""
        return cls(width, height, width, height)

    def to_nested(self) -> list[list[int]]:
        return [
            [self.original_width, self.original_height],
            [self.resize_width, self.resize_height],
        ]


@dataclass
class BoxCandidate:
    """One region outline as it moved through the pipeline.

    Records every intermediate box and, for rejected candidates, the stage
    that rejected it. Enables debugging of thresholds without re-running.

    Attributes:
        index: Position of the outline in extraction order.
        num_points: Number of points in the region outline.
        box: Fitted, canonically ordered box (None if never fitted).
        expanded: Box after unclip and refit (None if not reached).
        grid_box: Integer corners in probability grid coordinates.
        passed: Whether the candidate produced a detection.
        rejection_reason: Why the candidate was rejected (None if passed).
    """

    index: int
    num_points: int
    box: OrientedBox | None = None
    expanded: OrientedBox | None = None
    grid_box: Bbox | None = None
    passed: bool = True
    rejection_reason: str | None = None

    @property
    def score(self) -> float | None:
        return self.box.score if self.box is not None else None

    def reject(self, reason: str) -> BoxCandidate:
        """Mark this candidate as rejected and return it."""
        self.passed = False
        self.rejection_reason = reason
        return self


@dataclass
class Detection:
    """A located text region in original image coordinates.

    Attributes:
        points: 4 integer [x, y] corners, clockwise from the top-left,
                clamped to the image.
        score: Mean text probability of the region before expansion.
        source_candidate: The BoxCandidate this detection came from.
    """

    points: Bbox
    score: float
    source_candidate: BoxCandidate | None = field(default=None, repr=False)


# Ordered detections for one image
ResultSet = list[Detection]


@dataclass
class PostProcessResult:
    """Complete result of postprocessing one image.

    Attributes:
        detections: The image's ResultSet, in region-processing order.
        all_candidates: Every candidate considered (passed and rejected).
        mask_dimensions: (width, height) of the binary mask.
        grid_dimensions: (width, height) of the probability grid.
        shape_info: Image shape metadata used for the final mapping.
    """

    detections: ResultSet
    all_candidates: list[BoxCandidate]
    mask_dimensions: tuple[int, int]
    grid_dimensions: tuple[int, int]
    shape_info: ImageShapeInfo

    @property
    def rejected_candidates(self) -> list[BoxCandidate]:
        return [c for c in self.all_candidates if not c.passed]

    @property
    def boxes(self) -> list[Bbox]:
        """Detection corners only, as plain nested lists."""
        return [det.points for det in self.detections]
