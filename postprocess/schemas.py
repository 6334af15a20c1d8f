"""Pydantic schemas for the JSON written by the dbpost CLI.

Domain classes (Detection, BoxCandidate, ...) live in types.py.
These schemas define the exact output format.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .types import BoxCandidate, Detection, PostProcessResult


class DetectionOut(BaseModel):
    """A single detection: 4 clockwise [x, y] corners in original pixels."""
    points: list[list[int]]
    score: float

    @classmethod
    def from_detection(cls, det: Detection) -> DetectionOut:
        return cls(points=det.points, score=det.score)


class CandidateOut(BaseModel):
    """A rejected candidate, for threshold debugging."""
    index: int
    num_points: int
    score: float | None = None
    box: list[list[float]] | None = None
    rejection_reason: str | None = None

    @classmethod
    def from_candidate(cls, candidate: BoxCandidate) -> CandidateOut:
        return cls(
            index=candidate.index,
            num_points=candidate.num_points,
            score=candidate.score,
            box=candidate.box.corners if candidate.box is not None else None,
            rejection_reason=candidate.rejection_reason,
        )


class ImageResultOut(BaseModel):
    """Detections for one image of the batch."""
    index: int
    original_size: tuple[int, int]
    detections: list[DetectionOut]
    rejected: list[CandidateOut] = Field(default_factory=list)


class BatchResultOut(BaseModel):
    """Top-level document: one entry per input image, in batch order."""
    model_name: str
    images: list[ImageResultOut]


def build_batch_output(
    model_name: str,
    results: list[PostProcessResult],
    include_rejected: bool = False,
) -> BatchResultOut:
    images = []
    for index, result in enumerate(results):
        rejected = (
            [CandidateOut.from_candidate(c) for c in result.rejected_candidates]
            if include_rejected
            else []
        )
        images.append(
            ImageResultOut(
                index=index,
                original_size=(
                    result.shape_info.original_width,
                    result.shape_info.original_height,
                ),
                detections=[DetectionOut.from_detection(d) for d in result.detections],
                rejected=rejected,
            )
        )
    return BatchResultOut(model_name=model_name, images=images)
