"""
Postprocessing orchestration.

Ties the stages together per image (binarize, trace regions, fit and score
boxes, unclip, map coordinates) and dispatches whole batches by model_name.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence, Union

import numpy as np

from config import DET_MODEL_NAME, UNCLIP_MIN_SIZE_MARGIN

from .binarize import binarize, validate_grid
from .boxes import box_from_rect, box_score_fast, box_score_slow, get_mini_box
from .config import PostProcessConfig
from .errors import ConfigurationError, DegenerateGeometryError, ShapeMismatchError
from .mapping import box_side_lengths, is_large_enough, map_to_original, scale_box_to_grid
from .regions import find_region_outlines, is_valid_outline
from .types import (
    BinaryMask,
    BoxCandidate,
    Detection,
    ImageShapeInfo,
    PostProcessResult,
    ProbabilityGrid,
    RegionOutline,
    ResultSet,
)
from .unclip import is_degenerate_rect, unclip

logger = logging.getLogger(__name__)

ShapeInfoLike = Union[ImageShapeInfo, Sequence[Sequence[int]]]


def fit_candidate(
    index: int,
    outline: RegionOutline,
    pred: ProbabilityGrid,
    bitmap_size: tuple[int, int],
    config: PostProcessConfig,
) -> BoxCandidate:
    """Run one region outline through box fitting, scoring and unclip.

    Every rejection is recorded on the returned candidate; nothing is raised
    for a bad region.

    Args:
        index: Position of the outline in extraction order.
        outline: Region contour, (N, 1, 2) int32.
        pred: float32 probability grid.
        bitmap_size: (width, height) of the mask the outline came from.
        config: Postprocessing configuration.

    Returns:
        BoxCandidate; if passed, ``grid_box`` holds integer grid corners.
    """
    candidate = BoxCandidate(index=index, num_points=len(outline))
    if not is_valid_outline(outline):
        return candidate.reject("too_few_points")

    box = get_mini_box(outline)
    candidate.box = box
    if box.short_side < config.min_size:
        return candidate.reject(f"short_side {box.short_side:.2f} < {config.min_size}")

    if config.score_mode == "slow":
        box.score = box_score_slow(pred, outline)
    else:
        box.score = box_score_fast(pred, box.corners)
    if box.score < config.det_db_box_thresh:
        return candidate.reject(f"score {box.score:.3f} < {config.det_db_box_thresh}")

    try:
        rect = unclip(box.corners, config.det_db_unclip_ratio)
    except DegenerateGeometryError as e:
        logger.debug("Candidate %d: %s", index, e)
        return candidate.reject("degenerate_unclip")
    if is_degenerate_rect(rect):
        return candidate.reject("degenerate_unclip")

    expanded = box_from_rect(rect)
    candidate.expanded = expanded
    min_expanded = config.min_size + UNCLIP_MIN_SIZE_MARGIN
    if expanded.short_side < min_expanded:
        return candidate.reject(
            f"unclipped short_side {expanded.short_side:.2f} < {min_expanded}"
        )

    grid_size = (pred.shape[1], pred.shape[0])
    candidate.grid_box = scale_box_to_grid(expanded.corners, bitmap_size, grid_size)
    return candidate


def boxes_from_bitmap(
    pred: ProbabilityGrid,
    bitmap: BinaryMask,
    config: PostProcessConfig,
) -> list[BoxCandidate]:
    """Turn a binary mask into scored, expanded box candidates.

    Args:
        pred: float32 probability grid.
        bitmap: Binary mask derived from pred.
        config: Postprocessing configuration.

    Returns:
        All candidates in extraction order, passed and rejected.
    """
    bitmap_size = (bitmap.shape[1], bitmap.shape[0])
    outlines = find_region_outlines(bitmap, config.max_candidates)

    candidates = []
    for index, outline in enumerate(outlines):
        candidate = fit_candidate(index, outline, pred, bitmap_size, config)
        if not candidate.passed:
            logger.debug("Candidate %d rejected: %s", index, candidate.rejection_reason)
        candidates.append(candidate)
    return candidates


def postprocess_image(
    pred: ProbabilityGrid,
    shape_info: ImageShapeInfo,
    config: PostProcessConfig | None = None,
) -> PostProcessResult:
    """Run the full DB postprocessing pipeline on one probability grid.

    Args:
        pred: Probability grid (H, W) with values in [0, 1].
        shape_info: Original and resized image sizes.
        config: Postprocessing configuration. If None, uses defaults.

    Returns:
        PostProcessResult with the image's detections and all candidates.
    """
    if config is None:
        config = PostProcessConfig()
    validate_grid(pred)

    pred = pred.astype(np.float32, copy=False)
    bitmap = binarize(pred, config.det_db_thresh, config.use_dilation)
    candidates = boxes_from_bitmap(pred, bitmap, config)

    detections: ResultSet = []
    for candidate in candidates:
        if not candidate.passed:
            continue
        points = map_to_original(candidate.grid_box, shape_info)
        if not is_large_enough(points):
            width, height = box_side_lengths(points)
            candidate.reject(f"side_length {width}x{height} too small")
            logger.debug(
                "Candidate %d rejected: %s", candidate.index, candidate.rejection_reason
            )
            continue
        detections.append(
            Detection(points=points, score=candidate.score, source_candidate=candidate)
        )

    return PostProcessResult(
        detections=detections,
        all_candidates=candidates,
        mask_dimensions=(bitmap.shape[1], bitmap.shape[0]),
        grid_dimensions=(pred.shape[1], pred.shape[0]),
        shape_info=shape_info,
    )


def _normalize_shape_infos(
    shape_infos: Sequence[ShapeInfoLike],
    batch_size: int,
) -> list[ImageShapeInfo]:
    if len(shape_infos) != batch_size:
        raise ShapeMismatchError(
            f"Got {len(shape_infos)} shape infos for a batch of {batch_size} images"
        )
    return [
        info if isinstance(info, ImageShapeInfo) else ImageShapeInfo.from_nested(info)
        for info in shape_infos
    ]


def det_postprocess(
    outputs: np.ndarray,
    shape_infos: Sequence[ShapeInfoLike],
    config: PostProcessConfig,
) -> list[PostProcessResult]:
    """Postprocess a batch of DB detection outputs.

    Every image in the batch is processed, in order.

    Args:
        outputs: Probability tensor (N, C, H, W); channel 0 is used.
        shape_infos: N shape infos, ImageShapeInfo or nested lists.
        config: Postprocessing configuration.

    Returns:
        One PostProcessResult per image, index-aligned with the batch.

    Raises:
        ShapeMismatchError: If the tensor has fewer than 4 dimensions or the
                            shape infos do not match the batch size.
    """
    outputs = np.asarray(outputs)
    if outputs.ndim < 4:
        raise ShapeMismatchError(
            f"Expected a (N, C, H, W) tensor, got shape {outputs.shape}"
        )
    batch_size = outputs.shape[0]
    infos = _normalize_shape_infos(shape_infos, batch_size)

    results = []
    for i in range(batch_size):
        result = postprocess_image(outputs[i, 0], infos[i], config)
        logger.debug(
            "Image %d: %d detections from %d candidates",
            i,
            len(result.detections),
            len(result.all_candidates),
        )
        results.append(result)
    return results


PostProcessHandler = Callable[
    [np.ndarray, Sequence[ShapeInfoLike], PostProcessConfig],
    list[PostProcessResult],
]

POSTPROCESS_HANDLERS: dict[str, PostProcessHandler] = {
    DET_MODEL_NAME: det_postprocess,
}


def run_postprocess_detailed(
    outputs: np.ndarray,
    shape_infos: Sequence[ShapeInfoLike],
    config: PostProcessConfig | None = None,
) -> list[PostProcessResult]:
    """Dispatch a batch to the handler for config.model_name.

    Raises:
        ConfigurationError: If model_name has no handler or the config is invalid.
        ShapeMismatchError: If the inputs do not describe a consistent batch.
    """
    if config is None:
        config = PostProcessConfig()
    config.validate()

    handler = POSTPROCESS_HANDLERS.get(config.model_name)
    if handler is None:
        raise ConfigurationError(
            f"Unsupported model_name {config.model_name!r}; "
            f"expected one of {sorted(POSTPROCESS_HANDLERS)}"
        )

    results = handler(outputs, shape_infos, config)
    logger.info(
        "Postprocessed %d images: %d detections",
        len(results),
        sum(len(r.detections) for r in results),
    )
    return results


def run_postprocess(
    outputs: np.ndarray,
    shape_infos: Sequence[ShapeInfoLike],
    config: PostProcessConfig | None = None,
) -> list[ResultSet]:
    """Postprocess a batch and return one ResultSet per image.

    This is the main entry point. See run_postprocess_detailed() for the
    full per-image results including rejected candidates.
    """
    return [r.detections for r in run_postprocess_detailed(outputs, shape_infos, config)]
