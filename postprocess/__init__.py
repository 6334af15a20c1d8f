"""
DB text detection postprocessing module.

This module turns the per-pixel text probability map of a DB detection
model into quadrilateral text boxes in original image coordinates. Like the
rest of the code base it is built from pure functions with early
validation and a clear separation of stages.

Key components:
- types: Core data structures (OrientedBox, BoxCandidate, Detection, ImageShapeInfo)
- config: PostProcessConfig and the YAML loader
- errors: ConfigurationError, ShapeMismatchError, DegenerateGeometryError
- binarize: Probability grid -> dilated binary mask
- regions: Region outline tracing
- boxes: Minimum-area box fitting, corner ordering and scoring
- unclip: Round-joined polygon expansion
- mapping: Mask -> grid -> original image coordinates and size filtering
- detector: Per-image pipeline and batch dispatch by model_name

The main entry point is `run_postprocess()` which returns one list of
detections per image in the batch.
"""

from .types import (
    BoxCandidate,
    Detection,
    ImageShapeInfo,
    OrientedBox,
    PostProcessResult,
    ResultSet,
)
from .config import PostProcessConfig, load_postprocess_config
from .errors import (
    PostProcessError,
    ConfigurationError,
    ShapeMismatchError,
    DegenerateGeometryError,
)
from .binarize import binarize
from .regions import find_region_outlines, is_valid_outline
from .boxes import order_box_corners, get_mini_box, box_score_fast, box_score_slow
from .unclip import unclip, unclip_distance, offset_polygon, is_degenerate_rect
from .mapping import (
    scale_box_to_grid,
    order_points_clockwise,
    rescale_to_original,
    box_side_lengths,
    is_large_enough,
    map_to_original,
)
from .detector import (
    boxes_from_bitmap,
    postprocess_image,
    det_postprocess,
    run_postprocess,
    run_postprocess_detailed,
)

__all__ = [
    "BoxCandidate",
    "Detection",
    "ImageShapeInfo",
    "OrientedBox",
    "PostProcessResult",
    "ResultSet",
    "PostProcessConfig",
    "load_postprocess_config",
    "PostProcessError",
    "ConfigurationError",
    "ShapeMismatchError",
    "DegenerateGeometryError",
    "binarize",
    "find_region_outlines",
    "is_valid_outline",
    "order_box_corners",
    "get_mini_box",
    "box_score_fast",
    "box_score_slow",
    "unclip",
    "unclip_distance",
    "offset_polygon",
    "is_degenerate_rect",
    "scale_box_to_grid",
    "order_points_clockwise",
    "rescale_to_original",
    "box_side_lengths",
    "is_large_enough",
    "map_to_original",
    "boxes_from_bitmap",
    "postprocess_image",
    "det_postprocess",
    "run_postprocess",
    "run_postprocess_detailed",
]
