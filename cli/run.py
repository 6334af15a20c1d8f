"""Run command CLI parsing and control flow."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

from config import SCORE_MODES
from postprocess import (
    ImageShapeInfo,
    PostProcessConfig,
    load_postprocess_config,
    run_postprocess_detailed,
)
from postprocess.schemas import build_batch_output

logger = logging.getLogger(__name__)


def add_config_args(parser: argparse.ArgumentParser) -> None:
    """Add the config file and per-option override flags."""
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="YAML file with postprocess options",
    )
    parser.add_argument(
        "--model-name",
        help="Postprocessing variant (only DET is supported)",
    )
    parser.add_argument(
        "--thresh",
        type=float,
        help="Binarization threshold (det_db_thresh)",
    )
    parser.add_argument(
        "--box-thresh",
        type=float,
        help="Minimum region score (det_db_box_thresh)",
    )
    parser.add_argument(
        "--unclip-ratio",
        type=float,
        help="Box expansion ratio (det_db_unclip_ratio)",
    )
    parser.add_argument(
        "--max-candidates",
        type=int,
        help="Maximum region outlines per image",
    )
    parser.add_argument(
        "--score-mode",
        choices=SCORE_MODES,
        help="Score inside the fitted box (fast) or the raw outline (slow)",
    )
    parser.add_argument(
        "--no-dilation",
        action="store_true",
        help="Skip dilating the binary mask",
    )


def resolve_config(args: argparse.Namespace) -> PostProcessConfig:
    """Load the config file (if any) and apply command line overrides."""
    config = load_postprocess_config(args.config) if args.config else PostProcessConfig()
    config = config.with_overrides(
        model_name=args.model_name,
        det_db_thresh=args.thresh,
        det_db_box_thresh=args.box_thresh,
        det_db_unclip_ratio=args.unclip_ratio,
        max_candidates=args.max_candidates,
        score_mode=args.score_mode,
        use_dilation=False if args.no_dilation else None,
    )
    config.validate()
    return config


def load_probability_tensor(path: Path) -> np.ndarray:
    """Load a .npy probability map and promote it to (N, C, H, W).

    2D arrays are a single map, 3D arrays a batch of maps.
    """
    outputs = np.load(path)
    if outputs.ndim == 2:
        return outputs[np.newaxis, np.newaxis]
    if outputs.ndim == 3:
        return outputs[:, np.newaxis]
    return outputs


def load_shape_infos(path: Path | None, outputs: np.ndarray) -> list[ImageShapeInfo]:
    """Read [[origW, origH], [resizeW, resizeH]] entries from JSON.

    Without a file every image is assumed to have been run unresized.
    """
    if path is None:
        height, width = outputs.shape[-2:]
        return [ImageShapeInfo.unscaled(width, height) for _ in range(outputs.shape[0])]

    with open(path) as f:
        data = json.load(f)
    return [ImageShapeInfo.from_nested(entry) for entry in data]


def add_run_subparser(subparsers: argparse._SubParsersAction) -> None:
    run_parser = subparsers.add_parser(
        "run",
        help="Turn a saved probability map into text boxes",
    )
    run_parser.add_argument(
        "pred",
        type=Path,
        help="Probability map saved with numpy.save (H,W / N,H,W / N,C,H,W)",
    )
    run_parser.add_argument(
        "--shape-info", "-s",
        type=Path,
        help="JSON list of [[origW, origH], [resizeW, resizeH]] per image",
    )
    add_config_args(run_parser)
    run_parser.add_argument(
        "--include-rejected",
        action="store_true",
        help="Also write rejected candidates with their rejection reason",
    )
    run_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write JSON here instead of stdout",
    )
    run_parser.set_defaults(_cmd=cmd_run)


def cmd_run(args: argparse.Namespace) -> int:
    try:
        config = resolve_config(args)
        outputs = load_probability_tensor(args.pred)
        shape_infos = load_shape_infos(args.shape_info, outputs)
        results = run_postprocess_detailed(outputs, shape_infos, config)
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    document = build_batch_output(config.model_name, results, args.include_rejected)
    payload = document.model_dump_json(indent=2)

    if args.output:
        args.output.write_text(payload + "\n")
        logger.info("Results saved to %s", args.output)
    else:
        sys.stdout.write(payload + "\n")
    return 0
