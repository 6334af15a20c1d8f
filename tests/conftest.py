"""Shared fixtures: synthetic DB probability maps."""

import numpy as np
import pytest

from postprocess import ImageShapeInfo, PostProcessConfig


def make_grid(height: int, width: int, blocks=(), value: float = 0.9) -> np.ndarray:
    """Zero probability grid with rectangular blocks of ``value``.

    Each block is (x, y, w, h) in grid pixels.
    """
    grid = np.zeros((height, width), dtype=np.float32)
    for x, y, w, h in blocks:
        grid[y:y + h, x:x + w] = value
    return grid


@pytest.fixture
def default_config():
    return PostProcessConfig(
        det_db_thresh=0.3,
        det_db_box_thresh=0.5,
        det_db_unclip_ratio=1.5,
    )


@pytest.fixture
def block_grid():
    """40x40 grid with a centered 20x20 text block at 0.9."""
    return make_grid(40, 40, blocks=[(10, 10, 20, 20)])


@pytest.fixture
def unscaled_40():
    return ImageShapeInfo.unscaled(40, 40)
