"""Tests for box fitting, corner ordering and region scoring."""

import itertools

import cv2
import numpy as np
import pytest

from conftest import make_grid
from postprocess import box_score_fast, box_score_slow, get_mini_box, order_box_corners


def contour(points):
    return np.array(points, dtype=np.int32).reshape(-1, 1, 2)


# =============================================================================
# order_box_corners
# =============================================================================


class TestOrderBoxCorners:
    """Canonical order is (top-left, top-right, bottom-right, bottom-left)."""

    def test_axis_aligned_from_shuffled(self):
        shuffled = [[10, 5], [0, 0], [0, 5], [10, 0]]
        assert order_box_corners(shuffled) == [[0, 0], [10, 0], [10, 5], [0, 5]]

    def test_idempotent_axis_aligned(self):
        box = [[0.0, 0.0], [10.0, 0.0], [10.0, 5.0], [0.0, 5.0]]
        once = order_box_corners(box)
        assert once == box
        assert order_box_corners(once) == once

    def test_idempotent_rotated(self):
        rotated = [[3.0, 0.0], [8.0, 3.0], [5.0, 8.0], [0.0, 5.0]]
        once = order_box_corners(rotated)
        assert order_box_corners(once) == once

    def test_idempotent_with_tied_x(self):
        diamond = [[5.0, 10.0], [0.0, 5.0], [5.0, 0.0], [10.0, 5.0]]
        once = order_box_corners(diamond)
        assert once == [[5.0, 0.0], [10.0, 5.0], [5.0, 10.0], [0.0, 5.0]]
        assert order_box_corners(once) == once

    def test_tied_x_does_not_depend_on_input_order(self):
        diamond = [[5.0, 0.0], [10.0, 5.0], [5.0, 10.0], [0.0, 5.0]]
        orders = {
            tuple(map(tuple, order_box_corners(list(perm))))
            for perm in itertools.permutations(diamond)
        }
        assert orders == {((5.0, 0.0), (10.0, 5.0), (5.0, 10.0), (0.0, 5.0))}

    def test_rotated_box_roles(self):
        rotated = [[5.0, 8.0], [0.0, 5.0], [8.0, 3.0], [3.0, 0.0]]
        top_left, top_right, bottom_right, bottom_left = order_box_corners(rotated)
        # two smallest x: (0,5) and (3,0); smaller y is top-left
        assert top_left == [3.0, 0.0]
        assert bottom_left == [0.0, 5.0]
        # two largest x: (5,8) and (8,3)
        assert top_right == [8.0, 3.0]
        assert bottom_right == [5.0, 8.0]

    def test_returns_floats(self):
        ordered = order_box_corners(np.array([[0, 0], [4, 0], [4, 4], [0, 4]]))
        assert all(isinstance(v, float) for p in ordered for v in p)


# =============================================================================
# get_mini_box
# =============================================================================


class TestGetMiniBox:

    def test_axis_aligned_rectangle(self):
        box = get_mini_box(contour([[2, 3], [2, 9], [12, 9], [12, 3]]))
        assert box.short_side == pytest.approx(10.0)
        assert np.allclose(box.corners, [[2, 3], [12, 3], [12, 9], [2, 9]], atol=1e-3)
        assert box.score is None

    def test_short_side_is_the_longer_side(self):
        box = get_mini_box(contour([[0, 0], [0, 2], [20, 2], [20, 0]]))
        assert box.short_side == pytest.approx(20.0)

    def test_rotated_square(self):
        box = get_mini_box(contour([[5, 0], [10, 5], [5, 10], [0, 5]]))
        assert box.short_side == pytest.approx(np.hypot(5, 5), rel=1e-4)
        assert len(box.corners) == 4

    def test_accepts_flat_point_arrays(self):
        box = get_mini_box(np.array([[0, 0], [6, 0], [6, 4], [0, 4]], dtype=np.float32))
        assert box.short_side == pytest.approx(6.0)

    def test_corners_are_canonical(self):
        box = get_mini_box(contour([[5, 0], [10, 5], [5, 10], [0, 5]]))
        assert order_box_corners(box.corners) == box.corners


# =============================================================================
# box_score_fast / box_score_slow
# =============================================================================


class TestBoxScore:

    def test_uniform_block(self):
        pred = make_grid(20, 20, blocks=[(5, 5, 10, 10)], value=0.8)
        score = box_score_fast(pred, [[5, 5], [14, 5], [14, 14], [5, 14]])
        assert score == pytest.approx(0.8, abs=1e-6)

    def test_pixels_outside_polygon_are_excluded(self):
        # Only the diamond interior is averaged; the zero corners of the crop are not
        pred = np.zeros((11, 11), dtype=np.float32)
        diamond = [[5, 0], [10, 5], [5, 10], [0, 5]]
        mask = np.zeros((11, 11), dtype=np.uint8)
        cv2.fillPoly(mask, [np.array(diamond, dtype=np.int32).reshape(-1, 1, 2)], 1)
        pred[mask == 1] = 0.7
        assert box_score_fast(pred, diamond) == pytest.approx(0.7, abs=1e-6)

    def test_partial_coverage(self):
        pred = make_grid(10, 10, blocks=[(0, 0, 5, 10)], value=1.0)
        # box spans x 0..9: half the columns are 1.0
        assert box_score_fast(pred, [[0, 0], [9, 0], [9, 9], [0, 9]]) == pytest.approx(0.5)

    def test_score_is_bounded(self):
        rng = np.random.default_rng(42)
        pred = rng.random((30, 30), dtype=np.float32)
        for _ in range(20):
            x, y = rng.integers(-5, 30, size=2)
            w, h = rng.integers(1, 15, size=2)
            corners = [[x, y], [x + w, y], [x + w, y + h], [x, y + h]]
            score = box_score_fast(pred, corners)
            assert 0.0 <= score <= 1.0

    def test_box_outside_grid_is_clamped(self):
        pred = np.full((10, 10), 0.5, dtype=np.float32)
        score = box_score_fast(pred, [[-3, -3], [20, -3], [20, 20], [-3, 20]])
        assert score == pytest.approx(0.5)

    def test_slow_score_uses_outline(self):
        pred = make_grid(20, 20, blocks=[(2, 2, 8, 8)], value=0.6)
        outline = contour([[2, 2], [2, 9], [9, 9], [9, 2]])
        assert box_score_slow(pred, outline) == pytest.approx(0.6, abs=1e-6)
