"""Tests for box expansion (unclip)."""

from unittest.mock import patch

import pytest

from postprocess import (
    DegenerateGeometryError,
    is_degenerate_rect,
    offset_polygon,
    unclip,
    unclip_distance,
)
from postprocess.unclip import EMPTY_OFFSET_RECT

BOX = [[10.0, 10.0], [30.0, 10.0], [30.0, 20.0], [10.0, 20.0]]


def rect_area(rect):
    (_, _), (w, h), _ = rect
    return w * h


class TestUnclipDistance:

    def test_area_over_perimeter(self):
        # area 200, perimeter 60
        assert unclip_distance(BOX, 1.5) == pytest.approx(200 * 1.5 / 60)

    def test_scales_linearly_with_ratio(self):
        assert unclip_distance(BOX, 3.0) == pytest.approx(2 * unclip_distance(BOX, 1.5))

    def test_zero_perimeter_raises(self):
        with pytest.raises(DegenerateGeometryError, match="zero perimeter"):
            unclip_distance([[4.0, 4.0]] * 4, 1.5)


class TestOffsetPolygon:

    def test_grows_outward(self):
        points = offset_polygon(BOX, 5.0)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        assert min(xs) == pytest.approx(5, abs=1)
        assert max(xs) == pytest.approx(35, abs=1)
        assert min(ys) == pytest.approx(5, abs=1)
        assert max(ys) == pytest.approx(25, abs=1)

    def test_round_joins_add_points(self):
        assert len(offset_polygon(BOX, 5.0)) > 4

    def test_corners_are_truncated_before_offset(self):
        fractional = [[0.9, 0.9], [10.9, 0.9], [10.9, 10.9], [0.9, 10.9]]
        integral = [[0, 0], [10, 0], [10, 10], [0, 10]]
        assert offset_polygon(fractional, 2.0) == offset_polygon(integral, 2.0)


class TestUnclip:

    def test_expanded_rect_encloses_box(self):
        (cx, cy), (w, h), _ = unclip(BOX, 1.5)
        assert (cx, cy) == pytest.approx((20, 15), abs=0.5)
        distance = unclip_distance(BOX, 1.5)
        assert sorted([w, h]) == pytest.approx(
            sorted([20 + 2 * distance, 10 + 2 * distance]), abs=1.0
        )

    def test_monotonic_in_ratio(self):
        areas = [rect_area(unclip(BOX, ratio)) for ratio in (0.5, 1.0, 1.5, 2.0, 3.0)]
        assert areas == sorted(areas)
        assert areas[-1] > areas[0]

    def test_empty_offset_gives_unit_rect_at_origin(self):
        with patch("postprocess.unclip.offset_polygon", return_value=[]):
            rect = unclip(BOX, 1.5)
        assert rect == EMPTY_OFFSET_RECT

    def test_zero_perimeter_propagates(self):
        with pytest.raises(DegenerateGeometryError):
            unclip([[1.0, 1.0]] * 4, 2.0)


class TestIsDegenerateRect:

    def test_unit_rect_is_degenerate(self):
        assert is_degenerate_rect(EMPTY_OFFSET_RECT)

    def test_one_thin_side_is_not_degenerate(self):
        assert not is_degenerate_rect(((0, 0), (0.5, 10.0), 0))

    def test_threshold_is_exclusive(self):
        assert not is_degenerate_rect(((0, 0), (1.001, 1.001), 0))
        assert is_degenerate_rect(((0, 0), (1.0005, 1.0005), 0))
