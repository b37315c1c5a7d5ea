"""Tests for rect rounding/scaling and blend layout."""

import pytest

from styledqr.geometry import (
    Rect,
    RectF,
    round_half_up,
    round_rect,
    scale_bounding_rect_by_clipping_rect,
    scale_rect,
)


@pytest.mark.parametrize("value,expected", [(0.5, 1), (1.49, 1), (2.5, 3), (-0.5, 0), (-1.6, -2)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_round_rect_rounds_each_edge():
    assert round_rect(RectF(0.5, 1.49, 2.5, 10.7)) == Rect(1, 1, 3, 11)


def test_rect_properties():
    r = Rect(10, 20, 110, 70)
    assert (r.width, r.height) == (100, 50)
    assert r.box == (10, 20, 110, 70)
    assert not r.is_square()


def test_scale_rect():
    assert scale_rect(Rect(10, 20, 30, 40), 0.5) == RectF(5.0, 10.0, 15.0, 20.0)


class TestScaleBoundingRect:
    def test_square_clip_larger_than_target_is_scaled(self):
        full, placement = scale_bounding_rect_by_clipping_rect((1000, 800), 200, Rect(100, 100, 500, 500))
        assert full == Rect(0, 0, 500, 400)
        assert placement == Rect(50, 50, 250, 250)

    def test_placement_keeps_aspect_and_relative_position(self):
        clip = Rect(120, 60, 420, 360)
        size = 200
        full, placement = scale_bounding_rect_by_clipping_rect((600, 450), size, clip)
        ratio = size / clip.width
        assert placement.width == placement.height == size
        assert placement.left == round(clip.left * ratio)
        assert placement.top == round(clip.top * ratio)
        assert placement.left / full.width == pytest.approx(clip.left / 600, abs=0.01)
        assert placement.top / full.height == pytest.approx(clip.top / 450, abs=0.01)

    def test_non_square_clip_is_unchanged(self):
        clip = Rect(0, 0, 400, 300)
        full, placement = scale_bounding_rect_by_clipping_rect((800, 600), 200, clip)
        assert full == Rect(0, 0, 800, 600)
        assert placement == clip

    def test_clip_not_larger_than_target_is_unchanged(self):
        clip = Rect(10, 10, 210, 210)
        full, placement = scale_bounding_rect_by_clipping_rect((800, 600), 200, clip)
        assert full == Rect(0, 0, 800, 600)
        assert placement == clip

    def test_missing_clip_means_whole_image(self):
        full, placement = scale_bounding_rect_by_clipping_rect((400, 400), 200, None)
        assert full == Rect(0, 0, 200, 200)
        assert placement == Rect(0, 0, 200, 200)
