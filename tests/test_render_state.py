"""Tests for per-frame geometry."""

import pytest

from mochi.eyes.layout import Layout
from mochi.eyes.params import ParameterState
from mochi.eyes.render_state import (
    MIN_BORDER_RADIUS, Rect, compute_render_state, stretch_factors,
)

GAZE_STEPS = [-1.0, -0.5, 0.0, 0.5, 1.0]


def _inside(rect: Rect, layout: Layout) -> bool:
    return (0 <= rect.x and rect.right <= layout.screen_width
            and 0 <= rect.y and rect.bottom <= layout.screen_height
            and rect.w >= 1 and rect.h >= 1)


class TestSquashStretch:
    @pytest.mark.parametrize("squish", [0.5, 0.75, 1.0, 1.25, 1.5])
    def test_area_preserved(self, squish):
        sx, sy = stretch_factors(squish)
        assert sx * sy == pytest.approx(1.0)

    def test_out_of_range_squish_is_clamped(self):
        assert stretch_factors(0.1) == stretch_factors(0.5)
        assert stretch_factors(3.0) == stretch_factors(1.5)

    def test_squish_above_one_is_taller_and_narrower(self):
        layout = Layout()
        neutral = compute_render_state(layout, ParameterState())
        tall = compute_render_state(layout, ParameterState(squish=1.4))
        assert tall.left.h > neutral.left.h
        assert tall.left.w < neutral.left.w

    def test_wide_squish_stays_within_eye_slot(self):
        layout = Layout()
        rs = compute_render_state(layout, ParameterState(squish=0.5))
        slot = (layout.screen_width - layout.spacing) // 2
        assert rs.left.w <= slot
        assert rs.right.w <= slot


class TestBounds:
    @pytest.mark.parametrize("layout", [
        Layout(),
        Layout(screen_width=64, screen_height=32),
        Layout(eye_width=60, eye_height=60, spacing=2),
        Layout(screen_width=20, screen_height=10, eye_width=30, spacing=30),
    ])
    def test_rects_stay_on_screen(self, layout):
        for gx in GAZE_STEPS:
            for gy in GAZE_STEPS:
                for squish in (0.5, 1.0, 1.5):
                    params = ParameterState(gaze_x=gx, gaze_y=gy, squish=squish,
                                            curious=1.0, h_flicker=10.0)
                    rs = compute_render_state(layout, params)
                    assert _inside(rs.left, layout)
                    assert _inside(rs.right, layout)
                    assert _inside(rs.mouth, layout)

    def test_closed_eye_is_at_least_one_pixel(self):
        rs = compute_render_state(Layout(), ParameterState(openness=0.0))
        assert rs.left.h >= 1
        assert rs.right.h >= 1


class TestGeometry:
    def test_openness_scales_height(self):
        layout = Layout()
        full = compute_render_state(layout, ParameterState())
        half = compute_render_state(layout, ParameterState(openness=0.5))
        assert half.left.h < full.left.h

    def test_per_eye_openness(self):
        rs = compute_render_state(Layout(), ParameterState(left_openness=0.0))
        assert rs.left.h < rs.right.h

    def test_gaze_moves_eyes(self):
        layout = Layout()
        center = compute_render_state(layout, ParameterState())
        right = compute_render_state(layout, ParameterState(gaze_x=1.0))
        up = compute_render_state(layout, ParameterState(gaze_y=-1.0))
        assert right.left.x > center.left.x
        assert up.left.y < center.left.y
        assert right.gaze_offset[0] > 0

    def test_curious_enlarges_eye_on_gaze_side(self):
        layout = Layout()
        looking_left = compute_render_state(layout, ParameterState(gaze_x=-1.0, curious=1.0))
        assert looking_left.left.h > looking_left.right.h
        looking_right = compute_render_state(layout, ParameterState(gaze_x=1.0, curious=1.0))
        assert looking_right.right.h > looking_right.left.h

    def test_parallax_grows_eyes_with_sideways_gaze(self):
        layout = Layout()
        center = compute_render_state(layout, ParameterState())
        side = compute_render_state(layout, ParameterState(gaze_x=1.0))
        assert side.left.w > center.left.w

    def test_border_radius_floor(self):
        layout = Layout(border_radius=0)
        rs = compute_render_state(layout, ParameterState(squish=1.5))
        assert rs.border_radius == MIN_BORDER_RADIUS

    def test_border_radius_follows_smaller_scale(self):
        layout = Layout(border_radius=10)
        rs = compute_render_state(layout, ParameterState(squish=1.25))
        assert rs.border_radius == int(10 * 0.8)

    def test_cyclops_draws_one_centered_eye(self):
        layout = Layout()
        rs = compute_render_state(layout, ParameterState(cyclops=True))
        assert rs.right is None
        assert abs(rs.left.center[0] - layout.screen_width // 2) <= 1


class TestMouth:
    def test_mouth_below_eyes(self):
        rs = compute_render_state(Layout(), ParameterState())
        assert rs.mouth_visible
        assert rs.mouth.y >= max(rs.left.bottom, rs.right.bottom)

    def test_mouth_follows_gaze(self):
        layout = Layout()
        center = compute_render_state(layout, ParameterState())
        right = compute_render_state(layout, ParameterState(gaze_x=1.0))
        assert right.mouth.x > center.mouth.x

    def test_mouth_hidden_near_bottom(self):
        rs = compute_render_state(Layout(eye_height=56), ParameterState())
        assert not rs.mouth_visible

    def test_mouth_openness_grows_height(self):
        layout = Layout()
        closed = compute_render_state(layout, ParameterState())
        open_ = compute_render_state(layout, ParameterState(mouth_openness=1.0))
        assert open_.mouth.h >= closed.mouth.h
