"""Tests for exponential smoothing of the parameter state."""

import math

import pytest

from mochi.eyes.params import ImpulseTargets, ParameterState, SMOOTHED_FIELDS
from mochi.eyes.smoother import RATE_GROUPS, advance
from mochi.utils.math_helpers import approach, clamp, smooth_damp


class TestSmoothDamp:
    def test_matches_closed_form_after_n_steps(self):
        rate, dt, n = 12.0, 0.02, 50
        value = 0.0
        for _ in range(n):
            value = smooth_damp(value, 1.0, rate, dt)
        assert value == pytest.approx(1.0 - math.exp(-rate * dt * n), abs=1e-9)

    def test_never_overshoots(self):
        value = 0.0
        for _ in range(200):
            value = smooth_damp(value, 1.0, 50.0, 0.5)
            assert value <= 1.0

    def test_zero_dt_is_noop(self):
        assert smooth_damp(0.3, 1.0, 12.0, 0.0) == 0.3
        assert smooth_damp(0.3, 1.0, 12.0, -1.0) == 0.3

    def test_zero_rate_holds_value(self):
        assert smooth_damp(0.3, 1.0, 0.0, 0.1) == 0.3


class TestApproach:
    def test_moves_by_at_most_speed_dt(self):
        assert approach(0.0, 10.0, 40.0, 0.1) == pytest.approx(4.0)

    def test_lands_exactly_on_target(self):
        assert approach(9.0, 10.0, 40.0, 0.1) == 10.0

    def test_moves_down(self):
        assert approach(10.0, 0.0, 40.0, 0.1) == pytest.approx(6.0)


def test_clamp():
    assert clamp(2.0, 0.0, 1.0) == 1.0
    assert clamp(-2.0, 0.0, 1.0) == 0.0
    assert clamp(0.5, 0.0, 1.0) == 0.5


class TestAdvance:
    def test_every_smoothed_field_has_a_rate_group(self):
        assert set(RATE_GROUPS) == set(SMOOTHED_FIELDS)

    def test_uses_group_rate(self):
        params = ParameterState(openness=0.0)
        targets = ImpulseTargets(openness=1.0, openness_speed=12.0)
        advance(params, targets, 0.02)
        assert params.openness == pytest.approx(1.0 - math.exp(-12.0 * 0.02))

    def test_overlay_intensity_uses_effect_rate(self):
        params = ParameterState()
        targets = ImpulseTargets(knocked=1.0, effect_speed=4.0)
        advance(params, targets, 0.1)
        assert params.knocked == pytest.approx(1.0 - math.exp(-0.4))

    def test_heart_uses_heart_rate(self):
        params = ParameterState()
        targets = ImpulseTargets(heart_scale=1.0, heart_speed=8.0)
        advance(params, targets, 0.1)
        assert params.heart_scale == pytest.approx(1.0 - math.exp(-0.8))

    def test_converges(self):
        params = ParameterState()
        targets = ImpulseTargets(gaze_x=-0.7, squish=1.3, joy=0.8)
        for _ in range(500):
            advance(params, targets, 0.02)
        assert params.gaze_x == pytest.approx(-0.7, abs=1e-4)
        assert params.squish == pytest.approx(1.3, abs=1e-4)
        assert params.joy == pytest.approx(0.8, abs=1e-4)

    def test_zero_dt_changes_nothing(self):
        params = ParameterState(openness=0.0)
        advance(params, ImpulseTargets(), 0.0)
        assert params.openness == 0.0

    def test_discrete_fields_untouched(self):
        params = ParameterState(cyclops=True, spiral_angle=3.0)
        advance(params, ImpulseTargets(), 0.5)
        assert params.cyclops is True
        assert params.spiral_angle == 3.0
