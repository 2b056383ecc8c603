"""Tests for the MochiEngine command surface and frame loop."""

import math
import random

import pytest

from conftest import DT, RecordingSurface, run
from mochi.config import AnimationConfig
from mochi.eyes import expressions
from mochi.eyes.engine import MochiEngine
from mochi.eyes.params import Expression, MouthAnim, MouthShape


class TestBegin:
    def test_opens_from_closed(self, engine):
        assert engine.params.openness == 0.0
        assert engine.targets.openness == 1.0
        run(engine, 50 * DT)
        assert engine.params.openness > 0.99

    def test_resizes_layout_and_surface(self, surface):
        engine = MochiEngine(surface)
        engine.begin(64, 32, 30)
        assert engine.layout.screen_width == 64
        assert engine.layout.screen_height == 32
        assert (surface.width, surface.height) == (64, 32)
        assert engine.frame_interval == pytest.approx(1 / 30)

    def test_clears_and_flushes(self, surface):
        engine = MochiEngine(surface)
        engine.begin(128, 64, 50)
        assert surface.names() == ["clear"]
        assert surface.flushes == 1

    def test_begin_resets_state(self, engine):
        engine.trigger_cry()
        engine.set_joy(1.0)
        engine.begin(128, 64, 50)
        assert engine.targets.joy == 0.0
        assert engine.timers.expression is Expression.NONE


class TestUpdate:
    def _engine(self, times):
        clock = iter(times)
        engine = MochiEngine(RecordingSurface(),
                             animation=AnimationConfig(autoblink=False),
                             clock=lambda: next(clock))
        engine.begin(128, 64, 50)
        return engine

    def test_calls_inside_frame_interval_are_noops(self):
        engine = self._engine([0.0, 0.01, 0.025])
        assert engine.update() is True
        assert engine.update() is False
        assert engine.update() is True

    def test_uses_elapsed_time_as_dt(self):
        engine = self._engine([10.0, 10.1])
        engine.update()
        before = engine.params.openness
        engine.update()
        # One 0.1 s tick at rate 12 closes 1 - e^-1.2 of the gap
        expected = before + (1.0 - before) * (1.0 - math.exp(-1.2))
        assert engine.params.openness == pytest.approx(expected, rel=1e-6)

    def test_step_draws_and_flushes(self, engine, surface):
        flushes = surface.flushes
        rs = engine.step(DT)
        assert surface.flushes == flushes + 1
        assert surface.names()[0] == "clear"
        assert rs is engine.render


class TestClamping:
    def test_continuous_setters_clamp(self, engine):
        engine.set_openness(5.0)
        engine.set_squish(0.0)
        engine.set_gaze(3.0, -3.0)
        engine.set_mouth_openness(-1.0)
        assert engine.targets.openness == 1.0
        assert engine.targets.squish == 0.5
        assert (engine.targets.gaze_x, engine.targets.gaze_y) == (1.0, -1.0)
        assert engine.targets.mouth_openness == 0.0

    def test_emotion_setters_clamp(self, engine):
        engine.set_joy(2.0)
        engine.set_anger(-1.0)
        engine.set_fatigue(0.4)
        engine.set_love(9.0)
        assert engine.targets.joy == 1.0
        assert engine.targets.anger == 0.0
        assert engine.targets.fatigue == 0.4
        assert engine.targets.love == 1.0

    def test_speed_is_optional(self, engine):
        engine.set_openness(0.5, speed=3.0)
        assert engine.targets.openness_speed == 3.0
        engine.set_openness(0.2)
        assert engine.targets.openness_speed == 3.0

    def test_group_speed_setters(self, engine):
        engine.set_gaze_speed(2.0)
        engine.set_effect_speed(1.0)
        assert engine.targets.gaze_speed == 2.0
        assert engine.targets.effect_speed == 1.0


class TestOverlays:
    def test_cry_then_love_is_exclusive(self, engine):
        engine.trigger_cry(3.0)
        engine.trigger_love(2.0)
        assert engine.timers.remaining_for(Expression.CRY) == 0.0
        assert engine.targets.fatigue == 0.0

    def test_default_durations_from_config(self, engine):
        engine.trigger_confused()
        assert engine.timers.remaining == pytest.approx(0.5)
        engine.set_laugh_duration(0.8)
        engine.trigger_laugh()
        assert engine.timers.remaining == pytest.approx(0.8)

    def test_reset_emotions(self, engine):
        engine.set_joy(1.0)
        engine.trigger_cry(3.0)
        engine.reset_emotions()
        assert engine.targets.joy == 0.0
        assert engine.targets.tears == 0.0
        assert engine.targets.heart_scale == 0.0
        assert engine.timers.remaining_for(Expression.CRY) == 0.0

    def test_knocked_lifecycle(self, engine, surface):
        engine.set_knocked(True)
        assert engine.params.mouth_shape is MouthShape.OOO
        run(engine, 0.5)
        assert engine.params.knocked > 0.1
        last = engine.params.spiral_angle
        for _ in range(10):
            engine.step(DT)
            assert engine.params.spiral_angle > last
            last = engine.params.spiral_angle
        assert surface.count("draw_line") > 0

        engine.set_knocked(False)
        for _ in range(60):
            engine.step(DT)
        assert engine.params.knocked < 0.05
        assert surface.count("draw_line") == 0

    def test_mouth_anim_codes(self, engine):
        engine.start_mouth_anim(2, 1.0)
        assert engine.timers.mouth_anim is MouthAnim.CHEW
        engine.start_mouth_anim("wobble", 1.0)
        assert engine.timers.mouth_anim is MouthAnim.WOBBLE
        engine.start_mouth_anim(4, 1.0)
        assert engine.timers.expression is Expression.LAUGH

    def test_unknown_mouth_anim_ignored(self, engine):
        engine.start_mouth_anim(99, 1.0)
        engine.start_mouth_anim("yodel", 1.0)
        assert engine.timers.mouth_anim is MouthAnim.NONE


class TestWink:
    def test_left_wink(self, engine):
        run(engine, 1.0)
        engine.wink(left=True)
        assert engine.targets.left_openness == 0.0

        lowest_right = 1.0
        for _ in range(15):
            engine.step(DT)
            lowest_right = min(lowest_right, engine.params.right_openness)
        assert engine.targets.left_openness == 1.0
        assert engine.targets.right_openness == 1.0
        assert 0.69 < lowest_right < 0.75
        assert engine.params.left_openness < 0.1

        run(engine, 1.0)
        assert engine.params.left_openness > 0.99
        assert engine.params.right_openness > 0.99

    def test_blink_snaps_closed(self, engine):
        run(engine, 1.0)
        engine.blink()
        assert engine.params.openness == 0.0
        assert engine.targets.openness == 1.0


class TestMouthShape:
    def test_transition_completes(self, engine):
        engine.set_mouth_type(MouthShape.FROWN)
        assert engine.params.mouth_transition == 0.0
        run(engine, 0.2)
        assert engine.params.mouth_shape is MouthShape.FROWN
        assert engine.params.mouth_transition == 1.0

    def test_legacy_codes_and_names(self, engine):
        engine.set_mouth_type(5)
        assert engine.params.target_mouth_shape is MouthShape.FLAT
        engine.set_mouth_type("ooo")
        assert engine.params.target_mouth_shape is MouthShape.OOO
        engine.set_mouth_type(42)
        assert engine.params.target_mouth_shape is MouthShape.SMILE

    def test_same_shape_is_settled(self, engine):
        engine.set_mouth_type(MouthShape.SMILE)
        assert engine.params.mouth_transition == 1.0


class TestLegacy:
    @pytest.mark.parametrize("mood,field", [
        (expressions.TIRED, "fatigue"),
        (expressions.ANGRY, "anger"),
        (expressions.HAPPY, "joy"),
    ])
    def test_set_mood(self, engine, mood, field):
        engine.set_mood(mood)
        assert getattr(engine.targets, field) == 1.0

    def test_unknown_mood_is_neutral(self, engine):
        engine.set_joy(1.0)
        engine.set_mood(77)
        for field in ("joy", "anger", "fatigue", "love"):
            assert getattr(engine.targets, field) == 0.0

    def test_set_position(self, engine):
        engine.set_position(expressions.POS_NE)
        assert (engine.targets.gaze_x, engine.targets.gaze_y) == (1.0, -1.0)
        engine.set_position(expressions.POS_W)
        assert (engine.targets.gaze_x, engine.targets.gaze_y) == (-1.0, 0.0)

    def test_unknown_position_centers(self, engine):
        engine.set_position(expressions.POS_S)
        engine.set_position(200)
        assert (engine.targets.gaze_x, engine.targets.gaze_y) == (0.0, 0.0)

    def test_anim_helpers(self, engine):
        engine.anim_love()
        assert engine.timers.expression is Expression.LOVE
        engine.anim_knocked()
        assert engine.timers.knocked


class TestLayoutSetters:
    def test_width_recomputes_positions(self, engine):
        engine.set_width(40, 40)
        assert engine.eye_width == 40
        assert engine.layout.left_eye_x == (128 - 90) // 2
        assert engine.layout.right_eye_x == engine.layout.left_eye_x + 50

    def test_other_setters(self, engine):
        engine.set_height(30)
        engine.set_spacing(4)
        engine.set_border_radius(5)
        engine.set_mouth_size(24, 8)
        assert engine.eye_height == 30
        assert engine.layout.eye_y == (64 - 30) // 2
        assert engine.spacing == 4
        assert engine.border_radius == 5
        assert (engine.layout.mouth_width, engine.layout.mouth_height) == (24, 8)

    def test_display_colors_are_per_engine(self):
        a = MochiEngine(RecordingSurface(), rng=random.Random(1))
        b_surface = RecordingSurface()
        b = MochiEngine(b_surface, rng=random.Random(1))
        a.set_display_colors(1, 0)
        b.step(DT)
        assert b.compositor.foreground == 1
        assert b_surface.calls[1][-1] == 1

    def test_cyclops_and_sweat(self, engine, surface):
        engine.set_cyclops(True)
        engine.set_sweat(True)
        run(engine, 1.0)
        assert engine.render.right is None
        assert engine.params.sweat > 0.9

    def test_reset_defaults(self, engine):
        engine.set_cyclops(True)
        engine.set_gaze(1.0, 1.0)
        engine.trigger_uwu()
        engine.reset_defaults()
        assert engine.params.cyclops is False
        assert engine.targets.gaze_x == 0.0
        assert engine.timers.expression is Expression.NONE
