"""MochiEngine - parametric face animation engine.

Per tick: timers push targets -> smoother eases parameters -> render state is
derived -> compositor draws -> wink expiry -> surface flush.

Every setter clamps its input into the field's domain instead of rejecting it,
and unknown legacy codes fall back to neutral defaults. The engine is not
thread-safe: all calls are expected from the thread that drives update().
"""

import logging
import random
import time
from dataclasses import replace
from typing import Callable

from mochi.config import AnimationConfig, LayoutConfig
from mochi.display.surface import DrawingSurface
from mochi.eyes import expressions
from mochi.eyes.animator import EyeAnimator
from mochi.eyes.compositor import Compositor
from mochi.eyes.layout import Layout
from mochi.eyes.params import (
    Expression, ImpulseTargets, MouthAnim, MouthShape, ParameterState,
)
from mochi.eyes.render_state import RenderState, compute_render_state
from mochi.eyes.smoother import advance
from mochi.utils.math_helpers import clamp

log = logging.getLogger("mochi-face")

SPEED_FIELDS = (
    "openness_speed", "squish_speed", "gaze_speed", "emotion_speed",
    "mouth_speed", "heart_speed", "effect_speed",
)


class MochiEngine:
    """Owns the face state and draws it onto a DrawingSurface."""

    def __init__(self, surface: DrawingSurface,
                 layout: LayoutConfig | None = None,
                 animation: AnimationConfig | None = None,
                 rng: random.Random | None = None,
                 clock: Callable[[], float] = time.monotonic):
        self._surface = surface
        self._layout_cfg = layout or LayoutConfig()
        # Own copy, the duration setters write into it
        self._anim_cfg = replace(animation) if animation is not None else AnimationConfig()
        self._rng = rng or random.Random()
        self._clock = clock

        self.layout = Layout(
            screen_width=surface.width,
            screen_height=surface.height,
            eye_width=self._layout_cfg.eye_width,
            eye_height=self._layout_cfg.eye_height,
            spacing=self._layout_cfg.spacing,
            border_radius=self._layout_cfg.border_radius,
            mouth_width=self._layout_cfg.mouth_width,
            mouth_height=self._layout_cfg.mouth_height,
        )
        self.params = ParameterState()
        self.targets = ImpulseTargets()
        self.timers = EyeAnimator(self._anim_cfg, self._rng)
        self.compositor = Compositor(surface, self._rng)
        self.render: RenderState | None = None

        self._frame_interval = 1.0 / 50
        self._last_frame: float | None = None
        self._apply_speeds()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def begin(self, width: int, height: int, max_frame_rate: float = 50):
        """Reset to a closed-eye pose that opens smoothly on the first frames."""
        self.set_screen_size(width, height)
        self._frame_interval = 1.0 / max(1.0, float(max_frame_rate))
        self._last_frame = None

        self.reset_defaults()
        self.params.openness = 0.0
        self.targets.openness = 1.0

        self._surface.clear()
        self._surface.flush()
        log.info(f"Engine started at {self.layout.screen_width}x{self.layout.screen_height}, "
                 f"max {max_frame_rate} FPS")

    def reset_defaults(self):
        """Neutral face: parameters, targets, overlays and timers all reset."""
        self.params.reset()
        self.targets.reset_values()
        self._apply_speeds()
        self.timers = EyeAnimator(self._anim_cfg, self._rng)

    def _apply_speeds(self):
        for name in SPEED_FIELDS:
            setattr(self.targets, name, getattr(self._anim_cfg, name))

    @property
    def frame_interval(self) -> float:
        return self._frame_interval

    def update(self) -> bool:
        """Render a frame if the frame interval has elapsed. Returns True if drawn."""
        now = self._clock()
        if self._last_frame is None:
            dt = self._frame_interval
        else:
            dt = now - self._last_frame
            if dt < self._frame_interval:
                return False
        self._last_frame = now
        self.step(dt)
        return True

    def step(self, dt: float) -> RenderState:
        """Advance the face by dt seconds and draw exactly one frame."""
        dt = max(0.0, dt)
        self.timers.update(dt, self.params, self.targets, self.layout)
        advance(self.params, self.targets, dt)
        self.render = compute_render_state(self.layout, self.params)
        self.compositor.draw(self.render, self.params, self.layout, dt)
        self.timers.finish_wink(dt, self.targets)
        self._surface.flush()
        return self.render

    # ------------------------------------------------------------------
    # Continuous setters
    # ------------------------------------------------------------------

    def set_openness(self, target: float, speed: float | None = None):
        self.targets.openness = clamp(target, 0.0, 1.0)
        self._set_speed("openness_speed", speed)

    def set_squish(self, target: float, speed: float | None = None):
        self.targets.squish = clamp(target, 0.5, 1.5)
        self._set_speed("squish_speed", speed)

    def set_gaze(self, x: float, y: float, speed: float | None = None):
        self.targets.gaze_x = clamp(x, -1.0, 1.0)
        self.targets.gaze_y = clamp(y, -1.0, 1.0)
        self._set_speed("gaze_speed", speed)

    def set_mouth_openness(self, target: float, speed: float | None = None):
        self.targets.mouth_openness = clamp(target, 0.0, 1.0)
        self._set_speed("mouth_speed", speed)

    def _set_speed(self, name: str, speed: float | None):
        if speed is not None:
            setattr(self.targets, name, max(0.0, speed))

    def set_openness_speed(self, speed: float):
        self._set_speed("openness_speed", speed)

    def set_squish_speed(self, speed: float):
        self._set_speed("squish_speed", speed)

    def set_gaze_speed(self, speed: float):
        self._set_speed("gaze_speed", speed)

    def set_emotion_speed(self, speed: float):
        self._set_speed("emotion_speed", speed)

    def set_mouth_speed(self, speed: float):
        self._set_speed("mouth_speed", speed)

    def set_effect_speed(self, speed: float):
        self._set_speed("effect_speed", speed)

    def open(self):
        self.targets.openness = 1.0

    def close(self):
        self.targets.openness = 0.0

    # ------------------------------------------------------------------
    # Emotions
    # ------------------------------------------------------------------

    def set_joy(self, weight: float, speed: float | None = None):
        self.targets.joy = clamp(weight, 0.0, 1.0)
        self._set_speed("emotion_speed", speed)

    def set_anger(self, weight: float, speed: float | None = None):
        self.targets.anger = clamp(weight, 0.0, 1.0)
        self._set_speed("emotion_speed", speed)

    def set_fatigue(self, weight: float, speed: float | None = None):
        self.targets.fatigue = clamp(weight, 0.0, 1.0)
        self._set_speed("emotion_speed", speed)

    def set_love(self, weight: float, speed: float | None = None):
        self.targets.love = clamp(weight, 0.0, 1.0)
        self._set_speed("emotion_speed", speed)

    def reset_emotions(self):
        """Relax all emotions and the heart to zero and soft-cancel timed overlays."""
        self.targets.joy = 0.0
        self.targets.anger = 0.0
        self.targets.fatigue = 0.0
        self.targets.love = 0.0
        self.targets.heart_scale = 0.0
        self.timers.cancel_timed(self.targets)

    # ------------------------------------------------------------------
    # One-shot triggers
    # ------------------------------------------------------------------

    def blink(self):
        self.timers.blink(self.params)

    def wink(self, left: bool = True):
        self.timers.wink(left, self.targets)

    def _trigger(self, expression: Expression, duration: float | None, default: float):
        duration = default if duration is None else duration
        self.timers.trigger(expression, duration, self.params, self.targets)

    def trigger_love(self, duration: float | None = None):
        self._trigger(Expression.LOVE, duration, self._anim_cfg.love_duration)

    def trigger_cry(self, duration: float | None = None):
        self._trigger(Expression.CRY, duration, self._anim_cfg.cry_duration)

    def trigger_confused(self, duration: float | None = None):
        self._trigger(Expression.CONFUSED, duration, self._anim_cfg.confused_duration)

    def trigger_laugh(self, duration: float | None = None):
        self._trigger(Expression.LAUGH, duration, self._anim_cfg.laugh_duration)

    def trigger_uwu(self, duration: float | None = None):
        self._trigger(Expression.UWU, duration, self._anim_cfg.uwu_duration)

    def trigger_xd(self, duration: float | None = None):
        self._trigger(Expression.XD, duration, self._anim_cfg.xd_duration)

    def start_mouth_anim(self, kind, duration: float):
        """Start talk/chew/wobble. Accepts a MouthAnim, its name or a legacy code."""
        if isinstance(kind, MouthAnim):
            anim = kind
        elif isinstance(kind, str):
            try:
                anim = MouthAnim(kind.lower())
            except ValueError:
                anim = MouthAnim.NONE
        elif kind == expressions.MOUTH_ANIM_LAUGH:
            self.trigger_laugh(duration)
            return
        else:
            anim = expressions.MOUTH_ANIM_CODES.get(kind, MouthAnim.NONE)

        if anim is MouthAnim.NONE:
            log.debug(f"Ignoring unknown mouth animation {kind!r}")
            return
        self.timers.start_mouth_anim(anim, duration)

    # ------------------------------------------------------------------
    # Level toggles
    # ------------------------------------------------------------------

    def set_knocked(self, on: bool):
        self.timers.set_knocked(bool(on), self.params, self.targets)

    def set_cyclops(self, on: bool):
        self.params.cyclops = bool(on)

    def set_eyebrows(self, raised: bool):
        self.params.eyebrows = bool(raised)

    def set_mouth_enabled(self, enabled: bool):
        """Hide or show the mouth, including the mouth parts of overlays."""
        self.params.mouth_enabled = bool(enabled)

    def set_sweat(self, on: bool):
        self.targets.sweat = 1.0 if on else 0.0

    def set_curiosity(self, on: bool):
        self.timers.curious = bool(on)
        self.targets.curious = 1.0 if on else 0.0
        if on:
            self.params.curious_phase = 0.0

    def set_h_flicker(self, on: bool, amplitude: float = 2):
        self.timers.set_flicker(True, amplitude if on else 0.0)

    def set_v_flicker(self, on: bool, amplitude: float = 2):
        self.timers.set_flicker(False, amplitude if on else 0.0)

    def set_autoblinker(self, on: bool, interval: float | None = None,
                        variation: float | None = None):
        self.timers.set_autoblinker(
            bool(on),
            self.timers.blink_interval if interval is None else interval,
            self.timers.blink_variation if variation is None else variation,
        )

    def set_idle_mode(self, on: bool, interval: float | None = None,
                      variation: float | None = None):
        self.timers.set_idle_mode(
            bool(on),
            self.timers.idle_interval if interval is None else interval,
            self.timers.idle_variation if variation is None else variation,
        )

    def set_wink_duration(self, seconds: float):
        self._anim_cfg.wink_duration = max(0.0, seconds)

    def set_laugh_duration(self, seconds: float):
        """Default length of trigger_laugh() when no duration is passed."""
        self._anim_cfg.laugh_duration = max(0.0, seconds)

    def set_love_duration(self, seconds: float):
        self._anim_cfg.love_duration = max(0.0, seconds)

    # ------------------------------------------------------------------
    # Mouth shape
    # ------------------------------------------------------------------

    def set_mouth_type(self, shape):
        """Crossfade to a new mouth shape (MouthShape, name or legacy code)."""
        shape = expressions.mouth_shape(shape)
        self.params.target_mouth_shape = shape
        if shape is self.params.mouth_shape:
            self.params.mouth_transition = 1.0
        else:
            self.params.mouth_transition = 0.0

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def set_screen_size(self, width: int, height: int):
        self.layout.screen_width = width
        self.layout.screen_height = height
        self.layout.recompute()
        resize = getattr(self._surface, "resize", None)
        if resize is not None and (self._surface.width, self._surface.height) != (
                self.layout.screen_width, self.layout.screen_height):
            resize(self.layout.screen_width, self.layout.screen_height)

    def set_width(self, left: int, right: int | None = None):
        """Eye width. Eyes are symmetric, so only the left value is used."""
        self.layout.eye_width = left
        self.layout.recompute()
        log.debug(f"Eye width set to {self.layout.eye_width}")

    def set_height(self, left: int, right: int | None = None):
        self.layout.eye_height = left
        self.layout.recompute()
        log.debug(f"Eye height set to {self.layout.eye_height}")

    def set_spacing(self, space: int):
        self.layout.spacing = space
        self.layout.recompute()

    def set_border_radius(self, left: int, right: int | None = None):
        self.layout.border_radius = left
        self.layout.recompute()

    def set_mouth_size(self, width: int, height: int | None = None):
        self.layout.mouth_width = width
        if height is not None:
            self.layout.mouth_height = height
        self.layout.recompute()

    def set_display_colors(self, background: int, foreground: int):
        self.compositor.background = background
        self.compositor.foreground = foreground

    @property
    def eye_width(self) -> int:
        return self.layout.eye_width

    @property
    def eye_height(self) -> int:
        return self.layout.eye_height

    @property
    def spacing(self) -> int:
        return self.layout.spacing

    @property
    def border_radius(self) -> int:
        return self.layout.border_radius

    @property
    def mouth_width(self) -> int:
        return self.layout.mouth_width

    # ------------------------------------------------------------------
    # Legacy API
    # ------------------------------------------------------------------

    def set_mood(self, mood: int):
        """Old enumerated mood (DEFAULT/TIRED/ANGRY/HAPPY) onto emotion weights."""
        self.reset_emotions()
        for name, weight in expressions.mood_weights(mood).items():
            getattr(self, f"set_{name}")(weight)

    def set_position(self, position: int):
        """Old compass position (N..NW, anything else = center) onto gaze."""
        self.set_gaze(*expressions.position_gaze(position))

    def anim_love(self):
        self.trigger_love()

    def anim_cry(self):
        self.trigger_cry()

    def anim_confused(self):
        self.trigger_confused()

    def anim_laugh(self):
        self.trigger_laugh()

    def anim_knocked(self):
        self.set_knocked(True)
