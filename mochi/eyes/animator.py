import logging
import math
import random

from mochi.config import AnimationConfig
from mochi.eyes.layout import Layout
from mochi.eyes.params import (
    Expression, ImpulseTargets, MouthAnim, MouthShape, ParameterState,
)
from mochi.utils.math_helpers import approach, clamp

log = logging.getLogger("mochi-face")

# Below this intensity a fading overlay lets go of the mouth
RELEASE_THRESHOLD = 0.1
# Auto-blink pauses while knocked is stronger than this
KNOCKED_BLINK_SUPPRESS = 0.5
# Opposite eye openness during a wink
WINK_SQUINT = 0.7
# Pixels, absolute cap on the combined flicker offset
MAX_FLICKER = 10.0
# Manual flicker amplitude ramp (px/s)
FLICKER_RAMP = 40.0
_EPSILON = 1e-6

FORCED_MOUTH = {
    Expression.LOVE: MouthShape.SMILE,
    Expression.CRY: MouthShape.FROWN,
    Expression.CONFUSED: MouthShape.OOO,
    Expression.LAUGH: MouthShape.SMILE,
    Expression.UWU: MouthShape.W,
    Expression.XD: MouthShape.D,
    Expression.KNOCKED: MouthShape.OOO,
}

# Targets held while an overlay is running
ASSERTED_TARGETS = {
    Expression.LOVE: {"love": 1.0, "heart_scale": 1.0},
    Expression.CRY: {"tears": 1.0, "fatigue": 0.5},
    Expression.CONFUSED: {"confused": 1.0},
    Expression.LAUGH: {"laugh": 1.0, "joy": 1.0},
    Expression.UWU: {"uwu": 1.0},
    Expression.XD: {"xd": 1.0},
    Expression.KNOCKED: {"knocked": 1.0},
}

# Targets driven back to zero when an overlay ends or is cancelled
RELEASED_TARGETS = {
    Expression.LOVE: ("love", "heart_scale"),
    Expression.CRY: ("tears", "fatigue"),
    Expression.CONFUSED: ("confused",),
    Expression.LAUGH: ("laugh", "joy", "mouth_openness"),
    Expression.UWU: ("uwu",),
    Expression.XD: ("xd",),
    Expression.KNOCKED: ("knocked",),
}

OVERLAYS = tuple(FORCED_MOUTH)
TIMED_OVERLAYS = tuple(e for e in OVERLAYS if e is not Expression.KNOCKED)


def overlay_intensity(expression: Expression, params: ParameterState) -> float:
    """Visible strength of an overlay, used to decide when it has faded out."""
    if expression is Expression.LOVE:
        return max(params.love, params.heart_scale)
    if expression is Expression.CRY:
        return params.tears
    if expression is Expression.NONE:
        return 0.0
    return getattr(params, expression.value)


class EyeAnimator:
    """Countdown and level timers that push targets around each tick."""

    def __init__(self, config: AnimationConfig, rng: random.Random | None = None):
        self._cfg = config
        self._rng = rng or random.Random()

        # Exclusive overlay: which one, how long it keeps asserting
        self.expression = Expression.NONE
        self.remaining = 0.0
        self.knocked = False

        # Auto-blink
        self.autoblink = config.autoblink
        self.blink_interval = config.blink_interval
        self.blink_variation = config.blink_variation
        self.blink_cooldown = 2.0

        # Idle gaze wandering
        self.idle_mode = False
        self.idle_interval = config.idle_interval
        self.idle_variation = config.idle_variation
        self.idle_cooldown = 0.0

        # Orthogonal toggles
        self.curious = False

        # Mouth micro-animation
        self.mouth_anim = MouthAnim.NONE
        self.mouth_anim_remaining = 0.0
        self.mouth_anim_elapsed = 0.0

        # Wink
        self.wink_remaining = 0.0

        # Manual shiver amplitudes: current, requested
        self._h_amp = 0.0
        self._h_amp_target = 0.0
        self._v_amp = 0.0
        self._v_amp_target = 0.0

    # ------------------------------------------------------------------
    # Overlays
    # ------------------------------------------------------------------

    def remaining_for(self, expression: Expression) -> float:
        """Seconds left on an overlay's timer; 0 unless it is the active one."""
        if expression is self.expression and self.remaining > 0:
            return self.remaining
        return 0.0

    @property
    def asserting(self) -> bool:
        """True while the active overlay is still holding its targets up."""
        if self.expression is Expression.KNOCKED:
            return self.knocked
        return self.expression is not Expression.NONE and self.remaining > 0

    def trigger(self, expression: Expression, duration: float,
                params: ParameterState, targets: ImpulseTargets):
        """Start an overlay, soft-cancelling every other one first."""
        for other in OVERLAYS:
            if other is not expression:
                self._cancel(other, targets)

        self.expression = expression
        self.remaining = max(0.0, duration)
        self.knocked = expression is Expression.KNOCKED

        if expression is Expression.LOVE:
            params.heart_pulse = 0.0
        elif expression is Expression.CRY:
            params.tear_progress = 0.0
        elif expression is Expression.KNOCKED:
            params.spiral_angle = 0.0

        params.mouth_shape = FORCED_MOUTH[expression]
        if expression is not Expression.KNOCKED and self.remaining <= _EPSILON:
            # Already expired: behaves like a timer that ran out this tick
            self.remaining = 0.0
            for name in RELEASED_TARGETS[expression]:
                setattr(targets, name, 0.0)
            log.debug(f"Overlay {expression.value} triggered with no duration")
            return

        for name, value in ASSERTED_TARGETS[expression].items():
            setattr(targets, name, value)
        log.debug(f"Overlay {expression.value} triggered ({self.remaining:.2f}s)")

    def set_knocked(self, on: bool, params: ParameterState, targets: ImpulseTargets):
        if on:
            if not self.knocked:
                self.trigger(Expression.KNOCKED, 0.0, params, targets)
        elif self.knocked:
            self._cancel(Expression.KNOCKED, targets)

    def cancel_timed(self, targets: ImpulseTargets):
        """Soft-cancel every duration-based overlay. Knocked is left alone."""
        for expression in TIMED_OVERLAYS:
            self._cancel(expression, targets)

    def _cancel(self, expression: Expression, targets: ImpulseTargets):
        for name in RELEASED_TARGETS[expression]:
            setattr(targets, name, 0.0)
        if expression is self.expression:
            self.remaining = 0.0
        if expression is Expression.KNOCKED:
            self.knocked = False

    # ------------------------------------------------------------------
    # One-shot actions
    # ------------------------------------------------------------------

    def blink(self, params: ParameterState):
        """Snap both eyes shut; the smoother reopens them toward the target."""
        params.openness = 0.0

    def wink(self, left: bool, targets: ImpulseTargets):
        if left:
            targets.left_openness = 0.0
            targets.right_openness = WINK_SQUINT
        else:
            targets.right_openness = 0.0
            targets.left_openness = WINK_SQUINT
        self.wink_remaining = self._cfg.wink_duration

    def start_mouth_anim(self, kind: MouthAnim, duration: float):
        self.mouth_anim = kind
        self.mouth_anim_remaining = max(0.0, duration)
        self.mouth_anim_elapsed = 0.0

    def set_flicker(self, horizontal: bool, amplitude: float):
        amplitude = clamp(abs(amplitude), 0.0, MAX_FLICKER)
        if horizontal:
            self._h_amp_target = amplitude
        else:
            self._v_amp_target = amplitude

    def set_idle_mode(self, on: bool, interval: float, variation: float):
        self.idle_mode = on
        self.idle_interval = max(0.0, interval)
        self.idle_variation = max(0.0, variation)
        if on:
            self.idle_cooldown = 0.5  # start soon

    def set_autoblinker(self, on: bool, interval: float, variation: float):
        self.autoblink = on
        self.blink_interval = max(0.0, interval)
        self.blink_variation = max(0.0, variation)

    # ------------------------------------------------------------------
    # Per-tick update
    # ------------------------------------------------------------------

    def update(self, dt: float, params: ParameterState, targets: ImpulseTargets,
               layout: Layout):
        """Advance every timer by dt. Runs before the smoother each tick."""
        self._update_mouth_anim(dt, targets)
        self._update_expression(dt, params, targets)
        self._update_mouth_shape(dt, params)
        self._update_phases(dt, params, layout)
        self._update_blink(dt, params)
        self._update_idle(dt, targets)
        self._update_curious(dt, params, targets)
        self._update_flicker(dt, params)

    def finish_wink(self, dt: float, targets: ImpulseTargets):
        """Reopen both eyes once the wink has been held long enough."""
        if self.wink_remaining <= 0:
            return
        self.wink_remaining -= dt
        if self.wink_remaining <= _EPSILON:
            self.wink_remaining = 0.0
            targets.left_openness = 1.0
            targets.right_openness = 1.0

    def _update_expression(self, dt: float, params: ParameterState,
                           targets: ImpulseTargets):
        expression = self.expression
        if expression is Expression.NONE:
            return

        if self.asserting:
            for name, value in ASSERTED_TARGETS[expression].items():
                setattr(targets, name, value)
            params.mouth_shape = FORCED_MOUTH[expression]

            if expression is Expression.KNOCKED:
                return

            self.remaining -= dt
            if expression is Expression.LAUGH:
                targets.mouth_openness = (math.sin(self.remaining * 12.0) + 1.0) * 0.5

            if self.remaining <= _EPSILON:
                self.remaining = 0.0
                for name in RELEASED_TARGETS[expression]:
                    setattr(targets, name, 0.0)
                log.debug(f"Overlay {expression.value} expired")
            return

        # Fading out: keep the forced mouth until the overlay is nearly gone
        if overlay_intensity(expression, params) < RELEASE_THRESHOLD:
            self.expression = Expression.NONE
            if params.mouth_shape is not params.target_mouth_shape:
                params.mouth_transition = 0.0
            log.debug(f"Overlay {expression.value} released")
        else:
            params.mouth_shape = FORCED_MOUTH[expression]

    def _update_mouth_anim(self, dt: float, targets: ImpulseTargets):
        if self.mouth_anim is MouthAnim.NONE:
            return
        self.mouth_anim_remaining -= dt
        self.mouth_anim_elapsed += dt
        if self.mouth_anim_remaining <= _EPSILON:
            self.mouth_anim = MouthAnim.NONE
            self.mouth_anim_remaining = 0.0
            targets.mouth_openness = 0.0
            return

        t = self.mouth_anim_elapsed
        if self.mouth_anim is MouthAnim.TALK:
            targets.mouth_openness = (math.sin(t * 18.0) + 1.0) * 0.5
        elif self.mouth_anim is MouthAnim.CHEW:
            targets.mouth_openness = abs(math.sin(t * 9.0)) * 0.6
        elif self.mouth_anim is MouthAnim.WOBBLE:
            targets.mouth_openness = (math.sin(t * 25.0) + 1.0) * 0.15

    def _update_mouth_shape(self, dt: float, params: ParameterState):
        if self.expression is not Expression.NONE:
            return
        if params.mouth_shape is params.target_mouth_shape:
            params.mouth_transition = 1.0
            return
        duration = max(_EPSILON, self._cfg.mouth_transition)
        params.mouth_transition += dt / duration
        if params.mouth_transition >= 1.0 - _EPSILON:
            params.mouth_shape = params.target_mouth_shape
            params.mouth_transition = 1.0

    def _update_phases(self, dt: float, params: ParameterState, layout: Layout):
        if params.heart_scale > 0.01:
            params.heart_pulse += dt * 10.0

        if params.tears > 0.01:
            params.tear_progress += dt * 40.0
            if params.tear_progress > layout.screen_height:
                params.tear_progress = 0.0
        else:
            params.tear_progress = 0.0

        # Monotonic while visible; only trigger() rewinds it
        if params.knocked > RELEASE_THRESHOLD:
            params.spiral_angle += dt * 5.0

        if params.confused > 0.01 or params.laugh > 0.01:
            params.shake_phase += dt
        else:
            params.shake_phase = 0.0

    def _update_blink(self, dt: float, params: ParameterState):
        if not self.autoblink or params.knocked > KNOCKED_BLINK_SUPPRESS:
            return
        self.blink_cooldown -= dt
        if self.blink_cooldown <= 0:
            self.blink(params)
            self.blink_cooldown = (
                self.blink_interval + self._rng.uniform(0.0, self.blink_variation)
            )

    def _update_idle(self, dt: float, targets: ImpulseTargets):
        """Pick random gaze targets when idle."""
        if not self.idle_mode:
            return
        self.idle_cooldown -= dt
        if self.idle_cooldown <= 0:
            targets.gaze_x = self._rng.uniform(-1.0, 1.0)
            targets.gaze_y = self._rng.uniform(-1.0, 1.0)
            self.idle_cooldown = (
                self.idle_interval + self._rng.uniform(0.0, self.idle_variation)
            )

    def _update_curious(self, dt: float, params: ParameterState,
                        targets: ImpulseTargets):
        """Slow left-right scan while curious mode is on."""
        if not self.curious:
            return
        params.curious_phase += dt * 1.5
        targets.gaze_x = math.sin(params.curious_phase) * 0.8

    def _update_flicker(self, dt: float, params: ParameterState):
        h = 0.0
        v = 0.0
        if params.confused > 0.01:
            h += math.sin(params.shake_phase * 50.0) * 8.0 * params.confused
        if params.laugh > 0.01:
            v += math.sin(params.shake_phase * 20.0) * 2.0 * params.laugh

        self._h_amp = approach(self._h_amp, self._h_amp_target, FLICKER_RAMP, dt)
        self._v_amp = approach(self._v_amp, self._v_amp_target, FLICKER_RAMP, dt)
        if self._h_amp > 0 or self._v_amp > 0:
            params.flicker_phase += dt
            # Square shiver at ~12 Hz
            sign = 1.0 if math.sin(params.flicker_phase * 2.0 * math.pi * 12.0) >= 0 else -1.0
            h += self._h_amp * sign
            v += self._v_amp * sign
        else:
            params.flicker_phase = 0.0

        params.h_flicker = clamp(h, -MAX_FLICKER, MAX_FLICKER)
        params.v_flicker = clamp(v, -MAX_FLICKER, MAX_FLICKER)
