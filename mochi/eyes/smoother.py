"""Advances ParameterState toward ImpulseTargets with exponential easing."""

from mochi.eyes.params import ParameterState, ImpulseTargets
from mochi.utils.math_helpers import smooth_damp

# Which rate group drives each smoothed field
RATE_GROUPS = {
    "openness": "openness_speed",
    "left_openness": "openness_speed",
    "right_openness": "openness_speed",
    "squish": "squish_speed",
    "gaze_x": "gaze_speed",
    "gaze_y": "gaze_speed",
    "joy": "emotion_speed",
    "anger": "emotion_speed",
    "fatigue": "emotion_speed",
    "love": "emotion_speed",
    "mouth_openness": "mouth_speed",
    "heart_scale": "heart_speed",
    "tears": "effect_speed",
    "confused": "effect_speed",
    "laugh": "effect_speed",
    "uwu": "effect_speed",
    "xd": "effect_speed",
    "knocked": "effect_speed",
    "sweat": "effect_speed",
    "curious": "effect_speed",
}


def advance(params: ParameterState, targets: ImpulseTargets, dt: float) -> ParameterState:
    """Move every continuous field of params toward its target. Returns params."""
    if dt <= 0.0:
        return params
    for name, group in RATE_GROUPS.items():
        current = getattr(params, name)
        target = getattr(targets, name)
        rate = getattr(targets, group)
        setattr(params, name, smooth_damp(current, target, rate, dt))
    return params
