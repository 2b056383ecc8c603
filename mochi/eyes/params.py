from dataclasses import dataclass
from enum import Enum


class MouthShape(Enum):
    SMILE = "smile"
    FROWN = "frown"
    OPEN = "open"        # surprised
    OOO = "ooo"          # small round "o"
    FLAT = "flat"
    W = "w"              # uwu-style cat mouth
    D = "d"              # wide open laughing "D"


class Expression(Enum):
    """Exclusive facial overlays. At most one is active at a time."""
    NONE = "none"
    LOVE = "love"
    CRY = "cry"
    CONFUSED = "confused"
    LAUGH = "laugh"
    UWU = "uwu"
    XD = "xd"
    KNOCKED = "knocked"


class MouthAnim(Enum):
    NONE = "none"
    TALK = "talk"
    CHEW = "chew"
    WOBBLE = "wobble"


@dataclass
class ParameterState:
    """Current value of every animated quantity, advanced each tick."""

    # Openness: 0.0 = closed, 1.0 = fully open
    openness: float = 1.0
    left_openness: float = 1.0
    right_openness: float = 1.0

    # Squash/stretch, 1.0 = neutral, 0.5..1.5
    squish: float = 1.0

    # Gaze direction, -1.0..1.0
    gaze_x: float = 0.0
    gaze_y: float = 0.0

    # Emotion blend weights, 0.0..1.0
    joy: float = 0.0
    anger: float = 0.0
    fatigue: float = 0.0
    love: float = 0.0

    mouth_openness: float = 0.0

    # Overlay intensities, 0.0..1.0
    heart_scale: float = 0.0
    tears: float = 0.0
    confused: float = 0.0
    laugh: float = 0.0
    uwu: float = 0.0
    xd: float = 0.0
    knocked: float = 0.0
    sweat: float = 0.0
    curious: float = 0.0

    # Phase accumulators
    heart_pulse: float = 0.0
    tear_progress: float = 0.0
    spiral_angle: float = 0.0
    curious_phase: float = 0.0
    shake_phase: float = 0.0
    flicker_phase: float = 0.0

    # Frame-local offsets in pixels (recomputed every tick, never smoothed)
    h_flicker: float = 0.0
    v_flicker: float = 0.0

    cyclops: bool = False
    eyebrows: bool = False
    mouth_enabled: bool = True
    mouth_shape: MouthShape = MouthShape.SMILE
    target_mouth_shape: MouthShape = MouthShape.SMILE
    mouth_transition: float = 1.0  # 1.0 = settled on target

    def reset(self):
        """Return every field to its neutral value."""
        for name, value in ParameterState.__dataclass_fields__.items():
            setattr(self, name, value.default)


# Continuous fields shared by ParameterState and ImpulseTargets
SMOOTHED_FIELDS = (
    "openness", "left_openness", "right_openness", "squish",
    "gaze_x", "gaze_y", "joy", "anger", "fatigue", "love",
    "mouth_openness", "heart_scale",
    "tears", "confused", "laugh", "uwu", "xd", "knocked", "sweat", "curious",
)


@dataclass
class ImpulseTargets:
    """Values the smoother is pulling each ParameterState field toward."""

    openness: float = 1.0
    left_openness: float = 1.0
    right_openness: float = 1.0
    squish: float = 1.0
    gaze_x: float = 0.0
    gaze_y: float = 0.0
    joy: float = 0.0
    anger: float = 0.0
    fatigue: float = 0.0
    love: float = 0.0
    mouth_openness: float = 0.0
    heart_scale: float = 0.0
    tears: float = 0.0
    confused: float = 0.0
    laugh: float = 0.0
    uwu: float = 0.0
    xd: float = 0.0
    knocked: float = 0.0
    sweat: float = 0.0
    curious: float = 0.0

    # Convergence rates per group (1/s)
    openness_speed: float = 12.0
    squish_speed: float = 10.0
    gaze_speed: float = 6.0
    emotion_speed: float = 5.0
    mouth_speed: float = 15.0
    heart_speed: float = 8.0
    effect_speed: float = 4.0

    def reset_values(self):
        """Neutral targets. Rates are left alone."""
        for name in SMOOTHED_FIELDS:
            setattr(self, name, ImpulseTargets.__dataclass_fields__[name].default)
