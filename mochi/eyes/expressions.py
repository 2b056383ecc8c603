"""Lookup tables for the legacy integer command codes."""

from mochi.eyes.params import MouthShape, MouthAnim

# Legacy mood codes
DEFAULT = 0
TIRED = 1
ANGRY = 2
HAPPY = 3

# Legacy compass positions (0 or anything unknown = center)
POS_N = 1
POS_NE = 2
POS_E = 3
POS_SE = 4
POS_S = 5
POS_SW = 6
POS_W = 7
POS_NW = 8

# Emotion weights applied by each legacy mood
MOODS = {
    DEFAULT: {},
    TIRED: {"fatigue": 1.0},
    ANGRY: {"anger": 1.0},
    HAPPY: {"joy": 1.0},
}

# Gaze unit targets, screen coordinates (negative y = up)
POSITIONS = {
    POS_N: (0.0, -1.0),
    POS_NE: (1.0, -1.0),
    POS_E: (1.0, 0.0),
    POS_SE: (1.0, 1.0),
    POS_S: (0.0, 1.0),
    POS_SW: (-1.0, 1.0),
    POS_W: (-1.0, 0.0),
    POS_NW: (-1.0, -1.0),
}
CENTER = (0.0, 0.0)

POSITION_NAMES = {
    "center": 0,
    "n": POS_N, "up": POS_N,
    "ne": POS_NE,
    "e": POS_E, "right": POS_E,
    "se": POS_SE,
    "s": POS_S, "down": POS_S,
    "sw": POS_SW,
    "w": POS_W, "left": POS_W,
    "nw": POS_NW,
}

MOUTH_CODES = {
    1: MouthShape.SMILE,
    2: MouthShape.FROWN,
    3: MouthShape.OPEN,
    4: MouthShape.OOO,
    5: MouthShape.FLAT,
    6: MouthShape.W,
    7: MouthShape.D,
}

MOUTH_ANIM_CODES = {
    1: MouthAnim.TALK,
    2: MouthAnim.CHEW,
    3: MouthAnim.WOBBLE,
}
# Code 4 is the laughing mouth, which maps onto the laugh overlay
MOUTH_ANIM_LAUGH = 4


def mood_weights(code: int) -> dict:
    """Emotion weights for a legacy mood code; unknown codes are neutral."""
    return MOODS.get(code, MOODS[DEFAULT])


def position_gaze(code: int) -> tuple[float, float]:
    """Gaze target for a legacy compass code; unknown codes are centered."""
    return POSITIONS.get(code, CENTER)


def mouth_shape(code) -> MouthShape:
    """Resolve a MouthShape, legacy int code or shape name; default smile."""
    if isinstance(code, MouthShape):
        return code
    if isinstance(code, str):
        try:
            return MouthShape(code.lower())
        except ValueError:
            return MouthShape.SMILE
    return MOUTH_CODES.get(code, MouthShape.SMILE)
