"""Per-frame pixel geometry derived from Layout + ParameterState.

Everything here is recomputed from scratch each frame and never fed back into
the parameter state. All rectangles are clamped onto the screen and floored to
at least 1 px so the drawing primitives always get well-formed input.
"""

from dataclasses import dataclass

from mochi.eyes.layout import Layout
from mochi.eyes.params import ParameterState
from mochi.utils.math_helpers import clamp

MIN_BORDER_RADIUS = 2
# Eyes grow by this fraction at full sideways gaze
PARALLAX_GAIN = 0.05
# Size difference between the eyes in curious mode at full gaze
CURIOUS_GAIN = 0.25
# Extra eye height (px, per unit squish)
BOTTOM_BULGE = 2.0
MOUTH_GAP = 4
MOUTH_MARGIN = 8
# Extra mouth height at full openness
MOUTH_OPEN_GROWTH = 6


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    @property
    def center(self) -> tuple[int, int]:
        return self.x + self.w // 2, self.y + self.h // 2


@dataclass(frozen=True)
class RenderState:
    left: Rect
    right: Rect | None      # None in cyclops mode
    mouth: Rect
    mouth_visible: bool
    border_radius: int
    gaze_offset: tuple[int, int]


def stretch_factors(squish: float) -> tuple[float, float]:
    """Horizontal and vertical scale for a squish value (area-preserving)."""
    squish = clamp(squish, 0.5, 1.5)
    return 1.0 / squish, squish


def _fit(value: int, size: int, limit: int) -> int:
    return int(clamp(value, 0, max(0, limit - size)))


def _eye_rect(layout: Layout, base_x: int, width: float, height: float,
              offset_x: int, offset_y: int, max_width: int) -> Rect:
    """Rect of the given size centered on an eye's base slot plus gaze offset."""
    w = int(clamp(int(width), 1, max(1, max_width)))
    h = int(clamp(int(height), 1, layout.screen_height))
    cx = base_x + layout.eye_width / 2 + offset_x
    cy = layout.eye_y + layout.eye_height / 2 + offset_y
    x = _fit(int(round(cx - w / 2)), w, layout.screen_width)
    y = _fit(int(round(cy - h / 2)), h, layout.screen_height)
    return Rect(x, y, w, h)


def compute_render_state(layout: Layout, params: ParameterState) -> RenderState:
    left_open = clamp(params.openness * params.left_openness, 0.0, 1.0)
    right_open = clamp(params.openness * params.right_openness, 0.0, 1.0)

    stretch_x, stretch_y = stretch_factors(params.squish)
    eye_w = layout.eye_width * stretch_x
    eye_h = layout.eye_height * stretch_y

    # Gaze travel available on each axis
    max_gaze_x = max(0, (layout.screen_width - layout.eye_width * 2 - layout.spacing) // 2)
    max_gaze_y = max(0, (layout.screen_height - layout.eye_height) // 2)
    offset_x = int(clamp(params.gaze_x, -1.0, 1.0) * max_gaze_x + params.h_flicker)
    offset_y = int(clamp(params.gaze_y, -1.0, 1.0) * max_gaze_y + params.v_flicker)

    # 3-D illusion: parallax growth, curious asymmetry, soft bottom bulge
    parallax = 1.0 + abs(params.gaze_x) * PARALLAX_GAIN
    curious = clamp(params.curious, 0.0, 1.0) * CURIOUS_GAIN
    left_scale = 1.0 - params.gaze_x * curious
    right_scale = 1.0 + params.gaze_x * curious
    bulge = BOTTOM_BULGE * params.squish

    if params.cyclops:
        single_x = (layout.screen_width - layout.eye_width) // 2
        left = _eye_rect(layout, single_x, eye_w * parallax,
                         eye_h * left_open + bulge, offset_x, offset_y,
                         layout.screen_width)
        right = None
    else:
        # Widest an eye may get before it would run into its neighbour
        slot_width = (layout.screen_width - layout.spacing) // 2
        left = _eye_rect(layout, layout.left_eye_x,
                         eye_w * parallax * left_scale,
                         (eye_h * left_open + bulge) * left_scale,
                         offset_x, offset_y, slot_width)
        right = _eye_rect(layout, layout.right_eye_x,
                          eye_w * parallax * right_scale,
                          (eye_h * right_open + bulge) * right_scale,
                          offset_x, offset_y, slot_width)

    radius = max(MIN_BORDER_RADIUS, int(layout.border_radius * min(stretch_x, stretch_y)))

    # Mouth sits a fixed gap below whichever eye reaches lowest
    eye_bottom = left.bottom if right is None else max(left.bottom, right.bottom)
    mouth_w = min(layout.mouth_width, layout.screen_width)
    mouth_h = layout.mouth_height + int(clamp(params.mouth_openness, 0.0, 1.0) * MOUTH_OPEN_GROWTH)
    mouth_x = _fit((layout.screen_width - mouth_w) // 2 + offset_x, mouth_w, layout.screen_width)
    mouth_y = eye_bottom + MOUTH_GAP
    visible = mouth_y <= layout.screen_height - MOUTH_MARGIN
    mouth_y = min(mouth_y, max(0, layout.screen_height - 1))
    mouth_h = max(1, min(mouth_h, layout.screen_height - mouth_y))
    mouth = Rect(mouth_x, mouth_y, mouth_w, mouth_h)

    return RenderState(
        left=left,
        right=right,
        mouth=mouth,
        mouth_visible=visible,
        border_radius=radius,
        gaze_offset=(offset_x, offset_y),
    )
