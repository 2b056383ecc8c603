"""Face compositor: draws one frame from RenderState + ParameterState.

Fixed z-order:
    1. clear
    2. eye bodies, raised eyebrows
    3. eyelids (fatigue / anger droop, happy bottom mask)
    4. mouth
    5. sweat drops
    6. exclusive overlays: love, uwu, xd, tears, knocked

Overlays are drawn once their intensity passes DRAW_THRESHOLD; past
ERASE_THRESHOLD they first blank the eye (and mouth) area to background.
"""

import math
import random

from mochi.display.surface import DrawingSurface
from mochi.eyes.layout import Layout
from mochi.eyes.params import MouthShape, ParameterState
from mochi.eyes.render_state import Rect, RenderState

DRAW_THRESHOLD = 0.1
ERASE_THRESHOLD = 0.5
EYELID_THRESHOLD = 0.1
BLUSH_THRESHOLD = 0.3

MOUTH_THICKNESS = 3
SMILE_DEPTH = 5
FROWN_DEPTH = 4
MOUTH_OPEN_PX = 8

SWEAT_DROPS = 3
SWEAT_FALL_SPEED = 25.0    # px/s
SWEAT_GROW_SPEED = 15.0    # px/s while in the growth window
SWEAT_SHRINK_SPEED = 5.0
SWEAT_GROWTH_WINDOW = 15

TEAR_SIZE = 4
TEAR_SPACING = 10

# Raised eyebrows sit this far above the eye top
EYEBROW_OFFSET = 6
EYEBROW_HEIGHT = 3


def _u_points(cx, cy, hw, hh, n=12):
    """Lower half of an ellipse (a "U"), ordered right to left."""
    points = []
    for i in range(n + 1):
        t = math.pi * i / n
        points.append((cx + hw * math.cos(t), cy + hh * math.sin(t)))
    return points


def _w_points(cx, y, width, depth):
    """Polyline of a small "w" centered on cx."""
    hw = width / 2.0
    return [
        (cx - hw, y),
        (cx - hw / 2.0, y + depth),
        (cx, y + depth // 2),
        (cx + hw / 2.0, y + depth),
        (cx + hw, y),
    ]


class Compositor:
    """Issues the primitive calls for a frame against a DrawingSurface."""

    def __init__(self, surface: DrawingSurface, rng: random.Random | None = None):
        self.surface = surface
        self.background = 0
        self.foreground = 1
        self._rng = rng or random.Random()

        # Sweat drop simulation (fixed pool)
        self._sweat_x = [0.0] * SWEAT_DROPS
        self._sweat_y = [0.0] * SWEAT_DROPS
        self._sweat_size = [2.0] * SWEAT_DROPS
        self._sweat_limit = [20.0] * SWEAT_DROPS
        self._sweat_seeded = False

        self._mouth_painters = {
            MouthShape.SMILE: self._mouth_smile,
            MouthShape.FROWN: self._mouth_frown,
            MouthShape.OPEN: self._mouth_open,
            MouthShape.OOO: self._mouth_ooo,
            MouthShape.FLAT: self._mouth_flat,
            MouthShape.W: self._mouth_w,
            MouthShape.D: self._mouth_d,
        }

    def draw(self, rs: RenderState, params: ParameterState, layout: Layout, dt: float):
        self.surface.clear()
        self._draw_eyes(rs)
        if params.eyebrows:
            self._draw_eyebrows(rs)
        self._draw_eyelids(rs, params, layout)
        if self._mouth_shown(rs, params):
            self._draw_mouth(rs.mouth, params)
        self._draw_sweat(params, layout, dt)
        self._draw_love(rs, params)
        self._draw_uwu(rs, params)
        self._draw_xd(rs, params)
        self._draw_tears(rs, params, layout)
        self._draw_knocked(rs, params)

    @staticmethod
    def _mouth_shown(rs: RenderState, params: ParameterState) -> bool:
        return rs.mouth_visible and params.mouth_enabled

    @staticmethod
    def _eyes(rs: RenderState) -> list[tuple[Rect, bool]]:
        eyes = [(rs.left, True)]
        if rs.right is not None:
            eyes.append((rs.right, False))
        return eyes

    def _erase_eyes(self, rs: RenderState, margin: int):
        for r, _ in self._eyes(rs):
            self.surface.fill_round_rect(
                r.x - margin, r.y - margin, r.w + 2 * margin, r.h + 2 * margin,
                rs.border_radius, self.background,
            )

    def _erase_mouth(self, rs: RenderState):
        m = rs.mouth
        self.surface.fill_rect(m.x - 2, m.y - 3, m.w + 4, m.h + 6, self.background)

    def _thick_line(self, points, thickness: int):
        for dy in range(max(1, thickness)):
            for (x0, y0), (x1, y1) in zip(points, points[1:]):
                self.surface.draw_line(int(x0), int(y0) + dy, int(x1), int(y1) + dy,
                                       self.foreground)

    # ------------------------------------------------------------------
    # Base layers
    # ------------------------------------------------------------------

    def _draw_eyes(self, rs: RenderState):
        for r, _ in self._eyes(rs):
            self.surface.fill_round_rect(r.x, r.y, r.w, r.h, rs.border_radius,
                                         self.foreground)

    def _draw_eyebrows(self, rs: RenderState):
        for r, _ in self._eyes(rs):
            brow_y = r.y - EYEBROW_OFFSET
            if brow_y >= 0:
                self.surface.fill_round_rect(r.x, brow_y, r.w, EYEBROW_HEIGHT, 1,
                                             self.foreground)

    def _draw_eyelids(self, rs: RenderState, params: ParameterState, layout: Layout):
        s = self.surface
        bg = self.background

        # Tired: outer corners droop
        if params.fatigue > EYELID_THRESHOLD:
            for r, is_left in self._eyes(rs):
                droop = int(r.h * 0.4 * params.fatigue)
                low_x = r.x if is_left else r.right
                s.fill_triangle(r.x, r.y - 1, r.right, r.y - 1, low_x, r.y + droop, bg)

        # Angry: inner corners droop
        if params.anger > EYELID_THRESHOLD:
            for r, is_left in self._eyes(rs):
                droop = int(r.h * 0.4 * params.anger)
                low_x = r.right if is_left else r.x
                s.fill_triangle(r.x, r.y - 1, r.right, r.y - 1, low_x, r.y + droop, bg)

        # Happy: cheeks push up from below
        if params.joy > EYELID_THRESHOLD:
            for r, _ in self._eyes(rs):
                offset = int(r.h * 0.5 * params.joy)
                s.fill_round_rect(r.x - 1, r.bottom - offset + 1, r.w + 2,
                                  layout.eye_height, rs.border_radius, bg)

    # ------------------------------------------------------------------
    # Mouth
    # ------------------------------------------------------------------

    def _draw_mouth(self, m: Rect, params: ParameterState):
        shape = params.mouth_shape
        # Swap to the incoming shape halfway through a transition
        if 0.5 <= params.mouth_transition < 1.0:
            shape = params.target_mouth_shape
        painter = self._mouth_painters.get(shape, self._mouth_smile)
        painter(m, params)

    def _parabola(self, m: Rect, depth: int, smile: bool):
        cx = m.x + m.w / 2.0
        half = max(1.0, m.w / 2.0)
        for x in range(m.x, m.x + m.w + 1):
            n = (x - cx) / half
            curve = n * n  # 0 at center, 1 at the corners
            if smile:
                y = m.y + depth - int(curve * depth)
            else:
                y = m.y + int(curve * depth)
            for t in range(MOUTH_THICKNESS):
                self.surface.draw_pixel(x, y + t, self.foreground)

    def _mouth_smile(self, m: Rect, params: ParameterState):
        if params.mouth_openness > 0.1:
            # Laughing: open oval with a dark inside
            open_px = int(params.mouth_openness * MOUTH_OPEN_PX)
            w = max(1, m.w - 4)
            h = 4 + open_px
            self.surface.fill_round_rect(m.x + 2, m.y, w, h, h // 2, self.foreground)
            if open_px > 2 and w > 4:
                self.surface.fill_round_rect(m.x + 4, m.y + 2, w - 4, h - 4,
                                             (h - 4) // 2, self.background)
        else:
            self._parabola(m, SMILE_DEPTH, smile=True)

    def _mouth_frown(self, m: Rect, params: ParameterState):
        self._parabola(m, FROWN_DEPTH, smile=False)

    def _mouth_open(self, m: Rect, params: ParameterState):
        self.surface.fill_round_rect(m.x + 4, m.y - 2, max(1, m.w - 8), 10, 4,
                                     self.foreground)
        if m.w > 12:
            self.surface.fill_round_rect(m.x + 6, m.y, m.w - 12, 6, 3, self.background)

    def _mouth_ooo(self, m: Rect, params: ParameterState):
        cx = m.x + m.w // 2
        self.surface.fill_circle(cx, m.y + 3, 5, self.foreground)
        self.surface.fill_circle(cx, m.y + 3, 3, self.background)

    def _mouth_flat(self, m: Rect, params: ParameterState):
        self.surface.fill_round_rect(m.x + 2, m.y + 2, max(1, m.w - 4), 3, 1,
                                     self.foreground)

    def _mouth_w(self, m: Rect, params: ParameterState):
        self._thick_line(_w_points(m.x + m.w / 2.0, m.y + 1, m.w * 0.7, 4), 2)

    def _mouth_d(self, m: Rect, params: ParameterState, width: int | None = None):
        w = m.w if width is None else width
        x = m.x + (m.w - w) // 2
        h = MOUTH_OPEN_PX + int(params.mouth_openness * MOUTH_OPEN_PX)
        self.surface.fill_round_rect(x, m.y, w, h, h // 2, self.foreground)
        # Flat upper lip
        self.surface.fill_rect(x, m.y, w, 3, self.foreground)
        if w > 4:
            self.surface.fill_round_rect(x + 2, m.y + 3, w - 4, h - 5, (h - 5) // 2,
                                         self.background)

    # ------------------------------------------------------------------
    # Sweat
    # ------------------------------------------------------------------

    def _reset_drop(self, i: int, width: int, fresh: bool = False):
        if i == 0:
            self._sweat_x[i] = self._rng.uniform(0, min(30, width))
        elif i == SWEAT_DROPS - 1:
            self._sweat_x[i] = max(0, width - 30) + self._rng.uniform(0, min(30, width))
        else:
            self._sweat_x[i] = self._rng.uniform(min(30, width), max(30, width - 30))
        self._sweat_y[i] = self._rng.uniform(0, 20) if fresh else 2.0
        self._sweat_size[i] = 2.0
        self._sweat_limit[i] = 20.0 + self._rng.uniform(0, 10)

    def _draw_sweat(self, params: ParameterState, layout: Layout, dt: float):
        if params.sweat <= DRAW_THRESHOLD:
            return
        if not self._sweat_seeded:
            for i in range(SWEAT_DROPS):
                self._reset_drop(i, layout.screen_width, fresh=True)
            self._sweat_seeded = True

        for i in range(SWEAT_DROPS):
            self._sweat_y[i] += SWEAT_FALL_SPEED * dt
            if self._sweat_y[i] > self._sweat_limit[i]:
                self._reset_drop(i, layout.screen_width)

            if self._sweat_y[i] < SWEAT_GROWTH_WINDOW:
                self._sweat_size[i] += SWEAT_GROW_SPEED * dt
            else:
                self._sweat_size[i] -= SWEAT_SHRINK_SPEED * dt
            self._sweat_size[i] = max(1.0, self._sweat_size[i])

            size = max(1, int(self._sweat_size[i] * params.sweat))
            self.surface.fill_round_rect(int(self._sweat_x[i]), int(self._sweat_y[i]),
                                         size, int(size * 1.5), 3, self.foreground)

    # ------------------------------------------------------------------
    # Overlays
    # ------------------------------------------------------------------

    def _draw_heart(self, cx: int, cy: int, scale: float, pulse: float):
        if scale < DRAW_THRESHOLD:
            return
        s = self.surface
        fg = self.foreground
        scale *= 1.0 + math.sin(pulse) * 0.15

        size = int(28 * scale)
        r = max(1, size // 3)
        offset = size // 3

        s.fill_circle(cx - offset + 2, cy - offset // 3, r, fg)
        s.fill_circle(cx + offset - 2, cy - offset // 3, r, fg)
        s.fill_triangle(cx - size // 2 - 2, cy + 2,
                        cx + size // 2 + 2, cy + 2,
                        cx, cy + size // 2 + 4, fg)
        # Fill the gap between the lobes
        s.fill_rect(cx - offset + 2, cy - offset // 3, max(1, (offset - 2) * 2), r + 2, fg)

        if size > 16:
            highlight = max(2, size // 10)
            s.fill_circle(cx - offset // 2, cy - offset // 2, highlight, self.background)

    def _draw_blush(self, rs: RenderState, amount: float):
        w = max(1, int(10 * amount))
        h = max(1, int(5 * amount))
        left = rs.left
        self.surface.fill_round_rect(left.x - 12, left.bottom - 5, w, h, 2, self.foreground)
        if rs.right is not None:
            right = rs.right
            self.surface.fill_round_rect(right.right + 2, right.bottom - 5, w, h, 2,
                                         self.foreground)

    def _draw_love(self, rs: RenderState, params: ParameterState):
        if max(params.love, params.heart_scale) <= DRAW_THRESHOLD:
            return
        if params.heart_scale > ERASE_THRESHOLD:
            self._erase_eyes(rs, margin=2)
        for r, _ in self._eyes(rs):
            cx, cy = r.center
            self._draw_heart(cx, cy, params.heart_scale, params.heart_pulse)
        if params.love > BLUSH_THRESHOLD:
            self._draw_blush(rs, params.love)

    def _draw_uwu(self, rs: RenderState, params: ParameterState):
        if params.uwu <= DRAW_THRESHOLD:
            return
        if params.uwu > ERASE_THRESHOLD:
            self._erase_eyes(rs, margin=1)
            if self._mouth_shown(rs, params):
                self._erase_mouth(rs)

        for r, _ in self._eyes(rs):
            cx, cy = r.center
            hw = max(2, int(r.w * 0.35))
            hh = max(2, int(r.h * 0.4 * params.uwu))
            points = _u_points(cx, cy - hh // 2, hw, hh)
            half = len(points) // 2
            # Heavier stroke on the left arm, lighter on the right
            self._thick_line(points[half:], 3)
            self._thick_line(points[:half + 1], 2)

        if self._mouth_shown(rs, params):
            m = rs.mouth
            self._thick_line(_w_points(m.x + m.w / 2.0, m.y + 1, min(m.w, 10), 3), 1)
        self._draw_blush(rs, params.uwu)

    def _draw_xd(self, rs: RenderState, params: ParameterState):
        if params.xd <= DRAW_THRESHOLD:
            return
        if params.xd > ERASE_THRESHOLD:
            self._erase_eyes(rs, margin=1)
            if self._mouth_shown(rs, params):
                self._erase_mouth(rs)

        for r, is_left in self._eyes(rs):
            cx, cy = r.center
            hw = max(2, int(r.w * 0.3))
            hh = max(2, int(r.h * 0.35 * params.xd))
            # ">" on the left eye, "<" on the right, tips toward the nose
            direction = 1 if is_left else -1
            tip_x = cx + hw * direction
            self._thick_line([(cx - hw * direction, cy - hh), (tip_x, cy),
                              (cx - hw * direction, cy + hh)], 3)

        if self._mouth_shown(rs, params):
            self._mouth_d(rs.mouth, params, width=rs.mouth.w + 8)

    def _draw_tears(self, rs: RenderState, params: ParameterState, layout: Layout):
        if params.tears <= DRAW_THRESHOLD:
            return
        start_y = rs.left.bottom
        span = layout.screen_height - start_y
        if span <= 0:
            return
        size = max(2, int(TEAR_SIZE * params.tears))
        drops = [(rs.left.center[0], params.tear_progress)]
        if rs.right is not None:
            drops.append((rs.right.center[0], params.tear_progress + TEAR_SPACING))

        for x, progress in drops:
            y = start_y + int(math.fmod(progress, span))
            if y >= layout.screen_height - size:
                continue
            self.surface.fill_circle(x, y + size, size, self.foreground)
            self.surface.fill_triangle(x - size + 1, y + size, x + size - 1, y + size,
                                       x, y, self.foreground)

    def _draw_spiral(self, cx: int, cy: int, max_radius: float, angle: float):
        radius = 2.0
        prev_x, prev_y = cx, cy
        while radius < max_radius:
            x = cx + int(math.cos(angle) * radius)
            y = cy + int(math.sin(angle) * radius)
            self.surface.draw_line(prev_x, prev_y, x, y, self.foreground)
            self.surface.draw_line(prev_x + 1, prev_y, x + 1, y, self.foreground)
            prev_x, prev_y = x, y
            angle += 0.3
            radius += 0.4

    def _draw_knocked(self, rs: RenderState, params: ParameterState):
        if params.knocked <= DRAW_THRESHOLD:
            return
        if params.knocked > ERASE_THRESHOLD:
            self._erase_eyes(rs, margin=1)
        for r, _ in self._eyes(rs):
            max_radius = max(8, min(r.w, r.h) // 2 - 2) * min(1.0, params.knocked)
            cx, cy = r.center
            self._draw_spiral(cx, cy, max_radius, params.spiral_angle)
