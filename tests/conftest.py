import random

import pytest

from mochi.config import AnimationConfig
from mochi.display.surface import DrawingSurface
from mochi.eyes.engine import MochiEngine

DT = 0.020  # 50 Hz tick


class RecordingSurface(DrawingSurface):
    """Surface that records every primitive call instead of drawing."""

    def __init__(self, width: int = 128, height: int = 64):
        self.width = width
        self.height = height
        self.calls: list[tuple] = []
        self.flushes = 0

    def resize(self, width, height):
        self.width = width
        self.height = height

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)

    def clear(self):
        self.calls = [("clear",)]

    def flush(self):
        self.flushes += 1

    def fill_round_rect(self, x, y, w, h, r, color):
        self.calls.append(("fill_round_rect", x, y, w, h, r, color))

    def draw_round_rect(self, x, y, w, h, r, color):
        self.calls.append(("draw_round_rect", x, y, w, h, r, color))

    def fill_rect(self, x, y, w, h, color):
        self.calls.append(("fill_rect", x, y, w, h, color))

    def fill_triangle(self, x0, y0, x1, y1, x2, y2, color):
        self.calls.append(("fill_triangle", x0, y0, x1, y1, x2, y2, color))

    def fill_circle(self, cx, cy, r, color):
        self.calls.append(("fill_circle", cx, cy, r, color))

    def draw_circle(self, cx, cy, r, color):
        self.calls.append(("draw_circle", cx, cy, r, color))

    def draw_line(self, x0, y0, x1, y1, color):
        self.calls.append(("draw_line", x0, y0, x1, y1, color))

    def draw_pixel(self, x, y, color):
        self.calls.append(("draw_pixel", x, y, color))


def run(engine: MochiEngine, seconds: float, dt: float = DT) -> None:
    """Advance the engine by *seconds* in *dt*-sized steps."""
    for _ in range(int(round(seconds / dt))):
        engine.step(dt)


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def engine(surface):
    """Started engine with auto-blink off and a seeded RNG."""
    eng = MochiEngine(surface, animation=AnimationConfig(autoblink=False),
                      rng=random.Random(1234))
    eng.begin(128, 64, 50)
    return eng
