"""Two-color drawing surface the compositor draws on.

The engine only ever calls the primitives declared on DrawingSurface, with
color 0 (background) or 1 (foreground) by default. PillowSurface renders into an
8-bit greyscale PIL image so the frame can be saved, previewed or packed for an
OLED controller.
"""

from abc import ABC, abstractmethod
from typing import Callable

from PIL import Image, ImageDraw


class DrawingSurface(ABC):
    width: int
    height: int

    @abstractmethod
    def clear(self): ...

    @abstractmethod
    def flush(self): ...

    @abstractmethod
    def fill_round_rect(self, x: int, y: int, w: int, h: int, r: int, color: int): ...

    @abstractmethod
    def draw_round_rect(self, x: int, y: int, w: int, h: int, r: int, color: int): ...

    @abstractmethod
    def fill_rect(self, x: int, y: int, w: int, h: int, color: int): ...

    @abstractmethod
    def fill_triangle(self, x0: int, y0: int, x1: int, y1: int,
                      x2: int, y2: int, color: int): ...

    @abstractmethod
    def fill_circle(self, cx: int, cy: int, r: int, color: int): ...

    @abstractmethod
    def draw_circle(self, cx: int, cy: int, r: int, color: int): ...

    @abstractmethod
    def draw_line(self, x0: int, y0: int, x1: int, y1: int, color: int): ...

    @abstractmethod
    def draw_pixel(self, x: int, y: int, color: int): ...


class PillowSurface(DrawingSurface):
    """Renders into a reusable greyscale PIL image (0 = off, 255 = lit)."""

    def __init__(self, width: int = 128, height: int = 64,
                 on_flush: Callable[[Image.Image], None] | None = None):
        self._on_flush = on_flush
        self.resize(width, height)

    def resize(self, width: int, height: int):
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        # Pre-allocate image and draw context (reused every frame)
        self._img = Image.new("L", (self.width, self.height), 0)
        self._draw = ImageDraw.Draw(self._img)

    @property
    def image(self) -> Image.Image:
        """The internal frame buffer. Copy before keeping it."""
        return self._img

    @staticmethod
    def _ink(color: int) -> int:
        return 255 if color else 0

    def clear(self):
        self._draw.rectangle([0, 0, self.width - 1, self.height - 1], fill=0)

    def flush(self):
        if self._on_flush is not None:
            self._on_flush(self._img)

    def fill_round_rect(self, x, y, w, h, r, color):
        w, h = max(1, int(w)), max(1, int(h))
        r = max(0, min(int(r), w // 2, h // 2))
        self._draw.rounded_rectangle(
            [x, y, x + w - 1, y + h - 1], radius=r, fill=self._ink(color))

    def draw_round_rect(self, x, y, w, h, r, color):
        w, h = max(1, int(w)), max(1, int(h))
        r = max(0, min(int(r), w // 2, h // 2))
        self._draw.rounded_rectangle(
            [x, y, x + w - 1, y + h - 1], radius=r, outline=self._ink(color))

    def fill_rect(self, x, y, w, h, color):
        w, h = max(1, int(w)), max(1, int(h))
        self._draw.rectangle([x, y, x + w - 1, y + h - 1], fill=self._ink(color))

    def fill_triangle(self, x0, y0, x1, y1, x2, y2, color):
        self._draw.polygon([(x0, y0), (x1, y1), (x2, y2)], fill=self._ink(color))

    def fill_circle(self, cx, cy, r, color):
        r = int(r)
        if r < 0:
            return
        self._draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=self._ink(color))

    def draw_circle(self, cx, cy, r, color):
        r = int(r)
        if r < 0:
            return
        self._draw.ellipse([cx - r, cy - r, cx + r, cy + r], outline=self._ink(color))

    def draw_line(self, x0, y0, x1, y1, color):
        self._draw.line([(x0, y0), (x1, y1)], fill=self._ink(color))

    def draw_pixel(self, x, y, color):
        if 0 <= x < self.width and 0 <= y < self.height:
            self._img.putpixel((int(x), int(y)), self._ink(color))
