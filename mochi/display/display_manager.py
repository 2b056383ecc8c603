import logging

import numpy as np
from PIL import Image

log = logging.getLogger("mochi-face")

# Controller RAM geometry: (ram columns, column offset of the visible area)
CONTROLLERS = {
    "ssd1306": (128, 0),
    "sh1106": (132, 2),
}


def pack_pages(image: Image.Image, ram_width: int | None = None,
               column_offset: int = 0) -> bytes:
    """Pack a greyscale frame into page-ordered monochrome bytes.

    Each byte covers one column of an 8-row page, least significant bit at the
    top. Rows are padded to a multiple of 8; columns are padded to ram_width
    with the visible area starting at column_offset.
    """
    lit = np.asarray(image.convert("L"), dtype=np.uint8) > 127
    height, width = lit.shape
    pad_rows = (-height) % 8
    if pad_rows:
        lit = np.pad(lit, ((0, pad_rows), (0, 0)))

    pages = lit.reshape(-1, 8, width).astype(np.uint8)
    weights = (1 << np.arange(8, dtype=np.uint8)).reshape(1, 8, 1)
    packed = (pages * weights).sum(axis=1).astype(np.uint8)

    if ram_width is not None and ram_width > width + column_offset:
        packed = np.pad(packed, ((0, 0), (column_offset, ram_width - width - column_offset)))
    elif column_offset:
        packed = np.pad(packed, ((0, 0), (column_offset, 0)))
    return packed.tobytes()


class DisplayManager:
    """Converts finished frames into controller framebuffers and pushes them."""

    def __init__(self, device=None, controller: str = "ssd1306"):
        if controller not in CONTROLLERS:
            log.warning(f"Unknown controller {controller!r}, using ssd1306 layout")
            controller = "ssd1306"
        self._device = device
        self._ram_width, self._column_offset = CONTROLLERS[controller]
        self.last_image: Image.Image | None = None
        self.last_buffer: bytes | None = None
        self.frames = 0

    def update(self, image: Image.Image):
        """Pack the frame and send it to the device, if one is attached."""
        self.last_image = image
        self.last_buffer = pack_pages(image, self._ram_width, self._column_offset)
        self.frames += 1
        if self._device is not None:
            self._device.send_framebuffer(self.last_buffer)

    def snapshot(self, path: str):
        """Save the most recent frame as an image file."""
        if self.last_image is None:
            log.warning("No frame rendered yet, nothing to save")
            return
        self.last_image.copy().save(path)
        log.info(f"Saved frame to {path}")
