#!/usr/bin/env python3
"""Renders face expressions to PNG files for testing on a desktop (no display needed)."""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from PIL import Image

from mochi.commands import CommandDispatcher
from mochi.config import AnimationConfig
from mochi.display.surface import PillowSurface
from mochi.eyes.engine import MochiEngine

# Upscale factor so the 128x64 frame is readable on a desktop
SCALE = 4
# Simulated time per preview (s)
SETTLE_TIME = 0.6
FRAME_DT = 0.02


def main():
    previews = [
        "neutral", "happy", "sad", "angry", "love", "surprised", "confused",
        "sleepy", "curious", "nervous", "knocked", "raised", "uwu", "xd", "cry",
        "wink", "ne", "sw", "cyclops",
    ]

    out_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "preview_output")
    os.makedirs(out_dir, exist_ok=True)

    for name in previews:
        surface = PillowSurface(128, 64)
        engine = MochiEngine(surface, animation=AnimationConfig(autoblink=False))
        engine.begin(128, 64, 50)
        dispatcher = CommandDispatcher(engine)
        dispatcher.handle(name)

        t = 0.0
        while t < SETTLE_TIME:
            engine.step(FRAME_DT)
            t += FRAME_DT

        img = surface.image.copy().resize((128 * SCALE, 64 * SCALE), Image.NEAREST)
        path = os.path.join(out_dir, f"{name}.png")
        img.save(path)
        print(f"Saved {path}")

    print(f"\nAll previews saved to {out_dir}/")


if __name__ == "__main__":
    main()
