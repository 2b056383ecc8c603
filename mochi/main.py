#!/usr/bin/env python3
"""Mochi Face - host loop driving the engine from text commands."""

import argparse
import logging
import queue
import signal
import sys
import threading
import time

from mochi.commands import CommandDispatcher
from mochi.config import load_config
from mochi.display.display_manager import DisplayManager
from mochi.display.surface import PillowSurface
from mochi.eyes.engine import MochiEngine
from mochi.shuffle import ShuffleManager
from mochi.state import apply_settings, load_settings, save_settings

log = logging.getLogger("mochi-face")


class MochiFace:
    def __init__(self, config_path: str = "config.yaml",
                 settings_path: str | None = None,
                 snapshot_path: str | None = None):
        self.config = load_config(config_path)
        self._settings_path = settings_path
        self._snapshot_path = snapshot_path
        self._running = False
        # Commands arrive on the input thread and run on the render thread
        self._commands: queue.Queue[str] = queue.Queue()

    def submit(self, command: str):
        self._commands.put(command)

    def start(self, stream=None):
        self._running = True

        # Set up logging
        logging.basicConfig(
            level=getattr(logging, self.config.log_level.upper(), logging.INFO),
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

        display_cfg = self.config.display
        display_mgr = DisplayManager(controller=display_cfg.controller)
        surface = PillowSurface(display_cfg.width, display_cfg.height,
                                on_flush=display_mgr.update)

        engine = MochiEngine(surface, self.config.layout, self.config.animation)
        engine.begin(display_cfg.width, display_cfg.height, display_cfg.fps_target)
        engine.set_display_colors(display_cfg.background, display_cfg.foreground)

        dispatcher = CommandDispatcher(
            engine, on_settings=lambda s: save_settings(s, self._settings_path))

        shuffle = ShuffleManager(dispatcher, self.config.shuffle)

        # Restore persisted layout, timing and shuffle settings
        saved = load_settings(self._settings_path)
        apply_settings(saved, dispatcher)

        input_thread = threading.Thread(
            target=self._input_loop, args=(stream or sys.stdin,), daemon=True)
        input_thread.start()
        log.info("Command input thread started")

        frame_time = engine.frame_interval
        log.info(f"Entering render loop at {display_cfg.fps_target} FPS target")

        try:
            while self._running:
                now = time.monotonic()

                while True:
                    try:
                        command = self._commands.get_nowait()
                    except queue.Empty:
                        break
                    response = dispatcher.handle(command)
                    log.info(response)

                shuffle.update()
                engine.update()

                # Frame rate limiting
                elapsed = time.monotonic() - now
                sleep_time = frame_time - elapsed
                if sleep_time > 0:
                    time.sleep(sleep_time)

        except KeyboardInterrupt:
            log.info("Interrupted")
        finally:
            self._running = False
            if self._snapshot_path:
                display_mgr.snapshot(self._snapshot_path)
            log.info("Clearing display...")
            surface.clear()
            surface.flush()
            log.info(f"Done after {display_mgr.frames} frames")

    def _input_loop(self, stream):
        """Background thread: one command per line until EOF."""
        try:
            for line in stream:
                line = line.strip()
                if line:
                    self.submit(line)
        except (OSError, ValueError) as e:
            log.error(f"Command input error: {e}")
        log.info("Command input closed")

    def stop(self):
        self._running = False


def main():
    parser = argparse.ArgumentParser(description="Mochi Face")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--settings", default=None,
                        help="Settings file path (default settings.json)")
    parser.add_argument("--snapshot", default=None, metavar="PATH",
                        help="Save the last frame to PATH on exit")
    args = parser.parse_args()

    face = MochiFace(config_path=args.config, settings_path=args.settings,
                     snapshot_path=args.snapshot)

    # Handle SIGTERM gracefully (for systemd)
    signal.signal(signal.SIGTERM, lambda *_: face.stop())

    face.start()


if __name__ == "__main__":
    main()
