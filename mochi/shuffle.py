"""Auto-expression shuffle: alternates random expressions with neutral pauses.

Each phase lasts a random number of milliseconds drawn from its own
[min, max] window. Commands go through the CommandDispatcher exactly like
typed ones, so the shuffle can never reach a state the user could not.
"""

import logging
import random
import time
from typing import Callable

from mochi.config import ShuffleConfig

log = logging.getLogger("mochi-face")

EXPRESSIONS = (
    "happy", "sad", "angry", "love", "surprised", "confused",
    "sleepy", "curious", "nervous", "knocked",
)

# Seconds of neutral face after the shuffle is (re)started
FIRST_CHANGE = 2.0

NEUTRAL = "neutral"
EXPRESSION = "expression"


class ShuffleManager:
    def __init__(self, dispatcher, config: ShuffleConfig | None = None,
                 rng: random.Random | None = None,
                 clock: Callable[[], float] = time.monotonic):
        config = config or ShuffleConfig()
        self.dispatcher = dispatcher
        self.enabled = config.enabled
        self.expression_min_ms = config.expression_min_ms
        self.expression_max_ms = config.expression_max_ms
        self.neutral_min_ms = config.neutral_min_ms
        self.neutral_max_ms = config.neutral_max_ms
        self._rng = rng or random.Random()
        self._clock = clock

        self.phase = NEUTRAL
        self._next_change: float | None = None
        self._last_index = -1

        # Setting keys and the manual "shuffle" command are routed here
        dispatcher.shuffle = self

    def set_enabled(self, on: bool):
        on = bool(on)
        if on and not self.enabled:
            self._next_change = None  # restart from a neutral face
        self.enabled = on
        log.info(f"Shuffle {'enabled' if on else 'disabled'}")

    def set_expression_window(self, min_ms: int | None = None, max_ms: int | None = None):
        if min_ms is not None:
            self.expression_min_ms = max(0, int(min_ms))
        if max_ms is not None:
            self.expression_max_ms = max(0, int(max_ms))

    def set_neutral_window(self, min_ms: int | None = None, max_ms: int | None = None):
        if min_ms is not None:
            self.neutral_min_ms = max(0, int(min_ms))
        if max_ms is not None:
            self.neutral_max_ms = max(0, int(max_ms))

    def status(self) -> str:
        return (f"Shuffle: {'ON' if self.enabled else 'OFF'} "
                f"expr={self.expression_min_ms}-{self.expression_max_ms}ms "
                f"neutral={self.neutral_min_ms}-{self.neutral_max_ms}ms")

    def _hold(self, low_ms: int, high_ms: int) -> float:
        low, high = sorted((low_ms, high_ms))
        return self._rng.randint(low, high) / 1000.0

    def _pick(self) -> str:
        count = len(EXPRESSIONS)
        index = self._rng.randrange(count)
        if count > 1 and index == self._last_index:
            index = (index + 1 + self._rng.randrange(count - 1)) % count
        self._last_index = index
        return EXPRESSIONS[index]

    def update(self) -> str | None:
        """Advance the shuffle. Returns the command it issued, if any."""
        if not self.enabled:
            return None
        now = self._clock()

        if self._next_change is None:
            self.phase = NEUTRAL
            self._next_change = now + FIRST_CHANGE
            return self._issue(NEUTRAL)

        if now < self._next_change:
            return None

        if self.phase == EXPRESSION:
            self.phase = NEUTRAL
            self._next_change = now + self._hold(self.neutral_min_ms, self.neutral_max_ms)
            return self._issue(NEUTRAL)

        command = self._pick()
        self.phase = EXPRESSION
        self._next_change = now + self._hold(self.expression_min_ms, self.expression_max_ms)
        return self._issue(command)

    def _issue(self, command: str) -> str:
        log.debug(f"Shuffle -> {command}")
        self.dispatcher.handle(command)
        return command
