"""Text command dispatcher: maps command strings onto MochiEngine calls.

Commands are case-insensitive single words ("happy", "wink", "ne") or a
settings string "set:ew=36,eh=36,bi=3". handle() always returns a short
response message and never raises for unknown or malformed input.
"""

import logging
from typing import Callable

from mochi.eyes import expressions
from mochi.eyes.engine import MochiEngine
from mochi.eyes.expressions import ANGRY, DEFAULT, HAPPY, TIRED
from mochi.eyes.params import MouthAnim, MouthShape

log = logging.getLogger("mochi-face")

# Mouth micro-animation lengths (s)
TALK_DURATION = 3.0
CHEW_DURATION = 2.0
WOBBLE_DURATION = 2.0

# set: keys and what they control. Durations and shuffle windows in ms,
# blink intervals in s.
SETTING_KEYS = {
    "ew": "eye width",
    "eh": "eye height",
    "es": "eye spacing",
    "er": "border radius",
    "mw": "mouth width",
    "mh": "mouth height",
    "bi": "blink interval",
    "bv": "blink variation",
    "wd": "wink duration",
    "lt": "laugh duration",
    "vt": "love duration",
    "shuf_en": "shuffle on (1) / off (0)",
    "shuf_emin": "shuffle expression min",
    "shuf_emax": "shuffle expression max",
    "shuf_nmin": "shuffle neutral min",
    "shuf_nmax": "shuffle neutral max",
}
SHUFFLE_KEYS = {key for key in SETTING_KEYS if key.startswith("shuf_")}

MOUTH_NAMES = {shape.value for shape in MouthShape}

HELP_TEXT = """\
EXPRESSIONS: happy, sad, angry, love, surprised, confused, sleepy, curious,
             nervous, knocked, dizzy, neutral, idle, raised, uwu, xd
MOUTH:       smile, frown, open, ooo, flat, d, mouth:<shape>, talk, chew, wobble
ACTIONS:     blink, wink, winkr, laugh, cry
POSITIONS:   center, n, ne, e, se, s, sw, w, nw, up, down, left, right
TOGGLES:     sweat, cyclops, mouth, shuffle
SHUFFLE:     shuffle:on, shuffle:off, shuffle:time=<s>, shuffle: (status)
SETTINGS:    set:ew=36,eh=36,es=10,er=8,mw=20,mh=6,bi=3,bv=3,wd=300,lt=1000,vt=2000,
             shuf_en=1,shuf_emin=2000,shuf_emax=5000,shuf_nmin=2000,shuf_nmax=5000"""


class CommandDispatcher:
    """Owns the host-side toggles and translates commands for one engine."""

    def __init__(self, engine: MochiEngine,
                 on_settings: Callable[[dict], None] | None = None):
        self.engine = engine
        self.on_settings = on_settings
        self.sweat = False
        self.cyclops = False
        self.mouth_enabled = True
        # Set by ShuffleManager when one is attached
        self.shuffle = None
        # Last applied value per setting key, for persistence
        self.settings: dict[str, int] = {}

        self._expressions = {
            "happy": self._happy,
            "sad": self._sad,
            "angry": self._angry,
            "love": self._love,
            "surprised": self._surprised,
            "confused": self._confused,
            "sleepy": self._sleepy,
            "curious": self._curious,
            "nervous": self._nervous,
            "knocked": self._knocked,
            "dizzy": self._knocked,
            "neutral": self._neutral,
            "normal": self._neutral,
            "reset": self._neutral,
            "idle": self._idle,
            "raised": self._raised,
            "uwu": self._uwu,
            "xd": self._xd,
        }
        self._actions = {
            "blink": self._blink,
            "wink": self._wink_left,
            "winkr": self._wink_right,
            "laugh": self._laugh,
            "cry": self._cry,
            "talk": self._talk,
            "chew": self._chew,
            "wobble": self._wobble,
            "sweat": self._toggle_sweat,
            "cyclops": self._toggle_cyclops,
            "mouth": self._toggle_mouth,
            "shuffle": self._toggle_shuffle,
        }

    def handle(self, command: str) -> str:
        cmd = command.strip().lower()
        if not cmd:
            return "Empty command"
        log.info(f"> {cmd}")

        if cmd.startswith("set:"):
            return self.apply_settings_string(cmd[4:])
        if cmd.startswith("shuffle:"):
            return self.shuffle_command(cmd[8:])
        if cmd in ("help", "?"):
            return HELP_TEXT

        handler = self._expressions.get(cmd) or self._actions.get(cmd)
        if handler is not None:
            return handler()

        # Bare "w" is the west position; the w mouth needs the "mouth:" prefix
        if cmd.startswith("mouth:"):
            name = cmd[6:]
            if name in MOUTH_NAMES:
                self.engine.set_mouth_type(MouthShape(name))
                return f"Mouth: {name}"
        elif cmd in MOUTH_NAMES and cmd not in expressions.POSITION_NAMES:
            self.engine.set_mouth_type(MouthShape(cmd))
            return f"Mouth: {cmd}"

        if cmd in expressions.POSITION_NAMES:
            self.engine.set_position(expressions.POSITION_NAMES[cmd])
            return f"Position: {cmd}"

        log.info(f"Unknown command: {cmd}")
        return f"Unknown: {cmd}"

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def apply_settings_string(self, text: str) -> str:
        """Parse "key=value,key=value". Bad pairs are skipped."""
        applied = {}
        for pair in text.split(","):
            key, sep, raw = pair.partition("=")
            key = key.strip()
            if not sep or key not in SETTING_KEYS:
                if pair.strip():
                    log.warning(f"Ignoring setting {pair.strip()!r}")
                continue
            try:
                value = int(float(raw))
            except ValueError:
                log.warning(f"Ignoring non-numeric setting {key}={raw!r}")
                continue
            self.apply_setting(key, value)
            applied[key] = value

        if applied and self.on_settings is not None:
            self.on_settings(dict(self.settings))
        return "Settings applied" if applied else "No settings applied"

    def apply_setting(self, key: str, value: int):
        engine = self.engine
        if key == "ew":
            engine.set_width(value, value)
        elif key == "eh":
            engine.set_height(value, value)
        elif key == "es":
            engine.set_spacing(value)
        elif key == "er":
            engine.set_border_radius(value, value)
        elif key == "mw":
            engine.set_mouth_size(value)
        elif key == "mh":
            engine.set_mouth_size(engine.mouth_width, value)
        elif key == "bi":
            engine.set_autoblinker(engine.timers.autoblink, interval=value)
        elif key == "bv":
            engine.set_autoblinker(engine.timers.autoblink, variation=value)
        elif key == "wd":
            engine.set_wink_duration(value / 1000.0)
        elif key == "lt":
            engine.set_laugh_duration(value / 1000.0)
        elif key == "vt":
            engine.set_love_duration(value / 1000.0)
        elif key in SHUFFLE_KEYS:
            if self.shuffle is None:
                log.warning(f"Ignoring {key}: no shuffle attached")
                return
            self._apply_shuffle_setting(key, value)
        else:
            log.warning(f"Unknown setting {key!r}")
            return
        self.settings[key] = value

    def _apply_shuffle_setting(self, key: str, value: int):
        shuffle = self.shuffle
        if key == "shuf_en":
            shuffle.set_enabled(value != 0)
        elif key == "shuf_emin":
            shuffle.set_expression_window(min_ms=value)
        elif key == "shuf_emax":
            shuffle.set_expression_window(max_ms=value)
        elif key == "shuf_nmin":
            shuffle.set_neutral_window(min_ms=value)
        elif key == "shuf_nmax":
            shuffle.set_neutral_window(max_ms=value)

    def shuffle_command(self, args: str) -> str:
        """Handle "on", "off" and "time=<seconds>" parts; an empty args is a status query."""
        if self.shuffle is None:
            return "Shuffle unavailable"

        updates = {}
        for part in args.split(","):
            part = part.strip()
            if part in ("on", "off"):
                updates["shuf_en"] = 1 if part == "on" else 0
            elif part.startswith("time="):
                try:
                    max_ms = int(float(part[5:]) * 1000)
                except ValueError:
                    log.warning(f"Ignoring shuffle time {part[5:]!r}")
                    continue
                updates["shuf_emax"] = max_ms
                updates["shuf_emin"] = min(self.shuffle.expression_min_ms, max_ms)
            elif part:
                log.warning(f"Ignoring shuffle option {part!r}")

        for key, value in updates.items():
            self.apply_setting(key, value)
        if updates and self.on_settings is not None:
            self.on_settings(dict(self.settings))
        return self.shuffle.status()

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def reset_effects(self):
        """Turn off every level effect before a new expression."""
        engine = self.engine
        engine.set_curiosity(False)
        engine.set_h_flicker(False)
        engine.set_v_flicker(False)
        engine.set_sweat(False)
        engine.set_idle_mode(False)
        engine.set_eyebrows(False)
        engine.set_knocked(False)
        self.sweat = False

    def _expression(self, mood: int, position: int, mouth: MouthShape):
        self.reset_effects()
        self.engine.set_mood(mood)
        self.engine.set_position(position)
        self.engine.set_mouth_type(mouth)

    def _happy(self):
        self._expression(HAPPY, DEFAULT, MouthShape.SMILE)
        self.engine.anim_laugh()
        return "Expression: Happy"

    def _sad(self):
        self._expression(TIRED, DEFAULT, MouthShape.FROWN)
        return "Expression: Sad"

    def _angry(self):
        self._expression(ANGRY, DEFAULT, MouthShape.FLAT)
        return "Expression: Angry"

    def _love(self):
        self._expression(HAPPY, DEFAULT, MouthShape.OPEN)
        # After set_mood, which cancels running overlays
        self.engine.anim_love()
        return "Expression: Love"

    def _surprised(self):
        self._expression(DEFAULT, expressions.POS_N, MouthShape.OPEN)
        self.engine.set_curiosity(True)
        self.engine.blink()
        return "Expression: Surprised"

    def _confused(self):
        self._expression(DEFAULT, DEFAULT, MouthShape.OOO)
        self.engine.anim_confused()
        return "Expression: Confused"

    def _sleepy(self):
        self._expression(TIRED, expressions.POS_SW, MouthShape.FLAT)
        return "Expression: Sleepy"

    def _curious(self):
        self._expression(DEFAULT, expressions.POS_E, MouthShape.OOO)
        self.engine.set_curiosity(True)
        return "Expression: Curious"

    def _nervous(self):
        self._expression(DEFAULT, expressions.POS_N, MouthShape.FROWN)
        self.engine.set_curiosity(True)
        self.engine.set_sweat(True)
        self.sweat = True
        return "Expression: Nervous"

    def _knocked(self):
        self.reset_effects()
        self.engine.set_knocked(True)
        return "Expression: Knocked"

    def _neutral(self):
        self._expression(DEFAULT, DEFAULT, MouthShape.SMILE)
        return "Expression: Neutral"

    def _idle(self):
        self._expression(DEFAULT, DEFAULT, MouthShape.SMILE)
        self.engine.set_idle_mode(True, 1, 2)
        return "Mode: Idle"

    def _raised(self):
        self._expression(DEFAULT, DEFAULT, MouthShape.OOO)
        self.engine.set_eyebrows(True)
        return "Expression: Raised eyebrows"

    def _uwu(self):
        self.reset_effects()
        self.engine.trigger_uwu()
        return "Expression: UwU"

    def _xd(self):
        self.reset_effects()
        self.engine.trigger_xd()
        return "Expression: XD"

    # ------------------------------------------------------------------
    # Actions and toggles
    # ------------------------------------------------------------------

    def _blink(self):
        self.engine.blink()
        return "Action: Blink"

    def _wink_left(self):
        self.engine.wink(True)
        self.engine.set_mouth_type(MouthShape.SMILE)
        return "Action: Wink"

    def _wink_right(self):
        self.engine.wink(False)
        self.engine.set_mouth_type(MouthShape.SMILE)
        return "Action: Wink Right"

    def _laugh(self):
        self.engine.anim_laugh()
        return "Action: Laugh"

    def _cry(self):
        self.engine.anim_cry()
        return "Action: Cry"

    def _talk(self):
        self.engine.start_mouth_anim(MouthAnim.TALK, TALK_DURATION)
        return "Mouth: Talking"

    def _chew(self):
        self.engine.start_mouth_anim(MouthAnim.CHEW, CHEW_DURATION)
        return "Mouth: Chewing"

    def _wobble(self):
        self.engine.start_mouth_anim(MouthAnim.WOBBLE, WOBBLE_DURATION)
        return "Mouth: Wobbling"

    def _toggle_sweat(self):
        self.sweat = not self.sweat
        self.engine.set_sweat(self.sweat)
        return f"Sweat: {'ON' if self.sweat else 'OFF'}"

    def _toggle_cyclops(self):
        self.cyclops = not self.cyclops
        self.engine.set_cyclops(self.cyclops)
        return f"Cyclops: {'ON' if self.cyclops else 'OFF'}"

    def _toggle_mouth(self):
        self.mouth_enabled = not self.mouth_enabled
        self.engine.set_mouth_enabled(self.mouth_enabled)
        return f"Mouth: {'ON' if self.mouth_enabled else 'OFF'}"

    def _toggle_shuffle(self):
        if self.shuffle is None:
            return "Shuffle unavailable"
        return self.shuffle_command("off" if self.shuffle.enabled else "on")
