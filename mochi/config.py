import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import yaml

log = logging.getLogger("mochi-face")


@dataclass
class DisplayConfig:
    width: int = 128
    height: int = 64
    fps_target: int = 50
    controller: str = "sh1106"   # or "ssd1306"
    background: int = 0
    foreground: int = 1


@dataclass
class LayoutConfig:
    eye_width: int = 36
    eye_height: int = 36
    spacing: int = 10
    border_radius: int = 8
    mouth_width: int = 20
    mouth_height: int = 6


@dataclass
class AnimationConfig:
    # Exponential approach rates (1/s)
    openness_speed: float = 12.0
    squish_speed: float = 10.0
    gaze_speed: float = 6.0
    emotion_speed: float = 5.0
    mouth_speed: float = 15.0
    heart_speed: float = 8.0
    effect_speed: float = 4.0

    autoblink: bool = True
    blink_interval: float = 3.0
    blink_variation: float = 3.0
    idle_interval: float = 2.0
    idle_variation: float = 3.0

    wink_duration: float = 0.3
    mouth_transition: float = 0.15

    # Default one-shot overlay durations (s)
    love_duration: float = 2.0
    cry_duration: float = 3.0
    confused_duration: float = 0.5
    laugh_duration: float = 1.0
    uwu_duration: float = 2.0
    xd_duration: float = 2.0


@dataclass
class ShuffleConfig:
    enabled: bool = False
    # Random hold windows (ms)
    expression_min_ms: int = 2000
    expression_max_ms: int = 5000
    neutral_min_ms: int = 2000
    neutral_max_ms: int = 5000


@dataclass
class Config:
    display: DisplayConfig = field(default_factory=DisplayConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    shuffle: ShuffleConfig = field(default_factory=ShuffleConfig)
    log_level: str = "INFO"


def _merge(section, data: dict):
    """Overlay known keys from data onto a config section, ignoring the rest."""
    known = {f.name for f in fields(section)}
    updates = {k: v for k, v in data.items() if k in known}
    unknown = set(data) - known
    if unknown:
        log.warning(f"Ignoring unknown config keys in {type(section).__name__}: {sorted(unknown)}")
    return replace(section, **updates)


def load_config(path: str = "config.yaml") -> Config:
    """Load config from YAML file, falling back to defaults for missing keys."""
    config = Config()
    config_path = Path(path)

    if not config_path.exists():
        return config

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning(f"Could not read config {config_path}: {e}")
        return config

    if "display" in data:
        config.display = _merge(config.display, data["display"] or {})

    if "layout" in data:
        config.layout = _merge(config.layout, data["layout"] or {})

    if "animation" in data:
        config.animation = _merge(config.animation, data["animation"] or {})

    if "shuffle" in data:
        config.shuffle = _merge(config.shuffle, data["shuffle"] or {})

    if "logging" in data:
        config.log_level = (data["logging"] or {}).get("level", config.log_level)

    return config
