from __future__ import annotations

from pathlib import Path

import msgspec

RECORDER_CFG_NAME = "tickreplay.json"


class ConfigError(ValueError):
    pass


class RecorderConfig(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    last_replay_name: str = "last_replay.txt"
    default_replay_name: str = "replay.txt"
    cooldown_ticks: int = 5
    min_speed: int = 1
    max_speed: int = 7
    ticks_per_second: int = 60
    notify_ticks: int = 300

    def __post_init__(self) -> None:
        if not self.last_replay_name.strip():
            raise ConfigError("last_replay_name must not be empty")
        if int(self.cooldown_ticks) < 0:
            raise ConfigError(f"cooldown_ticks must be non-negative, got {self.cooldown_ticks}")
        if not (1 <= int(self.min_speed) <= int(self.max_speed)):
            raise ConfigError(f"invalid speed bounds: [{self.min_speed}, {self.max_speed}]")
        if int(self.ticks_per_second) <= 0:
            raise ConfigError(f"ticks_per_second must be positive, got {self.ticks_per_second}")

    def clamp_speed(self, speed: int | None) -> int:
        if speed is None:
            return int(self.min_speed)
        return max(int(self.min_speed), min(int(self.max_speed), int(speed)))


def recorder_config_path(base_dir: Path) -> Path:
    return Path(base_dir) / RECORDER_CFG_NAME


def dump_recorder_config(config: RecorderConfig) -> bytes:
    return msgspec.json.format(msgspec.json.encode(config), indent=2)


def load_recorder_config(path: Path) -> RecorderConfig:
    path = Path(path)
    try:
        return msgspec.json.decode(path.read_bytes(), type=RecorderConfig)
    except msgspec.ValidationError as exc:
        raise ConfigError(f"invalid recorder config {path}: {exc}") from exc
    except msgspec.DecodeError as exc:
        raise ConfigError(f"malformed recorder config {path}: {exc}") from exc


def ensure_recorder_config(base_dir: Path) -> RecorderConfig:
    """Load `tickreplay.json` from `base_dir`, writing defaults first if it is missing."""

    path = recorder_config_path(base_dir)
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(dump_recorder_config(RecorderConfig()))
    return load_recorder_config(path)
