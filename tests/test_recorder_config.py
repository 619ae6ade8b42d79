from __future__ import annotations

import json
from pathlib import Path

import pytest

from tickreplay.config import (
    ConfigError,
    RecorderConfig,
    ensure_recorder_config,
    load_recorder_config,
    recorder_config_path,
)


def test_ensure_recorder_config_writes_defaults(tmp_path: Path) -> None:
    config = ensure_recorder_config(tmp_path / "runtime")

    path = recorder_config_path(tmp_path / "runtime")
    assert path.is_file()
    assert config == RecorderConfig()
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["last_replay_name"] == "last_replay.txt"
    assert payload["cooldown_ticks"] == 5
    assert payload["max_speed"] == 7


def test_ensure_recorder_config_keeps_existing_values(tmp_path: Path) -> None:
    recorder_config_path(tmp_path).write_text('{"max_speed": 4, "ticks_per_second": 30}', encoding="utf-8")

    config = ensure_recorder_config(tmp_path)

    assert config.max_speed == 4
    assert config.ticks_per_second == 30
    assert config.min_speed == 1


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        '{"replay_speed": 3}',
        '{"min_speed": 5, "max_speed": 2}',
        '{"cooldown_ticks": "five"}',
    ],
)
def test_load_recorder_config_rejects_bad_files(tmp_path: Path, payload: str) -> None:
    path = recorder_config_path(tmp_path)
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(ConfigError, match="recorder config"):
        load_recorder_config(path)


def test_recorder_config_validates_on_construction() -> None:
    with pytest.raises(ConfigError, match="speed bounds"):
        RecorderConfig(min_speed=0)
    with pytest.raises(ConfigError, match="ticks_per_second"):
        RecorderConfig(ticks_per_second=0)


def test_clamp_speed() -> None:
    config = RecorderConfig(min_speed=2, max_speed=5)

    assert config.clamp_speed(None) == 2
    assert config.clamp_speed(1) == 2
    assert config.clamp_speed(3) == 3
    assert config.clamp_speed(99) == 5
