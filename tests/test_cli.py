from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from tickreplay.cli import app

REPLAY_TEXT = "\n".join(
    [
        "replay_version 2.0",
        "stopped_at 10",
        "seed 42",
        "recorded_at 2026-01-02 03:04:05 +0000",
        "[jump:,1.0,0.0,1,1,5]",
        "[move:,0.5,-2.0,2,2,5]",
        "",
    ]
)


def _write_replay(tmp_path: Path, text: str = REPLAY_TEXT) -> Path:
    path = tmp_path / "replays" / "demo.txt"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_inspect_prints_header_and_event_summary(tmp_path: Path) -> None:
    replay_file = _write_replay(tmp_path)

    result = CliRunner().invoke(app, ["inspect", str(replay_file)])

    assert result.exit_code == 0, result.output
    assert "seed:        42" in result.output
    assert "stopped_at:  10" in result.output
    assert "events:      2" in result.output
    assert "order=1,2" in result.output


def test_inspect_rejects_incompatible_replay(tmp_path: Path) -> None:
    replay_file = _write_replay(tmp_path, "replay_version 1.0\n")

    result = CliRunner().invoke(app, ["inspect", str(replay_file)])

    assert result.exit_code == 1


def test_inspect_missing_file_exits_nonzero(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["inspect", str(tmp_path / "nope.txt")])

    assert result.exit_code == 1


def test_play_dispatches_events_on_their_recorded_tick(tmp_path: Path) -> None:
    replay_file = _write_replay(tmp_path)
    runtime_dir = tmp_path / "rt"

    result = CliRunner().invoke(app, ["play", str(replay_file), "--runtime-dir", str(runtime_dir)])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert "tick=5 jump(1.0)" in lines
    assert "tick=5 move(0.5, -2.0)" in lines
    assert lines.index("tick=5 jump(1.0)") < lines.index("tick=5 move(0.5, -2.0)")
    assert "completed after 10 step(s)" in lines
    assert (runtime_dir / "tickreplay.json").is_file()
    console_lines = (runtime_dir / "console.log").read_text(encoding="utf-8").splitlines()
    assert console_lines[0] == "Replay started =demo.txt= speed: 1. (0)"
    assert console_lines[-1].startswith("Replay completed [demo.txt].")


def test_play_with_trace_writes_controller_log(tmp_path: Path) -> None:
    replay_file = _write_replay(tmp_path)
    runtime_dir = tmp_path / "rt"

    result = CliRunner().invoke(
        app,
        ["play", str(replay_file), "--runtime-dir", str(runtime_dir), "--speed", "3", "--trace"],
    )

    assert result.exit_code == 0, result.output
    traces = list((runtime_dir / "logs" / "replay").glob("replay-*.log"))
    assert len(traces) == 1
    text = traces[0].read_text(encoding="utf-8")
    assert "event=replay_start" in text
    assert "speed=3" in text
    assert "event=replay_complete" in text


def test_play_defaults_to_the_runtime_dir_from_the_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    replay_file = _write_replay(tmp_path)
    monkeypatch.setenv("TICKREPLAY_RUNTIME_DIR", str(tmp_path / "late-env"))

    result = CliRunner().invoke(app, ["play", str(replay_file)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "late-env" / "tickreplay.json").is_file()
    assert (tmp_path / "late-env" / "console.log").is_file()
