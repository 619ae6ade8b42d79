from __future__ import annotations

from pathlib import Path

import pytest

from tickreplay.replay import (
    CorruptReplayFile,
    IncompatibleVersion,
    InputEventLog,
    RecordedEvent,
    ReplayCodecError,
    ReplayFile,
    decode_replay,
    dump_replay_file,
    encode_replay,
    group_events_by_tick,
    load_replay,
    load_replay_file,
    peek_replay_version,
)

RECORDED_AT = "2026-01-02 03:04:05 +0000"


def _scenario_log() -> InputEventLog:
    log = InputEventLog(seed=42)
    log.record("jump", 1, 0, 1, tick=5)
    log.record("fire", 0, 0, 0, tick=5)
    log.record("move", 3.0, 4.0, 2, tick=6)
    return log


def test_encode_writes_headers_then_events_in_capture_order() -> None:
    replay = _scenario_log().finish(stopped_at=6, recorded_at=RECORDED_AT)

    assert encode_replay(replay).splitlines() == [
        "replay_version 2.0",
        "stopped_at 6",
        "seed 42",
        f"recorded_at {RECORDED_AT}",
        "[jump:,1.0,0.0,1,1,5]",
        "[fire:,0.0,0.0,0,2,5]",
        "[move:,3.0,4.0,2,3,6]",
    ]


def test_decode_restores_the_recorded_session() -> None:
    log = _scenario_log()
    log.record("aim", -0.1, 1e-7, 2, tick=6)
    log.record("aim", 0.30000000000000004, 2.5, 2, tick=40)
    replay = log.finish(stopped_at=41, recorded_at=RECORDED_AT)

    decoded = decode_replay(encode_replay(replay))

    assert decoded == replay
    assert decoded.events_by_tick() == group_events_by_tick(log.history)


def test_decode_sorts_each_tick_by_capture_order() -> None:
    text = "\n".join(
        [
            "replay_version 2.0",
            "stopped_at 10",
            "seed 7",
            "recorded_at whenever",
            "[a:,0.0,0.0,0,1,1]",
            "[c:,0.0,0.0,0,5,3]",
            "[c:,0.0,0.0,0,4,3]",
            "[c:,0.0,0.0,0,3,3]",
            "[b:,0.0,0.0,0,2,2]",
        ]
    )

    by_tick = decode_replay(text).events_by_tick()

    assert [event.order for event in by_tick[3]] == [3, 4, 5]
    assert sorted(by_tick) == [1, 2, 3]


def test_decode_tolerates_blank_lines_and_symbol_style_names() -> None:
    text = "\n\nreplay_version 2.0\n\nstopped_at 3\nseed 1\nrecorded_at 2019-01-01 10:00:00 +0100\n\n[:jump, 1, 0, 1, 1, 2]\n\n"

    replay = decode_replay(text)

    assert replay.recorded_at == "2019-01-01 10:00:00 +0100"
    assert replay.events == (RecordedEvent(name="jump", value_1=1.0, value_2=0.0, value_count=1, order=1, tick=2),)


def test_decode_rejects_unknown_lines_with_the_offending_text() -> None:
    text = "replay_version 2.0\nstopped_at 3\nseed 1\nthis is not replay data\n"

    with pytest.raises(CorruptReplayFile, match="this is not replay data") as excinfo:
        decode_replay(text)

    assert excinfo.value.line_number == 4
    assert isinstance(excinfo.value, ReplayCodecError)


@pytest.mark.parametrize(
    ("record", "reason"),
    [
        ("[jump:,1.0,0.0,1,1]", "expected 6 fields"),
        ("[jump:,abc,0.0,1,1,1]", "value_1 is not a number"),
        ("[jump:,1.0,0.0,3,1,1]", "value_count"),
        ("[jump:,1.0,0.0,1,1.5,1]", "order is not an integer"),
        ("[jump:,1.0,0.0,1,1,-2]", "tick must be non-negative"),
        ("[1jump:,1.0,0.0,1,1,1]", "bad event name"),
        ("[jump:,1.0,0.0,1,1,1", "unterminated"),
    ],
)
def test_decode_rejects_malformed_event_records(record: str, reason: str) -> None:
    text = f"replay_version 2.0\nstopped_at 3\nseed 1\n{record}\n"

    with pytest.raises(CorruptReplayFile, match=reason):
        decode_replay(text)


def test_decode_requires_core_headers() -> None:
    with pytest.raises(CorruptReplayFile, match="missing seed header"):
        decode_replay("replay_version 2.0\nstopped_at 3\n")
    with pytest.raises(CorruptReplayFile, match="seed is not an integer"):
        decode_replay("replay_version 2.0\nstopped_at 3\nseed lots\n")
    with pytest.raises(CorruptReplayFile, match="duplicate stopped_at"):
        decode_replay("replay_version 2.0\nstopped_at 3\nstopped_at 4\nseed 1\n")


def test_load_replay_rejects_other_versions_before_parsing() -> None:
    text = "replay_version 1.0\nsome v1 body we cannot parse\n"

    with pytest.raises(IncompatibleVersion, match="not compatible") as excinfo:
        load_replay(text, file_name="old.txt")

    assert excinfo.value.version == "1.0"
    assert excinfo.value.expected == "2.0"
    assert "old.txt" in str(excinfo.value)


def test_load_replay_rejects_missing_version_header() -> None:
    with pytest.raises(IncompatibleVersion, match="no version header"):
        load_replay("stopped_at 3\nseed 1\n")


def test_peek_replay_version() -> None:
    assert peek_replay_version("\n  replay_version 2.0 \nseed 1\n") == "2.0"
    assert peek_replay_version("seed 1\nreplay_version 2.0\n") == ""
    assert peek_replay_version("") == ""


def test_replay_file_roundtrip_on_disk(tmp_path: Path) -> None:
    replay = ReplayFile(version="2.0", stopped_at=9, seed=3, recorded_at=RECORDED_AT, events=())
    path = tmp_path / "replays" / "empty.txt"
    path.parent.mkdir()

    dump_replay_file(path, replay)

    assert load_replay_file(path) == replay


def test_decode_accepts_every_name_capture_allows() -> None:
    log = InputEventLog(seed=3)
    log.record("mouse-move", 1.0, 2.0, 2, tick=1)
    log.record("ui.click", tick=1)
    log.record("_debug-toggle", tick=2)
    replay = log.finish(stopped_at=3, recorded_at=RECORDED_AT)

    decoded = load_replay(encode_replay(replay))

    assert [event.name for event in decoded.events] == ["mouse-move", "ui.click", "_debug-toggle"]
    assert decoded == replay
