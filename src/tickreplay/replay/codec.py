from __future__ import annotations

import datetime as dt
import re
from collections.abc import Iterable
from pathlib import Path

from ..errors import RecordingErrorKind, ReplayCodecError
from .types import EVENT_NAME_PATTERN, RecordedEvent, ReplayFile
from .versioning import SUPPORTED_REPLAY_VERSION, VERSION_PREFIX, peek_replay_version, require_supported_version

STOPPED_AT_PREFIX = "stopped_at"
SEED_PREFIX = "seed"
RECORDED_AT_PREFIX = "recorded_at"

# Event names are written with a trailing `:` so they never read back as a number.
NAME_MARKER = ":"
EVENT_FIELD_COUNT = 6

_HEADER_RE = re.compile(r"^(replay_version|stopped_at|seed|recorded_at)(?:\s+(.*))?$")
_RECORD_RE = re.compile(r"^\[(?P<body>[^\[\]]*)\]$")
_NAME_RE = re.compile(rf":?(?P<name>{EVENT_NAME_PATTERN}):?")


class CorruptReplayFile(ReplayCodecError):
    kind = RecordingErrorKind.CORRUPT_REPLAY_FILE

    def __init__(self, message: str, *, line: str = "", line_number: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.line_number = int(line_number)


def _format_number(value: float) -> str:
    # `repr` is the shortest text that parses back to the identical float.
    return repr(float(value))


def encode_event(event: RecordedEvent) -> str:
    fields = (
        f"{event.name}{NAME_MARKER}",
        _format_number(event.value_1),
        _format_number(event.value_2),
        str(int(event.value_count)),
        str(int(event.order)),
        str(int(event.tick)),
    )
    return "[" + ",".join(fields) + "]"


def encode_replay(replay: ReplayFile) -> str:
    lines = [
        f"{VERSION_PREFIX} {replay.version}",
        f"{STOPPED_AT_PREFIX} {int(replay.stopped_at)}",
        f"{SEED_PREFIX} {int(replay.seed)}",
        f"{RECORDED_AT_PREFIX} {replay.recorded_at}",
    ]
    lines.extend(encode_event(event) for event in replay.events)
    return "\n".join(lines) + "\n"


def _corrupt(reason: str, line: str, line_number: int) -> CorruptReplayFile:
    return CorruptReplayFile(
        f"Replay data seems corrupt ({reason}) at line {line_number}: {line!r}",
        line=line,
        line_number=line_number,
    )


def _parse_int(text: str, *, what: str, line: str, line_number: int) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise _corrupt(f"{what} is not an integer", line, line_number) from None


def _parse_float(text: str, *, what: str, line: str, line_number: int) -> float:
    try:
        return float(text.strip())
    except ValueError:
        raise _corrupt(f"{what} is not a number", line, line_number) from None


def decode_event(line: str, *, line_number: int = 0) -> RecordedEvent:
    match = _RECORD_RE.match(line.strip())
    if match is None:
        raise _corrupt("unterminated event record", line, line_number)
    fields = match.group("body").split(",")
    if len(fields) != EVENT_FIELD_COUNT:
        raise _corrupt(f"expected {EVENT_FIELD_COUNT} fields, got {len(fields)}", line, line_number)

    raw_name, raw_v1, raw_v2, raw_count, raw_order, raw_tick = fields
    name_match = _NAME_RE.fullmatch(raw_name.strip())
    if name_match is None:
        raise _corrupt("bad event name", line, line_number)
    value_count = _parse_int(raw_count, what="value_count", line=line, line_number=line_number)
    if value_count not in (0, 1, 2):
        raise _corrupt("value_count must be 0, 1 or 2", line, line_number)
    tick = _parse_int(raw_tick, what="tick", line=line, line_number=line_number)
    if tick < 0:
        raise _corrupt("tick must be non-negative", line, line_number)

    return RecordedEvent(
        name=name_match.group("name"),
        value_1=_parse_float(raw_v1, what="value_1", line=line, line_number=line_number),
        value_2=_parse_float(raw_v2, what="value_2", line=line, line_number=line_number),
        value_count=value_count,  # type: ignore[arg-type]
        order=_parse_int(raw_order, what="order", line=line, line_number=line_number),
        tick=tick,
    )


def decode_replay(text: str) -> ReplayFile:
    """Parse the line-oriented replay format.

    Blank lines are skipped, header lines are matched by prefix and `[`-lines
    are event records. Anything else raises `CorruptReplayFile`. Events keep
    their on-disk order here; `ReplayFile.events_by_tick()` restores capture
    order per tick.
    """

    headers: dict[str, tuple[str, str, int]] = {}
    events: list[RecordedEvent] = []
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("["):
            events.append(decode_event(line, line_number=line_number))
            continue
        header = _HEADER_RE.match(line)
        if header is None:
            raise CorruptReplayFile(
                f"Replay data seems corrupt. I don't know how to parse line {line_number}: {line!r}",
                line=line,
                line_number=line_number,
            )
        key, value = header.group(1), (header.group(2) or "").strip()
        if key in headers:
            raise _corrupt(f"duplicate {key} header", line, line_number)
        headers[key] = (value, line, line_number)

    for key in (VERSION_PREFIX, STOPPED_AT_PREFIX, SEED_PREFIX):
        if key not in headers:
            raise CorruptReplayFile(f"Replay data seems corrupt: missing {key} header")

    stopped_at_text, stopped_at_line, stopped_at_number = headers[STOPPED_AT_PREFIX]
    seed_text, seed_line, seed_number = headers[SEED_PREFIX]
    return ReplayFile(
        version=headers[VERSION_PREFIX][0],
        stopped_at=_parse_int(stopped_at_text, what="stopped_at", line=stopped_at_line, line_number=stopped_at_number),
        seed=_parse_int(seed_text, what="seed", line=seed_line, line_number=seed_number),
        recorded_at=headers[RECORDED_AT_PREFIX][0] if RECORDED_AT_PREFIX in headers else "",
        events=tuple(events),
    )


def load_replay(text: str, *, file_name: str | None = None) -> ReplayFile:
    """Decode `text`, rejecting unsupported format versions before parsing the body."""

    require_supported_version(peek_replay_version(text), file_name=file_name)
    return decode_replay(text)


def format_recorded_at(now: dt.datetime | None = None) -> str:
    if now is None:
        now = dt.datetime.now().astimezone()
    return now.strftime("%Y-%m-%d %H:%M:%S %z").strip()


def build_replay(
    *,
    stopped_at: int,
    seed: int,
    events: Iterable[RecordedEvent],
    recorded_at: str | None = None,
    version: str = SUPPORTED_REPLAY_VERSION,
) -> ReplayFile:
    return ReplayFile(
        version=str(version),
        stopped_at=int(stopped_at),
        seed=int(seed),
        recorded_at=format_recorded_at() if recorded_at is None else str(recorded_at),
        events=tuple(events),
    )


def dump_replay_file(path: Path, replay: ReplayFile) -> None:
    Path(path).write_text(encode_replay(replay), encoding="utf-8")


def load_replay_file(path: Path) -> ReplayFile:
    path = Path(path)
    return load_replay(path.read_text(encoding="utf-8"), file_name=path.name)
