from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock

from .clock import TickClock

TRACE_DIR_PARTS = ("logs", "replay")


@dataclass(slots=True)
class _TraceFile:
    path: Path
    seq: int = 0

    def append(self, event: str, clock: TickClock | None, fields: dict[str, object]) -> None:
        self.seq += 1
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(_trace_line(self.seq, event, clock, fields) + "\n")


_TRACE_LOCK = Lock()
_TRACE: _TraceFile | None = None


def _format_value(value: object) -> str:
    if isinstance(value, str) and (not value or " " in value):
        return repr(value)
    return str(value).replace("\n", "\\n")


def _trace_line(seq: int, event: str, clock: TickClock | None, fields: dict[str, object]) -> str:
    """`<utc> seq=N [tick=T global_tick=G] event=E key=value...`, fields sorted by key."""

    stamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    parts = [stamp, f"seq={seq}"]
    if clock is not None:
        parts.append(f"tick={clock.tick_count}")
        parts.append(f"global_tick={clock.now}")
    parts.append(f"event={str(event).strip()}")
    parts.extend(f"{key}={_format_value(fields[key])}" for key in sorted(fields))
    return " ".join(parts)


def replay_debug_log_path() -> Path | None:
    with _TRACE_LOCK:
        return None if _TRACE is None else _TRACE.path


def init_replay_debug_log(*, base_dir: Path, build_id: str = "") -> Path:
    """Open a fresh trace file under `<base_dir>/logs/replay/` and log `init`.

    Until this is called `replay_debug_log` writes nothing.
    """

    global _TRACE
    opened = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%S.%fZ")
    path = Path(base_dir).joinpath(*TRACE_DIR_PARTS) / f"replay-pid{os.getpid()}-{opened}.log"
    path.parent.mkdir(parents=True, exist_ok=True)

    with _TRACE_LOCK:
        _TRACE = _TraceFile(path=path)

    replay_debug_log("init", build_id=str(build_id), pid=os.getpid())
    return path


def replay_debug_log(event: str, *, clock: TickClock | None = None, **fields: object) -> None:
    """Append one trace line; `clock` stamps the session and global tick on it."""

    with _TRACE_LOCK:
        if _TRACE is not None:
            _TRACE.append(event, clock, fields)


def close_replay_debug_log() -> None:
    global _TRACE
    with _TRACE_LOCK:
        _TRACE = None


__all__ = [
    "close_replay_debug_log",
    "init_replay_debug_log",
    "replay_debug_log",
    "replay_debug_log_path",
]
