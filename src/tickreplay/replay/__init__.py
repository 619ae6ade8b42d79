from __future__ import annotations

from ..errors import ReplayCodecError
from .codec import (
    CorruptReplayFile,
    build_replay,
    decode_event,
    decode_replay,
    dump_replay_file,
    encode_event,
    encode_replay,
    load_replay,
    load_replay_file,
)
from .playback import ReplaySession
from .recorder import InputEventLog
from .types import RecordedEvent, ReplayFile, group_events_by_tick, validate_event_name
from .versioning import SUPPORTED_REPLAY_VERSION, IncompatibleVersion, peek_replay_version, require_supported_version

__all__ = [
    "SUPPORTED_REPLAY_VERSION",
    "CorruptReplayFile",
    "IncompatibleVersion",
    "InputEventLog",
    "RecordedEvent",
    "ReplayCodecError",
    "ReplayFile",
    "ReplaySession",
    "build_replay",
    "decode_event",
    "decode_replay",
    "dump_replay_file",
    "encode_event",
    "encode_replay",
    "group_events_by_tick",
    "load_replay",
    "load_replay_file",
    "peek_replay_version",
    "require_supported_version",
    "validate_event_name",
]
