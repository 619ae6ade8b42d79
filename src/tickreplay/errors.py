from __future__ import annotations

from enum import Enum


class RecordingErrorKind(str, Enum):
    MISSING_SEED = "missing_seed"
    ALREADY_RECORDING = "already_recording"
    ALREADY_REPLAYING = "already_replaying"
    MISSING_FILE_NAME = "missing_file_name"
    NOT_RECORDING = "not_recording"
    NOT_REPLAYING = "not_replaying"
    FILE_READ_FAILURE = "file_read_failure"
    FILE_WRITE_FAILURE = "file_write_failure"
    INCOMPATIBLE_VERSION = "incompatible_version"
    CORRUPT_REPLAY_FILE = "corrupt_replay_file"
    UNKNOWN_HANDLER = "unknown_handler"


class RecordingError(Exception):
    """A rejected recorder operation.

    `remedy` is the console command the user should run next, if there is one.
    Recoverable errors never leave the controller; it logs them and returns False.
    """

    kind: RecordingErrorKind
    recoverable: bool = True

    def __init__(self, message: str, *, remedy: str | None = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.remedy = remedy


class MissingSeed(RecordingError):
    kind = RecordingErrorKind.MISSING_SEED


class AlreadyRecording(RecordingError):
    kind = RecordingErrorKind.ALREADY_RECORDING


class AlreadyReplaying(RecordingError):
    kind = RecordingErrorKind.ALREADY_REPLAYING


class MissingFileName(RecordingError):
    kind = RecordingErrorKind.MISSING_FILE_NAME


class NotRecording(RecordingError):
    kind = RecordingErrorKind.NOT_RECORDING


class NotReplaying(RecordingError):
    kind = RecordingErrorKind.NOT_REPLAYING


class FileReadFailure(RecordingError):
    kind = RecordingErrorKind.FILE_READ_FAILURE


class FileWriteFailure(RecordingError):
    kind = RecordingErrorKind.FILE_WRITE_FAILURE


class ReplayCodecError(ValueError):
    """Base for replay file format failures. These abort the requested operation only."""

    kind: RecordingErrorKind


class UnknownHandler(RecordingError, LookupError):
    kind = RecordingErrorKind.UNKNOWN_HANDLER
    recoverable = False

    def __init__(self, name: str) -> None:
        super().__init__(f"no handler registered for event {name!r}")
        self.name = str(name)


__all__ = [
    "AlreadyRecording",
    "AlreadyReplaying",
    "FileReadFailure",
    "FileWriteFailure",
    "MissingFileName",
    "MissingSeed",
    "NotRecording",
    "NotReplaying",
    "RecordingError",
    "RecordingErrorKind",
    "ReplayCodecError",
    "UnknownHandler",
]
