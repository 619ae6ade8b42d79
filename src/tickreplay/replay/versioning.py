from __future__ import annotations

from ..errors import RecordingErrorKind, ReplayCodecError

SUPPORTED_REPLAY_VERSION = "2.0"
VERSION_PREFIX = "replay_version"


class IncompatibleVersion(ReplayCodecError):
    """The replay was written by an unsupported format revision; it is rejected wholesale."""

    kind = RecordingErrorKind.INCOMPATIBLE_VERSION

    def __init__(self, version: str, *, expected: str = SUPPORTED_REPLAY_VERSION, file_name: str | None = None) -> None:
        source = f"The replay file {file_name}" if file_name else "The replay"
        got = repr(version) if version else "no version header"
        super().__init__(
            f"{source} is not compatible with this version of tickreplay "
            f"(found {got}, expected {expected!r}). Please recreate the replay."
        )
        self.version = str(version)
        self.expected = str(expected)
        self.file_name = file_name


def peek_replay_version(text: str) -> str:
    """Return the version tag from the first non-blank line, or "" if it is not a version header."""

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        head, _, rest = line.partition(" ")
        if head != VERSION_PREFIX:
            return ""
        return rest.strip()
    return ""


def require_supported_version(
    version: str,
    *,
    expected: str = SUPPORTED_REPLAY_VERSION,
    file_name: str | None = None,
) -> str:
    if str(version).strip() != str(expected):
        raise IncompatibleVersion(str(version).strip(), expected=expected, file_name=file_name)
    return str(expected)
