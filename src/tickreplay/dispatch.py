from __future__ import annotations

from typing import Callable, Final

from .errors import UnknownHandler
from .replay.types import validate_event_name


class _ReplaySentinel:
    __slots__ = ()

    def __repr__(self) -> str:
        return "REPLAY"


# Appended as the last positional argument of every playback-originated send.
REPLAY: Final = _ReplaySentinel()

EventHandler = Callable[[tuple[float, ...], bool], None]
RecordCallback = Callable[[str, float, float, int], None]


class EventDispatcher:
    """Name -> handler table for input events.

    Handlers receive `(args, replay)`. Live sends are offered to the attached
    recorder first, so an active recording captures them in call order.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, EventHandler] = {}
        self._recorder: RecordCallback | None = None

    def register(self, name: str, handler: EventHandler) -> None:
        # Only names the replay file format can carry may be recorded.
        self._handlers[validate_event_name(name)] = handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(str(name), None)

    def has_handler(self, name: str) -> bool:
        return str(name) in self._handlers

    def names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def attach_recorder(self, recorder: RecordCallback | None) -> None:
        self._recorder = recorder

    def send(self, name: str, *args: object) -> None:
        replay = bool(args) and args[-1] is REPLAY
        if replay:
            args = args[:-1]
        if len(args) > 2:
            raise ValueError(f"event {name!r} takes at most 2 values, got {len(args)}")
        values = tuple(float(arg) for arg in args)  # type: ignore[arg-type]

        handler = self._handlers.get(str(name))
        if handler is None:
            raise UnknownHandler(str(name))

        if not replay and self._recorder is not None:
            padded = values + (0.0,) * (2 - len(values))
            self._recorder(str(name), padded[0], padded[1], len(values))
        handler(values, replay)
