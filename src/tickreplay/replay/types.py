from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

ValueCount: TypeAlias = Literal[0, 1, 2]

# Shared by capture and the replay codec, so every recordable name reads back.
EVENT_NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_.\-]*"
_EVENT_NAME_RE = re.compile(EVENT_NAME_PATTERN)


def validate_event_name(name: str) -> str:
    name = str(name)
    if _EVENT_NAME_RE.fullmatch(name) is None:
        raise ValueError(f"invalid event name {name!r}: expected letters, digits, '_', '.' or '-', not starting with a digit")
    return name


@dataclass(frozen=True, slots=True)
class RecordedEvent:
    name: str
    value_1: float = 0.0
    value_2: float = 0.0
    value_count: ValueCount = 0
    order: int = 0
    tick: int = 0

    def __post_init__(self) -> None:
        validate_event_name(self.name)
        if int(self.value_count) not in (0, 1, 2):
            raise ValueError(f"value_count must be 0, 1 or 2, got {self.value_count}")
        if int(self.tick) < 0:
            raise ValueError(f"recorded event tick must be non-negative, got {self.tick}")

    def args(self) -> tuple[float, ...]:
        """The positional arguments this event is replayed with."""
        return (float(self.value_1), float(self.value_2))[: int(self.value_count)]


@dataclass(frozen=True, slots=True)
class ReplayFile:
    version: str
    stopped_at: int
    seed: int
    recorded_at: str = ""
    events: tuple[RecordedEvent, ...] = field(default_factory=tuple)

    def events_by_tick(self) -> dict[int, tuple[RecordedEvent, ...]]:
        return group_events_by_tick(self.events)


def group_events_by_tick(events: Iterable[RecordedEvent]) -> dict[int, tuple[RecordedEvent, ...]]:
    """Bucket events by tick; each bucket is sorted by capture `order`.

    On-disk line order is irrelevant: replay must dispatch in origination order.
    """

    grouped: dict[int, list[RecordedEvent]] = {}
    for event in events:
        grouped.setdefault(int(event.tick), []).append(event)
    return {tick: tuple(sorted(bucket, key=lambda event: int(event.order))) for tick, bucket in grouped.items()}
