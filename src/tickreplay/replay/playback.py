from __future__ import annotations

from dataclasses import dataclass, field

from .types import RecordedEvent, ReplayFile


@dataclass(slots=True)
class ReplaySession:
    file_name: str
    events_by_tick: dict[int, tuple[RecordedEvent, ...]]
    stopped_at: int
    seed: int
    speed: int = 1
    started_at_tick: int = 0
    recorded_at: str = ""
    cursor: int = 0
    completed: bool = False
    dispatched: int = field(default=0, init=False)

    @classmethod
    def from_replay(cls, replay: ReplayFile, *, file_name: str, speed: int, started_at_tick: int) -> ReplaySession:
        return cls(
            file_name=str(file_name),
            events_by_tick=replay.events_by_tick(),
            stopped_at=int(replay.stopped_at),
            seed=int(replay.seed),
            speed=int(speed),
            started_at_tick=int(started_at_tick),
            recorded_at=str(replay.recorded_at),
        )

    @property
    def completion_due(self) -> bool:
        return int(self.stopped_at) - int(self.cursor) <= 1

    @property
    def event_count(self) -> int:
        return sum(len(bucket) for bucket in self.events_by_tick.values())

    def advance(self) -> tuple[RecordedEvent, ...]:
        """Return the events captured at the cursor tick and move to the next tick."""

        events = self.events_by_tick.get(int(self.cursor), ())
        self.cursor += 1
        self.dispatched += len(events)
        return events

    def drain_remaining(self) -> tuple[RecordedEvent, ...]:
        """Take every event at or after the cursor, in (tick, order) order.

        Used on completion so inputs captured in the last ticks before the
        recording was stopped still reach their handlers.
        """

        remaining: list[RecordedEvent] = []
        for tick in sorted(self.events_by_tick):
            if tick >= int(self.cursor):
                remaining.extend(self.events_by_tick[tick])
        self.cursor = max(int(self.cursor), max(self.events_by_tick, default=-1) + 1)
        self.dispatched += len(remaining)
        return tuple(remaining)

    def seconds_remaining(self, *, now: int, ticks_per_second: int = 60) -> int:
        ticks_per_step = int(ticks_per_second) * max(1, int(self.speed))
        return (int(self.stopped_at) + int(self.started_at_tick) - int(now)) // ticks_per_step
