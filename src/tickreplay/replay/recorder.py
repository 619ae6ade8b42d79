from __future__ import annotations

from .codec import build_replay
from .types import RecordedEvent, ReplayFile
from .versioning import SUPPORTED_REPLAY_VERSION


class InputEventLog:
    """Append-only capture log for one recording session."""

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)
        self._next_order = 1
        self._history: list[RecordedEvent] = []

    @property
    def seed(self) -> int:
        return int(self._seed)

    @property
    def next_order(self) -> int:
        return int(self._next_order)

    @property
    def history(self) -> tuple[RecordedEvent, ...]:
        return tuple(self._history)

    def __len__(self) -> int:
        return len(self._history)

    def record(
        self,
        name: str,
        value_1: float = 0.0,
        value_2: float = 0.0,
        value_count: int = 0,
        *,
        tick: int,
    ) -> RecordedEvent:
        """Append one input event captured at `tick`.

        Returns the stored event; its `order` is unique within the session.
        """

        event = RecordedEvent(
            name=str(name),
            value_1=float(value_1),
            value_2=float(value_2),
            value_count=int(value_count),  # type: ignore[arg-type]
            order=int(self._next_order),
            tick=int(tick),
        )
        self._history.append(event)
        self._next_order += 1
        return event

    def finish(
        self,
        *,
        stopped_at: int,
        recorded_at: str | None = None,
        version: str = SUPPORTED_REPLAY_VERSION,
    ) -> ReplayFile:
        return build_replay(
            version=version,
            stopped_at=int(stopped_at),
            seed=int(self._seed),
            recorded_at=recorded_at,
            events=self._history,
        )
