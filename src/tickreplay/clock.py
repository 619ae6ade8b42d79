from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickClock:
    """Integer tick source advanced once per simulation step.

    `tick_count` restarts at 0 whenever the host runtime resets, so recorded
    event ticks are relative to the start of a recording. `global_tick_count`
    never goes backwards and is what cooldown windows are measured against.
    """

    tick_count: int = 0
    global_tick_count: int = 0

    def __post_init__(self) -> None:
        tick_count = int(self.tick_count)
        global_tick_count = int(self.global_tick_count)
        if tick_count < 0 or global_tick_count < 0:
            raise ValueError(f"tick counters must be non-negative, got {tick_count}/{global_tick_count}")
        self.tick_count = tick_count
        self.global_tick_count = global_tick_count

    @property
    def now(self) -> int:
        return int(self.global_tick_count)

    def advance(self, ticks: int = 1) -> int:
        ticks = int(ticks)
        if ticks <= 0:
            return 0
        self.tick_count += ticks
        self.global_tick_count += ticks
        return ticks

    def reset(self) -> None:
        self.tick_count = 0
