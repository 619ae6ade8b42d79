from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Protocol

from .clock import TickClock
from .console import ConsoleState, create_console

DEFAULT_NOTIFY_TICKS = 300

ResetHook = Callable[[], None]


class HostRuntime(Protocol):
    """What the recording controller needs from the host simulation."""

    clock: TickClock
    console: ConsoleState
    simulation_speed: int

    def reset(self) -> None: ...

    def set_seed(self, seed: int) -> None: ...

    def write_file(self, name: str, text: str) -> bool: ...

    def read_file(self, name: str) -> str | None: ...

    def notify(self, message: str, duration_ticks: int = DEFAULT_NOTIFY_TICKS) -> None: ...


@dataclass(frozen=True, slots=True)
class Notification:
    message: str
    posted_at: int
    duration_ticks: int = DEFAULT_NOTIFY_TICKS


@dataclass(slots=True)
class LocalRuntime:
    """File-backed host runtime: replays live under `base_dir`."""

    base_dir: Path
    clock: TickClock = field(default_factory=TickClock)
    console: ConsoleState | None = None
    rng: random.Random = field(default_factory=random.Random)
    simulation_speed: int = 1
    seed: int | None = None
    reset_count: int = 0
    notifications: list[Notification] = field(default_factory=list)
    reset_hooks: list[ResetHook] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.base_dir = Path(self.base_dir)
        if self.console is None:
            self.console = create_console(self.base_dir)

    def path_for(self, name: str) -> Path:
        return self.base_dir / str(name).strip().strip("\"'")

    def add_reset_hook(self, hook: ResetHook) -> None:
        self.reset_hooks.append(hook)

    def reset(self) -> None:
        self.clock.reset()
        self.reset_count += 1
        for hook in self.reset_hooks:
            hook()

    def set_seed(self, seed: int) -> None:
        self.seed = int(seed)
        self.rng.seed(int(seed))

    def write_file(self, name: str, text: str) -> bool:
        path = self.path_for(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            self.console.log.log(f"Failed to write '{name}': {exc}")
            return False
        return True

    def read_file(self, name: str) -> str | None:
        path = self.path_for(name)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def notify(self, message: str, duration_ticks: int = DEFAULT_NOTIFY_TICKS) -> None:
        self.notifications.append(
            Notification(message=str(message), posted_at=self.clock.now, duration_ticks=int(duration_ticks))
        )
