from __future__ import annotations

from pathlib import Path

from .commands import register_recording_commands
from .config import RecorderConfig
from .console import ConsoleState
from .controller import RecordingController
from .dispatch import EventDispatcher
from .runtime import LocalRuntime


class HeadlessHost:
    """Minimal tick loop around a `RecordingController`.

    Each simulation tick runs `controller.tick()` first (so replayed input
    lands before live input) and then advances the clock. One `step()` runs
    `simulation_speed` ticks, which is how replay speed-up is realised.
    """

    def __init__(
        self,
        base_dir: Path,
        *,
        config: RecorderConfig | None = None,
        runtime: LocalRuntime | None = None,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        self.runtime = runtime if runtime is not None else LocalRuntime(base_dir=Path(base_dir))
        self.dispatcher = dispatcher if dispatcher is not None else EventDispatcher()
        self.controller = RecordingController(self.runtime, self.dispatcher, config=config)
        self.dispatcher.attach_recorder(self.controller.record_input_history)
        register_recording_commands(self.runtime.console, self.controller)

    @property
    def console(self) -> ConsoleState:
        return self.runtime.console

    def tick(self) -> None:
        self.controller.tick()
        self.runtime.clock.advance()

    def step(self) -> int:
        ticks = max(1, int(self.runtime.simulation_speed))
        for _ in range(ticks):
            self.tick()
        return ticks

    def run_until_idle(self, *, max_steps: int = 100_000) -> int:
        """Step while a replay is running; returns the number of steps taken."""

        steps = 0
        while self.controller.is_replaying and steps < int(max_steps):
            self.step()
            steps += 1
        return steps
