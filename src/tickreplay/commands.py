from __future__ import annotations

from .console import CommandHandler, ConsoleState
from .controller import RecordingController
from .errors import ReplayCodecError


def _parse_int_arg(value: str) -> int | None:
    # Base 0 takes 0x/0o/0b prefixes but refuses zero-padded decimals like "007".
    for base in (0, 10):
        try:
            return int(value, base)
        except ValueError:
            continue
    return None


def recording_command_handlers(controller: RecordingController) -> dict[str, CommandHandler]:
    console = controller.runtime.console

    def cmd_recording_start(args: list[str]) -> None:
        if len(args) > 1:
            console.log.log("recording.start <seed>")
            return
        seed = None
        if args:
            seed = _parse_int_arg(args[0])
            if seed is None:
                console.log.log(f"recording.start: seed must be an integer, got '{args[0]}'")
                return
        controller.start_recording(seed)

    def cmd_recording_stop(args: list[str]) -> None:
        if len(args) > 1:
            console.log.log("recording.stop <file name>")
            return
        controller.stop_recording(args[0] if args else None)

    def cmd_recording_cancel(_args: list[str]) -> None:
        controller.cancel()

    def cmd_replay_start(args: list[str]) -> None:
        if len(args) > 2:
            console.log.log("replay.start <file name> [speed 1..7]")
            return
        speed: int | None = 1
        if len(args) == 2:
            speed = _parse_int_arg(args[1])
            if speed is None:
                console.log.log(f"replay.start: speed must be an integer, got '{args[1]}'")
                return
        try:
            controller.start_replay(args[0] if args else None, speed=speed)
        except ReplayCodecError:
            # Already reported by the controller; the console keeps running.
            return

    def cmd_replay_stop(_args: list[str]) -> None:
        controller.stop_replay()

    return {
        "recording.start": cmd_recording_start,
        "recording.stop": cmd_recording_stop,
        "recording.cancel": cmd_recording_cancel,
        "replay.start": cmd_replay_start,
        "replay.stop": cmd_replay_stop,
    }


def register_recording_commands(console: ConsoleState, controller: RecordingController) -> None:
    for name, handler in recording_command_handlers(controller).items():
        console.register_command(name, handler)
