from __future__ import annotations

from collections import Counter
from pathlib import Path

import typer

from . import __version__
from .config import ConfigError, ensure_recorder_config
from .console import create_console
from .debug_log import close_replay_debug_log, init_replay_debug_log
from .dispatch import EventDispatcher
from .errors import ReplayCodecError
from .host import HeadlessHost
from .paths import default_runtime_dir
from .replay import load_replay
from .runtime import LocalRuntime

app = typer.Typer(add_completion=False)


def _read_replay_text(replay_file: Path) -> str:
    if not replay_file.is_file():
        typer.echo(f"replay file not found: {replay_file}", err=True)
        raise typer.Exit(code=1)
    return replay_file.read_text(encoding="utf-8")


def _format_args(args: tuple[float, ...]) -> str:
    return ", ".join(repr(value) for value in args)


@app.command("inspect")
def cmd_inspect(replay_file: Path = typer.Argument(..., help="replay file path (.txt)")) -> None:
    """Print the header and per-tick event counts of a replay file."""
    text = _read_replay_text(replay_file)
    try:
        replay = load_replay(text, file_name=replay_file.name)
    except ReplayCodecError as exc:
        typer.echo(f"invalid replay: {exc}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"version:     {replay.version}")
    typer.echo(f"seed:        {replay.seed}")
    typer.echo(f"stopped_at:  {replay.stopped_at}")
    typer.echo(f"recorded_at: {replay.recorded_at}")
    typer.echo(f"events:      {len(replay.events)}")
    names = Counter(event.name for event in replay.events)
    for name, count in sorted(names.items()):
        typer.echo(f"  {name:16s} {count:6d}")
    for tick, bucket in sorted(replay.events_by_tick().items()):
        orders = ",".join(str(event.order) for event in bucket)
        typer.echo(f"tick {tick:6d}: {len(bucket)} event(s) order={orders}")


@app.command("play")
def cmd_play(
    replay_file: Path = typer.Argument(..., help="replay file path (.txt)"),
    speed: int = typer.Option(1, help="playback speed (clamped to the configured bounds)"),
    max_steps: int = typer.Option(100_000, "--max-steps", min=1, help="stop after N host steps"),
    runtime_dir: Path | None = typer.Option(
        None,
        "--runtime-dir",
        help="directory for tickreplay.json and logs (default: per-user OS data dir; override with TICKREPLAY_RUNTIME_DIR)",
    ),
    trace: bool = typer.Option(False, "--trace", help="write a controller trace under <runtime-dir>/logs/replay"),
) -> None:
    """Play a replay headlessly, echoing every dispatched event."""
    if runtime_dir is None:
        runtime_dir = default_runtime_dir()
    text = _read_replay_text(replay_file)
    try:
        config = ensure_recorder_config(runtime_dir)
        replay = load_replay(text, file_name=replay_file.name)
    except (ConfigError, ReplayCodecError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from None

    runtime = LocalRuntime(base_dir=replay_file.resolve().parent, console=create_console(runtime_dir))
    dispatcher = EventDispatcher()
    host = HeadlessHost(runtime.base_dir, config=config, runtime=runtime, dispatcher=dispatcher)

    def _echo_handler(name: str):
        def _handler(args: tuple[float, ...], _replay: bool) -> None:
            typer.echo(f"tick={runtime.clock.tick_count} {name}({_format_args(args)})")

        return _handler

    for name in sorted({event.name for event in replay.events}):
        dispatcher.register(name, _echo_handler(name))

    if trace:
        init_replay_debug_log(base_dir=runtime_dir, build_id=str(__version__))
    try:
        if not host.controller.start_replay(replay_file.name, speed=speed):
            for line in runtime.console.log.lines:
                typer.echo(line, err=True)
            raise typer.Exit(code=1)
        steps = host.run_until_idle(max_steps=max_steps)
    finally:
        runtime.console.log.flush()
        if trace:
            close_replay_debug_log()

    completed = host.controller.replay_completed_successfully
    typer.echo(f"{'completed' if completed else 'stopped'} after {steps} step(s)")
    if not completed:
        raise typer.Exit(code=2)


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
