from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

CONSOLE_LOG_NAME = "console.log"
MAX_CONSOLE_LINES = 0x1000
ERROR_BANNER = "* ERROR:"

CommandHandler = Callable[[list[str]], None]


def console_log_path(base_dir: Path) -> Path:
    return Path(base_dir) / CONSOLE_LOG_NAME


@dataclass(slots=True)
class ConsoleLog:
    base_dir: Path
    lines: list[str] = field(default_factory=list)
    flushed_index: int = 0

    def log(self, message: str) -> None:
        for line in str(message).rstrip("\n").splitlines() or [""]:
            self.lines.append(line)
        if len(self.lines) > MAX_CONSOLE_LINES:
            overflow = len(self.lines) - MAX_CONSOLE_LINES
            del self.lines[:overflow]
            self.flushed_index = max(0, self.flushed_index - overflow)

    def error(self, message: str, *, remedy: str | None = None) -> None:
        self.log(ERROR_BANNER)
        self.log(message)
        if remedy:
            self.log(f"Try: {remedy}")

    def flush(self) -> None:
        if self.flushed_index >= len(self.lines):
            return
        path = console_log_path(self.base_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            for line in self.lines[self.flushed_index :]:
                handle.write(line.rstrip() + "\n")
        self.flushed_index = len(self.lines)


@dataclass(slots=True)
class ConsoleState:
    base_dir: Path
    log: ConsoleLog
    commands: dict[str, CommandHandler] = field(default_factory=dict)
    suggested_command: str = ""

    def register_command(self, name: str, handler: CommandHandler) -> None:
        self.commands[name] = handler

    def suggest_command(self, text: str, *, silent: bool = False) -> None:
        """Prefill the next console command; the console never runs it by itself."""
        self.suggested_command = str(text)
        if not silent:
            self.log.log(f"Next: {text}")

    def exec_line(self, line: str) -> None:
        tokens = line.strip().split()
        if not tokens:
            return
        name, args = tokens[0], tokens[1:]
        handler = self.commands.get(name)
        if handler is None:
            self.log.log(f"Unknown command \"{name}\"")
            return
        handler(args)


def create_console(base_dir: Path) -> ConsoleState:
    return ConsoleState(base_dir=Path(base_dir), log=ConsoleLog(base_dir=Path(base_dir)))
