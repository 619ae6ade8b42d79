from __future__ import annotations

from enum import Enum
from typing import Callable

from .config import RecorderConfig
from .debug_log import replay_debug_log
from .dispatch import REPLAY, EventDispatcher
from .errors import (
    AlreadyRecording,
    AlreadyReplaying,
    FileReadFailure,
    FileWriteFailure,
    MissingFileName,
    MissingSeed,
    NotRecording,
    NotReplaying,
    RecordingError,
    ReplayCodecError,
    UnknownHandler,
)
from .replay.codec import encode_replay, load_replay
from .replay.playback import ReplaySession
from .replay.recorder import InputEventLog
from .replay.types import RecordedEvent
from .runtime import HostRuntime

DEFAULT_STOP_MESSAGE = "Replay has been stopped."


class Mode(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    REPLAYING = "replaying"


ControllerHook = Callable[["RecordingController"], None]


def _start_recording_command(seed: object = "SEED") -> str:
    return f"recording.start {seed}"


def _stop_recording_command(file_name: str) -> str:
    return f"recording.stop {file_name}"


def _start_replay_command(file_name: str, speed: int = 1) -> str:
    return f"replay.start {file_name} {int(speed)}"


class RecordingController:
    """Idle/Recording/Replaying state machine for one host.

    The controller is the only writer of its mode and session objects. Every
    public transition either completes or is rejected without touching state;
    rejections are logged with the command to run next and return False.
    """

    def __init__(
        self,
        runtime: HostRuntime,
        dispatcher: EventDispatcher,
        *,
        config: RecorderConfig | None = None,
    ) -> None:
        self.runtime = runtime
        self.dispatcher = dispatcher
        self.config = config if config is not None else RecorderConfig()

        self._mode = Mode.IDLE
        self._recording: InputEventLog | None = None
        self._replay: ReplaySession | None = None

        self._recording_stopped_at: int | None = None
        self._replay_started_at: int | None = None
        self._replay_stopped_at: int | None = None
        self._replay_completed_at: int | None = None
        self._replay_completed_successfully = False
        self._last_replay_file_name = self.config.default_replay_name

        self._pending_replay: tuple[str, int] | None = None
        self._on_replay_tick: ControllerHook | None = None
        self._on_recording_tick: ControllerHook | None = None
        self._on_replay_completed: ControllerHook | None = None

    # -- queries ---------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def is_recording(self) -> bool:
        return self._mode is Mode.RECORDING

    @property
    def is_replaying(self) -> bool:
        return self._mode is Mode.REPLAYING

    @property
    def recording_session(self) -> InputEventLog | None:
        return self._recording

    @property
    def replay_session(self) -> ReplaySession | None:
        return self._replay

    @property
    def simulation_speed(self) -> int:
        return int(self.runtime.simulation_speed)

    @property
    def recording_stopped_at(self) -> int | None:
        return self._recording_stopped_at

    @property
    def replay_started_at(self) -> int | None:
        return self._replay_started_at

    @property
    def replay_stopped_at(self) -> int | None:
        return self._replay_stopped_at

    @property
    def replay_completed_at(self) -> int | None:
        return self._replay_completed_at

    @property
    def replay_completed_successfully(self) -> bool:
        return self._replay_completed_successfully

    def _recent(self, marker: int | None) -> bool:
        if marker is None:
            return False
        return self.runtime.clock.now - int(marker) <= int(self.config.cooldown_ticks)

    @property
    def recording_recently_completed(self) -> bool:
        return self._recent(self._recording_stopped_at)

    @property
    def replay_recently_started(self) -> bool:
        return self._recent(self._replay_started_at)

    @property
    def replay_recently_stopped(self) -> bool:
        return self._recent(self._replay_stopped_at)

    @property
    def replay_recently_completed(self) -> bool:
        return self._recent(self._replay_completed_at)

    def clear_replay_stopped_at(self) -> None:
        self._replay_stopped_at = None

    # -- hooks -----------------------------------------------------------

    def on_replay_tick(self, handler: ControllerHook | None) -> None:
        self._on_replay_tick = handler

    def on_recording_tick(self, handler: ControllerHook | None) -> None:
        self._on_recording_tick = handler

    def on_replay_completed(self, handler: ControllerHook | None) -> None:
        self._on_replay_completed = handler

    # -- plumbing --------------------------------------------------------

    def _log(self, message: str) -> None:
        self.runtime.console.log.log(message)

    def _trace(self, event: str, **fields: object) -> None:
        replay_debug_log(event, clock=self.runtime.clock, **fields)

    def _reject(self, action: str, error: RecordingError) -> bool:
        console = self.runtime.console
        console.log.error(error.message, remedy=error.remedy)
        if error.remedy:
            console.suggest_command(error.remedy, silent=True)
        self._trace(f"{action}_rejected", kind=error.kind.value, mode=self._mode.value)
        return False

    def _require_idle(self) -> None:
        if self._mode is Mode.RECORDING:
            raise AlreadyRecording(
                "You are already recording, first cancel (or stop) the current recording.",
                remedy="recording.cancel",
            )
        if self._mode is Mode.REPLAYING:
            raise AlreadyReplaying(
                "You are currently replaying a recording, first stop the replay.",
                remedy="replay.stop",
            )

    # -- recording -------------------------------------------------------

    def start_recording(self, seed: int | None = None) -> bool:
        try:
            if seed is None:
                raise MissingSeed(
                    "To start recording, you must provide an integer value to seed random number generation.",
                    remedy=_start_recording_command(),
                )
            self._require_idle()
        except RecordingError as exc:
            return self._reject("recording_start", exc)

        seed = int(seed)
        self.runtime.reset()
        self.runtime.set_seed(seed)
        self._recording = InputEventLog(seed)
        self._mode = Mode.RECORDING

        stop_command = _stop_recording_command(self.config.default_replay_name)
        self._log(f"Recording has begun with RNG seed value set to {seed}.")
        self._log("To stop recording use recording.stop FILE_NAME, or recording.cancel to discard it.")
        self.runtime.console.suggest_command(stop_command)
        self.runtime.notify(
            f"Recording started. When completed, open the console to save it using {stop_command} "
            "(or recording.cancel).",
            self.config.notify_ticks,
        )
        self._trace("recording_start", seed=seed)
        return True

    def record_input_history(
        self,
        name: str,
        value_1: float = 0.0,
        value_2: float = 0.0,
        value_count: int = 0,
    ) -> RecordedEvent | None:
        """Capture one input event at the current session tick; ignored unless recording."""

        if self._mode is not Mode.RECORDING or self._recording is None:
            return None
        return self._recording.record(name, value_1, value_2, value_count, tick=self.runtime.clock.tick_count)

    def stop_recording(self, file_name: str | None = None) -> bool:
        default_name = self.config.default_replay_name
        try:
            if self._mode is not Mode.RECORDING or self._recording is None:
                raise NotRecording(
                    "You are not currently recording. Use recording.start SEED to start recording.",
                    remedy=_start_recording_command(),
                )
            if not file_name:
                raise MissingFileName(
                    "Please specify a file name when calling recording.stop FILE_NAME. "
                    "If you do NOT want to save the recording, call recording.cancel.",
                    remedy=_stop_recording_command(default_name),
                )
            stopped_at = self.runtime.clock.tick_count
            text = encode_replay(self._recording.finish(stopped_at=stopped_at))
            if not self.runtime.write_file(file_name, text):
                raise FileWriteFailure(
                    f"The recording could not be saved to {file_name}; it is still running.",
                    remedy=_stop_recording_command(default_name),
                )
        except RecordingError as exc:
            return self._reject("recording_stop", exc)

        if not self.runtime.write_file(self.config.last_replay_name, text):
            self._log(f"Could not update {self.config.last_replay_name}.")

        event_count = len(self._recording)
        self._recording = None
        self._mode = Mode.IDLE
        self.runtime.reset()
        self._recording_stopped_at = self.runtime.clock.now
        self._last_replay_file_name = str(file_name)

        replay_command = _start_replay_command(file_name)
        self._log(
            f"The recording has been saved successfully at {file_name}. "
            f"You can use {replay_command} to replay the recording."
        )
        self.runtime.console.suggest_command(replay_command)
        self.runtime.notify(f"Recording saved to {file_name}. To replay it: {replay_command}.", self.config.notify_ticks)
        self._trace("recording_stop", file=file_name, stopped_at=stopped_at, events=event_count)
        return True

    def cancel(self) -> bool:
        if self._mode is not Mode.RECORDING:
            return self._reject(
                "recording_cancel",
                NotRecording(
                    "You are not currently recording, there is nothing to cancel.",
                    remedy=_start_recording_command(),
                ),
            )

        self._recording = None
        self._mode = Mode.IDLE
        self.runtime.reset()
        self._log("Recording cancelled.")
        self.runtime.notify("Recording cancelled.", self.config.notify_ticks)
        self._trace("recording_cancel")
        return True

    # -- replay ----------------------------------------------------------

    def replay_next_tick(self, file_name: str, speed: int | None = 1) -> None:
        """Start `file_name` at the beginning of the next `tick()` instead of right now."""

        self._pending_replay = (str(file_name), self.config.clamp_speed(speed))

    def start_replay(self, file_name: str | None = None, speed: int | None = 1) -> bool:
        """Load `file_name` and begin playback from its first tick.

        A start within the cooldown window of the last stop is ignored, so the
        input that stopped a replay cannot immediately restart it. Version and
        format errors are logged and re-raised with the controller left Idle.
        """

        if self.replay_recently_stopped:
            self._trace("replay_start_debounced", file=file_name)
            return False

        try:
            if not file_name:
                raise MissingFileName(
                    "Please provide a file name to replay.start.",
                    remedy=_start_replay_command(self.config.default_replay_name),
                )
            self._require_idle()
            text = self.runtime.read_file(file_name)
            if text is None:
                raise FileReadFailure(
                    f"Could not read replay file {file_name}.",
                    remedy=_start_replay_command(self._last_replay_file_name),
                )
        except RecordingError as exc:
            return self._reject("replay_start", exc)

        try:
            replay = load_replay(text, file_name=file_name)
        except ReplayCodecError as exc:
            self.runtime.console.log.error(str(exc), remedy=_start_recording_command())
            self._trace("replay_rejected", file=file_name, kind=exc.kind.value)
            raise

        self._replay_completed_successfully = False
        effective_speed = self.config.clamp_speed(speed)
        self.runtime.reset()
        self.runtime.set_seed(replay.seed)
        self.runtime.simulation_speed = effective_speed

        now = self.runtime.clock.now
        self._replay = ReplaySession.from_replay(
            replay,
            file_name=file_name,
            speed=effective_speed,
            started_at_tick=now,
        )
        self._replay_started_at = now
        self._last_replay_file_name = str(file_name)
        self._mode = Mode.REPLAYING

        self._log(f"Replay started ={file_name}= speed: {effective_speed}. ({now})")
        self.runtime.notify(f"Replay started ={file_name}= speed: {effective_speed}.", self.config.notify_ticks)
        self._trace(
            "replay_start",
            file=file_name,
            speed=effective_speed,
            seed=replay.seed,
            stopped_at=replay.stopped_at,
            events=self._replay.event_count,
        )
        return True

    def stop_replay(self, message: str = DEFAULT_STOP_MESSAGE) -> bool:
        if self._mode is not Mode.REPLAYING or self._replay is None:
            return self._reject(
                "replay_stop",
                NotReplaying(
                    "No replay is currently running.",
                    remedy=_start_replay_command(self._last_replay_file_name),
                ),
            )

        file_name = self._replay.file_name
        self.runtime.simulation_speed = 1
        self._replay = None
        self._replay_stopped_at = self.runtime.clock.now
        self._mode = Mode.IDLE
        self.runtime.reset()

        self._log(f"{message} ({self.runtime.clock.now})")
        self.runtime.console.suggest_command(_start_replay_command(file_name), silent=True)
        self.runtime.notify(message, self.config.notify_ticks)
        self._trace("replay_stop", file=file_name, message=message)
        return True

    # -- per tick --------------------------------------------------------

    def tick(self) -> None:
        """Run once per host tick, before the host consumes live input."""

        if self._pending_replay is not None and not self.is_replaying:
            file_name, speed = self._pending_replay
            self._pending_replay = None
            try:
                self.start_replay(file_name, speed=speed)
            except ReplayCodecError as exc:
                # Already logged by start_replay; the controller stays Idle and the host keeps ticking.
                self._trace("replay_next_tick_failed", file=file_name, kind=exc.kind.value)

        if self.is_replaying and self._on_replay_tick is not None:
            self._on_replay_tick(self)
        if self.is_recording and self._on_recording_tick is not None:
            self._on_recording_tick(self)

        if self.is_replaying:
            self._step_playback()

    def _dispatch(self, events: tuple[RecordedEvent, ...]) -> None:
        for event in events:
            try:
                self.dispatcher.send(event.name, *event.args(), REPLAY)
            except UnknownHandler as exc:
                self.runtime.console.log.error(
                    f"Replay contains event {exc.name!r} with no registered handler.",
                    remedy="replay.stop",
                )
                self.stop_replay(f"Replay aborted: unknown event {exc.name!r}.")
                raise

    def _step_playback(self) -> None:
        session = self._replay
        if session is None:
            return

        if session.completion_due:
            session.completed = True
            self._dispatch(session.drain_remaining())
            self._replay_completed_successfully = True
            self._replay_completed_at = self.runtime.clock.now
            if self._on_replay_completed is not None:
                self._on_replay_completed(self)
            self._trace("replay_complete", file=session.file_name, dispatched=session.dispatched)
            if self.is_replaying:
                self.stop_replay(
                    f"Replay completed [{session.file_name}]. To rerun, bring up the console and press enter."
                )
            return

        events = session.advance()

        now = self.runtime.clock.now
        ticks_per_second = int(self.config.ticks_per_second)
        if now % (ticks_per_second * int(session.speed)) == 0:
            seconds = session.seconds_remaining(now=now, ticks_per_second=ticks_per_second)
            self._log(f"Replay ends in {seconds} second(s). ({now})")

        self._dispatch(events)
