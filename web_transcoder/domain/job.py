"""
Defines the data models for a single transcoding job.

A `TranscodeJob` is created for every call to `TranscodeSupervisor.transcode()`.
It carries the caller's `TranscodeOptions`, the encoder process handle while the
job runs, and the future that is settled exactly once when the job concludes.
"""

import collections
from concurrent.futures import Future
from typing import Callable, Dict, List, Optional

from ..config.common import (
    JOB_STATUS_ENDED,
    JOB_STATUS_ERROR,
    JOB_STATUS_IDLE,
    JOB_STATUS_RUNNING,
    STDERR_TAIL_LINES,
)
from ..utils.format_utils import parse_duration


class TranscodeStatus:
    """
    The states of a supervisor's current job.

    IDLE -> RUNNING -> ENDED | ERROR. A new `transcode()` call moves any state
    back to IDLE before the new job starts RUNNING.
    """

    IDLE = JOB_STATUS_IDLE
    RUNNING = JOB_STATUS_RUNNING
    ENDED = JOB_STATUS_ENDED
    ERROR = JOB_STATUS_ERROR

    TERMINAL = (ENDED, ERROR)


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value: Optional[str]) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class TranscodeProgress:
    """
    One progress update reported by the encoder.

    FFmpeg's `-progress` output is a sequence of `key=value` blocks, each closed
    by a `progress=continue` or `progress=end` line. The values are kept as the
    encoder reported them; fields the encoder marks as "N/A" become None.

    Attributes:
        frame (int | None): Number of frames written so far.
        fps (float | None): Current encoding speed in frames per second.
        bitrate (str | None): Current output bitrate, e.g. "1024.5kbits/s".
        total_size (int | None): Bytes written to the output so far.
        out_time (float | None): Position of the output in seconds.
        speed (str | None): Encoding speed relative to realtime, e.g. "2.5x".
        is_final (bool): True for the block FFmpeg writes right before exiting.
        raw (dict): Every key/value pair of the block, unmodified.
    """

    def __init__(self, fields: Dict[str, str]):
        self.raw = dict(fields)
        self.frame = _to_int(fields.get("frame"))
        self.fps = _to_float(fields.get("fps"))
        self.bitrate = self._optional(fields.get("bitrate"))
        self.total_size = _to_int(fields.get("total_size"))
        self.out_time = self._parse_out_time(fields)
        self.speed = self._optional(fields.get("speed"))
        self.is_final = fields.get("progress") == "end"

    @staticmethod
    def _optional(value: Optional[str]) -> Optional[str]:
        if value is None or value.strip() in ("", "N/A"):
            return None
        return value.strip()

    @staticmethod
    def _parse_out_time(fields: Dict[str, str]) -> Optional[float]:
        # out_time_us is exact; out_time is the same position as HH:MM:SS.micro
        out_time_us = _to_int(fields.get("out_time_us"))
        if out_time_us is not None and out_time_us >= 0:
            return out_time_us / 1_000_000
        out_time = fields.get("out_time")
        if out_time and out_time != "N/A":
            return parse_duration(out_time.lstrip("-"))
        return None

    def __repr__(self) -> str:
        return (
            f"TranscodeProgress(frame={self.frame}, fps={self.fps}, out_time={self.out_time}, "
            f"total_size={self.total_size}, speed={self.speed}, is_final={self.is_final})"
        )


class TranscodeListener:
    """
    Receives the lifecycle events of one transcoding job.

    Subclass it and override the handlers you need; the defaults do nothing.
    Handlers are called from the job's watcher thread, except `on_error` for a
    job that could not be launched, which is called from the thread that called
    `transcode()`.
    """

    def on_start(self, command_line: str) -> None:
        """Called once the encoder process has been spawned."""

    def on_progress(self, progress: TranscodeProgress) -> None:
        """Called for every progress block the encoder reports."""

    def on_end(self) -> None:
        """Called when the encoder exited successfully."""

    def on_error(self, error: Exception) -> None:
        """Called when the job failed. Not called for preempted jobs."""


class CallbackListener(TranscodeListener):
    """A listener built from plain `on_start` / `on_progress` callables."""

    def __init__(
        self,
        on_start: Optional[Callable[[str], None]] = None,
        on_progress: Optional[Callable[[TranscodeProgress], None]] = None,
    ):
        self._on_start = on_start
        self._on_progress = on_progress

    def on_start(self, command_line: str) -> None:
        if self._on_start:
            self._on_start(command_line)

    def on_progress(self, progress: TranscodeProgress) -> None:
        if self._on_progress:
            self._on_progress(progress)


class TranscodeOptions:
    """
    Options accepted by `TranscodeSupervisor.transcode()`.

    Attributes:
        seek (float | None): Offset into the input, in seconds, applied before decoding starts.
        listener (TranscodeListener): Receives the job's lifecycle events.
    """

    def __init__(self, seek: Optional[float] = None, listener: Optional[TranscodeListener] = None):
        if seek is not None and seek < 0:
            raise ValueError(f"seek must be a non-negative number of seconds, got {seek}")
        self.seek = seek
        self.listener = listener or TranscodeListener()

    @classmethod
    def from_callbacks(
        cls,
        on_start: Optional[Callable[[str], None]] = None,
        on_progress: Optional[Callable[[TranscodeProgress], None]] = None,
        seek: Optional[float] = None,
    ) -> "TranscodeOptions":
        """Builds options from the `on_start`, `on_progress` and `seek` keys."""
        return cls(seek=seek, listener=CallbackListener(on_start=on_start, on_progress=on_progress))


class TranscodeJob:
    """
    The state of a single `transcode()` call.

    Only the supervisor that created a job reads or mutates it. `process` is the
    encoder's `subprocess.Popen` handle; it is None before launch and after the
    handle has been released.
    """

    def __init__(self, input_path: str, output_path: str, options: TranscodeOptions, command: List[str]):
        self.input = input_path
        self.output = output_path
        self.options = options
        self.command = command
        self.process = None
        self.status: str = TranscodeStatus.IDLE
        self.future: Future = Future()
        self.stderr_tail = collections.deque(maxlen=STDERR_TAIL_LINES)
        self.superseded = False

    @property
    def listener(self) -> TranscodeListener:
        return self.options.listener

    def stderr_text(self) -> str:
        return "\n".join(self.stderr_tail)

    def __repr__(self) -> str:
        return f"TranscodeJob(input={self.input!r}, output={self.output!r}, status={self.status!r})"
