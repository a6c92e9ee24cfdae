"""
Defines custom exception types for the Web Transcoder.

Job failures are never raised from `TranscodeSupervisor.transcode()` directly.
They are delivered through the job's future, so callers see them when they call
`future.result()` or inspect `future.exception()`.

All custom exceptions inherit from the base `WebTranscoderException`.
"""
from typing import List, Optional


class WebTranscoderException(Exception):
    """Base class for all custom exceptions in the Web Transcoder."""

    pass


class EncodingError(WebTranscoderException):
    """
    Raised when the encoder process fails.

    This covers a non-zero exit status (bad input, codec failure), a process
    that was killed while running, and an executable that could not be launched
    at all.

    Attributes:
        returncode: The exit status of the encoder, or None if it never started.
        stderr: The last lines the encoder wrote to stderr.
        command: The argument list that was used to start the encoder.
    """

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
        command: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.command = command or []


class TranscodePreempted(EncodingError):
    """
    Raised on a job's future when a newer `transcode()` call replaced it.

    A supervisor runs at most one job. Starting a new one kills the previous
    encoder and settles its future with this error so that no caller waits forever.
    """

    pass


class ProbeError(WebTranscoderException):
    """
    Raised when `ffprobe` cannot read the metadata of an input.

    The underlying `ffmpeg.Error` or `OSError` is chained as `__cause__`.

    Attributes:
        stderr: The prober's error output, if any.
    """

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr
