"""
This module provides utility functions related to FFmpeg.

It builds the fixed web-playable MP4 command line with ffmpeg-python, formats
commands for display in logs, and parses the machine-readable progress stream
FFmpeg writes with `-progress`.
"""

import os
import shlex
import subprocess
from typing import Dict, List, Optional

import ffmpeg

from ..config.video import (
    AUDIO_CODEC,
    CRF,
    MOVFLAGS,
    OUTPUT_FORMAT,
    PRESET,
    PROGRESS_TARGET,
    THREADS,
    TUNE,
    VIDEO_CODEC,
)
from ..domain.job import TranscodeProgress


def build_transcode_command(
    input_path: str,
    output_path: str,
    ffmpeg_path: str = "ffmpeg",
    seek: Optional[float] = None,
) -> List[str]:
    """
    Builds the FFmpeg argument list that converts `input_path` to a web-playable MP4.

    The output always uses H.264 video and AAC audio with fast start and fragmented
    muxing, so playback can begin before the encode has finished. When `seek` is
    set, it is applied as an input option (`-ss` before `-i`), so FFmpeg skips to
    that position before decoding.

    Args:
        input_path: A file path, URL or stream descriptor FFmpeg can read.
        output_path: The destination FFmpeg writes the MP4 to.
        ffmpeg_path: The FFmpeg command or absolute path to use.
        seek: Offset into the input, in seconds.

    Returns:
        The complete argument list, starting with `ffmpeg_path`.
    """
    input_kwargs = {}
    if seek:
        input_kwargs["ss"] = seek

    stream = (
        ffmpeg.input(str(input_path), **input_kwargs)
        .output(
            str(output_path),
            format=OUTPUT_FORMAT,
            vcodec=VIDEO_CODEC,
            acodec=AUDIO_CODEC,
            crf=CRF,
            preset=PRESET,
            tune=TUNE,
            threads=THREADS,
            movflags=MOVFLAGS,
        )
        .global_args("-progress", PROGRESS_TARGET, "-nostats")
    )
    return stream.compile(cmd=ffmpeg_path, overwrite_output=True)


def format_command(cmd_list: List[str]) -> str:
    """
    Creates a display-friendly version of a command for logging.

    Uses the platform's quoting rules so the result can be pasted into a shell.
    """
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


class ProgressParser:
    """
    Turns the lines of FFmpeg's `-progress` output into `TranscodeProgress` objects.

    FFmpeg writes one `key=value` pair per line. A block ends with a `progress`
    key, whose value is "continue" while encoding and "end" on the final block.
    """

    def __init__(self):
        self._fields: Dict[str, str] = {}

    def feed(self, line: str) -> Optional[TranscodeProgress]:
        """
        Consumes one line of output.

        Returns:
            A `TranscodeProgress` when `line` completes a block, otherwise None.
        """
        line = line.strip()
        if not line or "=" not in line:
            return None

        key, _, value = line.partition("=")
        self._fields[key.strip()] = value.strip()
        if key.strip() != "progress":
            return None

        progress = TranscodeProgress(self._fields)
        self._fields = {}
        return progress
