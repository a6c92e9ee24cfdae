"""
Command-Line Interface (CLI) for the Web Transcoder.

This module uses Python's `argparse` to define and parse the command-line
arguments, and runs a single transcoding job or metadata probe with them.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from loguru import logger

from .config.common import LOGGER_FORMAT
from .domain.exceptions import EncodingError, ProbeError
from .domain.job import TranscodeListener, TranscodeOptions, TranscodeProgress
from .services.transcode_supervisor import TranscodeSupervisor
from .utils.executables import get_executable_paths, verify_executable
from .utils.format_utils import format_seconds, formatted_size
from .utils.media_types import needs_transcoding


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the Web Transcoder.

    Args:
        argv: The arguments to parse. Defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: An object containing the parsed command-line
                            arguments as attributes.
    """
    parser = argparse.ArgumentParser(description="Convert a media file or stream to web-playable MP4.")
    parser.add_argument("input", nargs="?", help="Input file path, URL or stream descriptor.")
    parser.add_argument("output", nargs="?", help="Output MP4 path. Defaults to the input name with '.mp4'.")
    parser.add_argument(
        "--seek", type=float, default=None, help="Start transcoding this many seconds into the input."
    )
    parser.add_argument(
        "--force", action="store_true", help="Transcode even if the input is already an MP4."
    )
    parser.add_argument(
        "--probe", action="store_true", help="Print the input's metadata as YAML instead of transcoding."
    )
    parser.add_argument(
        "--check", action="store_true", help="Verify that FFmpeg and ffprobe can be started, then exit."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )

    args = parser.parse_args(argv)

    if not args.check and not args.input:
        parser.error("the following arguments are required: input")
    if args.seek is not None and args.seek < 0:
        parser.error("--seek must not be negative")
    if args.input and not args.output and not args.probe:
        args.output = str(Path(args.input).with_suffix(".mp4"))
        if args.output == args.input:
            parser.error("output must differ from input; please specify it explicitly")

    return args


class ProgressLogger(TranscodeListener):
    """Logs the lifecycle of a CLI transcoding job."""

    def on_start(self, command_line: str) -> None:
        logger.info(f"FFmpeg command: {command_line}")

    def on_progress(self, progress: TranscodeProgress) -> None:
        size = formatted_size(progress.total_size)
        logger.info(
            f"time {format_seconds(progress.out_time)} | frame {progress.frame if progress.frame is not None else '?'} "
            f"| size {size} | speed {progress.speed or '?'}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function of the command-line tool.

    1. Parses command-line arguments and configures the logger.
    2. With `--check`, verifies the encoder and prober executables.
    3. With `--probe`, prints the input's metadata as YAML.
    4. Otherwise transcodes the input unless it is already an MP4 (see `--force`).

    Returns:
        The process exit status: 0 on success, 1 on failure.
    """
    args = get_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    paths = get_executable_paths()

    if args.check:
        encoder_ok = verify_executable(paths.ffmpeg)
        prober_ok = verify_executable(paths.ffprobe)
        return 0 if encoder_ok and prober_ok else 1

    with TranscodeSupervisor(executable_paths=paths) as supervisor:
        if args.probe:
            try:
                metadata = supervisor.probe_metadata(args.input).result()
            except ProbeError as e:
                logger.error(f"Could not read metadata: {e}")
                return 1
            yaml.safe_dump(metadata, sys.stdout, default_flow_style=False, sort_keys=False, allow_unicode=True)
            return 0

        if not args.force and not needs_transcoding(args.input):
            logger.info(f"'{args.input}' is already playable as MP4. Use --force to transcode anyway.")
            return 0

        options = TranscodeOptions(seek=args.seek, listener=ProgressLogger())
        logger.info(f"Transcoding '{args.input}' to '{args.output}'")
        try:
            supervisor.transcode(args.input, args.output, options).result()
        except KeyboardInterrupt:
            logger.warning("Interrupted, stopping FFmpeg.")
            supervisor.kill_process()
            return 1
        except EncodingError as e:
            logger.error(f"Transcoding failed: {e}")
            return 1

    logger.success(f"Wrote '{args.output}'")
    return 0
