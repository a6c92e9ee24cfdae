"""
This module contains helper functions for formatting data into human-readable strings.
These functions are used throughout the application, particularly in logging, to
present information like stream positions and output sizes in a clear and consistent way.
"""

import re
from typing import Optional

from loguru import logger


def parse_duration(duration_str: str) -> float:
    """
    Parses a duration string into total seconds.

    This function handles the two duration formats FFmpeg and ffprobe produce:
    1. A simple string representing a floating-point number of seconds (e.g., "3600.5").
    2. A timecode string in the format 'HH:MM:SS.sss' (e.g., "01:00:00.500").
       Hours are optional in the timecode format.

    Args:
        duration_str: The string containing the duration to parse.

    Returns:
        The total duration in seconds as a float. Returns 0.0 if parsing fails.
    """
    try:
        return float(duration_str)
    except ValueError:
        pattern = r"(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)"
        match = re.fullmatch(pattern, duration_str.strip())
        if match:
            hours_str, minutes_str, seconds_str = match.groups()
            hours = int(hours_str) if hours_str else 0
            minutes = int(minutes_str)
            seconds = float(seconds_str)
            return float(hours * 3600 + minutes * 60 + seconds)
        logger.warning(f"Could not parse duration string: {duration_str}")
    return 0.0


def format_seconds(seconds: Optional[float]) -> str:
    """Formats a stream position as "HH:MM:SS", or "--:--:--" when the encoder did not report one."""
    if seconds is None:
        return "--:--:--"
    minutes, secs = divmod(int(max(seconds, 0)), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02}:{minutes:02}:{secs:02}"


def formatted_size(size_bytes: Optional[int]) -> str:
    """
    Formats the output size reported by the encoder, e.g. 1536 -> "1.5 KB".

    Returns "?" when the size is unknown.
    """
    if size_bytes is None:
        return "?"
    size = float(max(size_bytes, 0))
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            break
        size /= 1024
    if unit == "B":
        return f"{int(size)} B"
    return f"{size:.1f} {unit}".replace(".0 ", " ")
