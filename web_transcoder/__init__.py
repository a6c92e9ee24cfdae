"""
Web Transcoder: supervises FFmpeg to turn media files and streams into web-playable MP4.

The most commonly used names are re-exported here:

    from web_transcoder import TranscodeSupervisor, TranscodeOptions, needs_transcoding

    if needs_transcoding("movie.mkv"):
        with TranscodeSupervisor() as supervisor:
            supervisor.transcode("movie.mkv", "movie.mp4", TranscodeOptions(seek=30)).result()
"""
from .domain.exceptions import EncodingError, ProbeError, TranscodePreempted, WebTranscoderException
from .domain.job import TranscodeListener, TranscodeOptions, TranscodeProgress, TranscodeStatus
from .services.transcode_supervisor import TranscodeSupervisor
from .utils.executables import ExecutablePaths, get_executable_paths
from .utils.media_types import needs_transcoding

__version__ = "0.1.0"

__all__ = [
    "EncodingError",
    "ExecutablePaths",
    "ProbeError",
    "TranscodeListener",
    "TranscodeOptions",
    "TranscodePreempted",
    "TranscodeProgress",
    "TranscodeStatus",
    "TranscodeSupervisor",
    "WebTranscoderException",
    "get_executable_paths",
    "needs_transcoding",
]
