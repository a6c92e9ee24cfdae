"""
Utilities Package for the Web Transcoder.

This package contains helper modules that support the transcoding supervisor
without being part of its state machine.

Modules:
    - executables.py: Locates the bundled or system FFmpeg and ffprobe executables.
    - ffmpeg_utils.py: Builds FFmpeg command lines and parses FFmpeg's progress output.
    - format_utils.py: Contains helper functions for formatting durations and sizes
      into human-readable strings.
    - media_types.py: Decides from a file name whether transcoding is needed.
"""
