"""
Services Package for the Web Transcoder.

This package contains the service layer of the application. The primary service is
the `TranscodeSupervisor`, which owns the FFmpeg process of at most one transcoding
job at a time, relays its start, progress, end and error events to the caller, and
settles one future per job.
"""
from .transcode_supervisor import TranscodeSupervisor, start_encoder_process

__all__ = ["TranscodeSupervisor", "start_encoder_process"]
