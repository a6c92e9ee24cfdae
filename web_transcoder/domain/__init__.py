"""
This package contains the core domain models of the Web Transcoder.

Modules:
    exceptions.py: Defines the error taxonomy surfaced through job futures
                   (`EncodingError`, `TranscodePreempted`, `ProbeError`).
    job.py: Contains `TranscodeJob` and the types a caller interacts with:
            `TranscodeStatus`, `TranscodeOptions`, `TranscodeListener` and
            `TranscodeProgress`.
"""
