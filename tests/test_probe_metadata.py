"""Tests for TranscodeSupervisor.probe_metadata."""

import ffmpeg
import pytest

from conftest import WAIT_TIMEOUT
from web_transcoder.domain.exceptions import ProbeError
from web_transcoder.domain.job import TranscodeStatus

PROBE_DOCUMENT = {
    "streams": [
        {"index": 0, "codec_type": "video", "codec_name": "hevc"},
        {"index": 1, "codec_type": "audio", "codec_name": "opus"},
    ],
    "format": {"format_name": "matroska,webm", "duration": "5400.120000", "nb_streams": 2},
}


@pytest.fixture
def probe_calls(monkeypatch):
    calls = []

    def fake_probe(filename, cmd="ffprobe", **kwargs):
        calls.append((filename, cmd))
        return PROBE_DOCUMENT

    monkeypatch.setattr(ffmpeg, "probe", fake_probe)
    return calls


def test_probe_returns_document_unchanged(supervisor, probe_calls):
    metadata = supervisor.probe_metadata("movie.mkv").result(timeout=WAIT_TIMEOUT)

    assert metadata == PROBE_DOCUMENT
    assert probe_calls == [("movie.mkv", "/opt/vendor/ffprobe")]


def test_probe_does_not_touch_job_status(supervisor, probe_calls):
    supervisor.probe_metadata("movie.mkv").result(timeout=WAIT_TIMEOUT)

    assert supervisor.status == TranscodeStatus.IDLE
    assert supervisor.current_job is None


def test_probe_while_transcoding(supervisor, launcher, probe_calls):
    supervisor.transcode("movie.mkv", "movie.mp4")

    supervisor.probe_metadata("movie.mkv").result(timeout=WAIT_TIMEOUT)

    assert supervisor.status == TranscodeStatus.RUNNING
    assert launcher.processes[0].kill_count == 0


def test_prober_failure_is_wrapped(supervisor, monkeypatch):
    def failing_probe(filename, cmd="ffprobe", **kwargs):
        raise ffmpeg.Error("ffprobe", b"", b"movie.mkv: Invalid data found when processing input")

    monkeypatch.setattr(ffmpeg, "probe", failing_probe)

    error = supervisor.probe_metadata("movie.mkv").exception(timeout=WAIT_TIMEOUT)

    assert isinstance(error, ProbeError)
    assert isinstance(error.__cause__, ffmpeg.Error)
    assert "Invalid data found" in error.stderr
    assert supervisor.status == TranscodeStatus.IDLE


def test_missing_prober_is_wrapped(supervisor, monkeypatch):
    def missing_probe(filename, cmd="ffprobe", **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd)

    monkeypatch.setattr(ffmpeg, "probe", missing_probe)

    error = supervisor.probe_metadata("movie.mkv").exception(timeout=WAIT_TIMEOUT)

    assert isinstance(error, ProbeError)
    assert isinstance(error.__cause__, FileNotFoundError)
