"""Tests for locating the FFmpeg and ffprobe executables."""

import subprocess

from web_transcoder.utils import executables
from web_transcoder.utils.executables import (
    ExecutablePaths,
    get_executable_paths,
    resolve_encoder_path,
    resolve_prober_path,
    verify_executable,
)


def _make_executable(path):
    path.write_bytes(b"")
    path.chmod(0o755)
    return path


class TestResolveExecutables:
    """Tests for the resolver functions."""

    def test_bundled_encoder_is_used(self, tmp_path):
        bundled = _make_executable(tmp_path / "ffmpeg")

        assert resolve_encoder_path("linux", vendor_dir=tmp_path) == str(bundled.resolve())

    def test_bundled_prober_is_used(self, tmp_path):
        bundled = _make_executable(tmp_path / "ffprobe")

        assert resolve_prober_path("darwin", vendor_dir=tmp_path) == str(bundled.resolve())

    def test_windows_uses_exe_suffix(self, tmp_path):
        _make_executable(tmp_path / "ffmpeg")
        bundled = _make_executable(tmp_path / "ffmpeg.exe")

        assert resolve_encoder_path("win32", vendor_dir=tmp_path) == str(bundled.resolve())

    def test_windows_ignores_binary_without_suffix(self, tmp_path):
        _make_executable(tmp_path / "ffmpeg")

        assert resolve_encoder_path("win32", vendor_dir=tmp_path) is None

    def test_missing_binary_falls_back_without_raising(self, tmp_path, caplog):
        assert resolve_encoder_path("linux", vendor_dir=tmp_path / "missing") is None
        assert 'Missing ffmpeg executable for platform "linux"' in caplog.text
        assert "with arch" in caplog.text

    def test_paths_default_to_system_commands(self, tmp_path):
        paths = ExecutablePaths.resolve("linux", vendor_dir=tmp_path)

        assert paths == ExecutablePaths(ffmpeg="ffmpeg", ffprobe="ffprobe")

    def test_paths_mix_bundled_and_system(self, tmp_path):
        bundled = _make_executable(tmp_path / "ffmpeg")

        paths = ExecutablePaths.resolve("linux", vendor_dir=tmp_path)

        assert paths.ffmpeg == str(bundled.resolve())
        assert paths.ffprobe == "ffprobe"


class TestGetExecutablePaths:
    """Tests for the process-wide executable paths."""

    def test_resolved_once(self, monkeypatch):
        calls = []

        def fake_resolve(cls, *args, **kwargs):
            calls.append(1)
            return ExecutablePaths(ffmpeg="/x/ffmpeg", ffprobe="/x/ffprobe")

        monkeypatch.setattr(ExecutablePaths, "resolve", classmethod(fake_resolve))
        get_executable_paths.cache_clear()
        try:
            first = get_executable_paths()
            second = get_executable_paths()
        finally:
            get_executable_paths.cache_clear()

        assert first is second
        assert first.ffmpeg == "/x/ffmpeg"
        assert calls == [1]


class TestVerifyExecutable:
    """Tests for verify_executable."""

    def test_success_logs_version(self, monkeypatch, caplog):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout="ffmpeg version 7.1 Copyright\nbuilt with gcc\n", stderr="")

        monkeypatch.setattr(executables.subprocess, "run", fake_run)

        assert verify_executable("ffmpeg") is True
        assert "ffmpeg version 7.1" in caplog.text

    def test_missing_executable(self, monkeypatch, caplog):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(executables.subprocess, "run", fake_run)

        assert verify_executable("ffmpeg") is False
        assert "not found" in caplog.text

    def test_failing_executable(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(1, cmd, stderr="broken build")

        monkeypatch.setattr(executables.subprocess, "run", fake_run)

        assert verify_executable("ffmpeg") is False
