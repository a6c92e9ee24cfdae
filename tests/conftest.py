"""Shared test fixtures for the Web Transcoder."""

import threading
from typing import List, Optional

import pytest
from loguru import logger

from web_transcoder.domain.job import TranscodeListener
from web_transcoder.services.transcode_supervisor import TranscodeSupervisor
from web_transcoder.utils.executables import ExecutablePaths

# Upper bound for anything a test waits on, so a broken supervisor fails instead of hanging.
WAIT_TIMEOUT = 5


class FakeProcess:
    """
    Stands in for the `subprocess.Popen` handle of an FFmpeg process.

    The scripted stdout and stderr lines are produced immediately. A blocking
    process then keeps its streams open until `finish()` or `kill()` is called.
    """

    def __init__(
        self,
        stdout_lines: Optional[List[str]] = None,
        stderr_lines: Optional[List[str]] = None,
        returncode: int = 0,
        block: bool = False,
    ):
        self._final_returncode = returncode
        self._exited = threading.Event()
        if not block:
            self._exited.set()
        self.returncode = None
        self.kill_count = 0
        self.stdout = self._stream(stdout_lines or [])
        self.stderr = self._stream(stderr_lines or [])

    def _stream(self, lines):
        for line in lines:
            yield line
        self._exited.wait(WAIT_TIMEOUT)

    @property
    def alive(self) -> bool:
        return not self._exited.is_set()

    def finish(self, returncode: Optional[int] = None):
        if returncode is not None:
            self._final_returncode = returncode
        self._exited.set()

    def kill(self):
        self.kill_count += 1
        if self.alive:
            self._final_returncode = -9
        self._exited.set()

    def poll(self):
        return self._final_returncode if not self.alive else None

    def wait(self, timeout=None):
        self._exited.wait(WAIT_TIMEOUT if timeout is None else timeout)
        self.returncode = self._final_returncode
        return self.returncode


class FakeLauncher:
    """
    Records the commands a supervisor launches and hands out scripted processes.

    When no process is queued, a blocking process that runs until killed is used.
    """

    def __init__(self):
        self.commands: List[List[str]] = []
        self.processes: List[FakeProcess] = []
        self.alive_at_launch: List[int] = []
        self._queued: List[FakeProcess] = []
        self.error: Optional[OSError] = None

    def queue(self, process: FakeProcess) -> FakeProcess:
        self._queued.append(process)
        return process

    def __call__(self, command: List[str]) -> FakeProcess:
        self.commands.append(list(command))
        if self.error is not None:
            raise self.error
        self.alive_at_launch.append(sum(1 for p in self.processes if p.alive))
        process = self._queued.pop(0) if self._queued else FakeProcess(block=True)
        self.processes.append(process)
        return process


class RecordingListener(TranscodeListener):
    """Collects every event of a job, for asserting on them later."""

    def __init__(self):
        self.started: List[str] = []
        self.progress = []
        self.ended = 0
        self.errors: List[Exception] = []

    def on_start(self, command_line):
        self.started.append(command_line)

    def on_progress(self, progress):
        self.progress.append(progress)

    def on_end(self):
        self.ended += 1

    def on_error(self, error):
        self.errors.append(error)


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def executable_paths() -> ExecutablePaths:
    return ExecutablePaths(ffmpeg="/opt/vendor/ffmpeg", ffprobe="/opt/vendor/ffprobe")


@pytest.fixture
def supervisor(executable_paths, launcher):
    """A supervisor whose encoder processes are fakes."""
    supervisor = TranscodeSupervisor(executable_paths=executable_paths, launcher=launcher)
    yield supervisor
    for process in launcher.processes:
        process.finish()
    supervisor.close()


@pytest.fixture
def caplog(caplog):
    """Routes loguru messages into pytest's caplog."""
    handler_id = logger.add(caplog.handler, format="{message}", level=0)
    yield caplog
    logger.remove(handler_id)
