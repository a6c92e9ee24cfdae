"""
This module provides the `TranscodeSupervisor`, which runs FFmpeg to convert media
files and streams into web-playable MP4.

A supervisor owns at most one encoder process at a time. Starting a new job kills
the running one, so a single supervisor can follow a user who keeps seeking or
switching files: the latest request always wins. Use one supervisor per use-case
(for example, one per player window).

Lifecycle of a job:
1. `transcode()` preempts the current job, builds the FFmpeg command and spawns it.
2. A watcher thread reports the start, forwards every progress block the encoder
   writes and waits for the process to exit.
3. On exit the job becomes ENDED or ERROR and its future is settled. The future of
   a preempted job is settled with `TranscodePreempted` at the moment it is replaced.
"""

import itertools
import subprocess
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

import ffmpeg
from loguru import logger

from ..config.common import PROBE_MAX_WORKERS
from ..domain.exceptions import EncodingError, ProbeError, TranscodePreempted
from ..domain.job import TranscodeJob, TranscodeOptions, TranscodeStatus
from ..utils.executables import ExecutablePaths, get_executable_paths
from ..utils.ffmpeg_utils import ProgressParser, build_transcode_command, format_command

ProcessLauncher = Callable[[List[str]], subprocess.Popen]

_job_counter = itertools.count(1)


def start_encoder_process(command: List[str]) -> subprocess.Popen:
    """
    Spawns the encoder with its progress stream on stdout and its log on stderr.

    stdin is closed so FFmpeg never waits for interactive input.
    """
    return subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        shell=False,
    )


class TranscodeSupervisor:
    """
    Supervises a single FFmpeg process converting one input to MP4 at a time.

    All changes to the current job and the status happen under one lock, so the
    supervisor can be shared between threads without ever running two encoder
    processes at once.

    Attributes:
        executable_paths (ExecutablePaths): The encoder and prober commands to use.
    """

    def __init__(
        self,
        executable_paths: Optional[ExecutablePaths] = None,
        launcher: Optional[ProcessLauncher] = None,
    ):
        """
        Args:
            executable_paths: The FFmpeg and ffprobe commands. Defaults to the
                              process-wide paths from `get_executable_paths()`.
            launcher: Spawns the encoder from an argument list. Defaults to
                      `start_encoder_process`.
        """
        self.executable_paths = executable_paths or get_executable_paths()
        self._launcher = launcher or start_encoder_process
        self._lock = threading.RLock()
        self._job: Optional[TranscodeJob] = None
        self._status: str = TranscodeStatus.IDLE
        self._probe_executor = ThreadPoolExecutor(
            max_workers=PROBE_MAX_WORKERS, thread_name_prefix="ffprobe"
        )

    @property
    def status(self) -> str:
        """The status of the current job, `TranscodeStatus.IDLE` if there is none."""
        with self._lock:
            return self._status

    @property
    def current_job(self) -> Optional[TranscodeJob]:
        with self._lock:
            return self._job

    # --- Transcoding ---

    def transcode(
        self,
        input_path: str,
        output_path: str,
        options: Optional[TranscodeOptions] = None,
    ) -> Future:
        """
        Starts converting `input_path` to a web-playable MP4 at `output_path`.

        Any job this supervisor is running is killed first, and its future is
        rejected with `TranscodePreempted`.

        Args:
            input_path: A file path, URL or stream descriptor FFmpeg can read.
            output_path: The destination of the MP4.
            options: Seek offset and listener for the job.

        Returns:
            A future that resolves to None when FFmpeg exits successfully, or is
            rejected with `EncodingError` when the encoder fails or cannot be started.
        """
        options = options or TranscodeOptions()
        command = build_transcode_command(
            input_path, output_path, ffmpeg_path=self.executable_paths.ffmpeg, seek=options.seek
        )

        with self._lock:
            superseded = self._preempt_current_job()

            job = TranscodeJob(str(input_path), str(output_path), options, command)
            self._job = job
            self._transition(job, TranscodeStatus.RUNNING)

            if options.seek:
                logger.info(f"Seeking input to {options.seek}")

            try:
                process = self._launcher(command)
            except OSError as e:
                launch_error = EncodingError(
                    f"Could not start encoder '{command[0]}': {e}", command=command
                )
                launch_error.__cause__ = e
                self._release_process(job)
                self._transition(job, TranscodeStatus.ERROR)
            else:
                launch_error = None
                job.process = process
                job_number = next(_job_counter)
                stderr_thread = threading.Thread(
                    target=self._drain_stderr,
                    args=(job, process),
                    name=f"transcode-{job_number}-stderr",
                    daemon=True,
                )
                watcher_thread = threading.Thread(
                    target=self._watch,
                    args=(job, process, stderr_thread),
                    name=f"transcode-{job_number}",
                    daemon=True,
                )
                stderr_thread.start()
                watcher_thread.start()

        if superseded is not None:
            superseded.future.set_exception(
                TranscodePreempted(
                    f"Transcoding of '{superseded.input}' was replaced by a new request.",
                    command=superseded.command,
                )
            )
        if launch_error is not None:
            logger.error(f"Transcoding error. {launch_error}")
            self._notify(job.listener.on_error, launch_error)
            job.future.set_exception(launch_error)
        return job.future

    def kill_process(self):
        """
        Kills the encoder of the current job, if one is running.

        This does nothing unless the status is RUNNING and a process handle exists.
        The status is left untouched: the job's watcher observes the exit and the
        job fails with `EncodingError`, even if a new job has replaced it by then.
        """
        with self._lock:
            job = self._job
            if job is None or job.process is None or self._status != TranscodeStatus.RUNNING:
                return
            logger.info("Killing previous FFmpeg process for this transcoder.")
            process = job.process
            self._release_process(job)
            process.kill()

    def wait(self, timeout: Optional[float] = None) -> None:
        """
        Blocks until the current job concludes and returns its result.

        Raises:
            EncodingError: If the job failed or was preempted.
            concurrent.futures.TimeoutError: If `timeout` seconds pass first.
        """
        job = self.current_job
        if job is None:
            return None
        return job.future.result(timeout=timeout)

    # --- Metadata ---

    def probe_metadata(self, input_path: str) -> Future:
        """
        Reads the container and stream metadata of `input_path` with ffprobe.

        Probing is independent of the current job and does not change the status.

        Returns:
            A future that resolves to ffprobe's JSON document as a dictionary, or is
            rejected with `ProbeError`.
        """
        return self._probe_executor.submit(self._probe, str(input_path))

    def _probe(self, input_path: str) -> dict:
        try:
            return ffmpeg.probe(input_path, cmd=self.executable_paths.ffprobe)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
            logger.error(f"ffprobe failed for {input_path}: {stderr.strip()}")
            raise ProbeError(f"ffprobe failed for {input_path}", stderr=stderr) from e
        except OSError as e:
            logger.error(f"Could not start prober '{self.executable_paths.ffprobe}': {e}")
            raise ProbeError(f"Could not start prober '{self.executable_paths.ffprobe}': {e}") from e

    # --- Lifecycle ---

    def close(self):
        """Kills the running encoder, if any, and stops the probe workers."""
        self.kill_process()
        self._probe_executor.shutdown(wait=False)

    def __enter__(self) -> "TranscodeSupervisor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # --- Internals ---

    def _transition(self, job: TranscodeJob, status: str) -> bool:
        """
        Moves `job` to `status`. This is the only place the status changes.

        Transitions of a job that is no longer the current one are ignored.
        Must be called with the lock held.
        """
        if job is not self._job:
            return False
        logger.trace(f"{job!r}: {job.status} -> {status}")
        job.status = status
        self._status = status
        return True

    @staticmethod
    def _release_process(job: TranscodeJob):
        job.process = None

    def _preempt_current_job(self) -> Optional[TranscodeJob]:
        """
        Kills the current job's encoder and marks the job as superseded.

        Must be called with the lock held. Returns the superseded job, whose future the
        caller rejects after releasing the lock, or None if no job was running. A job
        whose encoder was already killed is left to fail through its watcher.
        """
        job = self._job
        if job is None:
            return None
        was_running = self._status == TranscodeStatus.RUNNING and job.process is not None
        self.kill_process()
        self._transition(job, TranscodeStatus.IDLE)
        if not was_running:
            return None
        job.superseded = True
        logger.info(f"Transcoding of '{job.input}' preempted by a new request.")
        return job

    def _drain_stderr(self, job: TranscodeJob, process: subprocess.Popen):
        for line in process.stderr:
            line = line.rstrip()
            if line:
                job.stderr_tail.append(line)
                logger.trace(line)

    def _watch(self, job: TranscodeJob, process: subprocess.Popen, stderr_thread: threading.Thread):
        if not job.superseded:
            command_line = format_command(job.command)
            logger.info("Transcoding started.")
            logger.debug(command_line)
            self._notify(job.listener.on_start, command_line)

        parser = ProgressParser()
        for line in process.stdout:
            progress = parser.feed(line)
            if progress is None or job.superseded:
                continue
            logger.debug(progress)
            self._notify(job.listener.on_progress, progress)

        returncode = process.wait()
        stderr_thread.join()
        self._conclude(job, returncode)

    def _conclude(self, job: TranscodeJob, returncode: int):
        with self._lock:
            if job.superseded:
                logger.debug(f"Ignoring exit of superseded job for '{job.input}' (code {returncode}).")
                return
            # A job killed and then replaced still fails; _transition ignores it.
            self._release_process(job)
            if returncode == 0:
                self._transition(job, TranscodeStatus.ENDED)
                error = None
            else:
                self._transition(job, TranscodeStatus.ERROR)
                if returncode < 0:
                    message = f"FFmpeg was killed with signal {-returncode}"
                else:
                    message = f"FFmpeg exited with code {returncode}"
                error = EncodingError(
                    message, returncode=returncode, stderr=job.stderr_text(), command=job.command
                )

        if error is None:
            logger.info("Transcoding ended.")
            self._notify(job.listener.on_end)
            job.future.set_result(None)
        else:
            logger.error(f"Transcoding error. {error}")
            if error.stderr:
                logger.debug(f"FFmpeg stderr:\n{error.stderr}")
            self._notify(job.listener.on_error, error)
            job.future.set_exception(error)

    @staticmethod
    def _notify(handler, *args):
        """Calls a listener handler, logging instead of propagating its exceptions."""
        try:
            handler(*args)
        except Exception:
            logger.exception(f"Listener {getattr(handler, '__qualname__', handler)} raised an exception.")
