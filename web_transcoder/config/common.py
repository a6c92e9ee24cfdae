"""
Common configuration settings used throughout the application.

This module contains globally shared configuration settings and constants that are
used across the Web Transcoder. It centralizes parameters for logging, the location
of bundled executables, and job status tracking. It also handles the loading of
user-specific configuration from an external YAML file, allowing for easy
customization without modifying the source code.
"""
from pathlib import Path

import yaml
from loguru import logger

# --- User-Defined Path Configuration ---
# This block loads user-specific paths from a 'config.user.yaml' file located
# at the project root. It lets users point the transcoder at their own folder of
# FFmpeg builds instead of the bundled 'vendor' directory.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

# The directory holding the bundled, platform-specific `ffmpeg` and `ffprobe`
# executables. When an executable is missing from it, the host's PATH is used.
VENDOR_DIR: Path = PROJECT_ROOT / "vendor"


def load_user_config(config_path: Path = USER_CONFIG_PATH) -> dict:
    """
    Reads the optional user configuration file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        The parsed configuration as a dictionary. An empty dictionary is returned
        when the file does not exist or cannot be parsed.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using bundled vendor directory.")
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}
    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring '{config_path}': expected a mapping at the top level.")
        return {}
    return user_config


_paths_config = load_user_config().get("paths") or {}
if _paths_config.get("vendor_dir"):
    VENDOR_DIR = Path(_paths_config["vendor_dir"]).expanduser()


# --- Logging Configuration ---
# The format string for the Loguru logger. It defines the structure and appearance
# of log messages, including timestamp, level, module name, and the message itself.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{thread.name} - <level>{message}</level>"
)

# The number of trailing stderr lines kept for a running job. They are attached
# to an `EncodingError` when the encoder fails.
STDERR_TAIL_LINES = 30

# Worker threads available for one-shot metadata probes.
PROBE_MAX_WORKERS = 2


# --- Job Status Constants ---
# These constants represent the states of a supervisor's current job.
# See `web_transcoder.domain.job.TranscodeStatus` for the state machine.

JOB_STATUS_IDLE = "idle"  # No job started yet, or the previous one was preempted.
JOB_STATUS_RUNNING = "running"  # The encoder process is launched and has not concluded.
JOB_STATUS_ENDED = "ended"  # The encoder exited successfully.
JOB_STATUS_ERROR = "error"  # The encoder failed, was killed, or could not be launched.
