"""
This module locates the FFmpeg and ffprobe executables used by the transcoder.

Bundled, platform-specific builds are looked up in the vendor directory first.
When a bundled build is missing, the bare command name is used instead, which
relies on the executable being available on the host's PATH.

Resolution happens once per process through `get_executable_paths()`, and the
resulting `ExecutablePaths` value is handed to every `TranscodeSupervisor`.
"""
import functools
import platform as platform_module
import subprocess
import sys
from pathlib import Path
from typing import NamedTuple, Optional

from loguru import logger

from ..config.common import VENDOR_DIR

DEFAULT_FFMPEG = "ffmpeg"
DEFAULT_FFPROBE = "ffprobe"


def _bundled_executable_path(name: str, platform: Optional[str], vendor_dir: Path) -> Optional[str]:
    """
    Returns the path of a bundled executable, or None if it is not present.

    Args:
        name: The executable's base name, e.g. "ffmpeg".
        platform: A `sys.platform` style identifier. Defaults to the host's.
        vendor_dir: The directory holding the bundled executables.
    """
    platform = platform or sys.platform
    exe_name = f"{name}.exe" if platform == "win32" else name
    candidate = Path(vendor_dir) / exe_name

    if candidate.is_file():
        logger.debug(f"Using bundled {name} executable: '{candidate}'")
        return str(candidate.resolve())

    logger.warning(
        f"Missing {name} executable for platform \"{platform}\" with arch \"{platform_module.machine()}\". "
        f"Will try to use the {name} installed on the system."
    )
    return None


def resolve_encoder_path(platform: Optional[str] = None, vendor_dir: Path = VENDOR_DIR) -> Optional[str]:
    """Returns the bundled FFmpeg path for `platform`, or None to fall back to the system's."""
    return _bundled_executable_path(DEFAULT_FFMPEG, platform, vendor_dir)


def resolve_prober_path(platform: Optional[str] = None, vendor_dir: Path = VENDOR_DIR) -> Optional[str]:
    """Returns the bundled ffprobe path for `platform`, or None to fall back to the system's."""
    return _bundled_executable_path(DEFAULT_FFPROBE, platform, vendor_dir)


class ExecutablePaths(NamedTuple):
    """
    The commands used to start the encoder and the prober.

    Each value is either an absolute path to a bundled executable or a bare
    command name looked up on the host's PATH.
    """

    ffmpeg: str = DEFAULT_FFMPEG
    ffprobe: str = DEFAULT_FFPROBE

    @classmethod
    def resolve(cls, platform: Optional[str] = None, vendor_dir: Path = VENDOR_DIR) -> "ExecutablePaths":
        """Builds the paths from the vendor directory, falling back to the system executables."""
        return cls(
            ffmpeg=resolve_encoder_path(platform, vendor_dir) or DEFAULT_FFMPEG,
            ffprobe=resolve_prober_path(platform, vendor_dir) or DEFAULT_FFPROBE,
        )


@functools.lru_cache(maxsize=None)
def get_executable_paths() -> ExecutablePaths:
    """
    Returns the process-wide executable paths, resolving them on first use.

    Every supervisor created without explicit paths shares this value.
    """
    paths = ExecutablePaths.resolve()
    logger.info(f"Encoder: '{paths.ffmpeg}', prober: '{paths.ffprobe}'")
    return paths


def verify_executable(executable: str) -> bool:
    """
    Verifies that an FFmpeg-family executable can be started.

    This runs `<executable> -version` and logs the first line of the output on
    success, or a detailed error message if the command fails or cannot be found.

    Args:
        executable: A path or command name, e.g. `ExecutablePaths.ffmpeg`.

    Returns:
        True if the executable ran and exited successfully, False otherwise.
    """
    try:
        result = subprocess.run(
            [executable, "-version"],
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"'{executable} -version' failed (return code {e.returncode}):\n{e.stderr}")
        return False
    except FileNotFoundError:
        logger.error(
            f"'{executable}' not found. Please ensure FFmpeg is installed and on your PATH, "
            f"or place a bundled build in '{VENDOR_DIR}'."
        )
        return False
    except OSError as e:
        logger.error(f"Could not run '{executable}': {e}")
        return False

    version_output_lines = result.stdout.splitlines()
    first_line = version_output_lines[0] if version_output_lines else ""
    logger.info(f"Version check for '{executable}' successful: {first_line}")
    return True
