"""
Decides whether a media file must be transcoded before a browser can play it.
"""
import mimetypes
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ..config.video import PLAYABLE_MIME_SUFFIX

# Containers the host's mime registry may not know about. Looked up before the
# registry, which is left untouched.
_EXTRA_TYPES = {
    ".mkv": "video/x-matroska",
    ".m4v": "video/x-m4v",
    ".ts": "video/mp2t",
    ".flv": "video/x-flv",
}


def guess_mime_type(filename: Union[str, Path]) -> Optional[str]:
    """Returns the mime type derived from the file's extension, or None if unknown."""
    path = Path(filename)
    mime_type = _EXTRA_TYPES.get(path.suffix.lower())
    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type


def needs_transcoding(filename: Union[str, Path]) -> bool:
    """
    Returns True unless the file is already in the MP4 container.

    The decision is based on the extension only. A file whose type cannot be
    determined is assumed to need transcoding; FFmpeg is better placed than the
    extension to tell what it actually contains.

    Args:
        filename: A file name or path, e.g. "movie.mkv".
    """
    mime_type = guess_mime_type(filename)
    if mime_type is None:
        logger.debug(f"Unknown media type for '{filename}', assuming it needs transcoding.")
        return True
    return not mime_type.endswith(PLAYABLE_MIME_SUFFIX)
