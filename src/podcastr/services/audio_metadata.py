"""
Audio container metadata extraction.
"""
import logging
from typing import BinaryIO, Optional

import mutagen

logger = logging.getLogger(__name__)


def extract_duration(fileobj: BinaryIO, filename: str = "") -> Optional[int]:
    """
    Best-effort duration of an audio file, in whole seconds.

    Never raises: a file mutagen cannot parse just has no duration. The file
    position is restored to the start afterwards.

    Args:
        fileobj: Seekable binary file object
        filename: Original filename, used only for logging

    Returns:
        Duration in seconds (floored), or None if unknown
    """
    try:
        fileobj.seek(0)
        audio = mutagen.File(fileobj)
        length = getattr(getattr(audio, "info", None), "length", None)
        if length is None or length < 0:
            return None
        return int(length)
    except Exception as e:
        logger.warning("Failed to extract audio duration from %s: %s", filename or "upload", e)
        return None
    finally:
        try:
            fileobj.seek(0)
        except (OSError, ValueError):
            logger.warning("Could not rewind upload %s", filename or "upload")
