"""
Validation of multipart episode uploads.
"""
import os
from dataclasses import dataclass
from typing import BinaryIO, Optional

from ..errors import ValidationError


@dataclass
class IncomingFile:
    """An uploaded file: stream plus what the client declared about it."""

    file: BinaryIO
    filename: str
    content_type: Optional[str]
    size: int


def measure(fileobj: BinaryIO) -> int:
    """Size of a seekable file object, leaving it rewound."""
    fileobj.seek(0, os.SEEK_END)
    size = fileobj.tell()
    fileobj.seek(0)
    return size


def check_upload(incoming: IncomingFile, field: str, max_size: int) -> None:
    """
    Reject files of the wrong media family or over the size limit.

    ``audio`` must declare ``audio/*`` and ``image`` must declare ``image/*``.

    Raises:
        ValidationError: With a client-facing message
    """
    family = "audio/" if field == "audio" else "image/"
    content_type = (incoming.content_type or "").lower()
    if not content_type.startswith(family):
        raise ValidationError(f"Only {field} files are allowed for {field} field")
    if incoming.size > max_size:
        raise ValidationError(f"File too large: {field} exceeds the {max_size} byte limit")
