"""
Audio and image streaming from the blob store.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple
from urllib.parse import quote

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import StreamingResponse

from ..context import AppContext, get_context
from ..errors import NotFound, RangeNotSatisfiable, ValidationError
from ..models.blob_storage import BlobInfo
from ..models.schemas import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])

IMAGE_CACHE_CONTROL = "public, max-age=31536000"


def parse_range(header: Optional[str], length: int) -> Optional[Tuple[int, int]]:
    """
    Parse a single-range ``Range: bytes=...`` header.

    Multi-range and syntactically invalid headers (including a last byte
    before the first) are ignored, so the whole file is sent.

    Returns:
        Inclusive ``(start, end)`` offsets, or None for a full response

    Raises:
        RangeNotSatisfiable: If the range lies outside the file
    """
    if not header:
        return None
    unit, _, spec = header.partition("=")
    spec = spec.strip()
    if unit.strip().lower() != "bytes" or not spec or "," in spec:
        return None
    start_s, sep, end_s = spec.partition("-")
    if not sep:
        return None
    unsatisfiable = RangeNotSatisfiable(headers={"Content-Range": f"bytes */{length}"})
    try:
        if start_s == "":
            suffix = int(end_s)
            if suffix <= 0 or length == 0:
                raise unsatisfiable
            return max(length - suffix, 0), length - 1
        start = int(start_s)
        end = int(end_s) if end_s else length - 1
    except ValueError:
        return None
    if end_s and end < start:
        return None
    if start < 0 or start >= length:
        raise unsatisfiable
    return start, min(end, length - 1)


def _content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "file"
    return f"inline; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def _open(context: AppContext, file_id: str, kind: str):
    if not context.blobs.is_valid_id(file_id):
        raise ValidationError("Invalid file ID")
    try:
        return context.blobs.open(file_id)
    except NotFound as e:
        raise NotFound(f"{kind} file not found") from e


def _headers(info: BlobInfo) -> dict:
    return {"Content-Disposition": _content_disposition(info.filename)}


@router.get(
    "/audio/{file_id}",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        416: {"model": ErrorResponse},
    },
)
async def get_audio_file(
    file_id: str,
    range_header: Optional[str] = Header(default=None, alias="Range"),
    context: AppContext = Depends(get_context),
) -> StreamingResponse:
    """
    Stream an audio file, honouring a single byte range.
    """
    info, handle = _open(context, file_id, "Audio")
    try:
        byte_range = parse_range(range_header, info.length)
    except RangeNotSatisfiable:
        handle.close()
        raise

    headers = _headers(info)
    headers["Accept-Ranges"] = "bytes"
    if byte_range is None:
        start, end = 0, info.length - 1
        status_code = status.HTTP_200_OK
    else:
        start, end = byte_range
        status_code = status.HTTP_206_PARTIAL_CONTENT
        headers["Content-Range"] = f"bytes {start}-{end}/{info.length}"
    headers["Content-Length"] = str(max(end - start + 1, 0))

    return StreamingResponse(
        context.blobs.iter_chunks(handle, start, end, blob_id=info.id),
        status_code=status_code,
        media_type=info.content_type or "audio/mpeg",
        headers=headers,
    )


@router.get(
    "/image/{file_id}",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_image_file(file_id: str, context: AppContext = Depends(get_context)) -> StreamingResponse:
    """
    Stream an image file with a long-lived cache header.
    """
    info, handle = _open(context, file_id, "Image")
    headers = _headers(info)
    headers["Content-Length"] = str(info.length)
    headers["Cache-Control"] = IMAGE_CACHE_CONTROL
    return StreamingResponse(
        context.blobs.iter_chunks(handle, blob_id=info.id),
        media_type=info.content_type or "image/jpeg",
        headers=headers,
    )
