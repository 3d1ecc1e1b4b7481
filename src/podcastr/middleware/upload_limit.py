"""
Upload size middleware.

Rejects an episode upload from its declared ``Content-Length`` before the
multipart body is read and spooled to disk. Each file is still checked
against ``MAX_FILE_SIZE`` after parsing; this only stops bodies that cannot
possibly fit.
"""
import logging
from typing import Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/podcast"
# One audio file, one image file, the text fields and multipart framing
UPLOAD_FILE_FIELDS = 2
FORM_OVERHEAD_BYTES = 64 * 1024


def max_upload_body(max_file_size: int) -> int:
    """Largest request body a valid episode upload can have."""
    return UPLOAD_FILE_FIELDS * max_file_size + FORM_OVERHEAD_BYTES


class UploadLimitMiddleware(BaseHTTPMiddleware):
    """Middleware that refuses oversized episode uploads up front."""

    def __init__(self, app, max_file_size: int):
        """
        Initialize upload limit middleware.

        Args:
            app: The FastAPI application
            max_file_size: Per-file limit in bytes
        """
        super().__init__(app)
        self.max_file_size = max_file_size
        self.max_body = max_upload_body(max_file_size)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method != "POST" or request.url.path.rstrip("/") != UPLOAD_PATH:
            return await call_next(request)

        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body:
            logger.warning(
                "Rejected upload of %s bytes (limit %s bytes per file)", declared, self.max_file_size
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "success": False,
                    "message": f"File too large: upload exceeds the {self.max_file_size} byte limit",
                },
            )

        return await call_next(request)
