"""
Error taxonomy shared by the storage, service and route layers.

Each error carries the HTTP status it maps to; the handlers installed by
``create_app`` turn them into the ``{"success": false, "message": ...}`` envelope.
"""
from typing import Dict, Optional


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class PodcastrError(Exception):
    """Base class for errors that translate into an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(PodcastrError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(PodcastrError):
    status_code = 401
    default_message = "Not authorized"


class Forbidden(PodcastrError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PodcastrError):
    status_code = 404
    default_message = "Not found"


class RangeNotSatisfiable(PodcastrError):
    status_code = 416
    default_message = "Requested range not satisfiable"


class StorageError(PodcastrError):
    """Blob or document store failure."""

    status_code = 500
    default_message = "Storage error"
