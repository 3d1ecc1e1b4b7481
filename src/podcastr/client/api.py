"""
HTTP client for the Podcastr API.

Wraps each endpoint in a method returning the decoded JSON envelope and raising
``ApiClientError`` with the server's message on any non-2xx response.
"""
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Optional, Tuple, Union

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"

FileField = Union[BinaryIO, Tuple[str, Union[BinaryIO, bytes], str]]


class ApiClientError(Exception):
    """Raised when the API answers with an error status or an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class CreatePodcastData:
    """Upload form contents."""

    title: str
    description: str
    author: str
    audio: FileField
    category: Optional[str] = None
    image: Optional[FileField] = None


class PodcastApiClient:
    """Client for the auth and podcast endpoints.

    ``client`` may be any ``httpx.Client``; tests pass a FastAPI ``TestClient``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client if client is not None else httpx.Client(timeout=self.timeout)

    @property
    def server_url(self) -> str:
        """Origin that relative media URLs (``/api/files/...``) resolve against."""
        if self.base_url.endswith("/api"):
            return self.base_url[: -len("/api")]
        return self.base_url

    def _request(self, method: str, path: str, fallback_message: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.client.request(method.upper(), url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method.upper(), url, e)
            raise ApiClientError(f"{fallback_message}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiClientError(message or fallback_message, response.status_code)
        if not isinstance(data, dict):
            raise ApiClientError(fallback_message, response.status_code)
        return data

    @staticmethod
    def _auth_header(token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "post", "/auth/login", "Login failed", json={"email": email, "password": password}
        )

    def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        return self._request(
            "post",
            "/auth/register",
            "Registration failed",
            json={"email": email, "password": password, "name": name},
        )

    def list_podcasts(self) -> Dict[str, Any]:
        return self._request("get", "/podcasts", "Failed to fetch podcasts")

    def get_podcast(self, podcast_id: str) -> Dict[str, Any]:
        return self._request("get", f"/podcast/{podcast_id}", "Failed to fetch podcast")

    def create_podcast(self, data: CreatePodcastData, token: str) -> Dict[str, Any]:
        form = {"title": data.title, "description": data.description, "author": data.author}
        if data.category:
            form["category"] = data.category
        files = {"audio": data.audio}
        if data.image is not None:
            files["image"] = data.image
        return self._request(
            "post",
            "/podcast",
            "Failed to create podcast",
            data=form,
            files=files,
            headers=self._auth_header(token),
        )

    def delete_podcast(self, podcast_id: str, token: str) -> Dict[str, Any]:
        return self._request(
            "delete",
            f"/podcast/{podcast_id}",
            "Failed to delete podcast",
            headers=self._auth_header(token),
        )

    def audio_url(self, audio_file_id: str) -> str:
        return f"{self.base_url}/files/audio/{audio_file_id}"

    def image_url(self, image_file_id: str) -> str:
        return f"{self.base_url}/files/image/{image_file_id}"
