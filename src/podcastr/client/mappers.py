"""
Mapping of API podcast records to the ``Episode`` view model.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

DEFAULT_THUMBNAIL = "https://images.unsplash.com/photo-1478737270239-2f02b77fc618?w=600&h=600&fit=crop"


@dataclass(frozen=True)
class Uploader:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class Episode:
    """An episode as the views display it."""

    id: str
    title: str
    members: str
    published_at: str  # YYYY-MM-DD
    thumbnail: str
    description: str
    duration: int  # seconds
    duration_formatted: str
    url: str
    uploaded_by: Optional[Uploader] = None


def format_duration(seconds: float) -> str:
    """Format seconds as ``M:SS``, or ``H:MM:SS`` from one hour up."""
    seconds = max(int(seconds or 0), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_date(date_string: str) -> str:
    """``"2024-01-05"`` -> ``"05 Jan 24"``."""
    return date.fromisoformat(date_string).strftime("%d %b %y")


def _published_date(created_at: Optional[str]) -> str:
    if not created_at:
        return ""
    try:
        return datetime.fromisoformat(created_at.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return created_at[:10]


def _absolute(server_url: str, path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    if path.startswith(("http://", "https://")):
        return path
    return f"{server_url.rstrip('/')}{path}"


def podcast_to_episode(podcast: Dict, server_url: str) -> Episode:
    """
    Convert one API podcast record to an ``Episode``.

    Args:
        podcast: Record from ``/api/podcasts`` or ``/api/podcast/{id}``
        server_url: Origin the relative media URLs resolve against
    """
    duration = int(podcast.get("duration") or 0)
    uploader = podcast.get("uploadedBy")
    return Episode(
        id=podcast["id"],
        title=podcast.get("title", ""),
        members=podcast.get("author", ""),
        published_at=_published_date(podcast.get("createdAt")),
        thumbnail=_absolute(server_url, podcast.get("imageUrl")) or DEFAULT_THUMBNAIL,
        description=podcast.get("description", ""),
        duration=duration,
        duration_formatted=format_duration(duration),
        url=_absolute(server_url, podcast.get("audioUrl")) or "",
        uploaded_by=Uploader(
            id=uploader["id"], name=uploader.get("name", ""), email=uploader.get("email", "")
        )
        if uploader
        else None,
    )


def podcasts_to_episodes(podcasts: Iterable[Dict], server_url: str) -> List[Episode]:
    return [podcast_to_episode(p, server_url) for p in podcasts]
