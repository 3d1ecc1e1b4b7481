"""
Episode metadata storage using JSON files.

Stores the published episode documents that reference audio and image blobs.
Episodes are created once and never updated; deletion removes the document.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..errors import ValidationError
from .document_store import JsonDocumentStore, utc_timestamp
from .ids import is_object_id, new_object_id

DEFAULT_CATEGORY = "General"
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000


def validate_episode_fields(title: str, description: str, author: str) -> None:
    """
    Check the required text fields and their length limits.

    Raises:
        ValidationError: With a client-facing message
    """
    title = (title or "").strip()
    if not title:
        raise ValidationError("Please provide a podcast title")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title cannot be more than {MAX_TITLE_LENGTH} characters")
    if not description:
        raise ValidationError("Please provide a description")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description cannot be more than {MAX_DESCRIPTION_LENGTH} characters"
        )
    if not (author or "").strip():
        raise ValidationError("Please provide an author name")


class EpisodeStorage(JsonDocumentStore):
    """Thread-safe episode metadata storage."""

    collection = "episodes"

    def add_episode(
        self,
        title: str,
        description: str,
        author: str,
        audio_file_id: str,
        uploaded_by: str,
        category: Optional[str] = None,
        image_file_id: Optional[str] = None,
        duration: Optional[int] = None,
        file_size: int = 0,
    ) -> Dict:
        validate_episode_fields(title, description, author)
        title = title.strip()
        author = author.strip()
        category = (category or "").strip() or DEFAULT_CATEGORY
        if not audio_file_id:
            raise ValidationError("Please provide an audio file")

        episode_id = new_object_id()
        now = utc_timestamp()
        payload: Dict = {
            "title": title,
            "description": description,
            "author": author,
            "category": category,
            "audio_file_id": audio_file_id,
            "image_file_id": image_file_id,
            "duration": duration,
            "file_size": file_size,
            "uploaded_by": uploaded_by,
            "created_at": now,
            "updated_at": now,
        }
        with self.lock:
            data = self._load()
            data[self.collection][episode_id] = payload
            self._save(data)
        return self._with_id(episode_id, payload)

    def get_episode(self, episode_id: str) -> Optional[Dict]:
        if not is_object_id(episode_id):
            return None
        item = self._documents().get(episode_id)
        if item and isinstance(item, dict):
            return self._with_id(episode_id, item)
        return None

    def list_episodes(self) -> List[Dict]:
        items: List[Dict] = []
        for eid, payload in self._documents().items():
            if not isinstance(payload, dict):
                continue
            items.append(self._with_id(eid, payload))
        # Most recent first; equal timestamps keep the later insert first
        items.reverse()
        items.sort(key=lambda x: x.get("created_at", ""), reverse=True)
        return items

    def delete_episode(self, episode_id: str) -> Optional[Dict]:
        with self.lock:
            data = self._load()
            if episode_id not in data.get(self.collection, {}):
                return None
            item = data[self.collection].pop(episode_id)
            self._save(data)
        if isinstance(item, dict):
            item = self._with_id(episode_id, item)
        return item
