"""
Episode publishing: composes episode documents with their audio/image blobs.

Creation writes blobs first and the document last, so a crash can orphan a
blob but never leave a document without its audio. Deletion removes blobs
best-effort and always removes the document once ownership is established.
"""
import logging
from typing import Dict, List, Optional

from ..errors import Forbidden, NotFound, PodcastrError, ValidationError
from ..models.blob_storage import BlobStore
from ..models.episode_storage import EpisodeStorage, validate_episode_fields
from ..models.user_storage import UserStorage, public_user
from .audio_metadata import extract_duration
from .uploads import IncomingFile, check_upload

logger = logging.getLogger(__name__)

AUDIO_ROUTE = "/api/files/audio"
IMAGE_ROUTE = "/api/files/image"


def audio_url(file_id: str) -> str:
    return f"{AUDIO_ROUTE}/{file_id}"


def image_url(file_id: Optional[str]) -> Optional[str]:
    return f"{IMAGE_ROUTE}/{file_id}" if file_id else None


class EpisodeService:
    """CRUD surface over episode documents and their blobs."""

    def __init__(
        self,
        episodes: EpisodeStorage,
        users: UserStorage,
        blobs: BlobStore,
        max_file_size: int,
    ):
        self.episodes = episodes
        self.users = users
        self.blobs = blobs
        self.max_file_size = max_file_size

    def _summary(self, doc: Dict) -> Dict:
        item = {k: v for k, v in doc.items() if k not in ("audio_file_id", "uploaded_by")}
        item["uploaded_by"] = public_user(self.users.get_user(doc.get("uploaded_by")))
        item["image_url"] = image_url(doc.get("image_file_id"))
        return item

    def _detail(self, doc: Dict) -> Dict:
        item = self._summary(doc)
        item["audio_file_id"] = doc["audio_file_id"]
        item["audio_url"] = audio_url(doc["audio_file_id"])
        return item

    def list_episodes(self) -> List[Dict]:
        """All episodes newest first, without audio references."""
        return [self._summary(doc) for doc in self.episodes.list_episodes()]

    def get_episode(self, episode_id: str) -> Dict:
        """
        Full episode record with media URLs.

        Raises:
            NotFound: Unknown or malformed id
        """
        doc = self.episodes.get_episode(episode_id)
        if not doc:
            raise NotFound("Podcast not found")
        return self._detail(doc)

    def create_episode(
        self,
        owner_id: str,
        title: Optional[str],
        description: Optional[str],
        author: Optional[str],
        audio: Optional[IncomingFile],
        category: Optional[str] = None,
        image: Optional[IncomingFile] = None,
    ) -> Dict:
        """
        Store the audio blob, then the optional image blob, then the document.

        Every validation runs before the first write, so a rejected request
        persists nothing.

        Raises:
            ValidationError: Missing fields, missing/empty audio, bad file types
            StorageError: A blob could not be written
        """
        if not (title or "").strip() or not description or not (author or "").strip():
            raise ValidationError("Please provide title, description, and author")
        validate_episode_fields(title, description, author)
        if audio is None or audio.size == 0:
            raise ValidationError("Please upload an audio file")
        check_upload(audio, "audio", self.max_file_size)
        if image is not None:
            check_upload(image, "image", self.max_file_size)

        duration = extract_duration(audio.file, audio.filename)

        audio_file_id = self.blobs.upload(
            audio.file,
            filename=audio.filename,
            content_type=audio.content_type,
            metadata={"field_name": "audio", "original_name": audio.filename, "uploaded_by": owner_id},
        )
        image_file_id = None
        if image is not None:
            image_file_id = self.blobs.upload(
                image.file,
                filename=image.filename,
                content_type=image.content_type,
                metadata={"field_name": "image", "original_name": image.filename, "uploaded_by": owner_id},
            )

        doc = self.episodes.add_episode(
            title=title,
            description=description,
            author=author,
            category=category,
            audio_file_id=audio_file_id,
            image_file_id=image_file_id,
            duration=duration,
            file_size=audio.size,
            uploaded_by=owner_id,
        )
        logger.info("Episode %s created by %s (audio %s)", doc["id"], owner_id, audio_file_id)
        return self._detail(doc)

    def delete_episode(self, episode_id: str, requester_id: str) -> None:
        """
        Delete an episode owned by ``requester_id``.

        Blob removal failures are logged and do not stop the document delete.

        Raises:
            NotFound: Unknown episode
            Forbidden: Requester is not the uploader
        """
        doc = self.episodes.get_episode(episode_id)
        if not doc:
            raise NotFound("Podcast not found")
        if doc.get("uploaded_by") != requester_id:
            raise Forbidden("You are not authorized to delete this podcast")

        for role, file_id in (("audio", doc.get("audio_file_id")), ("image", doc.get("image_file_id"))):
            if not file_id:
                continue
            try:
                self.blobs.delete(file_id)
            except (PodcastrError, OSError) as e:
                logger.error("Error deleting %s file %s: %s", role, file_id, e)

        self.episodes.delete_episode(episode_id)
        logger.info("Episode %s deleted by %s", episode_id, requester_id)
