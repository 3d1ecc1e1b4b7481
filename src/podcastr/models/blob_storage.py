"""
Blob storage for uploaded audio and image files.

A GridFS-style content store on the local filesystem: every blob is written as
``<id>.bin`` with a companion ``<id>.json`` files document holding its length,
declared content type, original filename and free-form metadata.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, Optional, Tuple, Union

from ..errors import NotFound, StorageError
from .document_store import utc_timestamp
from .ids import is_object_id, new_object_id

logger = logging.getLogger(__name__)

CHUNK_SIZE = 255 * 1024  # GridFS default chunk size

BlobSource = Union[BinaryIO, bytes, Iterable[bytes]]


@dataclass
class BlobInfo:
    """Files document for a stored blob."""

    id: str
    length: int
    content_type: Optional[str]
    filename: str
    upload_date: str
    metadata: Dict = field(default_factory=dict)


def _iter_source(source: BlobSource, chunk_size: int) -> Iterator[bytes]:
    if isinstance(source, (bytes, bytearray)):
        for offset in range(0, len(source), chunk_size):
            yield bytes(source[offset:offset + chunk_size])
        return
    read = getattr(source, "read", None)
    if read is not None:
        while True:
            buf = read(chunk_size)
            if not buf:
                break
            yield buf
        return
    for buf in source:
        if buf:
            yield buf


class BlobStore:
    """Filesystem blob store addressed by opaque ids."""

    def __init__(self, root_dir: Path, chunk_size: int = CHUNK_SIZE):
        self.root_dir = Path(root_dir)
        self.chunk_size = chunk_size
        self.root_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def is_valid_id(blob_id) -> bool:
        return is_object_id(blob_id)

    def _data_path(self, blob_id: str) -> Path:
        return self.root_dir / f"{blob_id}.bin"

    def _doc_path(self, blob_id: str) -> Path:
        return self.root_dir / f"{blob_id}.json"

    def upload(
        self,
        source: BlobSource,
        filename: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict] = None,
    ) -> str:
        """
        Stream bytes into the store.

        Returns only after the data has been fsynced and the files document
        written.

        Args:
            source: Binary file object, bytes, or iterable of byte chunks
            filename: Original filename
            content_type: Declared MIME type
            metadata: Arbitrary metadata (uploader id, field role)

        Returns:
            The new blob id

        Raises:
            StorageError: If any write fails; partial files are removed
        """
        blob_id = new_object_id()
        tmp_path = self.root_dir / f"{blob_id}.part"
        data_path = self._data_path(blob_id)
        length = 0
        try:
            with tmp_path.open("wb") as f:
                for chunk in _iter_source(source, self.chunk_size):
                    f.write(chunk)
                    length += len(chunk)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, data_path)

            info = BlobInfo(
                id=blob_id,
                length=length,
                content_type=content_type,
                filename=filename,
                upload_date=utc_timestamp(),
                metadata=dict(metadata or {}),
            )
            self._doc_path(blob_id).write_text(json.dumps(asdict(info), indent=2))
        except OSError as e:
            logger.error("Blob upload failed for %s: %s", filename, e)
            for p in (tmp_path, data_path, self._doc_path(blob_id)):
                try:
                    p.unlink(missing_ok=True)
                except OSError:
                    logger.warning("Could not remove partial blob file %s", p)
            raise StorageError(f"Failed to store file '{filename}'") from e

        logger.info("Stored blob %s (%s, %d bytes)", blob_id, filename, length)
        return blob_id

    def info(self, blob_id: str) -> BlobInfo:
        """
        Look up a blob's files document.

        Raises:
            NotFound: If the id is malformed or nothing is stored under it
            StorageError: If the document exists but cannot be read
        """
        if not self.is_valid_id(blob_id):
            raise NotFound("File not found")
        doc_path = self._doc_path(blob_id)
        if not doc_path.exists() or not self._data_path(blob_id).exists():
            raise NotFound("File not found")
        try:
            data = json.loads(doc_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read file document {blob_id}") from e
        return BlobInfo(
            id=data.get("id", blob_id),
            length=int(data.get("length", 0)),
            content_type=data.get("content_type"),
            filename=data.get("filename") or blob_id,
            upload_date=data.get("upload_date", ""),
            metadata=data.get("metadata") or {},
        )

    def exists(self, blob_id: str) -> bool:
        try:
            self.info(blob_id)
        except NotFound:
            return False
        return True

    def open(self, blob_id: str) -> Tuple[BlobInfo, BinaryIO]:
        """
        Resolve a blob and open its data for reading.

        Both lookups happen before the caller commits to a response, so failures
        here can still become a clean error response.
        """
        info = self.info(blob_id)
        try:
            handle = self._data_path(blob_id).open("rb")
        except FileNotFoundError as e:
            raise NotFound("File not found") from e
        except OSError as e:
            raise StorageError(f"Failed to open file {blob_id}") from e
        return info, handle

    def iter_chunks(
        self,
        handle: BinaryIO,
        start: int = 0,
        end: Optional[int] = None,
        blob_id: str = "",
    ) -> Iterator[bytes]:
        """
        Yield the bytes in ``[start, end]`` (inclusive) and close the handle.

        A read error here happens after response headers have gone out, so it
        is logged and the stream simply ends.
        """
        try:
            handle.seek(start)
            remaining = None if end is None else end - start + 1
            while remaining is None or remaining > 0:
                size = self.chunk_size if remaining is None else min(self.chunk_size, remaining)
                buf = handle.read(size)
                if not buf:
                    break
                if remaining is not None:
                    remaining -= len(buf)
                yield buf
        except OSError as e:
            logger.error("Stream error while sending blob %s: %s", blob_id, e)
        finally:
            handle.close()

    def read_bytes(self, blob_id: str) -> bytes:
        info, handle = self.open(blob_id)
        return b"".join(self.iter_chunks(handle, blob_id=info.id))

    def delete(self, blob_id: str) -> None:
        """
        Remove a blob and its files document.

        Raises:
            NotFound: If nothing is stored under the id
            StorageError: If removal fails
        """
        if not self.is_valid_id(blob_id) or not self._doc_path(blob_id).exists():
            raise NotFound(f"File {blob_id} not found")
        try:
            self._data_path(blob_id).unlink(missing_ok=True)
            self._doc_path(blob_id).unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete file {blob_id}") from e
        logger.info("Deleted blob %s", blob_id)
