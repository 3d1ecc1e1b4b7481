"""
JSON-file document collections.

Each collection is one JSON file of ``{"<collection>": {id: document}}``. All
read-modify-write cycles run under a re-entrant lock, so concurrent requests in
one process never lose each other's writes.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict

from ..errors import StorageError

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with a fixed microsecond part and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


class JsonDocumentStore:
    """Thread-safe storage of one document collection in a JSON file."""

    collection = "documents"

    def __init__(self, storage_file: Path):
        self.storage_file = Path(storage_file)
        self.lock = threading.RLock()
        self._ensure_storage_file()

    def _ensure_storage_file(self) -> None:
        with self.lock:
            if not self.storage_file.exists():
                self.storage_file.parent.mkdir(parents=True, exist_ok=True)
                self.storage_file.write_text(json.dumps({self.collection: {}}, indent=2))

    def _load(self) -> Dict:
        try:
            if self.storage_file.exists():
                data = json.loads(self.storage_file.read_text())
                if not isinstance(data, dict):
                    return {self.collection: {}}
                data.setdefault(self.collection, {})
                return data
            return {self.collection: {}}
        except json.JSONDecodeError:
            logger.error("Corrupt document file %s; treating as empty", self.storage_file)
            return {self.collection: {}}
        except OSError as e:
            raise StorageError(f"Failed to read {self.storage_file.name}") from e

    def _save(self, data: Dict) -> None:
        with self.lock:
            data.setdefault(self.collection, {})
            tmp = self.storage_file.with_suffix(".tmp")
            try:
                self.storage_file.parent.mkdir(parents=True, exist_ok=True)
                tmp.write_text(json.dumps(data, indent=2))
                os.replace(tmp, self.storage_file)
            except OSError as e:
                raise StorageError(f"Failed to write {self.storage_file.name}") from e

    def _documents(self) -> Dict[str, Dict]:
        return self._load().get(self.collection, {})

    @staticmethod
    def _with_id(doc_id: str, payload: Dict) -> Dict:
        item = payload.copy()
        item["id"] = doc_id
        return item
