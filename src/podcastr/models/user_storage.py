"""
User account storage using JSON files.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..errors import ValidationError
from .document_store import JsonDocumentStore, utc_timestamp
from .ids import is_object_id, new_object_id


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserStorage(JsonDocumentStore):
    """Thread-safe user storage. Accounts are immutable once created."""

    collection = "users"

    def create_user(self, email: str, name: str, password_hash: str) -> Dict:
        email = normalize_email(email)
        name = (name or "").strip()
        if not email or not name or not password_hash:
            raise ValidationError("Please provide email, password, and name")

        with self.lock:
            data = self._load()
            for payload in data[self.collection].values():
                if isinstance(payload, dict) and payload.get("email") == email:
                    raise ValidationError("User already exists with this email")
            user_id = new_object_id()
            payload = {
                "email": email,
                "name": name,
                "password_hash": password_hash,
                "created_at": utc_timestamp(),
            }
            data[self.collection][user_id] = payload
            self._save(data)
        return self._with_id(user_id, payload)

    def get_user(self, user_id: str) -> Optional[Dict]:
        if not is_object_id(user_id):
            return None
        payload = self._documents().get(user_id)
        if payload and isinstance(payload, dict):
            return self._with_id(user_id, payload)
        return None

    def find_by_email(self, email: str) -> Optional[Dict]:
        email = normalize_email(email)
        if not email:
            return None
        for uid, payload in self._documents().items():
            if isinstance(payload, dict) and payload.get("email") == email:
                return self._with_id(uid, payload)
        return None


def public_user(user: Optional[Dict]) -> Optional[Dict]:
    """The user fields that may appear in API responses."""
    if not user:
        return None
    return {"id": user["id"], "email": user.get("email"), "name": user.get("name")}
