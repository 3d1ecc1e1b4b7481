"""
Last-issued-wins guard for overlapping client requests.

A view that fetches in response to user actions can have an older response
arrive after a newer one. Each logical operation (``"detail"``, ``"list"``...)
gets a monotonic counter; only the result of the newest issued request is
applied, stale ones are dropped.
"""
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RequestToken:
    key: str
    generation: int


class RequestGeneration:
    """Tracks the newest request per operation key."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> RequestToken:
        """Issue a token for a new request, superseding earlier ones for ``key``."""
        with self._lock:
            generation = next(self._counter)
            self._latest[key] = generation
        return RequestToken(key, generation)

    def is_current(self, token: RequestToken) -> bool:
        with self._lock:
            return self._latest.get(token.key) == token.generation

    def cancel(self, key: str) -> None:
        """Invalidate whatever request is in flight for ``key``."""
        with self._lock:
            self._latest[key] = next(self._counter)

    def commit(self, token: RequestToken, result: T, apply: Callable[[T], None]) -> bool:
        """
        Apply ``result`` only if ``token`` is still the newest for its key.

        Returns:
            True if applied, False if the result was stale and discarded
        """
        if not self.is_current(token):
            logger.debug("Discarding stale %s response (generation %s)", token.key, token.generation)
            return False
        apply(result)
        return True
