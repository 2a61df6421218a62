"""Advisory cache of document revisions observed after writes.

Entries are hints only: a miss or a stale entry never changes the
outcome of a request, it only loses the chance to skip a round trip.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable

from ..models import DocumentRevision

logger = logging.getLogger(__name__)


class DocumentRevisionCache:
    """Thread-safe ``identity → DocumentRevision`` mapping.

    The identity is any hashable chosen by the caller; the request
    layer uses the document handle (``collection/key``) unless a
    request names its own identity.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[Hashable, DocumentRevision] = {}

    @staticmethod
    def identity(collection: str, key: str) -> str:
        """Canonical identity of a document: its handle."""
        return f"{collection}/{key}"

    def set_values(self, identity: Hashable, revision: DocumentRevision) -> None:
        """Record the latest revision for *identity*, replacing any previous entry."""
        with self._lock:
            self._entries[identity] = revision
        logger.debug("Cached revision %s for %r", revision.rev, identity)

    def get(self, identity: Hashable) -> DocumentRevision | None:
        with self._lock:
            return self._entries.get(identity)

    def remove(self, identity: Hashable) -> DocumentRevision | None:
        with self._lock:
            return self._entries.pop(identity, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, identity: Hashable) -> bool:
        with self._lock:
            return identity in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
