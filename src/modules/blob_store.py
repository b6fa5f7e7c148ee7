"""Durable key-value slots holding serialized store state."""

import logging
from abc import ABC
from abc import abstractmethod
from typing import Dict
from typing import Optional

from src.models.blob import Blob

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """A key-value store of text blobs.

    Access is synchronous so a store mutation and its persistence happen in
    the same step of the event loop.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key``, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the blob stored under ``key``."""
        pass


class MemoryBlobStore(BlobStore):
    """Blob store kept in a dict, for tests and throwaway runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def set(self, key: str, value: str) -> None:
        self.blobs[key] = value


class SqlBlobStore(BlobStore):
    """Blob store backed by the ``blobs`` table.

    Args:
        session_factory: SQLAlchemy sessionmaker bound to an engine whose
            tables have been created.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            blob = Blob.get_by_key(session, key)
            return blob.value if blob else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            try:
                Blob.upsert(session, key, value)
                session.commit()
            except Exception:
                session.rollback()
                raise
        logger.debug(f"Persisted blob {key} ({len(value)} bytes)")
