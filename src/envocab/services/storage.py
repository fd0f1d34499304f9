"""Key/value storage backends for the serialized snapshot."""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from envocab.config import settings
from envocab.exceptions import StorageError, StorageQuotaExceeded
from envocab.models.models import SnapshotEntry

logger = logging.getLogger(__name__)

PROBE_KEY = "__storage_test__"


class SnapshotStorage(ABC):
    """Durable string storage addressed by key."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes if quota_bytes is not None else settings.storage.quota_bytes

    def check_quota(self, value: str) -> None:
        """Raise StorageQuotaExceeded if the value does not fit."""
        size = len(value.encode("utf-8"))
        if size > self.quota_bytes:
            raise StorageQuotaExceeded(size, self.quota_bytes)

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the storage can be written to."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get the stored value or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store the value, replacing any previous one."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete the value if present."""


class SQLAlchemyStorage(SnapshotStorage):
    """Storage backed by the snapshots table."""

    def __init__(self, session_factory: sessionmaker[Session], quota_bytes: Optional[int] = None):
        """Initialize the storage with a session factory."""
        super().__init__(quota_bytes)
        self.session_factory = session_factory

    def is_available(self) -> bool:
        try:
            self.set_item(PROBE_KEY, PROBE_KEY)
            self.remove_item(PROBE_KEY)
            return True
        except StorageError as e:
            logger.warning(f"Snapshot storage is not available: {e}")
            return False

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self.session_factory() as db:
                entry = db.query(SnapshotEntry).filter(SnapshotEntry.key == key).first()
                return entry.payload if entry else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        self.check_quota(value)
        try:
            with self.session_factory() as db:
                entry = db.query(SnapshotEntry).filter(SnapshotEntry.key == key).first()
                if entry:
                    entry.payload = value
                else:
                    db.add(SnapshotEntry(key=key, payload=value))
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            with self.session_factory() as db:
                db.query(SnapshotEntry).filter(SnapshotEntry.key == key).delete()
                db.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e


class InMemoryStorage(SnapshotStorage):
    """Process-local storage, used when no database is configured."""

    def __init__(self, quota_bytes: Optional[int] = None, available: bool = True):
        super().__init__(quota_bytes)
        self.available = available
        self.items: Dict[str, str] = {}

    def is_available(self) -> bool:
        return self.available

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.check_quota(value)
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)
