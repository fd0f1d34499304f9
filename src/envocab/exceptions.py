"""Exceptions raised inside the persistence and transfer layers."""


class SnapshotValidationError(ValueError):
    """Raised when stored or imported snapshot data does not match the schema."""


class StorageError(Exception):
    """Base class for snapshot storage failures."""


class StorageQuotaExceeded(StorageError):
    """Raised when a payload does not fit into the storage quota."""

    def __init__(self, size: int, quota: int):
        super().__init__(f"Payload of {size} bytes exceeds storage quota of {quota} bytes")
        self.size = size
        self.quota = quota


class TransferError(Exception):
    """Raised when the transfer channel cannot be read or written."""
