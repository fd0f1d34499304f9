"""Service for loading, saving and transferring the progress snapshot."""
import json
import logging
from typing import Callable, List, Optional

from envocab import monitoring
from envocab.config import settings
from envocab.exceptions import (
    SnapshotValidationError,
    StorageError,
    StorageQuotaExceeded,
    TransferError,
)
from envocab.models.entries import ImportResult
from envocab.models.snapshot import (
    AppSettings,
    ProgressRecord,
    Snapshot,
    StatsData,
    VoiceType,
    create_default_snapshot,
    parse_snapshot,
)
from envocab.services.scheduler_service import now_ms
from envocab.services.storage import SnapshotStorage
from envocab.services.transfer import TransferChannel

logger = logging.getLogger(__name__)

# Fields added by export_data that are not part of the snapshot
EXPORT_METADATA_FIELDS = ("exportedAt", "exportVersion")


class ProgressService:
    """Validated access to the persisted snapshot.

    Nothing raised by the storage or the transfer channel leaves this class:
    failures are logged and reported as None, False or an unsuccessful
    ImportResult. A stored snapshot that fails validation is treated exactly
    like a missing one.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        storage_key: Optional[str] = None,
        version: Optional[int] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize the service with a storage backend."""
        self.storage = storage
        self.storage_key = storage_key or settings.storage.key
        self.version = version if version is not None else settings.storage.snapshot_version
        self.clock = clock or now_ms

    def load(self) -> Optional[Snapshot]:
        """Load the snapshot, or None if it is missing or invalid."""
        if not self.storage.is_available():
            logger.warning("Storage is not available, progress cannot be loaded")
            return None

        try:
            raw = self.storage.get_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to load progress: {e}")
            return None
        if not raw:
            return None

        try:
            return parse_snapshot(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.warning(f"Stored progress is not valid JSON: {e}")
        except SnapshotValidationError as e:
            logger.warning(f"Stored progress has an invalid format: {e}")
        return None

    def save(self, snapshot: Snapshot) -> bool:
        """Save the snapshot in one write, returning whether it succeeded."""
        if not self.storage.is_available():
            logger.warning("Storage is not available, progress cannot be saved")
            monitoring.snapshot_saves.labels(result="unavailable").inc()
            return False

        try:
            self.storage.set_item(self.storage_key, json.dumps(snapshot.to_dict(), ensure_ascii=False))
        except StorageQuotaExceeded as e:
            logger.error(f"Not enough storage space to save progress: {e}")
            monitoring.snapshot_saves.labels(result="quota_exceeded").inc()
            return False
        except StorageError as e:
            logger.error(f"Failed to save progress: {e}")
            monitoring.snapshot_saves.labels(result="error").inc()
            return False

        monitoring.snapshot_saves.labels(result="ok").inc()
        return True

    def reset(self) -> bool:
        """Delete the stored snapshot."""
        if not self.storage.is_available():
            logger.warning("Storage is not available, progress cannot be reset")
            return False

        try:
            self.storage.remove_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to reset progress: {e}")
            return False

        logger.info("Progress reset")
        return True

    def get_all_progress(self) -> List[ProgressRecord]:
        """Get every stored progress record."""
        snapshot = self.load()
        return snapshot.progress if snapshot else []

    def get_word_progress(self, word_id: str) -> Optional[ProgressRecord]:
        """Get the stored progress of one word."""
        return next((record for record in self.get_all_progress() if record.id == word_id), None)

    def get_stats(self) -> Optional[StatsData]:
        """Get the stored streak and daily counters."""
        snapshot = self.load()
        return snapshot.stats if snapshot else None

    def get_settings(self) -> AppSettings:
        """Get stored settings, falling back to defaults."""
        snapshot = self.load()
        return snapshot.settings if snapshot else AppSettings()

    def update_settings(self, voice_type: Optional[VoiceType] = None) -> bool:
        """Update settings, creating an empty snapshot if none is stored."""
        snapshot = self.load() or create_default_snapshot(self.version)
        if voice_type is not None:
            snapshot.settings.voice_type = VoiceType(voice_type)
        return self.save(snapshot)

    def export_data(self) -> Optional[str]:
        """Serialize the stored snapshot with export metadata, or None if nothing is stored."""
        snapshot = self.load()
        if not snapshot:
            return None

        data = snapshot.to_dict()
        data["exportedAt"] = self.clock()
        data["exportVersion"] = self.version
        return json.dumps(data, ensure_ascii=False, indent=2)

    def import_data(self, text: str) -> ImportResult:
        """Replace the stored snapshot with imported data.

        Existing progress is left untouched unless the whole input is valid
        and saved successfully.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Import data is not valid JSON: {e}")
            monitoring.snapshot_imports.labels(result="invalid").inc()
            return ImportResult(False, "Failed to parse data, make sure the whole export was copied")

        if isinstance(data, dict):
            for name in EXPORT_METADATA_FIELDS:
                data.pop(name, None)

        try:
            snapshot = parse_snapshot(data)
        except SnapshotValidationError as e:
            logger.warning(f"Import data has an invalid format: {e}")
            monitoring.snapshot_imports.labels(result="invalid").inc()
            return ImportResult(False, "Invalid data format, please check the imported content")

        if not self.save(snapshot):
            monitoring.snapshot_imports.labels(result="save_failed").inc()
            return ImportResult(False, "Failed to save data, please check the available storage")

        logger.info(f"Imported progress of {len(snapshot.progress)} words")
        monitoring.snapshot_imports.labels(result="ok").inc()
        return ImportResult(True, f"Imported progress of {len(snapshot.progress)} words")

    async def copy_to_transfer(self, channel: TransferChannel) -> ImportResult:
        """Export the snapshot into a transfer channel."""
        data = self.export_data()
        if not data:
            return ImportResult(False, "There is no progress to export")

        try:
            await channel.write_text(data)
        except TransferError as e:
            logger.error(f"Failed to copy progress: {e}")
            return ImportResult(False, "Copy failed, please copy the data manually")

        return ImportResult(True, "Progress copied")

    async def import_from_transfer(self, channel: TransferChannel) -> ImportResult:
        """Import a snapshot from a transfer channel."""
        try:
            text = await channel.read_text()
        except TransferError as e:
            logger.error(f"Failed to read transferred progress: {e}")
            return ImportResult(False, "Cannot read the transferred data, please paste it manually")

        if not text.strip():
            return ImportResult(False, "Nothing to import, the transfer is empty")

        return self.import_data(text)
