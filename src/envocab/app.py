"""Main application object wiring the services together."""
import logging
from pathlib import Path
from typing import Callable, List, Optional

from envocab.config import settings
from envocab.models.base import create_db_engine, create_session_factory, init_db
from envocab.models.entries import CatalogGroup, ImportResult, RuntimeEntry
from envocab.services.catalog_service import CatalogService
from envocab.services.progress_service import ProgressService
from envocab.services.review_session import ReviewSession
from envocab.services.scheduler_service import SchedulerService
from envocab.services.storage import SnapshotStorage, SQLAlchemyStorage
from envocab.services.transfer import TransferChannel


class ReviewApp:
    """Main application class.

    Builds one instance of every service; nothing is shared through module
    globals, so tests can create as many independent apps as they need.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        catalog_dir: Optional[Path] = None,
        clock: Optional[Callable[[], int]] = None,
        storage: Optional[SnapshotStorage] = None,
    ):
        """Initialize the application."""
        self.logger = logging.getLogger(__name__)

        if storage is None:
            engine = create_db_engine(database_url or settings.database.url, echo=settings.database.echo)
            init_db(engine)
            storage = SQLAlchemyStorage(create_session_factory(engine))
            self.logger.info("Database initialized")

        self.storage = storage
        self.scheduler = SchedulerService(clock=clock)
        self.progress_service = ProgressService(self.storage, clock=clock)
        self.catalog_service = CatalogService(self.scheduler, catalog_dir)
        self.session = ReviewSession(self.progress_service, self.scheduler)
        self.groups: List[CatalogGroup] = []
        self.entries: List[RuntimeEntry] = []

    async def start(self) -> List[RuntimeEntry]:
        """Load stored progress and the catalog."""
        self.session.load_progress()
        self.groups = await self.catalog_service.load_groups()
        self.refresh_entries()
        self.logger.info(f"Application started with {len(self.entries)} words")
        return self.entries

    def refresh_entries(self) -> List[RuntimeEntry]:
        """Merge the loaded catalog with the in-memory progress again."""
        self.entries = self.catalog_service.merge_with_progress(self.groups, self.session.progress_list)
        return self.entries

    def start_review(self) -> int:
        """Start a session with today's due words."""
        return self.session.start_due_session(self.refresh_entries())

    async def import_from_transfer(self, channel: TransferChannel) -> ImportResult:
        """Import progress from a transfer channel and rebuild the entries."""
        result = await self.session.import_from_transfer(channel)
        if result.success:
            self.refresh_entries()
        return result

    def reset_progress(self) -> bool:
        """Erase all progress and rebuild the entries from the catalog."""
        if not self.session.reset_progress():
            return False
        self.refresh_entries()
        return True
