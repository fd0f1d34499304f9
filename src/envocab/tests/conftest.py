"""Test configuration."""
import os
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest
from dotenv import load_dotenv
from faker import Faker
from sqlalchemy.engine import Engine

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from envocab.models.base import create_db_engine, create_session_factory, init_db
from envocab.models.entries import RuntimeEntry
from envocab.models.snapshot import MemoryStatus
from envocab.services.progress_service import ProgressService
from envocab.services.review_session import ReviewSession
from envocab.services.scheduler_service import SchedulerService
from envocab.services.storage import SQLAlchemyStorage
from envocab.tests.helpers import FakeClock, to_ms

fake = Faker()


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at 2026-01-11 10:30 UTC."""
    return FakeClock(to_ms(2026, 1, 11, 10, 30))


@pytest.fixture
def scheduler(clock: FakeClock) -> SchedulerService:
    """Create a scheduler working in UTC."""
    return SchedulerService(timezone="UTC", clock=clock)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create a fresh in-memory database for each test."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def storage(engine: Engine) -> SQLAlchemyStorage:
    """Create snapshot storage on the test database."""
    return SQLAlchemyStorage(create_session_factory(engine))


@pytest.fixture
def progress_service(storage: SQLAlchemyStorage, clock: FakeClock) -> ProgressService:
    """Create a progress service instance."""
    return ProgressService(storage, storage_key="test-progress", clock=clock)


@pytest.fixture
def review_session(progress_service: ProgressService, scheduler: SchedulerService) -> ReviewSession:
    """Create a review session instance."""
    return ReviewSession(progress_service, scheduler)


@pytest.fixture
def make_entry() -> Callable[..., RuntimeEntry]:
    """Factory for runtime entries with generated words."""

    def _make_entry(
        next_review_at: int,
        stage: int = 0,
        memory_status: MemoryStatus = MemoryStatus.NEW,
        added_date: str = "2026-01-11",
        word: Optional[str] = None,
    ) -> RuntimeEntry:
        word = word or fake.unique.word()
        return RuntimeEntry(
            id=f"{added_date}_{word}",
            word=word,
            meaning=fake.sentence(nb_words=3),
            added_date=added_date,
            stage=stage,
            next_review_at=next_review_at,
            memory_status=memory_status,
        )

    return _make_entry
