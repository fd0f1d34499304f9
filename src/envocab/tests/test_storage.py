"""Tests for snapshot storage and transfer channels."""
from pathlib import Path

import pytest
from faker import Faker

from envocab.exceptions import StorageQuotaExceeded, TransferError
from envocab.models.base import create_db_engine, create_session_factory
from envocab.services.storage import InMemoryStorage, SQLAlchemyStorage
from envocab.services.transfer import FileTransfer

fake = Faker()


def test_set_get_remove(storage: SQLAlchemyStorage) -> None:
    """Test values can be stored, replaced and removed."""
    key = fake.slug()
    assert storage.get_item(key) is None

    storage.set_item(key, "first")
    storage.set_item(key, "second")
    assert storage.get_item(key) == "second"

    storage.remove_item(key)
    assert storage.get_item(key) is None
    storage.remove_item(key)


def test_keys_are_independent(storage: SQLAlchemyStorage) -> None:
    """Test values under different keys do not interfere."""
    storage.set_item("one", "1")
    storage.set_item("two", "2")

    assert storage.get_item("one") == "1"
    assert storage.get_item("two") == "2"


def test_is_available(storage: SQLAlchemyStorage) -> None:
    """Test the availability probe leaves nothing behind."""
    assert storage.is_available() is True
    assert storage.get_item("__storage_test__") is None


def test_not_available_without_table() -> None:
    """Test storage on an uninitialized database reports unavailable."""
    engine = create_db_engine("sqlite://")
    try:
        storage = SQLAlchemyStorage(create_session_factory(engine))
        assert storage.is_available() is False
    finally:
        engine.dispose()


@pytest.mark.parametrize("backend", ["sqlalchemy", "memory"])
def test_quota(engine, backend: str) -> None:
    """Test values over quota are rejected and the old value stays."""
    if backend == "sqlalchemy":
        storage = SQLAlchemyStorage(create_session_factory(engine), quota_bytes=10)
    else:
        storage = InMemoryStorage(quota_bytes=10)
    storage.set_item("key", "small")

    with pytest.raises(StorageQuotaExceeded) as exc_info:
        storage.set_item("key", "x" * 11)

    assert exc_info.value.size == 11
    assert exc_info.value.quota == 10
    assert storage.get_item("key") == "small"


def test_quota_counts_bytes() -> None:
    """Test the quota applies to the encoded size."""
    storage = InMemoryStorage(quota_bytes=4)
    storage.set_item("key", "ab")

    with pytest.raises(StorageQuotaExceeded):
        storage.set_item("key", "ééé")


def test_in_memory_unavailable() -> None:
    """Test in-memory storage can simulate a missing backend."""
    assert InMemoryStorage(available=False).is_available() is False


@pytest.mark.asyncio
async def test_file_transfer(tmp_path: Path) -> None:
    """Test writing and reading back through a file."""
    channel = FileTransfer(tmp_path / "out" / "progress.json")
    text = fake.paragraph()

    await channel.write_text(text)

    assert await channel.read_text() == text
    assert (tmp_path / "out" / "progress.json").exists()


@pytest.mark.asyncio
async def test_file_transfer_missing_file(tmp_path: Path) -> None:
    """Test reading a missing file raises a transfer error."""
    channel = FileTransfer(tmp_path / "missing.json")

    with pytest.raises(TransferError):
        await channel.read_text()
