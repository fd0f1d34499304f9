"""Tests for snapshot and catalog models."""
import pytest
from pydantic import ValidationError

from envocab.exceptions import SnapshotValidationError
from envocab.models.entries import CatalogWord, RuntimeEntry
from envocab.models.snapshot import (
    MemoryStatus,
    ProgressRecord,
    VoiceType,
    create_default_snapshot,
    parse_snapshot,
)


def test_default_snapshot() -> None:
    """Test the empty snapshot in wire form."""
    assert create_default_snapshot().to_dict() == {
        "version": 1,
        "progress": [],
        "stats": {"streakDays": 0, "lastStudyDate": "", "dailyReviews": {}},
        "settings": {"voiceType": "en-US"},
    }


@pytest.mark.parametrize("data", [None, [], "snapshot", 1])
def test_parse_snapshot_requires_object(data) -> None:
    """Test anything but an object is rejected."""
    with pytest.raises(SnapshotValidationError):
        parse_snapshot(data)


def test_parse_snapshot_ignores_unknown_keys() -> None:
    """Test unknown top-level keys do not make a snapshot invalid."""
    data = create_default_snapshot().to_dict()
    data["comment"] = "hello"

    assert parse_snapshot(data) == create_default_snapshot()


def test_parse_snapshot_defaults_voice() -> None:
    """Test an empty settings object falls back to the default voice."""
    data = create_default_snapshot().to_dict()
    data["settings"] = {}

    assert parse_snapshot(data).settings.voice_type == VoiceType.EN_US


def test_progress_record_accepts_both_stage_names() -> None:
    """Test validation from either key and output under stage."""
    base = {"id": "2026-01-01_a", "nextReviewAt": 0, "memoryStatus": "new"}

    assert ProgressRecord.model_validate({**base, "stage": 2}).stage == 2
    assert ProgressRecord.model_validate({**base, "reviewStage": 3}).stage == 3
    assert "stage" in ProgressRecord.model_validate({**base, "reviewStage": 3}).model_dump(by_alias=True)


def test_progress_record_rejects_negative_stage() -> None:
    """Test stages below zero are invalid."""
    with pytest.raises(ValidationError):
        ProgressRecord(id="x", stage=-1, next_review_at=0, memory_status=MemoryStatus.NEW)


@pytest.mark.parametrize(
    "data",
    [
        {"word": "apple"},
        {"meaning": "a fruit"},
        {"word": "  ", "meaning": "a fruit"},
        {"word": "apple", "meaning": 5},
    ],
)
def test_catalog_word_invalid(data) -> None:
    """Test catalog words need a word and a meaning."""
    with pytest.raises(ValidationError):
        CatalogWord.model_validate(data)


def test_runtime_entry_to_progress() -> None:
    """Test the progress part of an entry."""
    entry = RuntimeEntry(
        id="2026-01-11_apple",
        word="apple",
        meaning="a fruit",
        added_date="2026-01-11",
        stage=2,
        next_review_at=100,
        memory_status=MemoryStatus.LEARNING,
        last_reviewed_at=50,
    )

    assert entry.to_progress() == ProgressRecord(
        id="2026-01-11_apple",
        stage=2,
        next_review_at=100,
        memory_status=MemoryStatus.LEARNING,
        last_reviewed_at=50,
    )
