"""Models for catalog words and runtime review data."""
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictStr, field_validator

from envocab.models.snapshot import MemoryStatus, ProgressRecord


class CatalogWord(BaseModel):
    """A word as it appears in a catalog file."""

    model_config = ConfigDict(frozen=True)

    word: StrictStr
    meaning: StrictStr
    example: Optional[StrictStr] = None

    @field_validator("word", "meaning")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


@dataclass
class CatalogGroup:
    """Words introduced on the same day."""
    date: str  # YYYY-MM-DD
    words: List[CatalogWord] = field(default_factory=list)


@dataclass
class RuntimeEntry:
    """Catalog word merged with its review progress."""
    id: str
    word: str
    meaning: str
    added_date: str
    stage: int
    next_review_at: int
    memory_status: MemoryStatus
    example: Optional[str] = None
    last_reviewed_at: Optional[int] = None

    def to_progress(self) -> ProgressRecord:
        """Extract the progress part of the entry."""
        return ProgressRecord(
            id=self.id,
            stage=self.stage,
            next_review_at=self.next_review_at,
            memory_status=self.memory_status,
            last_reviewed_at=self.last_reviewed_at,
        )


@dataclass
class DailyStudy:
    """Number of reviews on one day."""
    date: str
    reviewed_count: int


@dataclass
class StudyStats:
    """Aggregate learning statistics."""
    total_words: int
    mastered_words: int
    learning_words: int
    new_words: int
    streak_days: int
    last_study_date: str
    weekly_data: List[DailyStudy]


@dataclass
class ReviewProgress:
    """Position inside the current review queue."""
    current: int
    total: int
    remaining: int


@dataclass
class ImportResult:
    """Outcome of an import or transfer operation."""
    success: bool
    message: str
