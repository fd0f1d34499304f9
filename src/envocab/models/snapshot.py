"""Schema of the persisted progress snapshot."""
import re
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from envocab.config import MAX_STAGE, SNAPSHOT_VERSION
from envocab.exceptions import SnapshotValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class MemoryStatus(str, Enum):
    """How well a word is known."""
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


class VoiceType(str, Enum):
    """Pronunciation accent."""
    EN_US = "en-US"
    EN_GB = "en-GB"


def check_calendar_date(value: str) -> None:
    """Raise ValueError unless the value is a real YYYY-MM-DD date."""
    if not DATE_PATTERN.match(value):
        raise ValueError(f"{value!r} is not in YYYY-MM-DD form")
    date.fromisoformat(value)


class SnapshotModel(BaseModel):
    """Base for snapshot parts, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProgressRecord(SnapshotModel):
    """Review progress of a single word."""

    id: StrictStr
    # Older exports wrote the stage as "reviewStage"
    stage: int = Field(
        ge=0,
        le=MAX_STAGE,
        strict=True,
        validation_alias=AliasChoices("stage", "reviewStage"),
    )
    next_review_at: StrictInt
    memory_status: MemoryStatus
    last_reviewed_at: Optional[StrictInt] = None


class StatsData(SnapshotModel):
    """Streak and per-day review counters."""

    streak_days: StrictInt = Field(ge=0)
    last_study_date: StrictStr
    daily_reviews: Dict[StrictStr, StrictInt]

    @field_validator("last_study_date")
    @classmethod
    def study_date_is_calendar_date(cls, v: str) -> str:
        if v:
            check_calendar_date(v)
        return v

    @field_validator("daily_reviews")
    @classmethod
    def counters_are_dated(cls, v: Dict[str, int]) -> Dict[str, int]:
        for day, count in v.items():
            check_calendar_date(day)
            if count < 0:
                raise ValueError(f"review count of {day} must not be negative")
        return v


class AppSettings(SnapshotModel):
    """User preferences stored next to the progress."""

    voice_type: VoiceType = VoiceType.EN_US


class Snapshot(SnapshotModel):
    """Everything that is persisted, versioned as a unit."""

    version: StrictInt
    progress: List[ProgressRecord]
    stats: StatsData
    settings: AppSettings

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-compatible wire form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def create_default_snapshot(version: int = SNAPSHOT_VERSION) -> Snapshot:
    """Create an empty snapshot."""
    return Snapshot(
        version=version,
        progress=[],
        stats=StatsData(streak_days=0, last_study_date="", daily_reviews={}),
        settings=AppSettings(),
    )


def parse_snapshot(data: Any) -> Snapshot:
    """Validate raw decoded JSON as a snapshot.

    Raises:
        SnapshotValidationError: if any part of the structure is missing or has the wrong type.
    """
    if not isinstance(data, dict):
        raise SnapshotValidationError(f"Snapshot must be an object, got {type(data).__name__}")
    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotValidationError(str(e)) from e
