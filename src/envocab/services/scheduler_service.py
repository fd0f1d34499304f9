"""Service for scheduling word reviews on a fixed interval table."""
import logging
from datetime import UTC, date, datetime, time, timedelta
from enum import IntEnum
from typing import Callable, Dict, Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

from envocab.config import settings
from envocab.models.entries import RuntimeEntry
from envocab.models.snapshot import MemoryStatus, ProgressRecord

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

Schedulable = Union[RuntimeEntry, ProgressRecord]


class UrgencyClass(IntEnum):
    """Review urgency, lower values come first in a session."""
    OVERDUE = 0
    DUE_TODAY = 1
    FUTURE = 2


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


def local_date(timestamp: int, tz: ZoneInfo) -> date:
    """Calendar date of an epoch-ms instant in the given zone."""
    return datetime.fromtimestamp(timestamp // 1000, tz).date()


def midnight(day: date, tz: ZoneInfo) -> int:
    """Epoch ms of 00:00 on the given day."""
    return round(datetime.combine(day, time.min, tzinfo=tz).timestamp()) * 1000


def get_start_of_day(timestamp: int, tz: ZoneInfo) -> int:
    """Start of the day (00:00:00.000) containing the instant."""
    return midnight(local_date(timestamp, tz), tz)


def get_end_of_day(timestamp: int, tz: ZoneInfo) -> int:
    """End of the day (23:59:59.999) containing the instant."""
    return midnight(local_date(timestamp, tz) + timedelta(days=1), tz) - 1


def add_days(timestamp: int, days: int, tz: ZoneInfo) -> int:
    """Start of the day that lies `days` calendar days after the instant's day."""
    return midnight(local_date(timestamp, tz) + timedelta(days=days), tz)


def parse_date_string(date_str: str, tz: ZoneInfo) -> int:
    """Parse YYYY-MM-DD into the epoch ms of that day's start."""
    return midnight(date.fromisoformat(date_str), tz)


def format_date(timestamp: int, tz: ZoneInfo) -> str:
    """Format an instant as YYYY-MM-DD."""
    return local_date(timestamp, tz).isoformat()


class SchedulerService:
    """Service for computing review stages and due dates.

    Every method is a pure function of its arguments and the injected clock,
    the clock only being consulted when no explicit instant is given.
    """

    def __init__(
        self,
        intervals: Optional[Dict[int, int]] = None,
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize the service with an interval table, time zone and clock."""
        self.intervals = dict(intervals if intervals is not None else settings.learning.review_intervals)
        self.max_stage = max(self.intervals)
        self.tz = ZoneInfo(timezone or settings.learning.timezone)
        self.clock = clock or now_ms

    def now(self) -> int:
        """Get the current instant from the clock."""
        return self.clock()

    def today(self, now: Optional[int] = None) -> str:
        """Get today's date string."""
        return format_date(self.now() if now is None else now, self.tz)

    def calculate_next_review(self, stage: int, base_time: Optional[int] = None) -> int:
        """Calculate when a word at the given stage is due next."""
        if base_time is None:
            base_time = self.now()
        return add_days(base_time, self.intervals[stage], self.tz)

    def calculate_initial_review(self, added_date: str) -> int:
        """First review of a new word: the start of the day it was added."""
        return parse_date_string(added_date, self.tz)

    def handle_remember(self, entry: Schedulable, now: Optional[int] = None) -> ProgressRecord:
        """Advance the word one stage, or mark it mastered at the last stage."""
        if now is None:
            now = self.now()

        if entry.stage >= self.max_stage:
            return ProgressRecord(
                id=entry.id,
                stage=self.max_stage,
                next_review_at=entry.next_review_at,
                memory_status=MemoryStatus.MASTERED,
                last_reviewed_at=now,
            )

        next_stage = entry.stage + 1
        return ProgressRecord(
            id=entry.id,
            stage=next_stage,
            next_review_at=self.calculate_next_review(next_stage, now),
            memory_status=MemoryStatus.LEARNING,
            last_reviewed_at=now,
        )

    def handle_forget(self, entry: Schedulable, now: Optional[int] = None) -> ProgressRecord:
        """Send the word back to stage 1 whatever stage it had reached."""
        if now is None:
            now = self.now()

        return ProgressRecord(
            id=entry.id,
            stage=1,
            next_review_at=self.calculate_next_review(1, now),
            memory_status=MemoryStatus.LEARNING,
            last_reviewed_at=now,
        )

    def classify_urgency(self, entry: Schedulable, now: Optional[int] = None) -> UrgencyClass:
        """Classify a word as overdue, due today or due in the future."""
        if now is None:
            now = self.now()

        if entry.next_review_at < get_start_of_day(now, self.tz):
            return UrgencyClass.OVERDUE
        if entry.next_review_at <= get_end_of_day(now, self.tz):
            return UrgencyClass.DUE_TODAY
        return UrgencyClass.FUTURE

    def get_today_review_words(
        self, entries: Iterable[RuntimeEntry], now: Optional[int] = None
    ) -> List[RuntimeEntry]:
        """Get words due by the end of today, leaving out mastered ones."""
        if now is None:
            now = self.now()
        today_end = get_end_of_day(now, self.tz)

        return [
            entry for entry in entries
            if entry.memory_status != MemoryStatus.MASTERED and entry.next_review_at <= today_end
        ]

    def get_today_new_words(
        self, entries: Iterable[RuntimeEntry], now: Optional[int] = None
    ) -> List[RuntimeEntry]:
        """Get words added today that were never reviewed."""
        today = self.today(now)
        return [
            entry for entry in entries
            if entry.added_date == today and entry.memory_status == MemoryStatus.NEW
        ]

    def sort_by_urgency(
        self, entries: Iterable[RuntimeEntry], now: Optional[int] = None
    ) -> List[RuntimeEntry]:
        """Sort overdue words first, then today's, then future ones.

        Within a class, earlier due dates come first; ties keep their input order.
        """
        if now is None:
            now = self.now()

        return sorted(
            entries,
            key=lambda entry: (self.classify_urgency(entry, now), entry.next_review_at),
        )
