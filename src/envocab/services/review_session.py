"""Review session: the live queue of words being graded."""
import logging
from dataclasses import replace
from enum import Enum
from typing import Iterable, List, Optional

from envocab import monitoring
from envocab.models.entries import (
    DailyStudy,
    ImportResult,
    ReviewProgress,
    RuntimeEntry,
    StudyStats,
)
from envocab.models.snapshot import ProgressRecord, Snapshot, StatsData
from envocab.services import stats_service
from envocab.services.progress_service import ProgressService
from envocab.services.scheduler_service import SchedulerService
from envocab.services.transfer import TransferChannel

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a review session."""
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class ReviewOutcome(Enum):
    """Possible grades of a word."""
    REMEMBER = "remember"
    FORGET = "forget"


def _empty_stats() -> StatsData:
    return StatsData(streak_days=0, last_study_date="", daily_reviews={})


class ReviewSession:
    """Owns the review queue, the cursor into it and the progress being built.

    The queue is sorted once when a session starts. Forgotten words are
    appended to its tail, so the queue can grow while the cursor only moves
    forward; the session is complete once the cursor reaches the current end.
    Every grade is saved before the method returns.
    Stored progress is loaded before the first grade if load_progress has not
    run yet, so a save never replaces records it has not seen.
    """

    def __init__(self, progress_service: ProgressService, scheduler: SchedulerService):
        """Initialize the session with its persistence and scheduling services."""
        self.progress_service = progress_service
        self.scheduler = scheduler
        self.progress_list: List[ProgressRecord] = []
        self.stats: StatsData = _empty_stats()
        self.review_queue: List[RuntimeEntry] = []
        self.current_index = 0
        self.last_save_ok = True
        self.loaded = False

    @property
    def current_word(self) -> Optional[RuntimeEntry]:
        """Word under the cursor, or None when there is none."""
        if self.current_index >= len(self.review_queue):
            return None
        return self.review_queue[self.current_index]

    @property
    def review_progress(self) -> ReviewProgress:
        return ReviewProgress(
            current=self.current_index + 1,
            total=len(self.review_queue),
            remaining=len(self.review_queue) - self.current_index,
        )

    @property
    def has_more_words(self) -> bool:
        return self.current_index < len(self.review_queue)

    @property
    def is_review_complete(self) -> bool:
        return len(self.review_queue) > 0 and self.current_index >= len(self.review_queue)

    @property
    def state(self) -> SessionState:
        if not self.review_queue:
            return SessionState.EMPTY
        if self.has_more_words:
            return SessionState.IN_PROGRESS
        return SessionState.COMPLETE

    @property
    def streak_days(self) -> int:
        return self.stats.streak_days

    @property
    def last_study_date(self) -> str:
        return self.stats.last_study_date

    @property
    def today_reviewed_count(self) -> int:
        return self.stats.daily_reviews.get(self.scheduler.today(), 0)

    @property
    def weekly_data(self) -> List[DailyStudy]:
        return stats_service.weekly_data(self.stats.daily_reviews, self.scheduler.today())

    def load_progress(self) -> bool:
        """Load stored progress, falling back to empty defaults.

        Returns:
            Whether a valid snapshot was found.
        """
        self.loaded = True
        snapshot = self.progress_service.load()
        if snapshot:
            self.progress_list = list(snapshot.progress)
            self.stats = snapshot.stats
            logger.info(f"Loaded progress of {len(self.progress_list)} words")
            return True

        self.progress_list = []
        self.stats = _empty_stats()
        return False

    def save_progress(self) -> bool:
        """Save progress and stats, keeping the stored settings."""
        snapshot = Snapshot(
            version=self.progress_service.version,
            progress=self.progress_list,
            stats=self.stats,
            settings=self.progress_service.get_settings(),
        )
        self.last_save_ok = self.progress_service.save(snapshot)
        if not self.last_save_ok:
            logger.warning("Progress was not saved, continuing in memory")
        return self.last_save_ok

    def start_session(self, entries: Iterable[RuntimeEntry]) -> None:
        """Start a new session, dropping any previous queue."""
        self.review_queue = self.scheduler.sort_by_urgency(entries)
        self.current_index = 0
        monitoring.review_sessions.inc()
        monitoring.queue_remaining.set(len(self.review_queue))
        logger.info(f"Review session started with {len(self.review_queue)} words")

    def start_due_session(self, entries: Iterable[RuntimeEntry]) -> int:
        """Start a session with the words due today.

        Returns:
            Number of words in the new queue.
        """
        self.start_session(self.scheduler.get_today_review_words(entries))
        return len(self.review_queue)

    def handle_remember(self) -> Optional[ProgressRecord]:
        """Grade the current word as remembered and move on."""
        return self._grade(ReviewOutcome.REMEMBER)

    def handle_forget(self) -> Optional[ProgressRecord]:
        """Grade the current word as forgotten, queue it again and move on."""
        return self._grade(ReviewOutcome.FORGET)

    def _grade(self, outcome: ReviewOutcome) -> Optional[ProgressRecord]:
        word = self.current_word
        if word is None:
            return None

        if not self.loaded:
            self.load_progress()

        now = self.scheduler.now()
        if outcome == ReviewOutcome.REMEMBER:
            record = self.scheduler.handle_remember(word, now)
        else:
            record = self.scheduler.handle_forget(word, now)

        self.update_progress_list(record)
        stats_service.record_review(self.stats, self.scheduler.today(now))
        self.save_progress()

        if outcome == ReviewOutcome.FORGET:
            self.review_queue.append(
                replace(
                    word,
                    stage=record.stage,
                    next_review_at=record.next_review_at,
                    memory_status=record.memory_status,
                    last_reviewed_at=record.last_reviewed_at,
                )
            )
            monitoring.requeued_words.inc()

        self.current_index += 1
        monitoring.reviews_graded.labels(outcome=outcome.value).inc()
        monitoring.queue_remaining.set(self.review_progress.remaining)
        logger.debug(f"Graded {word.id} as {outcome.value}: stage {word.stage} -> {record.stage}")
        return record

    def update_progress_list(self, record: ProgressRecord) -> None:
        """Replace the stored record of the word, or add it."""
        for index, existing in enumerate(self.progress_list):
            if existing.id == record.id:
                self.progress_list[index] = record
                return
        self.progress_list.append(record)

    def skip_current_word(self) -> None:
        """Move past the current word without grading it."""
        if self.has_more_words:
            self.current_index += 1
            monitoring.queue_remaining.set(self.review_progress.remaining)

    def get_word_progress(self, word_id: str) -> Optional[ProgressRecord]:
        """Get the in-memory progress of one word."""
        return next((record for record in self.progress_list if record.id == word_id), None)

    def calculate_stats(self, entries: Iterable[RuntimeEntry]) -> StudyStats:
        """Compute statistics over the given words."""
        return stats_service.calculate_stats(entries, self.stats, self.scheduler.today())

    def reset_progress(self) -> bool:
        """Erase all progress, stored and in memory."""
        if not self.progress_service.reset():
            return False

        self.progress_list = []
        self.stats = _empty_stats()
        self.review_queue = []
        self.current_index = 0
        self.loaded = True
        monitoring.queue_remaining.set(0)
        return True

    def import_data(self, text: str) -> ImportResult:
        """Import a snapshot and reload progress from it."""
        result = self.progress_service.import_data(text)
        if result.success:
            self.load_progress()
        return result

    async def import_from_transfer(self, channel: TransferChannel) -> ImportResult:
        """Import a snapshot from a transfer channel and reload progress from it."""
        result = await self.progress_service.import_from_transfer(channel)
        if result.success:
            self.load_progress()
        return result
