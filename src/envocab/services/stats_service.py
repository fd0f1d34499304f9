"""Study statistics: streaks, daily counters and status tallies."""
import logging
from collections import Counter
from datetime import date, timedelta
from typing import Dict, Iterable, List

from envocab.models.entries import DailyStudy, RuntimeEntry, StudyStats
from envocab.models.snapshot import MemoryStatus, StatsData

logger = logging.getLogger(__name__)

WEEK_DAYS = 7


def update_streak(stats: StatsData, today: str) -> None:
    """Record a study day and update the streak.

    The streak grows by one only when today directly follows the last study
    day; studying twice on one day changes nothing and any gap restarts it.
    """
    if not stats.last_study_date:
        stats.streak_days = 1
        stats.last_study_date = today
        return

    if stats.last_study_date == today:
        return

    diff_days = (date.fromisoformat(today) - date.fromisoformat(stats.last_study_date)).days
    if diff_days == 1:
        stats.streak_days += 1
    else:
        logger.debug(f"Streak broken after {stats.streak_days} days ({diff_days} day gap)")
        stats.streak_days = 1

    stats.last_study_date = today


def record_review(stats: StatsData, today: str) -> int:
    """Count one review for today and update the streak.

    Returns:
        Number of reviews recorded for today so far.
    """
    stats.daily_reviews[today] = stats.daily_reviews.get(today, 0) + 1
    update_streak(stats, today)
    return stats.daily_reviews[today]


def weekly_data(daily_reviews: Dict[str, int], today: str, days: int = WEEK_DAYS) -> List[DailyStudy]:
    """Per-day review counts for the last `days` days, oldest first, ending today."""
    end = date.fromisoformat(today)
    result = []
    for offset in range(days - 1, -1, -1):
        day = (end - timedelta(days=offset)).isoformat()
        result.append(DailyStudy(date=day, reviewed_count=daily_reviews.get(day, 0)))
    return result


def calculate_stats(entries: Iterable[RuntimeEntry], stats: StatsData, today: str) -> StudyStats:
    """Summarize word statuses together with the streak and weekly activity."""
    statuses = Counter(entry.memory_status for entry in entries)
    return StudyStats(
        total_words=sum(statuses.values()),
        mastered_words=statuses[MemoryStatus.MASTERED],
        learning_words=statuses[MemoryStatus.LEARNING],
        new_words=statuses[MemoryStatus.NEW],
        streak_days=stats.streak_days,
        last_study_date=stats.last_study_date,
        weekly_data=weekly_data(stats.daily_reviews, today),
    )
