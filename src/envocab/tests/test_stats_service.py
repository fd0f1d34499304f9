"""Tests for study statistics."""
import pytest

from envocab.models.snapshot import StatsData
from envocab.services.stats_service import record_review, update_streak, weekly_data


@pytest.fixture
def stats() -> StatsData:
    """Statistics of a user who has never studied."""
    return StatsData(streak_days=0, last_study_date="", daily_reviews={})


def test_first_study_day(stats: StatsData) -> None:
    """Test the first study day starts a streak of one."""
    update_streak(stats, "2026-01-11")

    assert stats.streak_days == 1
    assert stats.last_study_date == "2026-01-11"


@pytest.mark.parametrize(
    "today,expected",
    [
        ("2026-01-10", 5),
        ("2026-01-11", 6),
        ("2026-01-12", 1),
        ("2026-02-10", 1),
    ],
)
def test_update_streak(today: str, expected: int) -> None:
    """Test same day keeps, next day grows and a gap restarts the streak."""
    stats = StatsData(streak_days=5, last_study_date="2026-01-10", daily_reviews={})

    update_streak(stats, today)

    assert stats.streak_days == expected
    assert stats.last_study_date == today


def test_streak_across_month_boundary() -> None:
    """Test consecutive days across a month end still count."""
    stats = StatsData(streak_days=2, last_study_date="2026-01-31", daily_reviews={})

    update_streak(stats, "2026-02-01")

    assert stats.streak_days == 3


def test_record_review(stats: StatsData) -> None:
    """Test each review bumps today's counter once."""
    assert record_review(stats, "2026-01-11") == 1
    assert record_review(stats, "2026-01-11") == 2
    assert record_review(stats, "2026-01-12") == 1

    assert stats.daily_reviews == {"2026-01-11": 2, "2026-01-12": 1}
    assert stats.streak_days == 2


def test_weekly_data() -> None:
    """Test the week ends today, oldest day first, missing days as zero."""
    week = weekly_data({"2026-01-05": 3, "2026-01-11": 7, "2026-01-04": 9}, "2026-01-11")

    assert [day.date for day in week] == [
        "2026-01-05",
        "2026-01-06",
        "2026-01-07",
        "2026-01-08",
        "2026-01-09",
        "2026-01-10",
        "2026-01-11",
    ]
    assert [day.reviewed_count for day in week] == [3, 0, 0, 0, 0, 0, 7]


def test_weekly_data_custom_length() -> None:
    """Test a shorter window."""
    assert len(weekly_data({}, "2026-03-01", days=3)) == 3
    assert weekly_data({}, "2026-03-01", days=3)[0].date == "2026-02-27"
