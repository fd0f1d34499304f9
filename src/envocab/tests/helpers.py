"""Shared helpers for tests."""
from datetime import UTC, datetime

DAY_MS = 24 * 60 * 60 * 1000


def to_ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    """Epoch milliseconds of a UTC wall-clock time."""
    return int(datetime(year, month, day, hour, minute, tzinfo=UTC).timestamp() * 1000)


class FakeClock:
    """Clock returning a settable instant."""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now += days * DAY_MS + hours * 60 * 60 * 1000
