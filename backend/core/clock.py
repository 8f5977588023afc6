"""
Time source used by reservation rules and token handling.

All datetimes are naive UTC, matching what the database columns store.
Routes receive the clock through the ``get_clock`` dependency so tests can
pin "now" with a ``FixedClock``.
"""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return utcnow()


class FixedClock:
    """Clock frozen at a given moment until advanced."""

    def __init__(self, moment: datetime):
        self.moment = to_naive_utc(moment)

    def now(self) -> datetime:
        return self.moment

    def advance(self, delta: timedelta) -> datetime:
        self.moment = self.moment + delta
        return self.moment


_system_clock = SystemClock()


def get_clock() -> SystemClock:
    return _system_clock
