"""
The check-in deadline rule.

An event is "within the deadline" when it has not started yet and starts in
less than ``CHECK_IN_DEADLINE_HOURS`` (48 by default). Inside that window
free reservations are checked in on join and paid reservations are checked
in as soon as payment is confirmed.
"""

from datetime import datetime, timedelta
from typing import Optional

from core.config import settings


def deadline_window(hours: Optional[int] = None) -> timedelta:
    return timedelta(hours=settings.check_in_deadline_hours if hours is None else hours)


def check_in_deadline_for(start_time: datetime, hours: Optional[int] = None) -> datetime:
    return start_time - deadline_window(hours)


def is_within_deadline(
    start_time: datetime, now: datetime, hours: Optional[int] = None
) -> bool:
    remaining = start_time - now
    return timedelta(0) < remaining < deadline_window(hours)
