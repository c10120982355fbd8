"""
Time helpers.

Timestamps are stored as naive UTC. The business day (shift reopen rule,
"today" statistics) follows the configured local timezone.
"""
from datetime import datetime, date, timezone

import pytz

from app.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_tz():
    return pytz.timezone(settings.TIMEZONE)


def local_date(value: datetime) -> date:
    """Calendar day of a stored (naive UTC) timestamp in the local timezone."""
    return pytz.utc.localize(value).astimezone(local_tz()).date()


def local_today() -> date:
    return local_date(utcnow())


def local_day_start_utc(day: date = None) -> datetime:
    """Naive UTC instant at which the given local calendar day begins."""
    day = day or local_today()
    start = local_tz().localize(datetime.combine(day, datetime.min.time()))
    return start.astimezone(pytz.utc).replace(tzinfo=None)
