"""Calendar helpers for user-local days."""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo


def day_window(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the UTC start (inclusive) and end (exclusive) of a local day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def local_day(moment: datetime, tz: ZoneInfo) -> date:
    """Return the local calendar day of a timestamp."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(tz).date()


def today(tz: ZoneInfo) -> date:
    """Return today's date in a timezone."""
    return datetime.now(tz=tz).date()
