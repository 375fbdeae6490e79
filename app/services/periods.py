"""Local-day and week window arithmetic for aggregation queries."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.config import settings


def app_timezone() -> ZoneInfo:
    """Timezone that defines midnight for every daily window (validated in Settings)."""
    return ZoneInfo(settings.app_timezone)


def as_utc(dt: datetime) -> datetime:
    """Normalize a stored timestamp to aware UTC (some backends drop tzinfo)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_date(dt: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar date of a timestamp in the application timezone."""
    return as_utc(dt).astimezone(tz or app_timezone()).date()


def day_bounds(day: date, tz: Optional[ZoneInfo] = None) -> Tuple[datetime, datetime]:
    """[local midnight of `day`, local midnight of the next day) as UTC instants."""
    tz = tz or app_timezone()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def week_start(today: date) -> date:
    """Most recent Monday on or before `today`."""
    return today - timedelta(days=today.weekday())


def days_elapsed_in_week(today: date) -> int:
    """Days from the week's Monday through today inclusive, capped at 7."""
    return min(7, (today + timedelta(days=1) - week_start(today)).days)


@dataclass(frozen=True)
class PeriodWindows:
    """Daily and weekly windows for one evaluation instant."""

    today: date
    day_start: datetime
    day_end: datetime
    week_start: datetime
    days_in_week: int

    @classmethod
    def at(cls, now: datetime) -> "PeriodWindows":
        tz = app_timezone()
        today = local_date(now, tz)
        day_start, day_end = day_bounds(today, tz)
        monday_start, _ = day_bounds(week_start(today), tz)
        return cls(
            today=today,
            day_start=day_start,
            day_end=day_end,
            week_start=monday_start,
            days_in_week=days_elapsed_in_week(today),
        )
