import datetime as dt
import re
from typing import List, Tuple, Union
from zoneinfo import ZoneInfo

from dateutil.rrule import rrule, DAILY

from crew_scheduling.exceptions import InvalidTimeFormat

UTC = dt.timezone.utc

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def _as_date(value: Union[str, dt.date]) -> dt.date:
    if isinstance(value, str):
        return dt.date.fromisoformat(value[:10])
    return value


def date_list(start: Union[str, dt.date], end: Union[str, dt.date]) -> List[dt.date]:
    """Inclusive day range; empty when `end` precedes `start`."""
    start, end = _as_date(start), _as_date(end)
    if end < start:
        return []
    return [d.date() for d in rrule(DAILY, dtstart=start, until=end)]


def generate_days(start: Union[str, dt.date], num_days: int) -> List[dt.date]:
    """Planning horizon of `num_days` consecutive days starting at `start`."""
    if num_days <= 0:
        return []
    return [d.date() for d in rrule(DAILY, dtstart=_as_date(start), count=num_days)]


def parse_time_of_day(value, field: str = "time") -> dt.time:
    """Parse 'HH:MM' or 'HH:MM:SS' into a time. Raises InvalidTimeFormat."""
    if isinstance(value, dt.datetime):
        return value.time().replace(tzinfo=None)
    if isinstance(value, dt.time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str):
        raise InvalidTimeFormat(value, field)
    match = _TIME_RE.match(value.strip())
    if not match:
        raise InvalidTimeFormat(value, field)
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise InvalidTimeFormat(value, field)
    return dt.time(hour, minute, second)


def resolve_zone(name: Union[str, dt.tzinfo, None]) -> dt.tzinfo:
    """Planning time zone. None and 'UTC' both mean UTC."""
    if name is None:
        return UTC
    if isinstance(name, dt.tzinfo):
        return name
    if name.upper() in ("UTC", "Z"):
        return UTC
    return ZoneInfo(name)


def localize(value: dt.datetime, tz: dt.tzinfo = UTC) -> dt.datetime:
    """Naive instants are read as wall-clock time in the planning zone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def shift_window(day: dt.date, start: dt.time, end: dt.time,
                 tz: dt.tzinfo = UTC) -> Tuple[dt.datetime, dt.datetime]:
    """Absolute window for a shift template on a given day.

    An end at or before the start belongs to the following day (e.g. 22:00-06:00).
    """
    shift_start = dt.datetime.combine(day, start, tzinfo=tz)
    shift_end = dt.datetime.combine(day, end, tzinfo=tz)
    if shift_end <= shift_start:
        shift_end = dt.datetime.combine(day + dt.timedelta(days=1), end, tzinfo=tz)
    return shift_start, shift_end


def overlaps(a_start: dt.datetime, a_end: dt.datetime,
             b_start: dt.datetime, b_end: dt.datetime) -> bool:
    """Half-open interval overlap."""
    return max(a_start, b_start) < min(a_end, b_end)


def hours_between(start: dt.datetime, end: dt.datetime) -> float:
    return (end - start).total_seconds() / 3600
