"""Calendar arithmetic for date-range resolution.

All ranges are computed at day resolution with inclusive ends, which is how
the reporting API interprets ``start-date``/``end-date``.

Key Components:
    - truncate: floor an instant to the start of its calendar-unit bucket
    - add: move an instant by a number of calendar units
    - bucket_range: first and last day of the bucket containing an instant
    - comparison_range: the days satisfying ``<instant> <op> x``
    - relative_day_token: ``today``/``yesterday``/``NdaysAgo`` for a day offset
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from types import MappingProxyType
from typing import NamedTuple

from dateutil.relativedelta import relativedelta

from gaquery.onto import CalendarUnit, normalize_unit

DATE_FORMAT = "%Y-%m-%d"

# smallest step between two datetimes
_INSTANT = timedelta(microseconds=1)

# calendar unit -> truncation granularity
_GRANULARITY = MappingProxyType(
    {
        CalendarUnit.MINUTE_OF_HOUR: "minute",
        CalendarUnit.HOUR: "hour",
        CalendarUnit.HOUR_OF_DAY: "hour",
        CalendarUnit.DAY: "day",
        CalendarUnit.DAY_OF_WEEK: "day",
        CalendarUnit.DAY_OF_MONTH: "day",
        CalendarUnit.WEEK: "week",
        CalendarUnit.WEEK_OF_YEAR: "week",
        CalendarUnit.ISO_WEEK: "iso-week",
        CalendarUnit.MONTH: "month",
        CalendarUnit.MONTH_OF_YEAR: "month",
        CalendarUnit.YEAR: "year",
    }
)

_STEP = MappingProxyType(
    {
        "minute": relativedelta(minutes=1),
        "hour": relativedelta(hours=1),
        "day": relativedelta(days=1),
        "week": relativedelta(weeks=1),
        "iso-week": relativedelta(weeks=1),
        "month": relativedelta(months=1),
        "year": relativedelta(years=1),
    }
)


class DayBounds(NamedTuple):
    start: date | None = None
    end: date | None = None


def granularity(unit: str) -> str:
    return _GRANULARITY[normalize_unit(unit)]


def as_datetime(t: datetime | date, tz: tzinfo) -> datetime:
    """Interpret ``t`` in ``tz``: naive values are localized, aware ones converted."""
    if not isinstance(t, datetime):
        t = datetime(t.year, t.month, t.day)
    if t.tzinfo is None:
        return t.replace(tzinfo=tz)
    return t.astimezone(tz)


def truncate(t: datetime, unit: str) -> datetime:
    """Floor ``t`` to the start of its ``unit`` bucket.

    Weeks start on Sunday, ISO weeks on Monday.
    """
    g = granularity(unit)
    if g == "minute":
        return t.replace(second=0, microsecond=0)
    if g == "hour":
        return t.replace(minute=0, second=0, microsecond=0)
    t = t.replace(hour=0, minute=0, second=0, microsecond=0)
    if g == "week":
        # Monday is 0, Sunday is 6
        return t - timedelta(days=(t.weekday() + 1) % 7)
    if g == "iso-week":
        return t - timedelta(days=t.weekday())
    if g == "month":
        return t.replace(day=1)
    if g == "year":
        return t.replace(month=1, day=1)
    return t


def add(t: datetime, unit: str, amount: int) -> datetime:
    """Move ``t`` by ``amount`` units, clamping month ends (Jan 31 + 1 month = Feb 28/29)."""
    return t + _STEP[granularity(unit)] * amount


def _bucket_instants(t: datetime, unit: str) -> tuple[datetime, datetime]:
    """Start of the bucket containing ``t`` and its last instant."""
    start = truncate(t, unit)
    return start, add(start, unit, 1) - _INSTANT


def bucket_range(t: datetime, unit: str) -> DayBounds:
    """First and last day (inclusive) touched by the bucket containing ``t``."""
    first, last = _bucket_instants(t, unit)
    return DayBounds(first.date(), last.date())


def comparison_range(t: datetime, unit: str, op: str) -> DayBounds:
    """Days holding any instant that satisfies ``x <op> bucket(t)``, inclusive.

    Bounds come from the bucket's instants rather than its days, so a partly
    matching day is kept: ``> 07:00`` at hour resolution starts today.

    Example:
        >>> comparison_range(datetime(2020, 3, 15), "month", "<")
        DayBounds(start=None, end=datetime.date(2020, 2, 29))
    """
    first, last = _bucket_instants(t, unit)
    if op == "<":
        return DayBounds(end=(first - _INSTANT).date())
    if op == "<=":
        return DayBounds(end=last.date())
    if op == ">":
        return DayBounds(start=(last + _INSTANT).date())
    if op == ">=":
        return DayBounds(start=first.date())
    if op == "=":
        return DayBounds(first.date(), last.date())
    raise ValueError(f"no date range for comparison {op!r}")


def format_date(d: date | datetime) -> str:
    return d.strftime(DATE_FORMAT)


def relative_day_token(n: int) -> str:
    """Reporting API token for ``n`` days from today; ``n`` must not be positive."""
    if n > 0:
        raise ValueError(f"future day offset {n} has no relative token")
    if n == 0:
        return "today"
    if n == -1:
        return "yesterday"
    return f"{-n}daysAgo"
