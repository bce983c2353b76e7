"""Core enumerations shared across the compiler.

This module provides the string enumerations used by the query tree and the
fixed lookup table from calendar units to Google Analytics dimension names.

Key Components:
    - BaseEnum: Base class for string-based enumerations with flexible membership testing
    - CalendarUnit: Datetime bucketing granularities
    - SortDirection: Ordering directions

Example:
    >>> "day" in CalendarUnit  # True
    >>> unit_to_dimension("week")  # 'ga:yearWeek'
"""

from enum import EnumMeta
from types import MappingProxyType

from strenum import StrEnum


class MetaEnum(EnumMeta):
    """Metaclass for flexible enumeration membership testing.

    Allows checking whether a raw value is a valid member with ``in``,
    even if the value hasn't been instantiated as an enum member.
    """

    def __contains__(self, member: object) -> bool:
        if isinstance(member, self):
            return True
        try:
            self(member)
            return True
        except ValueError:
            return False


class BaseEnum(StrEnum, metaclass=MetaEnum):
    """Base class for string-based enumerations."""

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return self.value


class CalendarUnit(BaseEnum):
    """Bucketing granularities for datetime breakouts and filters.

    ``DEFAULT`` is what an unbucketed datetime field carries; it normalizes to
    ``DAY`` before any date arithmetic.
    """

    DEFAULT = "default"
    MINUTE_OF_HOUR = "minute-of-hour"
    HOUR = "hour"
    HOUR_OF_DAY = "hour-of-day"
    DAY = "day"
    DAY_OF_WEEK = "day-of-week"
    DAY_OF_MONTH = "day-of-month"
    WEEK = "week"
    ISO_WEEK = "iso-week"
    WEEK_OF_YEAR = "week-of-year"
    MONTH = "month"
    MONTH_OF_YEAR = "month-of-year"
    YEAR = "year"


class SortDirection(BaseEnum):
    ASC = "asc"
    DESC = "desc"


UNIT_DIMENSIONS = MappingProxyType(
    {
        CalendarUnit.MINUTE_OF_HOUR: "ga:minute",
        CalendarUnit.HOUR: "ga:dateHour",
        CalendarUnit.HOUR_OF_DAY: "ga:hour",
        CalendarUnit.DAY: "ga:date",
        CalendarUnit.DAY_OF_WEEK: "ga:dayOfWeek",
        CalendarUnit.DAY_OF_MONTH: "ga:day",
        CalendarUnit.WEEK: "ga:yearWeek",
        CalendarUnit.ISO_WEEK: "ga:isoYearIsoWeek",
        CalendarUnit.WEEK_OF_YEAR: "ga:week",
        CalendarUnit.MONTH: "ga:yearMonth",
        CalendarUnit.MONTH_OF_YEAR: "ga:month",
        CalendarUnit.YEAR: "ga:year",
    }
)


def normalize_unit(unit: str) -> CalendarUnit:
    """Map a raw unit to its enum member, turning ``default`` into ``day``."""
    unit = CalendarUnit(unit)
    return CalendarUnit.DAY if unit == CalendarUnit.DEFAULT else unit


def unit_to_dimension(unit: str) -> str:
    """Return the Google Analytics dimension name for a calendar unit.

    Raises:
        ValueError: If ``unit`` is not a calendar unit
    """
    return UNIT_DIMENSIONS[normalize_unit(unit)]
