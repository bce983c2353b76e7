"""Extraction of the report date range from a predicate tree.

The reporting API takes the time range as two parameters, ``start-date`` and
``end-date``, separate from the free-form ``filters``. Datetime clauses are
therefore pulled out of the predicate tree and reduced to one inclusive range.

Pipeline:
    1. normalize calendar units (``default`` becomes ``day``)
    2. null out, in place, every leaf that is not a comparison on a datetime
       field; compounds keep their arity
    3. reduce the tree to a single DateRange: a two-child ``and`` merges its
       bounds, any other compound allows at most one non-null child

Relative day offsets become API tokens (``today``, ``yesterday``,
``NdaysAgo``); everything else becomes explicit ``YYYY-MM-DD`` dates.

Example:
    >>> extractor.extract(parse_clause(
    ...     [">", ["datetime-field", ["field-id", 1], "day"], ["relative-datetime", -30, "day"]]
    ... ))
    DateRange(start='29daysAgo', end=None)
"""

from __future__ import annotations

import logging

from pydantic import Field

from gaquery.architecture.base import ConfigBaseModel
from gaquery.architecture.config import CompilerConfig
from gaquery.architecture.onto import AbsoluteDatetime, DatetimeField, RelativeDatetime
from gaquery.architecture.query import Query
from gaquery.exceptions import MultipleDateFiltersError, UnsupportedNegationError
from gaquery.filter.onto import Between, Comparison, Compound, Not
from gaquery.filter.rewrite import (
    Clause,
    is_date_range_clause,
    normalize_datetime_units,
    prune,
)
from gaquery.hq.resolver import ValueResolver
from gaquery.onto import CalendarUnit, normalize_unit
from gaquery.util import dates

logger = logging.getLogger(__name__)


class DateRange(ConfigBaseModel):
    """Inclusive report range; each bound is a ``YYYY-MM-DD`` date or a relative token."""

    start: str | None = Field(default=None, alias="start-date")
    end: str | None = Field(default=None, alias="end-date")

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def merge(self, other: DateRange | None) -> DateRange:
        """Combine bounds, raising if both sides set the same bound differently."""
        if other is None:
            return self
        for name in ("start", "end"):
            mine, theirs = getattr(self, name), getattr(other, name)
            if mine is not None and theirs is not None and mine != theirs:
                raise MultipleDateFiltersError(self, other)
        return DateRange(
            start=self.start if self.start is not None else other.start,
            end=self.end if self.end is not None else other.end,
        )

    def __str__(self) -> str:
        return f"[{self.start or ''} .. {self.end or ''}]"


def day_date_range(op: str, n: int) -> DateRange | None:
    """Range for ``day <op> today + n days`` expressed with relative tokens.

    The API bounds are inclusive, so exclusive comparisons shift by a day:

        [:> ... [:relative-datetime -30 :day]]
        => day > 30 days ago
        => day >= 29 days ago
        => start-date 29daysAgo

        [:< ... [:relative-datetime 0 :day]]
        => day < today
        => day <= yesterday
        => end-date yesterday

    Future bounds have no relative token and yield ``None``.
    """
    if op == "<":
        n -= 1
    elif op == ">":
        n += 1
    if n > 0:
        return None
    token = dates.relative_day_token(n)
    if op in ("<", "<="):
        return DateRange(end=token)
    if op in (">", ">="):
        return DateRange(start=token)
    if op == "=":
        return DateRange(start=token, end=token)
    return None


def _from_bounds(bounds: dates.DayBounds) -> DateRange:
    return DateRange(
        start=dates.format_date(bounds.start) if bounds.start else None,
        end=dates.format_date(bounds.end) if bounds.end else None,
    )


def _only_one(ranges: list[DateRange | None]) -> DateRange | None:
    found = [r for r in ranges if r is not None]
    if len(found) > 1:
        raise MultipleDateFiltersError(*found)
    return found[0] if found else None


class DateRangeExtractor:
    """Reduces the datetime part of a predicate tree to a DateRange."""

    def __init__(self, resolver: ValueResolver, config: CompilerConfig):
        self.resolver = resolver
        self.config = config

    @property
    def full_range(self) -> DateRange:
        return DateRange(start=self.config.earliest_date, end=self.config.latest_date)

    def extract(self, clause: Clause | None) -> DateRange:
        """Date range implied by ``clause``; the full range when it has no datetime clauses.

        Raises:
            MultipleDateFiltersError: If the clauses imply more than one range
            UnsupportedNegationError: If a datetime clause is negated
        """
        result = self._reduce(normalize_datetime_units(clause))
        if result is None or result.is_empty:
            return self.full_range
        return result

    def date_params(self, query: Query) -> dict[str, str]:
        """``start-date`` and ``end-date`` for ``query``, missing bounds filled from the config."""
        result = self.extract(query.filter)
        params = {
            "start-date": result.start or self.config.earliest_date,
            "end-date": result.end or self.config.latest_date,
        }
        logger.debug(f"Date range: {params}")
        return params

    def _reduce(self, clause: Clause | None) -> DateRange | None:
        """Reduce ``clause`` with every non-date leaf standing in as a null result."""
        if clause is None:
            return None
        if isinstance(clause, Compound):
            ranges = [self._reduce(c) for c in clause.clauses]
            if clause.op == "and" and len(ranges) == 2:
                first, second = ranges
                if first is None:
                    return second
                return first.merge(second)
            return _only_one(ranges)
        if isinstance(clause, Not):
            if prune(clause.clause, lambda c: not is_date_range_clause(c)) is not None:
                raise UnsupportedNegationError()
            return None
        if not is_date_range_clause(clause):
            return None
        if isinstance(clause, Comparison):
            return self._comparison(clause.op, clause.field, clause.value)
        if isinstance(clause, Between):
            lower = self._comparison(">=", clause.field, clause.min)
            upper = self._comparison("<=", clause.field, clause.max)
            if lower is None:
                return upper
            return lower.merge(upper)
        return None

    def _comparison(self, op, field, value) -> DateRange | None:
        """Range for one comparison, keeping only the bounds ``op`` implies."""
        unit = field.unit if isinstance(field, DatetimeField) else CalendarUnit.DAY
        result = self._date_range(normalize_unit(unit), op, value)
        if result is None:
            return None
        if op in (">", ">="):
            result = DateRange(start=result.start)
        elif op in ("<", "<="):
            result = DateRange(end=result.end)
        return None if result.is_empty else result

    def _date_range(self, unit: CalendarUnit, op: str, value) -> DateRange | None:
        if isinstance(value, RelativeDatetime):
            value_unit = normalize_unit(value.unit)
            if value_unit == CalendarUnit.DAY:
                result = day_date_range(op, value.amount)
                if result is not None:
                    return result
            t = dates.truncate(self.resolver.now(), value_unit)
            t = dates.add(t, value_unit, value.amount)
            return _from_bounds(dates.comparison_range(t, unit, op))
        if isinstance(value, AbsoluteDatetime):
            t = dates.as_datetime(value.timestamp, self.config.tz)
            return _from_bounds(dates.comparison_range(t, unit, op))
        rendered = self.resolver.render(value)
        return DateRange(start=rendered, end=rendered)
