"""Extraction of display values from query-tree nodes."""

from __future__ import annotations

from typing import Any

from gaquery.architecture.config import CompilerConfig
from gaquery.architecture.onto import (
    AbsoluteDatetime,
    DatetimeField,
    FieldId,
    FieldLiteral,
    RelativeDatetime,
    Value,
)
from gaquery.hq.lookup import MetadataProvider, TimeProvider
from gaquery.onto import CalendarUnit, normalize_unit
from gaquery.util import dates


class ValueResolver:
    """Resolves field references and literals to the values the API expects.

    Attributes:
        metadata: Field/table name lookup
        clock: Source of "now" for relative datetimes
        config: Compiler configuration (reporting time zone)
    """

    def __init__(
        self,
        metadata: MetadataProvider,
        clock: TimeProvider,
        config: CompilerConfig,
    ):
        self.metadata = metadata
        self.clock = clock
        self.config = config

    def resolve(self, node: Any) -> Any:
        """Return the display value of ``node``.

        Field ids go through the metadata lookup, whose failure propagates.
        Relative and absolute datetimes come back unchanged so callers can
        interpret them against a comparison operator.
        """
        if isinstance(node, FieldId):
            return self.metadata.field_name(node.field_id)
        if isinstance(node, FieldLiteral):
            return node.name
        if isinstance(node, DatetimeField):
            return self.resolve(node.field)
        if isinstance(node, Value):
            return node.value
        return node

    def render(self, node: Any) -> str:
        """Resolve ``node`` and render it as filter-expression text."""
        value = self.resolve(node)
        if isinstance(value, RelativeDatetime):
            return self.render_relative(value)
        if isinstance(value, AbsoluteDatetime):
            t = dates.as_datetime(value.timestamp, self.config.tz)
            return dates.format_date(dates.truncate(t, value.unit))
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def now(self):
        return self.clock.now(self.config.report_timezone)

    def render_relative(self, node: RelativeDatetime) -> str:
        unit = normalize_unit(node.unit)
        if unit == CalendarUnit.DAY and node.amount <= 0:
            return dates.relative_day_token(node.amount)
        t = dates.add(dates.truncate(self.now(), unit), unit, node.amount)
        return dates.format_date(t)
