"""External collaborators consumed by the compiler.

The compiler never owns metadata or the clock; it reads them through two
narrow interfaces:

    - MetadataProvider: table id -> table name, field id -> field name
    - TimeProvider: the current instant in a given time zone

Both are treated as synchronous, read-only lookups. ``InMemoryMetadata`` and
``FixedTimeProvider`` are simple implementations for embedding and tests.
"""

from __future__ import annotations

import abc
from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import Field

from gaquery.architecture.base import ConfigBaseModel
from gaquery.exceptions import UnresolvableReferenceError


class MetadataProvider(abc.ABC):
    """Resolves table and field identifiers to names."""

    @abc.abstractmethod
    def table_name(self, table_id: int | str) -> str:
        """Return the name of a table.

        Raises:
            UnresolvableReferenceError: If no table has this id
        """

    @abc.abstractmethod
    def field_name(self, field_id: int) -> str:
        """Return the name of a field.

        Raises:
            UnresolvableReferenceError: If no field has this id
        """


class InMemoryMetadata(ConfigBaseModel, MetadataProvider):
    """Metadata held in two dictionaries.

    Example:
        >>> metadata = InMemoryMetadata(table_names={1: "123456"}, field_names={7: "ga:country"})
        >>> metadata.field_name(7)
        'ga:country'
    """

    table_names: dict[int | str, str] = Field(default_factory=dict)
    field_names: dict[int, str] = Field(default_factory=dict)

    def table_name(self, table_id: int | str) -> str:
        try:
            return self.table_names[table_id]
        except KeyError:
            raise UnresolvableReferenceError("table", table_id) from None

    def field_name(self, field_id: int) -> str:
        try:
            return self.field_names[field_id]
        except KeyError:
            raise UnresolvableReferenceError("field", field_id) from None


class TimeProvider(abc.ABC):
    """Source of the current instant."""

    @abc.abstractmethod
    def now(self, timezone: str) -> datetime:
        """Return the current instant as an aware datetime in ``timezone``."""


class SystemTimeProvider(TimeProvider):
    def now(self, timezone: str) -> datetime:
        return datetime.now(ZoneInfo(timezone))


class FixedTimeProvider(TimeProvider):
    """Always returns the same instant, converted to the requested zone.

    Naive instants are taken to be UTC.
    """

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=ZoneInfo("UTC"))
        self.instant = instant

    def now(self, timezone: str) -> datetime:
        return self.instant.astimezone(ZoneInfo(timezone))
