"""Compiler configuration.

The constants the reporting API imposes (earliest reportable date, maximum
page size, the ``ga:`` namespace) live here and are passed explicitly to every
compiler component.

Example:
    >>> config = CompilerConfig.from_yaml_str("report_timezone: Europe/Madrid")
    >>> config.max_results
    10000
"""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator

from gaquery.architecture.base import ConfigBaseModel


class CompilerConfig(ConfigBaseModel):
    """Settings for one compiler instance.

    Attributes:
        earliest_date: Start date used when a query has no lower date bound
        latest_date: End date used when a query has no upper date bound
        max_results: Row limit used when a query has none
        namespace: Prefix for the table name in the ``ids`` parameter
        report_timezone: IANA zone that relative and absolute dates resolve in
        include_empty_rows: Value of the ``include-empty-rows`` parameter
    """

    earliest_date: str = "2005-01-01"
    latest_date: str = "today"
    max_results: int = Field(default=10000, gt=0)
    namespace: str = "ga:"
    report_timezone: str = "UTC"
    include_empty_rows: bool = False

    @field_validator("earliest_date")
    @classmethod
    def check_earliest_date(cls, v: str) -> str:
        date.fromisoformat(v)
        return v

    @field_validator("report_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown time zone {v!r}") from e
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.report_timezone)
