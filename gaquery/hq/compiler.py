"""Compilation of query trees into Core Reporting API request parameters.

This module wires the value resolver, the structural mappers and the
filter/date/segment compilers together and merges their outputs into one flat
parameter map.

Key Components:
    - QueryCompiler: runs every stage against a query
    - NativeQuery: the compiled parameters as handed to the execution stage

Example:
    >>> compiler = QueryCompiler(metadata, clock=FixedTimeProvider(now))
    >>> compiler.compile({
    ...     "source-table": 1,
    ...     "aggregation": [["metric", "ga:sessions"]],
    ...     "breakout": [["datetime-field", ["field-id", 2], "day"]],
    ...     "filter": [">", ["datetime-field", ["field-id", 2], "day"],
    ...                ["relative-datetime", -30, "day"]],
    ... })
    {'include-empty-rows': False, 'ids': 'ga:123456', 'metrics': 'ga:sessions',
     'dimensions': 'ga:date', 'start-date': '29daysAgo', 'end-date': 'today',
     'max-results': 10000}
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import Field
from suthing import Timer

from gaquery.architecture.base import ConfigBaseModel
from gaquery.architecture.config import CompilerConfig
from gaquery.architecture.query import Query
from gaquery.filter.date_range import DateRangeExtractor
from gaquery.filter.expression import FilterExpressionCompiler
from gaquery.filter.segment import SegmentExtractor
from gaquery.hq.lookup import MetadataProvider, SystemTimeProvider, TimeProvider
from gaquery.hq.mappers import QueryMapper
from gaquery.hq.resolver import ValueResolver

logger = logging.getLogger(__name__)


class NativeQuery(ConfigBaseModel):
    """Compiled request parameters, tagged as produced from a query tree."""

    query: dict[str, Any]
    mbql: bool = Field(default=True, alias="mbql?")


class QueryCompiler:
    """Compiles query trees for one metadata source and configuration.

    The compiler keeps no state between calls; a single instance can compile
    any number of queries, from any number of threads, as long as the metadata
    provider and clock support concurrent reads.

    Attributes:
        metadata: Table/field name lookup
        clock: Source of "now" for relative dates
        config: Compiler configuration
    """

    def __init__(
        self,
        metadata: MetadataProvider,
        clock: TimeProvider | None = None,
        config: CompilerConfig | None = None,
    ):
        self.metadata = metadata
        self.clock = clock if clock is not None else SystemTimeProvider()
        self.config = config if config is not None else CompilerConfig()
        self.resolver = ValueResolver(metadata, self.clock, self.config)
        self.mapper = QueryMapper(metadata, self.resolver, self.config)
        self.filters = FilterExpressionCompiler(self.resolver)
        self.date_range = DateRangeExtractor(self.resolver, self.config)
        self.segments = SegmentExtractor()

    @property
    def stages(self) -> list[Callable[[Query], dict[str, Any]]]:
        return [
            self.mapper.source_table,
            self.mapper.aggregation,
            self.mapper.breakout,
            self.date_range.date_params,
            self.filters.compile_filters,
            self.segments.segment_params,
            self.mapper.order_by,
            self.mapper.limit,
        ]

    def compile(self, query: Query | dict[str, Any]) -> dict[str, Any]:
        """Compile ``query`` into the flat request parameter map.

        Args:
            query: A Query, or its dictionary form (list-form clauses allowed)

        Returns:
            dict: Request parameters keyed by their API names

        Raises:
            CompilationError: If any stage cannot express the query; nothing
                is returned in that case
            pydantic.ValidationError: If ``query`` is not a valid query tree
        """
        if not isinstance(query, Query):
            query = Query.model_validate(query)
        with Timer() as timer:
            params: dict[str, Any] = {
                "include-empty-rows": self.config.include_empty_rows
            }
            for stage in self.stages:
                params.update(stage(query))
        logger.debug(f"Compiled query in {timer.elapsed:.4f} sec: {params}")
        return params

    def mbql_to_native(self, query: Query | dict[str, Any]) -> NativeQuery:
        """Compile ``query`` and wrap the parameters for the execution stage."""
        return NativeQuery(query=self.compile(query))
