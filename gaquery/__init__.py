"""gaquery: compile abstract query trees into Google Analytics request parameters.

gaquery translates a vendor-neutral query tree (source, aggregations,
breakouts, filters, ordering, limit) into the flat parameter set of the Google
Analytics Core Reporting API. It does not send requests or parse responses.

Key Features:
    - Filter-expression compilation with the API's escaping rules
    - Date-range extraction from datetime predicates
    - Built-in segment extraction
    - Dimension, metric, sort and limit mapping

Example:
    >>> from gaquery import InMemoryMetadata, QueryCompiler
    >>> metadata = InMemoryMetadata(table_names={1: "123456"}, field_names={2: "ga:date"})
    >>> QueryCompiler(metadata).compile({"source-table": 1, "aggregation": [["metric", "ga:users"]]})
"""

# --- Models ----------------------------------------------------------------
from .architecture import (
    CompilerConfig,
    ConfigBaseModel,
    DatetimeField,
    FieldId,
    FieldLiteral,
    Query,
    RelativeDatetime,
    AbsoluteDatetime,
    Value,
)

# --- Filters ---------------------------------------------------------------
from .filter import Predicate, parse_clause
from .filter.date_range import DateRange, DateRangeExtractor
from .filter.expression import FilterExpressionCompiler
from .filter.segment import SegmentExtractor

# --- Orchestration ---------------------------------------------------------
from .hq import (
    FixedTimeProvider,
    InMemoryMetadata,
    MetadataProvider,
    SystemTimeProvider,
    TimeProvider,
    ValueResolver,
)
from .hq.compiler import NativeQuery, QueryCompiler

# --- Enums & errors --------------------------------------------------------
from .exceptions import (
    CompilationError,
    MultipleDateFiltersError,
    MultipleSegmentsError,
    UnresolvableReferenceError,
    UnsupportedClauseError,
    UnsupportedNegationError,
)
from .onto import CalendarUnit, SortDirection

__all__ = [
    # Orchestration
    "QueryCompiler",
    "NativeQuery",
    "MetadataProvider",
    "InMemoryMetadata",
    "TimeProvider",
    "SystemTimeProvider",
    "FixedTimeProvider",
    "ValueResolver",
    # Models
    "CompilerConfig",
    "ConfigBaseModel",
    "Query",
    "FieldId",
    "FieldLiteral",
    "DatetimeField",
    "Value",
    "RelativeDatetime",
    "AbsoluteDatetime",
    # Filters
    "Predicate",
    "parse_clause",
    "DateRange",
    "DateRangeExtractor",
    "FilterExpressionCompiler",
    "SegmentExtractor",
    # Enums & errors
    "CalendarUnit",
    "SortDirection",
    "CompilationError",
    "MultipleDateFiltersError",
    "MultipleSegmentsError",
    "UnresolvableReferenceError",
    "UnsupportedClauseError",
    "UnsupportedNegationError",
]
