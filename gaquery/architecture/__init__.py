"""Query-tree and configuration models.

Key Components:
    - ConfigBaseModel: pydantic base with YAML loading
    - CompilerConfig: constants and defaults for one compiler
    - Query: the query tree consumed by the compiler
    - FieldId, FieldLiteral, DatetimeField: field references
    - Value, RelativeDatetime, AbsoluteDatetime: values
"""

from .base import ConfigBaseModel, NodeBaseModel
from .onto import (
    AbsoluteDatetime,
    AggregationIndex,
    DatetimeField,
    FieldId,
    FieldLiteral,
    Metric,
    OrderBy,
    RelativeDatetime,
    Value,
    parse_field,
    parse_value,
)
from .config import CompilerConfig
from .query import Query

__all__ = [
    "AbsoluteDatetime",
    "AggregationIndex",
    "CompilerConfig",
    "ConfigBaseModel",
    "DatetimeField",
    "FieldId",
    "FieldLiteral",
    "Metric",
    "NodeBaseModel",
    "OrderBy",
    "Query",
    "RelativeDatetime",
    "Value",
    "parse_field",
    "parse_value",
]
