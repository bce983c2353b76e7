"""Predicate tree for query filters.

A predicate is a closed discriminated union over the ``op`` tag:

    - Comparison: ``=``, ``!=``, ``<``, ``<=``, ``>``, ``>=`` over (field, value)
    - Between: inclusive range over (field, min, max)
    - StringMatch: ``contains``, ``starts-with``, ``ends-with`` with a
      case-sensitivity flag
    - Compound: ``and`` / ``or`` over child clauses
    - Not: negation of a single clause
    - SegmentRef: a segment identifier

An absent filter is ``None``. Clauses may be given in list form:

Example:
    >>> parse_clause(
    ...     ["and",
    ...      ["=", ["field-literal", "ga:country"], "Chile"],
    ...      ["contains", ["field-literal", "ga:browser"], "fire", {"case-sensitive": False}]]
    ... )
    Compound(op='and', clauses=[Comparison(...), StringMatch(...)])
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, field_validator

from gaquery.architecture.base import NodeBaseModel
from gaquery.architecture.onto import (
    FieldRef,
    ValueNode,
    field_from_list,
    value_from_list,
)

COMPARISON_OPS = ("=", "!=", "<", "<=", ">", ">=")
STRING_MATCH_OPS = ("contains", "starts-with", "ends-with")

_BUILTIN_SEGMENT = re.compile(r"^ga(id)?:")


class _FieldClause(NodeBaseModel):
    """Shared parsing for clauses whose first argument is a field."""

    field: FieldRef

    @field_validator("field", mode="before")
    @classmethod
    def parse_field(cls, v: Any) -> Any:
        return field_from_list(v)


class Comparison(_FieldClause):
    op: Literal["=", "!=", "<", "<=", ">", ">="]
    value: ValueNode

    @field_validator("value", mode="before")
    @classmethod
    def parse_value(cls, v: Any) -> Any:
        return value_from_list(v)


class Between(_FieldClause):
    """Inclusive on both ends."""

    op: Literal["between"] = "between"
    min: ValueNode
    max: ValueNode

    @field_validator("min", "max", mode="before")
    @classmethod
    def parse_bounds(cls, v: Any) -> Any:
        return value_from_list(v)


class StringMatch(_FieldClause):
    op: Literal["contains", "starts-with", "ends-with"]
    value: ValueNode
    case_sensitive: bool = Field(default=True, alias="case-sensitive")

    @field_validator("value", mode="before")
    @classmethod
    def parse_value(cls, v: Any) -> Any:
        return value_from_list(v)


class Compound(NodeBaseModel):
    op: Literal["and", "or"]
    clauses: list[Predicate] = Field(default_factory=list)

    @field_validator("clauses", mode="before")
    @classmethod
    def parse_clauses(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return v
        return [clause_from_list(c) for c in v]


class Not(NodeBaseModel):
    op: Literal["not"] = "not"
    clause: Predicate

    @field_validator("clause", mode="before")
    @classmethod
    def parse_clause(cls, v: Any) -> Any:
        return clause_from_list(v)


class SegmentRef(NodeBaseModel):
    """Segment reference; string ids prefixed ``ga:``/``gaid:`` are built-in segments."""

    op: Literal["segment"] = "segment"
    segment_id: int | str = Field(alias="segment-id")

    @property
    def is_builtin(self) -> bool:
        return isinstance(self.segment_id, str) and bool(
            _BUILTIN_SEGMENT.match(self.segment_id)
        )


Predicate = Annotated[
    Comparison | Between | StringMatch | Compound | Not | SegmentRef,
    Field(discriminator="op"),
]

Compound.model_rebuild()
Not.model_rebuild()

predicate_adapter: TypeAdapter[
    Comparison | Between | StringMatch | Compound | Not | SegmentRef
] = TypeAdapter(Predicate)


def clause_from_list(data: Any) -> Any:
    """Convert a list-form clause into its tagged dictionary.

    Nested clauses, fields and values are converted by the validators of the
    models they end up in.
    """
    if not isinstance(data, (list, tuple)):
        return data
    head, *args = data
    if head in ("and", "or"):
        return {"op": head, "clauses": list(args)}
    if head == "not":
        return {"op": head, "clause": args[0]}
    if head in COMPARISON_OPS:
        return {"op": head, "field": args[0], "value": args[1]}
    if head == "between":
        return {"op": head, "field": args[0], "min": args[1], "max": args[2]}
    if head in STRING_MATCH_OPS:
        clause = {"op": head, "field": args[0], "value": args[1]}
        options = args[2] if len(args) > 2 else {}
        for key in ("case-sensitive", "case_sensitive"):
            if key in options:
                clause["case_sensitive"] = options[key]
        return clause
    if head == "segment":
        return {"op": head, "segment_id": args[0]}
    raise ValueError(f"unknown filter clause {head!r}")


def parse_clause(
    data: Any,
) -> Comparison | Between | StringMatch | Compound | Not | SegmentRef | None:
    """Validate a predicate given as a model, dictionary or list.

    ``None`` and ``True`` (an always-true filter) both mean "no filter".
    """
    if data is None or data is True:
        return None
    return predicate_adapter.validate_python(clause_from_list(data))
