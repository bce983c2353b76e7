"""Query-tree node models: field references, values, aggregations and ordering.

Every node kind is a pydantic model tagged by a literal ``kind`` field, and
each family is a closed discriminated union. Nodes can be written either as
tagged dictionaries or in the bracketed list form of the upstream query
language; ``*_from_list`` helpers turn the latter into the former before
validation.

Example:
    >>> TypeAdapter(FieldRef).validate_python(
    ...     field_from_list(["datetime-field", ["field-id", 3], "month"])
    ... )
    DatetimeField(kind='datetime-field', field=FieldId(...), unit='month')
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, field_validator

from gaquery.architecture.base import NodeBaseModel
from gaquery.onto import CalendarUnit, SortDirection

# ---------------------------------------------------------------------------
# Field references
# ---------------------------------------------------------------------------


class FieldId(NodeBaseModel):
    """Reference to a field by metadata id."""

    kind: Literal["field-id"] = "field-id"
    field_id: int = Field(alias="field-id")


class FieldLiteral(NodeBaseModel):
    """Reference to a field by its name."""

    kind: Literal["field-literal"] = "field-literal"
    name: str


class DatetimeField(NodeBaseModel):
    """A field bucketed by a calendar unit."""

    kind: Literal["datetime-field"] = "datetime-field"
    field: BaseField
    unit: CalendarUnit = CalendarUnit.DEFAULT

    @field_validator("field", mode="before")
    @classmethod
    def parse_field(cls, v: Any) -> Any:
        return field_from_list(v)


BaseField = Annotated[FieldId | FieldLiteral, Field(discriminator="kind")]

FieldRef = Annotated[
    FieldId | FieldLiteral | DatetimeField, Field(discriminator="kind")
]

DatetimeField.model_rebuild()


def field_from_list(data: Any) -> Any:
    """Convert a list-form field reference into its tagged dictionary."""
    if not isinstance(data, (list, tuple)):
        return data
    head, *args = data
    if head == "field-id":
        return {"kind": head, "field_id": args[0]}
    if head == "field-literal":
        return {"kind": head, "name": args[0]}
    if head == "datetime-field":
        unit = args[1] if len(args) > 1 else CalendarUnit.DEFAULT
        return {"kind": head, "field": field_from_list(args[0]), "unit": unit}
    raise ValueError(f"unknown field reference {head!r}")


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class Value(NodeBaseModel):
    """A literal constant, optionally carrying type information."""

    kind: Literal["value"] = "value"
    value: Any = None
    type_info: dict[str, Any] | None = Field(default=None, alias="type-info")


class RelativeDatetime(NodeBaseModel):
    """An offset of ``amount`` calendar units from the current instant."""

    kind: Literal["relative-datetime"] = "relative-datetime"
    amount: int
    unit: CalendarUnit = CalendarUnit.DEFAULT


class AbsoluteDatetime(NodeBaseModel):
    kind: Literal["absolute-datetime"] = "absolute-datetime"
    timestamp: datetime | date
    unit: CalendarUnit = CalendarUnit.DEFAULT


ValueNode = Annotated[
    Value | RelativeDatetime | AbsoluteDatetime, Field(discriminator="kind")
]


def value_from_list(data: Any) -> Any:
    """Convert a list-form value (or a bare scalar) into its tagged dictionary."""
    if isinstance(data, NodeBaseModel):
        return data
    if isinstance(data, dict):
        if "kind" in data:
            return data
        return {"kind": "value", "value": data}
    if isinstance(data, (list, tuple)) and data and isinstance(data[0], str):
        head, *args = data
        if head == "value":
            type_info = args[1] if len(args) > 1 else None
            return {"kind": head, "value": args[0], "type_info": type_info}
        if head in ("relative-datetime", "absolute-datetime"):
            unit = args[1] if len(args) > 1 else CalendarUnit.DEFAULT
            key = "amount" if head == "relative-datetime" else "timestamp"
            return {"kind": head, key: args[0], "unit": unit}
    return {"kind": "value", "value": data}


# ---------------------------------------------------------------------------
# Aggregations and ordering
# ---------------------------------------------------------------------------


class Metric(NodeBaseModel):
    """A named metric, e.g. ``ga:sessions``."""

    kind: Literal["metric"] = "metric"
    name: str | int


class AggregationIndex(NodeBaseModel):
    """Back-reference to the aggregation at ``index``."""

    kind: Literal["aggregation"] = "aggregation"
    index: int


Aggregation = Annotated[Metric | AggregationIndex, Field(discriminator="kind")]

OrderTarget = Annotated[
    FieldId | FieldLiteral | DatetimeField | AggregationIndex,
    Field(discriminator="kind"),
]


def aggregation_from_list(data: Any) -> Any:
    if not isinstance(data, (list, tuple)):
        return data
    head, *args = data
    if head == "metric":
        return {"kind": head, "name": args[0]}
    if head == "aggregation":
        return {"kind": head, "index": args[0]}
    raise ValueError(f"unsupported aggregation {head!r}")


class OrderBy(NodeBaseModel):
    direction: SortDirection = SortDirection.ASC
    target: OrderTarget

    @field_validator("target", mode="before")
    @classmethod
    def parse_target(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)) and v and v[0] == "aggregation":
            return aggregation_from_list(v)
        return field_from_list(v)


def order_by_from_list(data: Any) -> Any:
    """Convert ``[direction, target]`` into an order-by dictionary."""
    if isinstance(data, (list, tuple)):
        direction, target = data
        return {"direction": direction, "target": target}
    return data


field_ref_adapter: TypeAdapter[FieldId | FieldLiteral | DatetimeField] = TypeAdapter(
    FieldRef
)
value_adapter: TypeAdapter[Value | RelativeDatetime | AbsoluteDatetime] = TypeAdapter(
    ValueNode
)


def parse_field(data: Any) -> FieldId | FieldLiteral | DatetimeField:
    """Validate a field reference given as a model, dictionary or list."""
    return field_ref_adapter.validate_python(field_from_list(data))


def parse_value(data: Any) -> Value | RelativeDatetime | AbsoluteDatetime:
    """Validate a value given as a model, dictionary, list or bare scalar."""
    return value_adapter.validate_python(value_from_list(data))
