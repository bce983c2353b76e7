"""The query tree consumed by the compiler."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from gaquery.architecture.base import NodeBaseModel
from gaquery.architecture.onto import (
    Aggregation,
    FieldRef,
    OrderBy,
    aggregation_from_list,
    field_from_list,
    order_by_from_list,
)
from gaquery.filter.onto import Predicate, clause_from_list


class Query(NodeBaseModel):
    """One analytical query.

    Attributes:
        source_table: Metadata id of the source table (a Google Analytics view)
        aggregation: Metrics to report
        breakout: Grouping fields, datetime fields carry their bucketing unit
        filter: Predicate tree, ``None`` when unfiltered
        order_by: (direction, target) pairs
        limit: Row limit, ``None`` for the API maximum
    """

    source_table: int | str = Field(alias="source-table")
    aggregation: list[Aggregation] = Field(default_factory=list)
    breakout: list[FieldRef] = Field(default_factory=list)
    filter: Predicate | None = None
    order_by: list[OrderBy] = Field(default_factory=list, alias="order-by")
    limit: int | None = None

    @field_validator("aggregation", mode="before")
    @classmethod
    def parse_aggregation(cls, v: Any) -> Any:
        if v is None:
            return []
        return [aggregation_from_list(a) for a in v]

    @field_validator("breakout", mode="before")
    @classmethod
    def parse_breakout(cls, v: Any) -> Any:
        if v is None:
            return []
        return [field_from_list(f) for f in v]

    @field_validator("filter", mode="before")
    @classmethod
    def parse_filter(cls, v: Any) -> Any:
        if v is True:
            return None
        return clause_from_list(v)

    @field_validator("order_by", mode="before")
    @classmethod
    def parse_order_by(cls, v: Any) -> Any:
        if v is None:
            return []
        return [order_by_from_list(o) for o in v]

    def aggregation_at(self, index: int) -> Aggregation:
        """Return the aggregation an ``["aggregation", index]`` reference points to."""
        try:
            return self.aggregation[index]
        except IndexError:
            raise IndexError(
                f"aggregation index {index} out of range "
                f"for {len(self.aggregation)} aggregation(s)"
            ) from None
