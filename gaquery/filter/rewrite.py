"""Structural rewriting passes over predicate trees.

Each pass returns a new tree. ``prune`` removes clauses by dropping them from
their parent, and a compound or negation left without children is removed in
turn, so callers never see empty ``and``/``or``/``not`` nodes.

The filter-expression compiler and the date-range extractor work on
complementary halves of the same tree:

    - remove_datetime_and_segment_clauses: what goes into ``filters``
    - is_date_range_clause: the leaves that go into ``start-date``/``end-date``;
      the extractor nulls every other leaf in place, keeping compound arity
"""

from __future__ import annotations

import logging
from typing import Callable

from gaquery.architecture.onto import AbsoluteDatetime, DatetimeField, RelativeDatetime
from gaquery.filter.onto import (
    Between,
    Comparison,
    Compound,
    Not,
    SegmentRef,
    StringMatch,
)
from gaquery.onto import normalize_unit

logger = logging.getLogger(__name__)

Clause = Comparison | Between | StringMatch | Compound | Not | SegmentRef

DATE_RANGE_OPS = frozenset({"=", "<", "<=", ">", ">=", "between"})


def prune(clause: Clause | None, drop: Callable[[Clause], bool]) -> Clause | None:
    """Remove every leaf for which ``drop`` is true, collapsing emptied parents."""
    if clause is None:
        return None
    if isinstance(clause, Compound):
        kept = [c for c in (prune(c, drop) for c in clause.clauses) if c is not None]
        if not kept:
            return None
        return clause.model_copy(update={"clauses": kept})
    if isinstance(clause, Not):
        inner = prune(clause.clause, drop)
        if inner is None:
            return None
        return clause.model_copy(update={"clause": inner})
    return None if drop(clause) else clause


def on_datetime_field(clause: Clause) -> bool:
    return isinstance(clause, (Comparison, Between, StringMatch)) and isinstance(
        clause.field, DatetimeField
    )


def is_builtin_segment(clause: Clause) -> bool:
    return isinstance(clause, SegmentRef) and clause.is_builtin


def remove_datetime_and_segment_clauses(clause: Clause | None) -> Clause | None:
    return prune(clause, lambda c: on_datetime_field(c) or is_builtin_segment(c))


def is_date_range_clause(clause: Clause) -> bool:
    """True for comparison-family clauses over a datetime field.

    ``!=`` and string matches on datetime fields cannot become a date range;
    they are reported and treated like any other non-date clause.
    """
    if not on_datetime_field(clause):
        return False
    if clause.op not in DATE_RANGE_OPS:
        logger.warning(
            f"Dropping {clause.op} on datetime field {clause.field}: "
            "not expressible as a date range"
        )
        return False
    return True


def _normalize_node(node):
    if isinstance(node, (DatetimeField, RelativeDatetime, AbsoluteDatetime)):
        return node.model_copy(update={"unit": normalize_unit(node.unit)})
    return node


def normalize_datetime_units(clause: Clause | None) -> Clause | None:
    """Replace the ``default`` unit with ``day`` on datetime fields and values."""
    if clause is None:
        return None
    if isinstance(clause, Compound):
        return clause.model_copy(
            update={"clauses": [normalize_datetime_units(c) for c in clause.clauses]}
        )
    if isinstance(clause, Not):
        return clause.model_copy(
            update={"clause": normalize_datetime_units(clause.clause)}
        )
    if isinstance(clause, Between):
        return clause.model_copy(
            update={
                "field": _normalize_node(clause.field),
                "min": _normalize_node(clause.min),
                "max": _normalize_node(clause.max),
            }
        )
    if isinstance(clause, (Comparison, StringMatch)):
        return clause.model_copy(
            update={
                "field": _normalize_node(clause.field),
                "value": _normalize_node(clause.value),
            }
        )
    return clause
