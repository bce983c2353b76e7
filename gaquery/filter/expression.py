"""Compilation of predicate trees into the reporting API filter grammar.

Grammar (Core Reporting API v3):
    - ``;`` joins clauses with AND, ``,`` with OR, a leading ``!`` negates
    - comparison operators ``==``, ``!=``, ``>``, ``<``, ``>=``, ``<=``
    - ``=~`` matches a regular expression

Within a clause, ``,``, ``;`` and ``\\`` are escaped with a backslash.
Patterns for ``=~`` are additionally escaped for the regex metacharacters.

Example:
    >>> compiler.compile(parse_clause(
    ...     ["or",
    ...      ["=", ["field-literal", "ga:country"], "Chile"],
    ...      ["starts-with", ["field-literal", "ga:pagePath"], "/blog"]]
    ... ))
    'ga:country==Chile,ga:pagePath=~(?-i)^/blog'
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import assert_never

from gaquery.architecture.query import Query
from gaquery.exceptions import UnsupportedClauseError
from gaquery.filter.onto import (
    Between,
    Comparison,
    Compound,
    Not,
    SegmentRef,
    StringMatch,
)
from gaquery.filter.rewrite import Clause, remove_datetime_and_segment_clauses
from gaquery.hq.resolver import ValueResolver

logger = logging.getLogger(__name__)

REGEX_SPECIAL_CHARS = ".\\+*?[^]$(){}=!<>|:"
FILTER_CLAUSE_SPECIAL_CHARS = ",;\\"

AND_SEPARATOR = ";"
OR_SEPARATOR = ","

COMPARISON_OPERATORS = MappingProxyType(
    {"=": "==", "!=": "!=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}
)


def _escape(s: str, chars: str) -> str:
    return "".join("\\" + c if c in chars else c for c in s)


def escape_for_regex(s: str) -> str:
    return _escape(s, REGEX_SPECIAL_CHARS)


def escape_for_filter_clause(s: str) -> str:
    return _escape(s, FILTER_CLAUSE_SPECIAL_CHARS)


def ga_filter(*parts: str) -> str:
    """Concatenate ``parts`` into a single escaped filter clause."""
    return escape_for_filter_clause("".join(parts))


class FilterExpressionCompiler:
    """Compiles predicate trees into ``filters`` strings."""

    def __init__(self, resolver: ValueResolver):
        self.resolver = resolver

    def compile(self, clause: Clause | None) -> str | None:
        """Compile ``clause``; ``None`` compiles to ``None``.

        Raises:
            UnsupportedClauseError: If a segment that is not built in reaches the compiler
        """
        if clause is None:
            return None
        render = self.resolver.render
        if isinstance(clause, Comparison):
            op = COMPARISON_OPERATORS[clause.op]
            return ga_filter(render(clause.field), op, render(clause.value))
        if isinstance(clause, Between):
            field = render(clause.field)
            return (
                ga_filter(field, ">=", render(clause.min))
                + AND_SEPARATOR
                + ga_filter(field, "<=", render(clause.max))
            )
        if isinstance(clause, StringMatch):
            return self._compile_string_match(clause)
        if isinstance(clause, Compound):
            separator = AND_SEPARATOR if clause.op == "and" else OR_SEPARATOR
            compiled = (self.compile(c) for c in clause.clauses)
            return separator.join(s for s in compiled if s)
        if isinstance(clause, Not):
            inner = self.compile(clause.clause)
            return "!" + inner if inner else None
        if isinstance(clause, SegmentRef):
            raise UnsupportedClauseError(
                f"segment {clause.segment_id!r} is not a built-in segment "
                "and must be expanded before compilation"
            )
        assert_never(clause)

    def _compile_string_match(self, clause: StringMatch) -> str:
        flag = "(?-i)" if clause.case_sensitive else "(?i)"
        pattern = escape_for_regex(self.resolver.render(clause.value))
        if clause.op == "starts-with":
            pattern = "^" + pattern
        elif clause.op == "ends-with":
            pattern = pattern + "$"
        return ga_filter(self.resolver.render(clause.field), "=~", flag, pattern)

    def compile_filters(self, query: Query) -> dict[str, str]:
        """The ``filters`` parameter for ``query``, empty when nothing is left to filter.

        Datetime clauses and built-in segments are removed from the tree first;
        they become the date range and ``segment`` parameters.
        """
        clause = remove_datetime_and_segment_clauses(query.filter)
        filter_str = self.compile(clause)
        if not filter_str or not filter_str.strip():
            return {}
        logger.debug(f"Compiled filters: {filter_str}")
        return {"filters": filter_str}
