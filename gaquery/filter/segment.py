"""Extraction of the built-in segment from a predicate tree.

Built-in segments (``gaid::-3`` and friends) are not part of the filter
grammar; the API takes at most one of them in its own ``segment`` parameter.
"""

from __future__ import annotations

from typing import Iterator

from gaquery.architecture.query import Query
from gaquery.exceptions import MultipleSegmentsError
from gaquery.filter.onto import Compound, Not, SegmentRef
from gaquery.filter.rewrite import Clause


def iter_segments(clause: Clause | None) -> Iterator[SegmentRef]:
    """Yield every segment reference in ``clause``, depth first."""
    if isinstance(clause, Compound):
        for c in clause.clauses:
            yield from iter_segments(c)
    elif isinstance(clause, Not):
        yield from iter_segments(clause.clause)
    elif isinstance(clause, SegmentRef):
        yield clause


class SegmentExtractor:
    def extract(self, clause: Clause | None) -> str | None:
        """Id of the built-in segment referenced by ``clause``, if any.

        Raises:
            MultipleSegmentsError: If more than one built-in segment is referenced
        """
        segments = [str(s.segment_id) for s in iter_segments(clause) if s.is_builtin]
        if len(segments) > 1:
            raise MultipleSegmentsError(segments)
        return segments[0] if segments else None

    def segment_params(self, query: Query) -> dict[str, str]:
        segment = self.extract(query.filter)
        return {"segment": segment} if segment else {}
