"""Predicate trees and their compilation.

The compilers live in submodules (``expression``, ``date_range``,
``segment``); this package exports the predicate model only.
"""

from .onto import (
    Between,
    Comparison,
    Compound,
    Not,
    Predicate,
    SegmentRef,
    StringMatch,
    parse_clause,
)

__all__ = [
    "Between",
    "Comparison",
    "Compound",
    "Not",
    "Predicate",
    "SegmentRef",
    "StringMatch",
    "parse_clause",
]
