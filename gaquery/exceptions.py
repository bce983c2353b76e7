"""Errors raised while compiling a query.

All of them are compile-time and non-retryable: they abort the whole
compilation and are surfaced to the caller unchanged.
"""


class CompilationError(Exception):
    """Base exception for query compilation errors."""

    pass


class MultipleDateFiltersError(CompilationError):
    """The filter yields more than one independent date range."""

    def __init__(self, *ranges):
        message = "Multiple date filters are not supported"
        if ranges:
            message += " in filters: " + " ".join(str(r) for r in ranges)
        super().__init__(message)
        self.ranges = ranges


class UnsupportedNegationError(CompilationError):
    """A ``not`` is applied to a datetime predicate."""

    def __init__(self):
        super().__init__(":not is not yet implemented for date filters")


class MultipleSegmentsError(CompilationError):
    """More than one built-in segment is referenced."""

    def __init__(self, segments: list[str]):
        super().__init__(
            f"Only one Google Analytics segment allowed at a time, got {segments}"
        )
        self.segments = segments


class UnresolvableReferenceError(CompilationError, LookupError):
    """A table or field identifier has no matching metadata."""

    def __init__(self, kind: str, identifier):
        super().__init__(f"No {kind} with id {identifier!r}")
        self.kind = kind
        self.identifier = identifier


class UnsupportedClauseError(CompilationError):
    """A clause cannot be expressed in the reporting API's request format."""

    pass
