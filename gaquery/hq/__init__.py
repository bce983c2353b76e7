"""High-level orchestration modules for gaquery.

This package provides the collaborators the compiler reads from and the
classes that coordinate the compilation stages. ``QueryCompiler`` lives in
``gaquery.hq.compiler``.
"""

from gaquery.hq.lookup import (
    FixedTimeProvider,
    InMemoryMetadata,
    MetadataProvider,
    SystemTimeProvider,
    TimeProvider,
)
from gaquery.hq.resolver import ValueResolver

__all__ = [
    "FixedTimeProvider",
    "InMemoryMetadata",
    "MetadataProvider",
    "SystemTimeProvider",
    "TimeProvider",
    "ValueResolver",
]
