"""One-to-one mappings from query-tree parts to request parameters.

Each mapper takes the whole query and returns the parameters it owns:

    - source_table: ``ids``
    - aggregation: ``metrics``
    - breakout: ``dimensions``
    - order_by: ``sort``
    - limit: ``max-results``
"""

from __future__ import annotations

import logging
from typing import Any

from gaquery.architecture.config import CompilerConfig
from gaquery.architecture.onto import AggregationIndex, DatetimeField, Metric
from gaquery.architecture.query import Query
from gaquery.exceptions import UnsupportedClauseError
from gaquery.hq.lookup import MetadataProvider
from gaquery.hq.resolver import ValueResolver
from gaquery.onto import SortDirection, unit_to_dimension

logger = logging.getLogger(__name__)


class QueryMapper:
    """Maps source, aggregations, breakouts, ordering and limit of a query."""

    def __init__(
        self,
        metadata: MetadataProvider,
        resolver: ValueResolver,
        config: CompilerConfig,
    ):
        self.metadata = metadata
        self.resolver = resolver
        self.config = config

    def source_table(self, query: Query) -> dict[str, str]:
        table_name = self.metadata.table_name(query.source_table)
        return {"ids": f"{self.config.namespace}{table_name}"}

    def aggregation(self, query: Query) -> dict[str, str]:
        # metric ids and back-references are expanded upstream; only names reach the API
        if not query.aggregation:
            return {}
        names = [
            a.name
            for a in query.aggregation
            if isinstance(a, Metric) and isinstance(a.name, str)
        ]
        return {"metrics": ",".join(names)}

    def dimension(self, field) -> str:
        """Dimension name of a breakout field: its unit for datetime fields, else its name."""
        if isinstance(field, DatetimeField):
            return unit_to_dimension(field.unit)
        return str(self.resolver.resolve(field))

    def breakout(self, query: Query) -> dict[str, str]:
        return {"dimensions": ",".join(self.dimension(f) for f in query.breakout)}

    def _sort_target(self, query: Query, target) -> str:
        if isinstance(target, AggregationIndex):
            aggregation = query.aggregation_at(target.index)
            named = isinstance(aggregation, Metric) and isinstance(aggregation.name, str)
            if not named:
                raise UnsupportedClauseError(
                    f"cannot sort by aggregation {target.index}: it is not a named metric"
                )
            return aggregation.name
        return self.dimension(target)

    def order_by(self, query: Query) -> dict[str, str]:
        if not query.order_by:
            return {}
        tokens = []
        for order in query.order_by:
            prefix = "-" if order.direction == SortDirection.DESC else ""
            tokens.append(prefix + self._sort_target(query, order.target))
        return {"sort": ",".join(tokens)}

    def limit(self, query: Query) -> dict[str, Any]:
        if query.limit is None:
            return {"max-results": self.config.max_results}
        if query.limit > self.config.max_results:
            logger.warning(
                f"Limit {query.limit} exceeds the API maximum of {self.config.max_results}"
            )
        return {"max-results": int(query.limit)}
