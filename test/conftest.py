import logging
from datetime import datetime, timezone

import pytest
import yaml

from gaquery.architecture.config import CompilerConfig
from gaquery.filter.date_range import DateRangeExtractor
from gaquery.filter.expression import FilterExpressionCompiler
from gaquery.hq.compiler import QueryCompiler
from gaquery.hq.lookup import FixedTimeProvider, InMemoryMetadata
from gaquery.hq.resolver import ValueResolver

logger = logging.getLogger(__name__)

# Sunday
NOW = datetime(2026, 3, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture()
def metadata():
    return InMemoryMetadata.from_yaml_str(
        """
        table_names:
            1: "98765432"
        field_names:
            10: ga:date
            11: ga:country
            12: ga:browser
            13: ga:pagePath
            14: ga:sessions
        """
    )


@pytest.fixture()
def config():
    return CompilerConfig()


@pytest.fixture()
def clock():
    return FixedTimeProvider(NOW)


@pytest.fixture()
def resolver(metadata, clock, config):
    return ValueResolver(metadata, clock, config)


@pytest.fixture()
def filter_compiler(resolver):
    return FilterExpressionCompiler(resolver)


@pytest.fixture()
def extractor(resolver, config):
    return DateRangeExtractor(resolver, config)


@pytest.fixture()
def compiler(metadata, clock, config):
    return QueryCompiler(metadata, clock=clock, config=config)


@pytest.fixture()
def date_field():
    return ["datetime-field", ["field-id", 10], "day"]


@pytest.fixture()
def sessions_by_day():
    return yaml.safe_load(
        """
        source-table: 1
        aggregation:
        -   [metric, "ga:sessions"]
        breakout:
        -   [datetime-field, [field-id, 10], day]
        filter:
        -   and
        -   [">", [datetime-field, [field-id, 10], day], [relative-datetime, -30, day]]
        -   ["=", [field-id, 11], Chile]
        order-by:
        -   [desc, [aggregation, 0]]
        limit: 100
        """
    )
