import pytest

from gaquery.architecture.config import CompilerConfig
from gaquery.architecture.query import Query
from gaquery.exceptions import MultipleDateFiltersError, UnsupportedNegationError
from gaquery.filter.date_range import DateRange, DateRangeExtractor, day_date_range
from gaquery.filter.onto import parse_clause
from gaquery.hq.resolver import ValueResolver


def relative(n, unit="day"):
    return ["relative-datetime", n, unit]


def absolute(ts, unit="day"):
    return ["absolute-datetime", ts, unit]


@pytest.fixture()
def extract(extractor):
    def _extract(clause):
        return extractor.extract(parse_clause(clause)).to_dict()

    return _extract


def test_no_filter(extractor):
    assert extractor.extract(None).to_dict() == {
        "start-date": "2005-01-01",
        "end-date": "today",
    }


def test_equals_today(extract, date_field):
    assert extract(["=", date_field, relative(0)]) == {
        "start-date": "today",
        "end-date": "today",
    }


def test_less_than_is_exclusive(extract, date_field):
    assert extract(["<", date_field, relative(-30)]) == {"end-date": "31daysAgo"}
    assert extract(["<", date_field, relative(0)]) == {"end-date": "yesterday"}


def test_greater_than_is_exclusive(extract, date_field):
    assert extract([">", date_field, relative(-30)]) == {"start-date": "29daysAgo"}


def test_inclusive_comparisons(extract, date_field):
    assert extract([">=", date_field, relative(-7)]) == {"start-date": "7daysAgo"}
    assert extract(["<=", date_field, relative(-1)]) == {"end-date": "yesterday"}


def test_and_merges_bounds(extract, date_field):
    clause = ["and", [">=", date_field, relative(-30)], ["<=", date_field, relative(-1)]]
    assert extract(clause) == {"start-date": "30daysAgo", "end-date": "yesterday"}


def test_between(extract, date_field):
    clause = ["between", date_field, absolute("2020-01-01"), absolute("2020-01-31")]
    assert extract(clause) == {"start-date": "2020-01-01", "end-date": "2020-01-31"}


def test_future_start_uses_explicit_date(extract, date_field):
    # today is 2026-03-15
    assert extract([">", date_field, relative(0)]) == {"start-date": "2026-03-16"}
    assert extract([">=", date_field, relative(2)]) == {"start-date": "2026-03-17"}


def test_relative_month(extract):
    month_field = ["datetime-field", ["field-id", 10], "month"]
    assert extract(["=", month_field, relative(-1, "month")]) == {
        "start-date": "2026-02-01",
        "end-date": "2026-02-28",
    }
    assert extract(["<", month_field, relative(0, "month")]) == {
        "end-date": "2026-02-28"
    }


def test_absolute_day(extract, date_field):
    assert extract(["<", date_field, absolute("2020-03-15T12:00:00")]) == {
        "end-date": "2020-03-14"
    }
    assert extract([">", date_field, absolute("2020-03-15T12:00:00")]) == {
        "start-date": "2020-03-16"
    }
    assert extract([">=", date_field, absolute("2020-03-15")]) == {
        "start-date": "2020-03-15"
    }


def test_absolute_weeks(extract):
    week = ["datetime-field", ["field-id", 10], "week"]
    iso_week = ["datetime-field", ["field-id", 10], "iso-week"]
    assert extract(["=", week, absolute("2020-03-18", "week")]) == {
        "start-date": "2020-03-15",
        "end-date": "2020-03-21",
    }
    assert extract(["=", iso_week, absolute("2020-03-18", "iso-week")]) == {
        "start-date": "2020-03-16",
        "end-date": "2020-03-22",
    }


def test_default_unit_is_day(extract):
    field = ["datetime-field", ["field-id", 10], "default"]
    assert extract(["=", field, absolute("2020-03-18", "default")]) == {
        "start-date": "2020-03-18",
        "end-date": "2020-03-18",
    }


def test_literal_value(extract, date_field):
    assert extract(["=", date_field, "2020-05-01"]) == {
        "start-date": "2020-05-01",
        "end-date": "2020-05-01",
    }


def test_two_equalities_on_different_dates(extract, date_field):
    clause = [
        "and",
        ["=", date_field, absolute("2020-01-01")],
        ["=", date_field, absolute("2020-02-01")],
    ]
    with pytest.raises(MultipleDateFiltersError):
        extract(clause)


def test_matching_bounds_merge(extract, date_field):
    clause = [
        "and",
        ["=", date_field, absolute("2020-01-01")],
        [">=", date_field, absolute("2020-01-01")],
    ]
    assert extract(clause) == {"start-date": "2020-01-01", "end-date": "2020-01-01"}


def test_or_of_two_ranges(extract, date_field):
    clause = ["or", ["=", date_field, relative(-1)], ["=", date_field, relative(-7)]]
    with pytest.raises(MultipleDateFiltersError):
        extract(clause)


def test_and_of_three_ranges(extract, date_field):
    clause = [
        "and",
        [">=", date_field, relative(-30)],
        ["<=", date_field, relative(-1)],
        ["=", date_field, relative(-7)],
    ]
    with pytest.raises(MultipleDateFiltersError):
        extract(clause)


def test_non_date_clauses_ignored(extract, date_field):
    clause = [
        "and",
        ["=", ["field-id", 11], "Chile"],
        ["contains", ["field-id", 12], "Fire"],
        ["<", date_field, relative(-30)],
    ]
    assert extract(clause) == {"end-date": "31daysAgo"}


def test_unsupported_date_clauses_dropped(extract, date_field):
    assert extract(["!=", date_field, relative(0)]) == {
        "start-date": "2005-01-01",
        "end-date": "today",
    }
    assert extract(["contains", date_field, "2020"]) == {
        "start-date": "2005-01-01",
        "end-date": "today",
    }


def test_not_on_date(extract, date_field):
    with pytest.raises(UnsupportedNegationError):
        extract(["not", ["=", date_field, relative(0)]])


def test_not_on_other_field(extract):
    assert extract(["not", ["=", ["field-id", 11], "Chile"]]) == {
        "start-date": "2005-01-01",
        "end-date": "today",
    }


def test_report_timezone(metadata, clock):
    # 10:30 UTC is already the next day in Kiritimati (UTC+14)
    config = CompilerConfig(report_timezone="Pacific/Kiritimati")
    extractor = DateRangeExtractor(ValueResolver(metadata, clock, config), config)
    date_field = ["datetime-field", ["field-id", 10], "day"]
    result = extractor.extract(parse_clause([">", date_field, relative(0)]))
    assert result.start == "2026-03-17"
    result = extractor.extract(
        parse_clause(["=", date_field, absolute("2020-03-15T20:00:00+00:00")])
    )
    assert result == DateRange(start="2020-03-16", end="2020-03-16")


def test_date_params_fill_missing_bound(extractor, date_field):
    query = Query.model_validate(
        {"source-table": 1, "filter": ["<", date_field, relative(-30)]}
    )
    assert extractor.date_params(query) == {
        "start-date": "2005-01-01",
        "end-date": "31daysAgo",
    }


def test_day_date_range():
    assert day_date_range("<", -30) == DateRange(end="31daysAgo")
    assert day_date_range(">", -30) == DateRange(start="29daysAgo")
    assert day_date_range("=", -1) == DateRange(start="yesterday", end="yesterday")
    assert day_date_range(">", 0) is None
    assert day_date_range("<=", 1) is None
    assert day_date_range("<", 1) == DateRange(end="today")


def test_recent_hours_start_today(extract):
    # now is 10:30, three hours back is the 07:00 bucket
    hour_field = ["datetime-field", ["field-id", 10], "hour"]
    assert extract([">", hour_field, relative(-3, "hour")]) == {
        "start-date": "2026-03-15"
    }
    assert extract([">=", hour_field, relative(-12, "hour")]) == {
        "start-date": "2026-03-14"
    }
    assert extract(["<", hour_field, relative(0, "hour")]) == {
        "end-date": "2026-03-15"
    }


def test_non_date_clause_keeps_and_arity(extract, date_field):
    clause = [
        "and",
        [">=", date_field, relative(-30)],
        ["<=", date_field, relative(-1)],
        ["=", ["field-id", 11], "Chile"],
    ]
    with pytest.raises(MultipleDateFiltersError):
        extract(clause)


def test_two_child_and_with_non_date_clause(extract, date_field):
    clause = ["and", ["=", ["field-id", 11], "Chile"], [">=", date_field, relative(-7)]]
    assert extract(clause) == {"start-date": "7daysAgo"}


def test_compound_of_non_date_clauses(extract):
    clause = ["or", ["=", ["field-id", 11], "Chile"], ["segment", "gaid::-4"]]
    assert extract(clause) == {"start-date": "2005-01-01", "end-date": "today"}
