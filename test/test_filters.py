import pytest

from gaquery.architecture.query import Query
from gaquery.exceptions import UnresolvableReferenceError, UnsupportedClauseError
from gaquery.filter.expression import (
    escape_for_filter_clause,
    escape_for_regex,
    ga_filter,
)
from gaquery.filter.onto import parse_clause


@pytest.fixture()
def eq_clause():
    # ga:country == Chile
    return ["=", ["field-id", 11], "Chile"]


@pytest.fixture()
def gt_clause():
    return [">", ["field-literal", "ga:sessions"], 5]


@pytest.fixture()
def date_clause(date_field):
    return [">", date_field, ["relative-datetime", -30, "day"]]


def test_escape_for_filter_clause():
    assert escape_for_filter_clause("a,b;c\\d") == "a\\,b\\;c\\\\d"


def test_escape_for_regex():
    assert escape_for_regex("a.b(c)|d") == "a\\.b\\(c\\)\\|d"
    assert escape_for_regex("plain") == "plain"


def test_ga_filter_escapes_whole_clause():
    assert ga_filter("ga:country", "==", "Korea, Republic of") == (
        "ga:country==Korea\\, Republic of"
    )


def test_none(filter_compiler):
    assert filter_compiler.compile(None) is None


def test_comparisons(filter_compiler):
    field = ["field-literal", "ga:sessions"]
    expected = {"=": "==", "!=": "!=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}
    for op, ga_op in expected.items():
        clause = parse_clause([op, field, 10])
        assert filter_compiler.compile(clause) == f"ga:sessions{ga_op}10"


def test_field_id_resolved(filter_compiler, eq_clause):
    assert filter_compiler.compile(parse_clause(eq_clause)) == "ga:country==Chile"


def test_and(filter_compiler, eq_clause, gt_clause):
    clause = parse_clause(["and", eq_clause, gt_clause])
    assert filter_compiler.compile(clause) == "ga:country==Chile;ga:sessions>5"


def test_or(filter_compiler, eq_clause, gt_clause):
    clause = parse_clause(["or", eq_clause, gt_clause])
    assert filter_compiler.compile(clause) == "ga:country==Chile,ga:sessions>5"


def test_not(filter_compiler, eq_clause):
    clause = parse_clause(["not", eq_clause])
    assert filter_compiler.compile(clause) == "!ga:country==Chile"


def test_nested(filter_compiler, eq_clause, gt_clause):
    clause = parse_clause(
        ["and", ["or", eq_clause, ["=", ["field-id", 11], "Peru"]], gt_clause]
    )
    assert (
        filter_compiler.compile(clause)
        == "ga:country==Chile,ga:country==Peru;ga:sessions>5"
    )


def test_between(filter_compiler):
    clause = parse_clause(["between", ["field-literal", "ga:sessions"], 1, 10])
    assert filter_compiler.compile(clause) == "ga:sessions>=1;ga:sessions<=10"


def test_contains_case_sensitive_by_default(filter_compiler):
    clause = parse_clause(["contains", ["field-id", 12], "Fire.fox"])
    result = filter_compiler.compile(clause)
    assert "=~" in result
    assert result == "ga:browser=~(?-i)Fire\\\\.fox"


def test_starts_with_case_insensitive(filter_compiler):
    clause = parse_clause(
        ["starts-with", ["field-id", 13], "/blog", {"case-sensitive": False}]
    )
    assert filter_compiler.compile(clause) == "ga:pagePath=~(?i)^/blog"


def test_ends_with(filter_compiler):
    clause = parse_clause(["ends-with", ["field-id", 13], "html"])
    assert filter_compiler.compile(clause) == "ga:pagePath=~(?-i)html$"


def test_delimiters_in_values_do_not_split_clauses(filter_compiler):
    clause = parse_clause(
        [
            "and",
            ["=", ["field-id", 11], "Korea, Republic of"],
            ["=", ["field-id", 12], "a;b"],
        ]
    )
    assert (
        filter_compiler.compile(clause)
        == "ga:country==Korea\\, Republic of;ga:browser==a\\;b"
    )


def test_boolean_and_null_values(filter_compiler):
    clause = parse_clause(["=", ["field-literal", "ga:isMobile"], True])
    assert filter_compiler.compile(clause) == "ga:isMobile==true"
    clause = parse_clause(["=", ["field-literal", "ga:isMobile"], None])
    assert filter_compiler.compile(clause) == "ga:isMobile=="


def test_compile_is_deterministic(filter_compiler, eq_clause, gt_clause):
    clause = parse_clause(["or", eq_clause, ["not", gt_clause]])
    assert filter_compiler.compile(clause) == filter_compiler.compile(clause)


def test_unknown_field(filter_compiler):
    clause = parse_clause(["=", ["field-id", 999], "x"])
    with pytest.raises(UnresolvableReferenceError):
        filter_compiler.compile(clause)


def test_custom_segment_rejected(filter_compiler):
    with pytest.raises(UnsupportedClauseError):
        filter_compiler.compile(parse_clause(["segment", 42]))


def test_compile_filters_prunes_dates_and_segments(
    filter_compiler, eq_clause, date_clause
):
    query = Query.model_validate(
        {
            "source-table": 1,
            "filter": ["and", date_clause, ["segment", "gaid::-4"], eq_clause],
        }
    )
    assert filter_compiler.compile_filters(query) == {"filters": "ga:country==Chile"}


def test_compile_filters_collapses_emptied_branches(
    filter_compiler, eq_clause, date_clause
):
    query = Query.model_validate(
        {
            "source-table": 1,
            "filter": ["or", ["not", date_clause], ["and", date_clause], eq_clause],
        }
    )
    assert filter_compiler.compile_filters(query) == {"filters": "ga:country==Chile"}


def test_compile_filters_only_dates(filter_compiler, date_clause):
    query = Query.model_validate({"source-table": 1, "filter": date_clause})
    assert filter_compiler.compile_filters(query) == {}


def test_compile_filters_no_filter(filter_compiler):
    query = Query.model_validate({"source-table": 1})
    assert filter_compiler.compile_filters(query) == {}


def test_not_over_empty_clause(filter_compiler, eq_clause):
    assert filter_compiler.compile(parse_clause(["not", ["and"]])) is None
    clause = parse_clause(["and", eq_clause, ["not", ["or"]]])
    assert filter_compiler.compile(clause) == "ga:country==Chile"
