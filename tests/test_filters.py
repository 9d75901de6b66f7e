import copy
import re
from datetime import datetime

import pytest
from bson import ObjectId

from jobboard.core.errors import InvalidRequestError
from jobboard.services.filters import build_filter, coerce_date, coerce_value, parse_query_params


def test_bracket_operators_are_rewritten_and_page_dropped():
    params = parse_query_params([("page", "2"), ("salary[gte]", "50000")])

    assert params == {"page": "2", "salary": {"gte": "50000"}}
    assert build_filter(params) == {"salary": {"$gte": 50000}}


def test_all_comparison_operators():
    params = parse_query_params([
        ("salary[gt]", "1"), ("salary[lt]", "9"), ("experience[gte]", "2"), ("experience[lte]", "5.5"),
    ])

    assert build_filter(params) == {
        "salary": {"$gt": 1, "$lt": 9},
        "experience": {"$gte": 2, "$lte": 5.5},
    }


def test_operators_rewritten_at_every_depth():
    params = {"pay": {"lt": "9", "base": {"gte": "1", "bonus": {"gt": "0"}}}}

    assert build_filter(params) == {
        "pay": {"$lt": 9},
        "pay.base": {"$gte": 1},
        "pay.base.bonus": {"$gt": 0},
    }


def test_top_level_field_named_like_an_operator_is_untouched():
    assert build_filter({"gte": "senior", "lt": "x"}) == {"gte": "senior", "lt": "x"}


def test_job_title_becomes_case_insensitive_literal_substring():
    built = build_filter({"jobTitle": "C++ dev"})

    assert built == {"jobTitle": {"$regex": re.escape("C++ dev"), "$options": "i"}}


def test_job_title_filter_matches_substrings_ignoring_case(db):
    db.jobs.insert_many([
        {"jobTitle": "Senior ENGINEER"},
        {"jobTitle": "engineering manager"},
        {"jobTitle": "Designer"},
    ])

    found = {doc["jobTitle"] for doc in db.jobs.find(build_filter({"jobTitle": "engineer"}))}

    assert found == {"Senior ENGINEER", "engineering manager"}


def test_input_is_not_mutated():
    params = {"page": "3", "limit": "10", "jobTitle": "dev", "salary": {"gte": "10"}}
    snapshot = copy.deepcopy(params)

    build_filter(params)

    assert params == snapshot


def test_repeated_and_array_keys_become_in_predicates():
    params = parse_query_params([("skills", "python"), ("skills", "go"), ("jobType[]", "internship")])

    assert params == {"skills": ["python", "go"], "jobType": ["internship"]}
    assert build_filter(params) == {
        "skills": {"$in": ["python", "go"]},
        "jobType": {"$in": ["internship"]},
    }


def test_reference_fields_become_object_ids():
    category = ObjectId()

    assert build_filter({"category": str(category)}, id_fields=("category",)) == {"category": category}
    with pytest.raises(InvalidRequestError):
        build_filter({"category": "not-an-id"}, id_fields=("category",))


@pytest.mark.parametrize("params", [
    {"$where": "sleep(1000)"},
    {"salary": {"$gt": "1"}},
    {"salary": {"gte": {"nested": "1"}}},
])
def test_rejects_operator_injection_and_bad_shapes(params):
    with pytest.raises(InvalidRequestError):
        build_filter(params)


@pytest.mark.parametrize("items", [
    [("salary[gte", "1")],
    [("salary[][gte]", "1")],
    [("salary", "1"), ("salary[gte]", "2")],
    [("salary[gte]", "2"), ("salary", "1")],
])
def test_malformed_query_strings(items):
    with pytest.raises(InvalidRequestError):
        parse_query_params(items)


@pytest.mark.parametrize("raw, expected", [
    ("42", 42),
    ("-7", -7),
    ("3.25", 3.25),
    ("true", True),
    ("false", False),
    ("Remote", "Remote"),
    ("1e5", "1e5"),
])
def test_coerce_value(raw, expected):
    assert coerce_value(raw) == expected


def test_several_job_titles_match_any_of_them(db):
    db.jobs.insert_many([
        {"jobTitle": "Backend Developer"},
        {"jobTitle": "DevOps Engineer"},
        {"jobTitle": "Designer"},
    ])
    params = parse_query_params([("jobTitle", "developer"), ("jobTitle", "ops")])

    built = build_filter(params)

    assert built == {"$or": [
        {"jobTitle": {"$regex": "developer", "$options": "i"}},
        {"jobTitle": {"$regex": "ops", "$options": "i"}},
    ]}
    found = {doc["jobTitle"] for doc in db.jobs.find(built)}
    assert found == {"Backend Developer", "DevOps Engineer"}


def test_search_field_rejects_operators():
    with pytest.raises(InvalidRequestError):
        build_filter({"jobTitle": {"gt": "a"}})


def test_date_fields_are_compared_as_dates():
    params = {"lastApply": {"gte": "2030-01-01", "lt": "2030-02-01T12:30:00"}, "salary": "2030"}

    built = build_filter(params, date_fields=("lastApply",))

    assert built == {
        "lastApply": {"$gte": datetime(2030, 1, 1), "$lt": datetime(2030, 2, 1, 12, 30)},
        "salary": 2030,
    }


def test_coerce_date_normalizes_offsets_to_utc():
    assert coerce_date("2030-01-01T02:00:00+02:00") == datetime(2030, 1, 1)

    with pytest.raises(InvalidRequestError):
        coerce_date("next tuesday")
