"""
Query Filter Builder - request query parameters -> MongoDB filter document.

Grammar:
    ?salary[gte]=50000&salary[lt]=90000   {"salary": {"$gte": 50000, "$lt": 90000}}
    ?jobTitle=engineer                    {"jobTitle": {"$regex": "engineer", "$options": "i"}}
    ?skills=python&skills=go              {"skills": {"$in": ["python", "go"]}}
    ?companyInfo[size][gt]=10             {"companyInfo.size": {"$gt": 10}}
    ?jobTitle=dev&jobTitle=ops            {"$or": [{"jobTitle": <contains "dev">}, {"jobTitle": <contains "ops">}]}
    ?lastApply[gte]=2030-01-01            {"lastApply": {"$gte": datetime(2030, 1, 1)}}

Top-level keys are always field names. Only keys in operator position
(inside a field) are recognized as comparison operators, so a field that
happens to be called "gte" is left alone.
"""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Sequence, Tuple

from bson import ObjectId

from jobboard.core.errors import InvalidRequestError

COMPARISON_OPERATORS = {
    "gt": "$gt",
    "gte": "$gte",
    "lt": "$lt",
    "lte": "$lte",
}

PAGINATION_KEYS = ("page", "limit")

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")
_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$")


# ============================================================
# QUERY STRING -> NESTED MAPPING
# ============================================================

def _split_key(raw_key: str) -> list:
    match = _KEY_RE.match(raw_key)
    if not match:
        raise InvalidRequestError(f"Malformed query parameter '{raw_key}'")
    return [match.group(1)] + _SEGMENT_RE.findall(match.group(2))


def parse_query_params(items: Iterable[Tuple[str, str]]) -> dict:
    """
    Expand bracket notation into nested dicts.

    `skills[]=a` and repeated keys collect into lists.
    """
    result: dict = {}
    for raw_key, value in items:
        path = _split_key(raw_key)
        as_list = path[-1] == ""
        if as_list:
            path = path[:-1]
        if any(part == "" for part in path):
            raise InvalidRequestError(f"Malformed query parameter '{raw_key}'")

        node = result
        for part in path[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise InvalidRequestError(f"Conflicting query parameter '{raw_key}'")
            node = child

        leaf = path[-1]
        if leaf in node:
            existing = node[leaf]
            if isinstance(existing, dict):
                raise InvalidRequestError(f"Conflicting query parameter '{raw_key}'")
            node[leaf] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            node[leaf] = [value] if as_list else value
    return result


# ============================================================
# NESTED MAPPING -> FILTER DOCUMENT
# ============================================================

def coerce_value(value: Any) -> Any:
    """Query strings carry text; turn numbers and booleans back into values."""
    if not isinstance(value, str):
        return value
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    if value in ("true", "false"):
        return value == "true"
    return value


def _check_field_name(name: Any) -> None:
    if not isinstance(name, str) or not name or name.startswith("$"):
        raise InvalidRequestError(f"Invalid filter field '{name}'")


def coerce_date(value: Any) -> datetime:
    """ISO-8601 date or datetime; aware values are converted to naive UTC."""
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(str(value))
        except ValueError:
            raise InvalidRequestError(f"Invalid date in filter: {value!r}")
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def coerce_id(value: Any) -> ObjectId:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise InvalidRequestError(f"Invalid id in filter: {value!r}")


def _scalar(value: Any, convert: Callable[[Any], Any]) -> Any:
    if isinstance(value, (dict, list)):
        raise InvalidRequestError("Filter values must be plain values")
    return convert(value)


def _field_predicates(path: str, value: Any, convert: Callable[[Any], Any]) -> dict:
    if isinstance(value, Mapping):
        operators = {}
        nested = {}
        for key, sub_value in value.items():
            if key in COMPARISON_OPERATORS:
                operators[COMPARISON_OPERATORS[key]] = _scalar(sub_value, convert)
            else:
                _check_field_name(key)
                nested.update(_field_predicates(f"{path}.{key}", sub_value, convert))
        predicates = {path: operators} if operators else {}
        predicates.update(nested)
        return predicates
    if isinstance(value, (list, tuple)):
        return {path: {"$in": [_scalar(item, convert) for item in value]}}
    return {path: _scalar(value, convert)}


def substring_match(value: str) -> dict:
    """Case-insensitive 'contains' predicate; the value is matched literally."""
    return {"$regex": re.escape(value), "$options": "i"}


def build_filter(
    params: Mapping[str, Any],
    search_fields: Sequence[str] = ("jobTitle",),
    id_fields: Sequence[str] = (),
    date_fields: Sequence[str] = (),
) -> dict:
    """
    Build a new filter document from parsed query parameters.

    Args:
        params: nested mapping, e.g. the output of parse_query_params()
        search_fields: fields matched as case-insensitive substrings
        id_fields: reference fields whose values are ObjectIds
        date_fields: fields whose values are ISO-8601 dates

    Several values for one search field match any of them.
    The input mapping is never modified.
    """
    filters: dict = {}
    any_of = []
    for field, value in params.items():
        if field in PAGINATION_KEYS:
            continue
        _check_field_name(field)
        if field in search_fields:
            if isinstance(value, str):
                filters[field] = substring_match(value)
            elif isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
                any_of.append([{field: substring_match(item)} for item in value])
            else:
                raise InvalidRequestError(f"Invalid search value for '{field}'")
            continue
        if field in id_fields:
            convert = coerce_id
        elif field in date_fields:
            convert = coerce_date
        else:
            convert = coerce_value
        filters.update(_field_predicates(field, value, convert))

    if len(any_of) == 1:
        filters["$or"] = any_of[0]
    elif any_of:
        filters["$and"] = [{"$or": group} for group in any_of]
    return filters
