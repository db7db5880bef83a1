"""
Backend-neutral read filters.

Entity services describe a filtered read once as a :class:`Query`; the
remote store turns it into ``where``/``whereGroups``/``orderBy``/``pagingInfo``
params and the mock store evaluates it in Python.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Sequence

from ..core.models import parse_date

EQUAL_TO = "EqualTo"
CONTAINS = "Contains"
LESS_OR_EQUAL = "LessThanOrEqualTo"
GREATER_OR_EQUAL = "GreaterThanOrEqualTo"

OPERATORS = (EQUAL_TO, CONTAINS, LESS_OR_EQUAL, GREATER_OR_EQUAL)


@dataclass(frozen=True)
class Condition:
    field: str  # record attribute name, not the storage column
    operator: str
    values: Sequence[Any]

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.operator}")


@dataclass(frozen=True)
class ConditionGroup:
    operator: str  # "AND" | "OR"
    conditions: Sequence[Condition]


@dataclass
class Query:
    where: List[Condition] = field(default_factory=list)
    groups: List[ConditionGroup] = field(default_factory=list)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    offset: int = 0


# ---------- in-memory evaluation ----------


def _comparable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # compare ISO dates against dates
        try:
            return parse_date(value)
        except ValueError:
            return value
    return value


def condition_matches(record: Mapping[str, Any], cond: Condition) -> bool:
    actual = record.get(cond.field)
    if cond.operator == CONTAINS:
        text = "" if actual is None else str(actual).lower()
        return any(str(v).lower() in text for v in cond.values)
    if cond.operator == EQUAL_TO:
        return any(actual == v or (actual is not None and str(actual) == str(v)) for v in cond.values)

    if actual is None:
        return False
    left = _comparable(actual)
    for v in cond.values:
        right = _comparable(v)
        try:
            if cond.operator == LESS_OR_EQUAL and left <= right:
                return True
            if cond.operator == GREATER_OR_EQUAL and left >= right:
                return True
        except TypeError:
            continue
    return False


def group_matches(record: Mapping[str, Any], group: ConditionGroup) -> bool:
    results = (condition_matches(record, c) for c in group.conditions)
    if group.operator.upper() == "OR":
        return any(results)
    return all(results)


def apply_query(records: Sequence[Mapping[str, Any]], query: Query) -> List[Mapping[str, Any]]:
    """Filter, order and page plain record dicts (attribute-name keys)."""
    out = [
        r
        for r in records
        if all(condition_matches(r, c) for c in query.where)
        and all(group_matches(r, g) for g in query.groups)
    ]
    if query.order_by:
        key = query.order_by
        # records missing the sort field go last
        present = [r for r in out if r.get(key) not in (None, "")]
        missing = [r for r in out if r.get(key) in (None, "")]
        present.sort(key=lambda r: _comparable(r.get(key)), reverse=query.descending)
        out = present + missing
    if query.offset:
        out = out[query.offset:]
    if query.limit is not None:
        out = out[: query.limit]
    return out
