"""
Query evaluation in Python — filter, sort, cursor, count.

The memory engine runs every query here; the SQL engine compiles queries to
SQL (``_sql_query``) and falls back here only for filters SQL cannot express.

Values of different types order the way the document store has always
ordered them: null < booleans < numbers < timestamps < strings < everything else.
Values of different types never compare equal (``True`` is not ``1``).
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from artiflare.store._clean import is_timestamp_mapping, to_datetime
from artiflare.store._types import Filter, Page, Query, Snapshot, lookup

_MISSING = object()


def sort_key(value: Any) -> tuple[int, Any]:
    """Total order across mixed value types."""
    if value is None or value is _MISSING:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime) or is_timestamp_mapping(value):
        return (3, to_datetime(value))
    if isinstance(value, str):
        return (4, value)
    # Same text SQLite's json_extract yields for arrays and objects.
    return (5, json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str))


def _compare(left: Any, right: Any) -> int | None:
    """-1 / 0 / 1, or ``None`` when the two values are not comparable."""
    lk, rk = sort_key(left), sort_key(right)
    if lk[0] != rk[0]:
        return None
    if lk[1] == rk[1]:
        return 0
    return -1 if lk[1] < rk[1] else 1


def matches(data: dict[str, Any], flt: Filter) -> bool:
    value = lookup(data, flt.field, _MISSING)
    match flt.op:
        case "array-contains":
            return isinstance(value, list) and any(_compare(v, flt.value) == 0 for v in value)
        case "in":
            return value is not _MISSING and any(_compare(value, v) == 0 for v in flt.value)
        case "!=":
            return value is not _MISSING and _compare(value, flt.value) != 0
        case _:
            if value is _MISSING:
                return False
            cmp = _compare(value, flt.value)
            if cmp is None:
                return False
            match flt.op:
                case "==":
                    return cmp == 0
                case "<":
                    return cmp < 0
                case "<=":
                    return cmp <= 0
                case ">":
                    return cmp > 0
                case ">=":
                    return cmp >= 0
    return False


def _ordering(query: Query, snapshot: Snapshot) -> tuple[tuple[int, Any], str]:
    field = query.order_by.field if query.order_by else None
    value = snapshot.get(field, _MISSING) if field else None
    return (sort_key(value), snapshot.id)


def run_query(snapshots: Iterable[Snapshot], query: Query) -> Page:
    """
    Apply ``query`` to every snapshot of one collection.

    Documents lacking the sort field are excluded when a sort key is given.
    Ties on the sort field are broken by document id.
    """
    hits = [
        snap
        for snap in snapshots
        if snap.data is not None and all(matches(snap.data, f) for f in query.filters)
    ]
    if query.order_by is not None:
        field = query.order_by.field
        hits = [s for s in hits if s.get(field, _MISSING) is not _MISSING]

    descending = bool(query.order_by and query.order_by.descending)
    hits.sort(key=lambda s: _ordering(query, s), reverse=descending)
    total = len(hits)

    if query.start_after is not None:
        anchor = _ordering(query, query.start_after)
        if descending:
            hits = [s for s in hits if _ordering(query, s) < anchor]
        else:
            hits = [s for s in hits if _ordering(query, s) > anchor]

    if query.limit is not None:
        hits = hits[: query.limit]

    return Page(items=hits, cursor=hits[-1] if hits else None, total=total)


__all__ = ("sort_key", "matches", "run_query")
