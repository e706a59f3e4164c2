"""
Document queries compiled to SQL over the JSON ``data`` column (SQLite JSON1).

    compiled = compile_query(query, data=DocumentRow.data, doc_id=DocumentRow.id)
    stmt = select(DocumentRow).where(*compiled.where).order_by(*compiled.order)

Filters become ``json_extract`` comparisons guarded by ``json_type``, so
values of different kinds never match each other. Ordering follows the same
kind ranks as the memory engine (null < booleans < numbers < timestamps <
strings < everything else), ties broken by id. ``{seconds, nanoseconds}``
timestamps compare as integer nanoseconds.

A filter with an operand the compiler cannot express (arrays, objects,
timestamps inside arrays) lands in ``residual``; the engine then narrows in
SQL and finishes the query with ``run_query``.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, and_, case, false, func, literal, not_, or_, select, true

from artiflare.store._clean import from_datetime, is_timestamp_mapping, to_datetime
from artiflare.store._query import sort_key
from artiflare.store._types import Filter, Query, Snapshot

NANOS = 1_000_000_000

NULL, BOOLEAN, NUMBER, TIMESTAMP, STRING, OTHER = range(6)

_COMPARE: dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def json_path(field: str) -> str:
    """``shippingAddress.city`` → ``$."shippingAddress"."city"``."""
    return "$" + "".join(f'."{part}"' for part in field.split("."))


def timestamp_nanos(value: datetime) -> int:
    encoded = from_datetime(value)
    return encoded["seconds"] * NANOS + encoded["nanoseconds"]


# ═══════════════════════════════════════════════════════════════════════════════
# Operands
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Operand:
    """A filter value as SQL sees it: its kind rank and a comparable literal."""

    rank: int
    value: Any


def operand(value: Any) -> Operand | None:
    if value is None:
        return Operand(NULL, 0)
    if isinstance(value, bool):
        return Operand(BOOLEAN, int(value))
    if isinstance(value, (int, float)):
        return Operand(NUMBER, value)
    if isinstance(value, datetime) or is_timestamp_mapping(value):
        return Operand(TIMESTAMP, timestamp_nanos(to_datetime(value)))  # type: ignore[arg-type]
    if isinstance(value, str):
        return Operand(STRING, value)
    return None


class _Field:
    """SQL expressions for one document path."""

    def __init__(self, data: Any, field: str) -> None:
        self.data = data
        self.path = json_path(field)
        self.kind = func.json_type(data, self.path)

    def extract(self, suffix: str = "") -> Any:
        return func.json_extract(self.data, self.path + suffix)

    @property
    def nanos(self) -> Any:
        seconds = func.coalesce(self.extract(".seconds"), self.extract("._seconds"))
        fraction = func.coalesce(self.extract(".nanoseconds"), self.extract("._nanoseconds"))
        return seconds * NANOS + fraction

    @property
    def is_timestamp(self) -> ColumnElement[bool]:
        return and_(self.kind == "object", self.nanos.is_not(None))

    @property
    def present(self) -> ColumnElement[bool]:
        return self.kind.is_not(None)

    @property
    def rank(self) -> Any:
        return case(
            (self.kind == "null", NULL),
            (self.kind.in_(("true", "false")), BOOLEAN),
            (self.kind.in_(("integer", "real")), NUMBER),
            (self.is_timestamp, TIMESTAMP),
            (self.kind == "text", STRING),
            else_=OTHER,
        )

    @property
    def value(self) -> Any:
        return case((self.is_timestamp, self.nanos), else_=self.extract())

    def of_rank(self, rank: int) -> ColumnElement[bool]:
        match rank:
            case 0:
                return self.kind == "null"
            case 1:
                return self.kind.in_(("true", "false"))
            case 2:
                return self.kind.in_(("integer", "real"))
            case 3:
                return self.is_timestamp
            case _:
                return self.kind == "text"

    def compare(self, op: str, target: Operand) -> ColumnElement[bool]:
        match target.rank:
            case 0:
                left = literal(0)
            case 3:
                left = self.nanos
            case _:
                left = self.extract()
        return and_(self.of_rank(target.rank), _COMPARE[op](left, target.value))

    def contains(self, target: Operand) -> ColumnElement[bool] | None:
        if target.rank in (TIMESTAMP, OTHER):
            return None
        elements = func.json_each(self.data, self.path).table_valued("value", "type")
        kinds = {NULL: ("null",), BOOLEAN: ("true", "false"), NUMBER: ("integer", "real")}
        element = literal(0) if target.rank == NULL else elements.c.value
        hit = select(literal(1)).select_from(elements).where(
            elements.c.type.in_(kinds.get(target.rank, ("text",))),
            element == target.value,
        )
        return and_(self.kind == "array", hit.exists())


# ═══════════════════════════════════════════════════════════════════════════════
# Filters
# ═══════════════════════════════════════════════════════════════════════════════


def compile_filter(data: Any, flt: Filter) -> ColumnElement[bool] | None:
    """SQL predicate for one filter, or ``None`` when it has to run in Python."""
    target = _Field(data, flt.field)
    match flt.op:
        case "in":
            parts = [compile_filter(data, Filter(flt.field, "==", v)) for v in flt.value]
            if any(part is None for part in parts):
                return None
            return or_(false(), *parts)  # type: ignore[arg-type]
        case "!=":
            equal = compile_filter(data, Filter(flt.field, "==", flt.value))
            return None if equal is None else and_(target.present, not_(equal))
        case "array-contains":
            value = operand(flt.value)
            return None if value is None else target.contains(value)
        case op:
            value = operand(flt.value)
            return None if value is None else target.compare(op, value)


# ═══════════════════════════════════════════════════════════════════════════════
# Query
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CompiledQuery:
    where: tuple[ColumnElement[bool], ...]
    order: tuple[Any, ...]
    after: ColumnElement[bool] | None
    residual: tuple[Filter, ...]


def _anchor(query: Query, cursor: Snapshot) -> tuple[int, Any]:
    """Rank and SQL-comparable value of the cursor's sort field."""
    if query.order_by is None:
        return NULL, None
    rank, key = sort_key(cursor.get(query.order_by.field))
    match rank:
        case 0:
            return NULL, None
        case 1:
            return BOOLEAN, int(key)
        case 3:
            return TIMESTAMP, timestamp_nanos(key)
        case _:
            return rank, key


def compile_query(query: Query, *, data: Any, doc_id: Any) -> CompiledQuery:
    where: list[ColumnElement[bool]] = []
    residual: list[Filter] = []
    for flt in query.filters:
        predicate = compile_filter(data, flt)
        if predicate is None:
            residual.append(flt)
        else:
            where.append(predicate)

    descending = bool(query.order_by and query.order_by.descending)
    direction = operator.methodcaller("desc" if descending else "asc")
    beyond = operator.lt if descending else operator.gt

    if query.order_by is None:
        rank: Any = literal(NULL)
        value: Any = literal(None)
        order: tuple[Any, ...] = (direction(doc_id),)
    else:
        sort = _Field(data, query.order_by.field)
        where.append(sort.present)
        rank, value = sort.rank, sort.value
        order = (direction(rank), direction(value), direction(doc_id))

    after = None
    if query.start_after is not None:
        anchor_rank, anchor_value = _anchor(query, query.start_after)
        # Nulls share one sort value, so only the id separates them.
        if anchor_rank == NULL:
            same_value, past_value = true(), false()
        else:
            same_value, past_value = value == anchor_value, beyond(value, anchor_value)
        after = or_(
            beyond(rank, anchor_rank),
            and_(rank == anchor_rank, past_value),
            and_(rank == anchor_rank, same_value, beyond(doc_id, query.start_after.id)),
        )

    return CompiledQuery(tuple(where), order, after, tuple(residual))


__all__ = ("CompiledQuery", "compile_query", "compile_filter", "json_path", "operand")
