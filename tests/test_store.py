from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import event

from artiflare.store import (
    SERVER_TIMESTAMP,
    DocumentMissing,
    Filter,
    MemoryDocumentStore,
    OrderBy,
    Query,
    SQLAlchemyDocumentStore,
    TransactionConflict,
)
from artiflare.store._sql_query import compile_query, json_path
from artiflare.store._sqlalchemy import DocumentRow


async def test_missing_document_has_version_zero(any_store) -> None:
    snap = await any_store.get("products", "nope")
    assert not snap.exists
    assert snap.version == 0
    assert snap.get("inventory", 7) == 7


async def test_set_then_get_bumps_version(any_store) -> None:
    await any_store.set("products", "p1", {"name": "Mug", "inventory": 3})
    first = await any_store.get("products", "p1")
    await any_store.set("products", "p1", {"name": "Mug", "inventory": 4})
    second = await any_store.get("products", "p1")
    assert first.version == 1
    assert second.version == 2
    assert second.data == {"name": "Mug", "inventory": 4}


async def test_update_merges_top_level_keys(any_store) -> None:
    await any_store.set("products", "p1", {"name": "Mug", "inventory": 3})
    await any_store.update("products", "p1", {"inventory": 1})
    snap = await any_store.get("products", "p1")
    assert snap.data == {"name": "Mug", "inventory": 1}


async def test_update_of_missing_document_raises(any_store) -> None:
    with pytest.raises(DocumentMissing):
        await any_store.update("products", "ghost", {"inventory": 1})


async def test_delete_reports_whether_anything_was_removed(any_store) -> None:
    await any_store.set("products", "p1", {"name": "Mug"})
    assert await any_store.delete("products", "p1") is True
    assert await any_store.delete("products", "p1") is False


async def test_server_timestamp_resolves_to_aware_datetime(any_store) -> None:
    await any_store.set("products", "p1", {"createdAt": SERVER_TIMESTAMP})
    snap = await any_store.get("products", "p1")
    value = snap.data["createdAt"]
    if isinstance(any_store, SQLAlchemyDocumentStore):
        assert set(value) == {"seconds", "nanoseconds"}
    else:
        assert isinstance(value, datetime) and value.tzinfo is not None


async def test_transaction_commits_all_writes(any_store) -> None:
    await any_store.set("products", "p1", {"inventory": 5})
    async with any_store.transaction() as tx:
        snap = await tx.get("products", "p1")
        tx.update("products", "p1", {"inventory": snap.data["inventory"] - 2})
        tx.set("orders", "o1", {"userId": "u1"})
    assert (await any_store.get("products", "p1")).data["inventory"] == 3
    assert (await any_store.get("orders", "o1")).exists


async def test_transaction_conflicts_when_a_read_changed(any_store) -> None:
    await any_store.set("products", "p1", {"inventory": 5})
    with pytest.raises(TransactionConflict):
        async with any_store.transaction() as tx:
            snap = await tx.get("products", "p1")
            await any_store.update("products", "p1", {"inventory": 0})
            tx.update("products", "p1", {"inventory": snap.data["inventory"] - 1})
            tx.set("orders", "o1", {"userId": "u1"})
    assert (await any_store.get("products", "p1")).data["inventory"] == 0
    assert not (await any_store.get("orders", "o1")).exists


async def test_transaction_conflicts_when_a_missing_read_appears(any_store) -> None:
    with pytest.raises(TransactionConflict):
        async with any_store.transaction() as tx:
            await tx.get("wishlists", "w1")
            await any_store.set("wishlists", "w1", {"items": []})
            tx.set("wishlists", "w1", {"items": ["p1"]})


async def test_read_only_transaction_never_conflicts(any_store) -> None:
    await any_store.set("products", "p1", {"inventory": 5})
    async with any_store.transaction() as tx:
        await tx.get("products", "p1")
        await any_store.update("products", "p1", {"inventory": 4})


async def test_update_of_missing_document_in_transaction_writes_nothing(any_store) -> None:
    with pytest.raises(DocumentMissing):
        async with any_store.transaction() as tx:
            tx.set("orders", "o1", {"userId": "u1"})
            tx.update("products", "ghost", {"inventory": 0})
    assert not (await any_store.get("orders", "o1")).exists


async def test_transaction_rereads_return_first_snapshot(any_store) -> None:
    await any_store.set("products", "p1", {"inventory": 5})
    async with any_store.transaction() as tx:
        first = await tx.get("products", "p1")
        second = await tx.get("products", "p1")
    assert first is second


# ═══════════════════════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════════════════════


async def _seed_catalog(store) -> None:
    for i, (artisan, price) in enumerate(
        [("a1", 10), ("a2", 30), ("a1", 20), ("a1", 40), ("a2", 5)]
    ):
        await store.set(
            "products",
            f"p{i}",
            {"artisanId": artisan, "price": price, "tags": ["clay"] if price > 15 else []},
        )


async def test_query_filters_and_sorts(any_store) -> None:
    await _seed_catalog(any_store)
    page = await any_store.query(
        Query(
            "products",
            filters=(Filter("artisanId", "==", "a1"),),
            order_by=OrderBy("price", descending=True),
        )
    )
    assert [s.data["price"] for s in page.items] == [40, 20, 10]
    assert page.total == 3


async def test_query_paginates_with_cursor(any_store) -> None:
    await _seed_catalog(any_store)
    query = Query("products", order_by=OrderBy("price"), limit=2)
    first = await any_store.query(query)
    second = await any_store.query(
        Query("products", order_by=OrderBy("price"), limit=2, start_after=first.cursor)
    )
    third = await any_store.query(
        Query("products", order_by=OrderBy("price"), limit=2, start_after=second.cursor)
    )
    prices = [s.data["price"] for page in (first, second, third) for s in page.items]
    assert prices == [5, 10, 20, 30, 40]
    assert first.total == second.total == 5
    assert len(third.items) == 1


async def test_query_operators(any_store) -> None:
    await _seed_catalog(any_store)

    async def ids(*filters: Filter) -> set[str]:
        page = await any_store.query(Query("products", filters=filters))
        return {s.id for s in page.items}

    assert await ids(Filter("price", ">=", 30)) == {"p1", "p3"}
    assert await ids(Filter("price", "<", 10)) == {"p4"}
    assert await ids(Filter("price", "in", [5, 40])) == {"p3", "p4"}
    assert await ids(Filter("artisanId", "!=", "a1")) == {"p1", "p4"}
    assert await ids(Filter("tags", "array-contains", "clay")) == {"p1", "p2", "p3"}


async def test_query_excludes_documents_without_sort_field(any_store) -> None:
    await any_store.set("products", "a", {"price": 1})
    await any_store.set("products", "b", {"name": "no price"})
    page = await any_store.query(Query("products", order_by=OrderBy("price")))
    assert [s.id for s in page.items] == ["a"]


async def _seed_mixed(store) -> None:
    for doc_id, price in [("text", "10"), ("ten", 10), ("flag", True), ("one", 1), ("nil", None)]:
        await store.set("products", doc_id, {"price": price})
    await store.set("products", "bare", {"name": "no price"})


async def test_values_of_different_types_never_match(any_store) -> None:
    await _seed_mixed(any_store)

    async def ids(flt: Filter) -> set[str]:
        return {s.id for s in (await any_store.query(Query("products", filters=(flt,)))).items}

    assert await ids(Filter("price", "==", 10)) == {"ten"}
    assert await ids(Filter("price", "==", "10")) == {"text"}
    assert await ids(Filter("price", "==", True)) == {"flag"}
    assert await ids(Filter("price", "==", 1)) == {"one"}
    assert await ids(Filter("price", "in", [1, "x"])) == {"one"}
    assert await ids(Filter("price", "==", None)) == {"nil"}
    assert await ids(Filter("price", ">", 0)) == {"ten", "one"}
    assert await ids(Filter("price", "!=", 10)) == {"text", "flag", "one", "nil"}


async def test_sort_orders_values_by_kind(any_store) -> None:
    await _seed_mixed(any_store)
    await any_store.set("products", "when", {"price": datetime(2024, 1, 1, tzinfo=UTC)})
    await any_store.set("products", "dims", {"price": [1, 2]})

    ascending = await any_store.query(Query("products", order_by=OrderBy("price")))
    descending = await any_store.query(
        Query("products", order_by=OrderBy("price", descending=True))
    )

    order = ["nil", "flag", "one", "ten", "when", "text", "dims"]
    assert [s.id for s in ascending.items] == order
    assert [s.id for s in descending.items] == order[::-1]
    assert ascending.total == 7


async def test_timestamps_filter_and_sort_by_instant(any_store) -> None:
    for day in (3, 1, 4, 2):
        await any_store.set(
            "orders", f"o{day}", {"createdAt": datetime(2024, 5, day, 12, tzinfo=UTC)}
        )
    page = await any_store.query(
        Query(
            "orders",
            filters=(Filter("createdAt", ">=", datetime(2024, 5, 2, tzinfo=UTC)),),
            order_by=OrderBy("createdAt", descending=True),
        )
    )
    assert [s.id for s in page.items] == ["o4", "o3", "o2"]


async def test_descending_cursor_breaks_ties_by_id(any_store) -> None:
    for doc_id, price in [("a", 10), ("b", 10), ("c", 10), ("d", 5), ("e", 20)]:
        await any_store.set("products", doc_id, {"price": price})

    pages = []
    cursor = None
    for _ in range(3):
        page = await any_store.query(
            Query(
                "products",
                order_by=OrderBy("price", descending=True),
                limit=2,
                start_after=cursor,
            )
        )
        pages.append([s.id for s in page.items])
        cursor = page.cursor

    assert pages == [["e", "c"], ["b", "a"], ["d"]]


async def test_array_contains_matches_same_kind_only(any_store) -> None:
    await any_store.set("products", "num", {"tags": [1, 2]})
    await any_store.set("products", "str", {"tags": ["1"]})
    await any_store.set("products", "bool", {"tags": [True]})
    await any_store.set("products", "flat", {"tags": 1})

    async def ids(value: object) -> set[str]:
        page = await any_store.query(
            Query("products", filters=(Filter("tags", "array-contains", value),))
        )
        return {s.id for s in page.items}

    assert await ids(1) == {"num"}
    assert await ids("1") == {"str"}
    assert await ids(True) == {"bool"}


async def test_list_operands_are_matched_by_value(any_store) -> None:
    for doc_id, dims, price in [("a", [1, 2], 3), ("b", [2, 1], 1), ("c", [1, 2], 2)]:
        await any_store.set("products", doc_id, {"dims": dims, "price": price})
    page = await any_store.query(
        Query(
            "products",
            filters=(Filter("dims", "==", [1, 2]),),
            order_by=OrderBy("price"),
            limit=1,
        )
    )
    assert [s.id for s in page.items] == ["c"]
    assert page.total == 2


def test_unknown_filter_operator_is_rejected() -> None:
    with pytest.raises(ValueError):
        Filter("price", "~=", 1)  # type: ignore[arg-type]


async def test_memory_store_hands_out_copies() -> None:
    store = MemoryDocumentStore()
    await store.set("products", "p1", {"tags": ["clay"]})
    snap = await store.get("products", "p1")
    snap.data["tags"].append("glaze")
    assert store.dump("products")["p1"]["tags"] == ["clay"]


# ═══════════════════════════════════════════════════════════════════════════════
# SQL compilation
# ═══════════════════════════════════════════════════════════════════════════════


def _compile(*filters: Filter):
    return compile_query(
        Query("products", filters=filters), data=DocumentRow.data, doc_id=DocumentRow.id
    )


def test_scalar_filters_compile_to_sql() -> None:
    compiled = _compile(
        Filter("price", ">=", 10),
        Filter("artisanId", "in", ["a1", "a2"]),
        Filter("createdAt", "<", datetime(2024, 1, 1, tzinfo=UTC)),
        Filter("tags", "array-contains", "clay"),
    )
    assert compiled.residual == ()
    assert len(compiled.where) == 4


def test_filters_with_list_operands_are_left_for_python() -> None:
    dims = Filter("dims", "==", [1, 2])
    compiled = _compile(Filter("price", "==", 1), dims)
    assert compiled.residual == (dims,)
    assert len(compiled.where) == 1


def test_nested_fields_become_quoted_json_paths() -> None:
    assert json_path("shippingAddress.city") == '$."shippingAddress"."city"'


async def test_sql_query_counts_and_limits_in_the_database(sql_store) -> None:
    await _seed_catalog(sql_store)
    statements: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany) -> None:
        statements.append(statement)

    engine = sql_store._engine.sync_engine
    event.listen(engine, "before_cursor_execute", record)
    try:
        page = await sql_store.query(
            Query(
                "products",
                filters=(Filter("price", ">", 5),),
                order_by=OrderBy("price"),
                limit=2,
            )
        )
    finally:
        event.remove(engine, "before_cursor_execute", record)

    assert [s.data["price"] for s in page.items] == [10, 20]
    assert page.total == 4
    assert any("count(" in s.lower() for s in statements)
    assert any("json_extract" in s and "LIMIT" in s for s in statements)
