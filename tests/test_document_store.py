"""
Document Store Integration Tests

Runs the real SQLAlchemy store against a temporary SQLite database.
"""

from datetime import timedelta, timezone

from sqlalchemy import func, select

from fineract_rag.db.models import CacheEntry, QueryLog, utcnow


class TestUpsert:

    async def test_same_key_twice_is_one_document(self, store):
        await store.upsert_document("1", "client", "Client: A", "first", [1.0, 0.0])
        first = await store.get_document_by_key("1", "client")

        await store.upsert_document("1", "client", "Client: renamed", "second", [0.0, 1.0])
        docs = await store.list_documents()

        assert len(docs) == 1
        doc = docs[0]
        assert doc.id == first.id
        assert doc.content == "second"
        assert doc.embedding == [0.0, 1.0]
        assert doc.updated_at >= first.updated_at
        # Title is derived once at creation
        assert doc.title == "Client: A"

    async def test_same_external_id_different_type(self, store):
        await store.upsert_document("1", "client", "Client", "c", [1.0])
        await store.upsert_document("1", "loan", "Loan", "l", [1.0])

        assert len(await store.list_documents()) == 2
        assert len(await store.list_documents(document_type="loan")) == 1

    async def test_metadata_round_trips(self, store):
        await store.upsert_document("7", "client", "T", "c", [1.0], metadata={"officeId": 1})

        doc = await store.get_document_by_key("7", "client")
        assert doc.metadata == {"officeId": 1}


async def test_only_embedded_documents_listed_for_search(store):
    await store.upsert_document("1", "client", "A", "a", [1.0, 0.0])
    await store.upsert_document("2", "client", "B", "b", None)

    docs = await store.list_documents_with_embedding()

    assert [d.external_id for d in docs] == ["1"]


async def test_update_and_delete(store):
    await store.upsert_document("p", "policy", "Policy", "old", [1.0])
    doc = await store.get_document_by_key("p", "policy")

    updated = await store.update_document(doc.id, content="new", embedding=[2.0])
    assert updated.content == "new"
    assert updated.embedding == [2.0]
    assert updated.title == "Policy"

    assert await store.delete_document(doc.id) is True
    assert await store.delete_document(doc.id) is False
    assert await store.get_document(doc.id) is None


async def test_unknown_or_malformed_ids(store):
    assert await store.get_document("not-a-uuid") is None
    assert await store.update_document("not-a-uuid", content="x") is None
    assert await store.delete_document("not-a-uuid") is False


async def test_stats(store):
    assert (await store.get_stats())["indexing_progress"] == 0.0

    await store.upsert_document("1", "client", "A", "a", [1.0])
    await store.upsert_document("2", "client", "B", "b", None)
    await store.upsert_document("3", "loan", "C", "c", [1.0])

    stats = await store.get_stats()

    assert stats["total_documents"] == 3
    assert stats["with_embeddings"] == 2
    assert stats["by_type"] == {"client": 2, "loan": 1}
    assert stats["last_indexed"] is not None
    assert round(stats["indexing_progress"], 2) == 66.67


async def test_append_query_log(store):
    await store.append_query_log(
        user_id="u1",
        query="show me overdue loans",
        live_data=[{"id": 1}],
        answer="None are overdue.",
        response_time_ms=42,
    )

    async with store._session_factory() as session:
        row = (await session.execute(select(QueryLog))).scalar_one()

    assert row.user_id == "u1"
    assert row.live_data_used == [{"id": 1}]
    assert row.response_time_ms == 42


async def test_delete_expired_cache_is_idempotent(store):
    now = utcnow()
    async with store._session_factory() as session:
        session.add_all([
            CacheEntry(cache_key="old", payload={}, expires_at=now - timedelta(hours=1)),
            CacheEntry(cache_key="fresh", payload={}, expires_at=now + timedelta(hours=1)),
        ])
        await session.commit()

    aware_now = now.replace(tzinfo=timezone.utc)
    assert await store.delete_expired_cache(aware_now) == 1
    assert await store.delete_expired_cache(aware_now) == 0

    async with store._session_factory() as session:
        remaining = (await session.execute(select(func.count()).select_from(CacheEntry))).scalar()
    assert remaining == 1
