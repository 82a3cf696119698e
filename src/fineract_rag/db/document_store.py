"""
Document Store

SQLAlchemy-backed storage for indexed documents, query logs and the
Fineract data cache.

Every public method opens its own session and commits before returning,
so each upsert is atomic per record and no caller ever holds a session
across network calls to Fineract or OpenAI.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .models import Base, CacheEntry, FineractDocument, QueryLog, utcnow
from ..rag.models import IndexedDocument


def _parse_id(document_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(document_id)
    except (TypeError, ValueError):
        return None


def _to_model(row: FineractDocument) -> IndexedDocument:
    embedding = None
    if row.embedding is not None:
        embedding = [float(x) for x in row.embedding]

    return IndexedDocument(
        id=str(row.id),
        external_id=row.external_id,
        document_type=row.document_type,
        title=row.title,
        content=row.content,
        metadata=row.metadata_,
        embedding=embedding,
        updated_at=row.updated_at,
    )


class DocumentStore:
    """
    Keyed, idempotent storage operations used by the RAG pipeline.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Parameters
        ----------
        session_factory : async_sessionmaker[AsyncSession]
            Factory producing sessions bound to the service database.
        """
        self._session_factory = session_factory

    async def create_all(self, engine: AsyncEngine) -> None:
        """Create missing tables. Existing tables are left untouched."""
        async with engine.begin() as conn:
            if conn.dialect.name == "postgresql":
                await conn.exec_driver_sql("CREATE EXTENSION IF NOT EXISTS vector")
            await conn.run_sync(Base.metadata.create_all)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def upsert_document(
        self,
        external_id: str,
        document_type: str,
        title: str,
        content: str,
        embedding: Optional[Sequence[float]],
        metadata: Optional[Any] = None,
    ) -> None:
        """
        Insert or update a document keyed by ``(external_id, document_type)``.

        On conflict only ``content``, ``embedding`` and ``updated_at`` are
        replaced; the title and metadata written at creation are kept.
        """
        now = utcnow()
        values = {
            "id": uuid.uuid4(),
            "external_id": external_id,
            "document_type": document_type,
            "title": title,
            "content": content,
            "metadata": metadata,
            "embedding": list(embedding) if embedding is not None else None,
            "created_at": now,
            "updated_at": now,
        }

        async with self._session_factory() as session:
            insert = self._insert_for(session)
            stmt = insert(FineractDocument.__table__).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["external_id", "document_type"],
                set_={
                    "content": stmt.excluded.content,
                    "embedding": stmt.excluded.embedding,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            await session.execute(stmt)
            await session.commit()

    async def list_documents_with_embedding(self) -> List[IndexedDocument]:
        """Return every document whose embedding is present."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(FineractDocument).where(FineractDocument.embedding.is_not(None))
            )
            return [_to_model(row) for row in result.scalars().all()]

    async def get_document_by_key(
        self,
        external_id: str,
        document_type: str,
    ) -> Optional[IndexedDocument]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(FineractDocument).where(
                    FineractDocument.external_id == external_id,
                    FineractDocument.document_type == document_type,
                )
            )
            row = result.scalar_one_or_none()
            return _to_model(row) if row is not None else None

    async def list_documents(self, document_type: Optional[str] = None) -> List[IndexedDocument]:
        async with self._session_factory() as session:
            stmt = select(FineractDocument).order_by(FineractDocument.created_at.desc())
            if document_type is not None:
                stmt = stmt.where(FineractDocument.document_type == document_type)
            result = await session.execute(stmt)
            return [_to_model(row) for row in result.scalars().all()]

    async def get_document(self, document_id: str) -> Optional[IndexedDocument]:
        doc_id = _parse_id(document_id)
        if doc_id is None:
            return None
        async with self._session_factory() as session:
            row = await session.get(FineractDocument, doc_id)
            return _to_model(row) if row is not None else None

    async def update_document(
        self,
        document_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        embedding: Optional[Sequence[float]] = None,
        metadata: Optional[Any] = None,
    ) -> Optional[IndexedDocument]:
        """
        Partially update a document by id. Returns None if it does not exist.
        """
        doc_id = _parse_id(document_id)
        if doc_id is None:
            return None

        async with self._session_factory() as session:
            row = await session.get(FineractDocument, doc_id)
            if row is None:
                return None

            if title is not None:
                row.title = title
            if content is not None:
                row.content = content
            if embedding is not None:
                row.embedding = list(embedding)
            if metadata is not None:
                row.metadata_ = metadata
            row.updated_at = utcnow()

            await session.commit()
            return _to_model(row)

    async def delete_document(self, document_id: str) -> bool:
        """Administrative removal of a single document. Never called by the indexer."""
        doc_id = _parse_id(document_id)
        if doc_id is None:
            return False

        async with self._session_factory() as session:
            result = await session.execute(
                delete(FineractDocument).where(FineractDocument.id == doc_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def get_stats(self) -> Dict[str, Any]:
        """
        Return statistics about the mirrored corpus.
        """
        async with self._session_factory() as session:
            total = (
                await session.execute(select(func.count()).select_from(FineractDocument))
            ).scalar() or 0

            with_embeddings = (
                await session.execute(
                    select(func.count())
                    .select_from(FineractDocument)
                    .where(FineractDocument.embedding.is_not(None))
                )
            ).scalar() or 0

            by_type_rows = await session.execute(
                select(
                    FineractDocument.document_type,
                    func.count(FineractDocument.id).label("total"),
                ).group_by(FineractDocument.document_type)
            )
            by_type = {row.document_type: row.total for row in by_type_rows}

            last_indexed = (
                await session.execute(select(func.max(FineractDocument.updated_at)))
            ).scalar()

        return {
            "total_documents": total,
            "with_embeddings": with_embeddings,
            "by_type": by_type,
            "last_indexed": last_indexed,
            "indexing_progress": (with_embeddings / total) * 100 if total > 0 else 0.0,
        }

    # ------------------------------------------------------------------
    # Query log and cache
    # ------------------------------------------------------------------

    async def append_query_log(
        self,
        user_id: str,
        query: str,
        live_data: List[Any],
        answer: str,
        response_time_ms: int,
    ) -> None:
        async with self._session_factory() as session:
            session.add(
                QueryLog(
                    user_id=user_id,
                    user_query=query,
                    live_data_used=live_data,
                    response=answer,
                    response_time_ms=response_time_ms,
                )
            )
            await session.commit()

    async def delete_expired_cache(self, now: Optional[datetime] = None) -> int:
        """
        Remove cache rows whose ``expires_at`` is before ``now``.

        Idempotent: a second call with the same ``now`` deletes nothing.
        """
        cutoff = now or utcnow()
        if cutoff.tzinfo is not None:
            cutoff = cutoff.astimezone(timezone.utc).replace(tzinfo=None)

        async with self._session_factory() as session:
            result = await session.execute(
                delete(CacheEntry).where(CacheEntry.expires_at < cutoff)
            )
            await session.commit()
            return result.rowcount

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _insert_for(session: AsyncSession):
        """Dialect-specific INSERT supporting ON CONFLICT DO UPDATE."""
        dialect = session.bind.dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"Upsert is not supported on dialect {dialect!r}")
