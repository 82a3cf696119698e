"""
SQLAlchemy Models

Defines the database schema for:
- Mirrored Fineract documents with their embeddings (pgvector)
- Query logs (append-only analytics sink)
- Fineract data cache rows with expiry (swept by the cache cleanup job)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from pgvector.sqlalchemy import Vector


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the naive DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ---------------------------------------------------------------------
# Indexed Document
# ---------------------------------------------------------------------

class FineractDocument(Base):
    """
    One mirrored entity snapshot (or an administrator-managed policy document).

    ``(external_id, document_type)`` is the natural key: re-indexing the
    same entity updates this row in place.
    """
    __tablename__ = "fineract_document"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id: Mapped[str] = mapped_column(String(64), nullable=False)
    document_type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_: Mapped[Optional[Any]] = mapped_column("metadata", JSONType, nullable=True)

    # Dimension is fixed by the embedding model and validated at search time
    embedding = Column(Vector(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (
        UniqueConstraint("external_id", "document_type", name="uq_document_external_type"),
        Index("idx_document_type", "document_type"),
    )


# ---------------------------------------------------------------------
# Query Log
# ---------------------------------------------------------------------

class QueryLog(Base):
    """One answered query. Written once, never read by the pipeline."""
    __tablename__ = "query_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_query: Mapped[str] = mapped_column(Text, nullable=False)
    live_data_used: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    response_time_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_query_log_user", "user_id", "created_at"),
    )


# ---------------------------------------------------------------------
# Cache Entry
# ---------------------------------------------------------------------

class CacheEntry(Base):
    """
    Ephemeral key/value row written by other parts of the platform.

    Rows whose ``expires_at`` lies in the past are removed by the hourly
    cache cleanup job.
    """
    __tablename__ = "fineract_data_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cache_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    payload: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
