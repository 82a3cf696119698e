"""
Database Package

Provides SQLAlchemy async engine/session construction, model definitions
for PostgreSQL with pgvector, and the document store used by the RAG
pipeline.
"""

from .session import create_engine, create_session_factory
from .models import Base, FineractDocument, QueryLog, CacheEntry
from .document_store import DocumentStore

__all__ = [
    "create_engine",
    "create_session_factory",
    "Base",
    "FineractDocument",
    "QueryLog",
    "CacheEntry",
    "DocumentStore",
]
