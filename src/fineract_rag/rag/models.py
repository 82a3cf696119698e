"""
RAG Data Models

Canonical in-memory representations passed between the document store,
the indexer, the similarity search engine and the answer generator. ORM
rows never leave the store; they are converted to these models first.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class IndexedDocument(BaseModel):
    """
    A single mirrored entity snapshot.

    ``metadata`` is the raw Fineract payload, carried through unexamined.
    """

    id: str = Field(..., min_length=1, description="Store-assigned identifier.")
    external_id: str = Field(..., min_length=1, description="Fineract entity id (or policy key).")
    document_type: str = Field(..., min_length=1, description="Category tag, e.g. 'client'.")
    title: str
    content: str
    metadata: Optional[Any] = None
    embedding: Optional[List[float]] = Field(default=None, repr=False, exclude=True)
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class SearchResult(BaseModel):
    """A ranked document with its cosine similarity to the query."""

    document: IndexedDocument
    similarity: float

    model_config = ConfigDict(frozen=True)


class RAGResponse(BaseModel):
    """Result of one answered query."""

    answer: str
    sources: List[SearchResult] = Field(default_factory=list)
    live_data: List[Any] = Field(default_factory=list)
    response_time_ms: int = Field(..., ge=0)


class CategoryReport(BaseModel):
    """Outcome of indexing one Fineract category."""

    category: str
    indexed: int = 0
    skipped: int = 0
    failed: int = 0
    error: Optional[str] = None


class IndexingReport(BaseModel):
    """
    Outcome of one full indexing run.

    A category listed in ``failed_categories`` could not be fetched at all;
    per-entity failures are counted in the category reports instead.
    """

    started_at: datetime
    finished_at: Optional[datetime] = None
    categories: Dict[str, CategoryReport] = Field(default_factory=dict)
    failed_categories: List[str] = Field(default_factory=list)
    skipped_run: bool = False

    @computed_field
    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def total_indexed(self) -> int:
        return sum(c.indexed for c in self.categories.values())

    @property
    def ok(self) -> bool:
        return not self.failed_categories and not self.skipped_run
