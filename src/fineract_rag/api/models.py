"""
API Models

Request and response bodies for the HTTP surface. Domain results
(``RAGResponse``, ``IndexingReport``) are returned as-is; only shapes that
exist purely at the HTTP boundary are defined here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------
# RAG
# ---------------------------------------------------------------------

class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1)
    user_id: str = Field(default="anonymous", min_length=1, max_length=128)

    model_config = ConfigDict(extra="forbid")


class IndexingStatsResponse(BaseModel):
    total_documents: int = Field(..., ge=0)
    with_embeddings: int = Field(..., ge=0)
    by_type: Dict[str, int] = Field(default_factory=dict)
    last_indexed: Optional[datetime] = None
    indexing_progress: float = Field(..., ge=0.0, le=100.0)
    indexing_running: bool = False


# ---------------------------------------------------------------------
# Policy documents
# ---------------------------------------------------------------------

class PolicyCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=512)
    content: str = Field(..., min_length=1)
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


class PolicyUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=512)
    content: Optional[str] = Field(default=None, min_length=1)
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


class PolicyDocument(BaseModel):
    """A policy document without its embedding vector."""
    id: str
    title: str
    content: str
    metadata: Optional[Any] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------

class JobTriggerResponse(BaseModel):
    job_name: str
    ran: bool
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class JobRestartResponse(BaseModel):
    job_name: str
    restarted: bool
