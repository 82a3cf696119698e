from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

from fineract_rag.db import DocumentStore, create_engine, create_session_factory
from fineract_rag.fineract import FineractClient
from fineract_rag.llm import Embedder
from fineract_rag.rag.models import IndexedDocument, SearchResult


def make_document(
    doc_id: str,
    embedding: Optional[List[float]],
    title: str = "Doc",
    content: str = "content",
    document_type: str = "client",
) -> IndexedDocument:
    return IndexedDocument(
        id=doc_id,
        external_id=doc_id,
        document_type=document_type,
        title=title,
        content=content,
        embedding=embedding,
    )


def make_result(doc_id: str, similarity: float, content: str = "content") -> SearchResult:
    return SearchResult(
        document=make_document(doc_id, [1.0, 0.0], title=f"Doc {doc_id}", content=content),
        similarity=similarity,
    )


@pytest.fixture
async def store(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'rag.db'}")
    store = DocumentStore(create_session_factory(engine))
    await store.create_all(engine)
    yield store
    await engine.dispose()


@pytest.fixture
def mock_embedder():
    mock = AsyncMock(spec=Embedder)
    mock.embed_one.return_value = [0.1, 0.2, 0.3]
    return mock


@pytest.fixture
def mock_fineract():
    return AsyncMock(spec=FineractClient)
