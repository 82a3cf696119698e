"""
Similarity Search Tests

Covers the numeric core (cosine similarity) and ranking rules:
threshold, top-k bound, missing/degenerate embeddings, empty corpus.
"""

from unittest.mock import AsyncMock

import pytest

from fineract_rag.db import DocumentStore
from fineract_rag.rag.similarity import (
    SimilaritySearchEngine,
    cosine_similarity,
    rank_documents,
)

from conftest import make_document


class TestCosineSimilarity:

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_symmetric(self):
        a = [0.3, -1.2, 4.5, 0.01]
        b = [2.2, 0.7, -0.4, 3.3]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_zero_vector_is_undefined(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) is None
        assert cosine_similarity([1.0, 1.0], [0.0, 0.0]) is None

    def test_dimension_mismatch_is_undefined(self):
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) is None

    def test_empty_is_undefined(self):
        assert cosine_similarity([], []) is None


class TestRankDocuments:

    def test_threshold_is_exclusive(self):
        doc = make_document("a", [0.6, 0.8])
        score = cosine_similarity([1.0, 0.0], doc.embedding)

        assert rank_documents([1.0, 0.0], [doc], top_k=5, threshold=score) == []
        assert len(rank_documents([1.0, 0.0], [doc], top_k=5, threshold=score - 1e-9)) == 1

    def test_scores_above_threshold_only(self):
        docs = [
            make_document("near", [1.0, 0.1]),
            make_document("far", [0.0, 1.0]),
        ]
        results = rank_documents([1.0, 0.0], docs, top_k=5, threshold=0.7)

        assert [r.document.id for r in results] == ["near"]
        assert all(0.7 < r.similarity <= 1.0 + 1e-9 for r in results)

    def test_never_more_than_top_k(self):
        docs = [make_document(str(i), [1.0, i * 0.01]) for i in range(10)]
        results = rank_documents([1.0, 0.0], docs, top_k=3, threshold=0.7)

        assert len(results) == 3
        assert [r.document.id for r in results] == ["0", "1", "2"]

    def test_zero_top_k(self):
        docs = [make_document("a", [1.0, 0.0])]
        assert rank_documents([1.0, 0.0], docs, top_k=0, threshold=0.7) == []

    def test_missing_and_degenerate_embeddings_excluded(self):
        docs = [
            make_document("none", None, content="matches everything"),
            make_document("zero", [0.0, 0.0]),
            make_document("short", [1.0]),
            make_document("ok", [1.0, 0.0]),
        ]
        results = rank_documents([1.0, 0.0], docs, top_k=10, threshold=0.7)

        assert [r.document.id for r in results] == ["ok"]

    def test_ties_ordered_by_id(self):
        docs = [
            make_document("b", [2.0, 0.0]),
            make_document("a", [1.0, 0.0]),
        ]
        results = rank_documents([1.0, 0.0], docs, top_k=2, threshold=0.7)

        assert [r.document.id for r in results] == ["a", "b"]


class TestSimilaritySearchEngine:

    @pytest.fixture
    def mock_store(self):
        return AsyncMock(spec=DocumentStore)

    async def test_empty_corpus_returns_empty(self, mock_store, mock_embedder):
        mock_store.list_documents_with_embedding.return_value = []
        engine = SimilaritySearchEngine(mock_store, mock_embedder, threshold=0.7, default_top_k=5)

        assert await engine.search("anything") == []

    async def test_query_closest_to_second_document(self, mock_store, mock_embedder):
        mock_store.list_documents_with_embedding.return_value = [
            make_document("doc-1", [1.0, 0.0, 0.0]),
            make_document("doc-2", [0.0, 1.0, 0.0]),
            make_document("doc-3", [0.0, 0.0, 1.0]),
        ]
        mock_embedder.embed_one.return_value = [0.1, 0.95, 0.05]
        engine = SimilaritySearchEngine(mock_store, mock_embedder, threshold=0.7, default_top_k=5)

        results = await engine.search("query", top_k=1)

        assert len(results) == 1
        assert results[0].document.id == "doc-2"
        mock_embedder.embed_one.assert_awaited_once_with("query")

    async def test_default_top_k_applies(self, mock_store, mock_embedder):
        mock_store.list_documents_with_embedding.return_value = [
            make_document(str(i), [1.0, 0.0]) for i in range(4)
        ]
        mock_embedder.embed_one.return_value = [1.0, 0.0]
        engine = SimilaritySearchEngine(mock_store, mock_embedder, threshold=0.7, default_top_k=2)

        assert len(await engine.search("q")) == 2
