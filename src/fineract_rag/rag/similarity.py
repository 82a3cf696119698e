"""
Similarity Search

Brute-force cosine similarity ranking over every embedded document in the
store.

Key Properties
--------------
- One global relevance threshold; results at or below it are discarded
- Documents without an embedding, with a zero vector, or with a
  dimensionality different from the query are never scored
- Deterministic and symmetric scores (``sim(a, b) == sim(b, a)``)
- An empty corpus yields an empty result, not an error
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from ..config import settings
from ..db.document_store import DocumentStore
from ..llm.embedder import Embedder
from .models import IndexedDocument, SearchResult

logger = logging.getLogger("rag.search")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> Optional[float]:
    """
    Cosine similarity of two vectors, or None when it is undefined.

    Undefined means either vector has zero magnitude or the dimensions
    differ. The dot product and the norm product are both commutative, so
    the result does not depend on argument order.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.ndim != 1 or va.shape != vb.shape or va.size == 0:
        return None

    norm = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if norm == 0.0 or not np.isfinite(norm):
        return None

    return float(np.dot(va, vb) / norm)


def rank_documents(
    query_embedding: Sequence[float],
    documents: Sequence[IndexedDocument],
    top_k: int,
    threshold: float,
) -> List[SearchResult]:
    """
    Score ``documents`` against ``query_embedding`` and keep the best ``top_k``.

    Ties are broken by document id so the ranking is stable across runs.
    """
    if top_k <= 0:
        return []

    results: List[SearchResult] = []

    for doc in documents:
        if doc.embedding is None:
            continue

        score = cosine_similarity(query_embedding, doc.embedding)
        if score is None:
            logger.debug("Skipping document %s with degenerate embedding", doc.id)
            continue

        if score > threshold:
            results.append(SearchResult(document=doc, similarity=score))

    results.sort(key=lambda r: (-r.similarity, r.document.id))
    return results[:top_k]


class SimilaritySearchEngine:
    """
    Embeds a query and ranks the stored corpus against it.
    """

    def __init__(
        self,
        store: DocumentStore,
        embedder: Embedder,
        threshold: Optional[float] = None,
        default_top_k: Optional[int] = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.threshold = settings.relevance_threshold if threshold is None else threshold
        self.default_top_k = default_top_k or settings.search_top_k

    async def search(self, query_text: str, top_k: Optional[int] = None) -> List[SearchResult]:
        """
        Return at most ``top_k`` documents whose similarity exceeds the threshold.

        Raises EmbeddingError if the query cannot be embedded.
        """
        k = self.default_top_k if top_k is None else top_k

        query_embedding = await self._embedder.embed_one(query_text)
        documents = await self._store.list_documents_with_embedding()

        if not documents:
            return []

        results = rank_documents(query_embedding, documents, k, self.threshold)
        logger.info(
            "Search scored %d documents, %d above threshold %.2f returned",
            len(documents),
            len(results),
            self.threshold,
        )
        return results
