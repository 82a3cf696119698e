"""
Answer Generation

Orchestrates one retrieval-augmented answer:

1. Rank indexed documents against the query.
2. Route the query to live Fineract fetches and run them.
3. Assemble the bounded prompt context.
4. Ask the completion model.
5. Record the interaction in the query log (best effort).

A failed completion fails the request with ``AnswerGenerationError``; no
partial answer is ever returned. A failed query-log write is logged and
otherwise ignored.
"""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..db.document_store import DocumentStore
from ..llm.client import CompletionError, LLMClient
from ..llm.embedder import EmbeddingError
from ..prompts import SYSTEM_PROMPT, USER_PROMPT_TEMPLATE
from .context import assemble
from .intent import classify
from .live_data import LiveDataFetcher
from .models import RAGResponse
from .similarity import SimilaritySearchEngine

logger = logging.getLogger("rag.answer")


class AnswerGenerationError(RuntimeError):
    """Raised when no answer could be generated for a query."""


class AnswerGenerator:
    def __init__(
        self,
        search_engine: SimilaritySearchEngine,
        live_data: LiveDataFetcher,
        llm: LLMClient,
        store: DocumentStore,
        max_context_chars: Optional[int] = None,
    ) -> None:
        self._search = search_engine
        self._live_data = live_data
        self._llm = llm
        self._store = store
        self._max_context_chars = max_context_chars

    async def answer(self, query_text: str, user_id: str) -> RAGResponse:
        """
        Answer ``query_text`` on behalf of ``user_id``.

        Raises
        ------
        AnswerGenerationError
            If the query cannot be embedded, the corpus cannot be read, or
            the completion call fails.
        """
        start = time.monotonic()

        try:
            sources = await self._search.search(query_text)
        except (EmbeddingError, SQLAlchemyError) as exc:
            raise AnswerGenerationError("Could not generate a response") from exc

        directives = classify(query_text)
        live_data = await self._live_data.fetch(directives) if directives else []

        context = assemble(sources, live_data, self._max_context_chars)
        user_prompt = USER_PROMPT_TEMPLATE.format(query=query_text, context=context)

        try:
            answer = await self._llm.complete(SYSTEM_PROMPT, user_prompt)
        except CompletionError as exc:
            raise AnswerGenerationError("Could not generate a response") from exc

        response_time_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Answered query for user %s in %d ms (%d sources, %d live items, directives=%s)",
            user_id,
            response_time_ms,
            len(sources),
            len(live_data),
            sorted(d.value for d in directives),
        )

        await self._log_query(user_id, query_text, live_data, answer, response_time_ms)

        return RAGResponse(
            answer=answer,
            sources=sources,
            live_data=live_data,
            response_time_ms=response_time_ms,
        )

    async def _log_query(
        self,
        user_id: str,
        query_text: str,
        live_data: List[Any],
        answer: str,
        response_time_ms: int,
    ) -> None:
        try:
            await self._store.append_query_log(
                user_id=user_id,
                query=query_text,
                live_data=live_data,
                answer=answer,
                response_time_ms=response_time_ms,
            )
        except Exception:
            logger.exception("Failed to write query log for user %s", user_id)
