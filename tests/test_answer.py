"""
Answer Generator Tests

The completion call is fatal to a request; the query-log write is not.
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from fineract_rag.db import DocumentStore
from fineract_rag.llm import CompletionError, EmbeddingError, LLMClient
from fineract_rag.rag.answer import AnswerGenerationError, AnswerGenerator
from fineract_rag.rag.intent import LiveFetchDirective
from fineract_rag.rag.live_data import LiveDataFetcher
from fineract_rag.rag.similarity import SimilaritySearchEngine

from conftest import make_result


@pytest.fixture
def search():
    mock = AsyncMock(spec=SimilaritySearchEngine)
    mock.search.return_value = [make_result("1", 0.9, "Loan product Starter: 12% interest")]
    return mock


@pytest.fixture
def live_data():
    mock = AsyncMock(spec=LiveDataFetcher)
    mock.fetch.return_value = [{"accountNo": "L-1", "overdue": True}]
    return mock


@pytest.fixture
def llm():
    mock = AsyncMock(spec=LLMClient)
    mock.complete.return_value = "Loan L-1 is overdue."
    return mock


@pytest.fixture
def store():
    return AsyncMock(spec=DocumentStore)


@pytest.fixture
def generator(search, live_data, llm, store):
    return AnswerGenerator(search, live_data, llm, store, max_context_chars=10_000)


async def test_answer_combines_sources_and_live_data(generator, live_data, llm, store):
    response = await generator.answer("show me overdue loans", "user-1")

    assert response.answer == "Loan L-1 is overdue."
    assert [s.document.id for s in response.sources] == ["1"]
    assert response.live_data == [{"accountNo": "L-1", "overdue": True}]
    assert response.response_time_ms >= 0

    live_data.fetch.assert_awaited_once_with(frozenset({LiveFetchDirective.OVERDUE_LOANS}))

    system_prompt, user_prompt = llm.complete.await_args.args
    assert "show me overdue loans" in user_prompt
    assert "Loan product Starter" in user_prompt
    assert '"accountNo": "L-1"' in user_prompt

    store.append_query_log.assert_awaited_once()
    assert store.append_query_log.await_args.kwargs["user_id"] == "user-1"


async def test_no_directives_skips_live_fetch(generator, live_data):
    response = await generator.answer("hello", "user-1")

    live_data.fetch.assert_not_awaited()
    assert response.live_data == []


async def test_completion_failure_is_fatal(generator, llm, store):
    llm.complete.side_effect = CompletionError("provider down")

    with pytest.raises(AnswerGenerationError, match="Could not generate a response"):
        await generator.answer("show me overdue loans", "user-1")

    store.append_query_log.assert_not_awaited()


async def test_query_embedding_failure_is_fatal(generator, search):
    search.search.side_effect = EmbeddingError("provider down")

    with pytest.raises(AnswerGenerationError):
        await generator.answer("anything", "user-1")


async def test_corpus_read_failure_is_fatal(generator, search, llm):
    search.search.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))

    with pytest.raises(AnswerGenerationError, match="Could not generate a response"):
        await generator.answer("show me loans", "user-1")

    llm.complete.assert_not_awaited()


async def test_query_log_failure_is_swallowed(generator, store):
    store.append_query_log.side_effect = RuntimeError("database gone")

    response = await generator.answer("show me overdue loans", "user-1")

    assert response.answer == "Loan L-1 is overdue."
