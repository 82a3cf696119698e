"""
Service Composition Root

Builds every long-lived service object once, in dependency order, and tears
them down again. Both the HTTP application and the standalone worker get
their services from here; nothing is constructed at import time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from .config import Settings, settings as default_settings
from .db import DocumentStore, create_engine, create_session_factory
from .fineract import FineractClient
from .jobs import BackgroundJobs, JobScheduler
from .llm import Embedder, LLMClient
from .rag.answer import AnswerGenerator
from .rag.indexer import Indexer
from .rag.live_data import LiveDataFetcher
from .rag.policies import PolicyDocumentService
from .rag.similarity import SimilaritySearchEngine

logger = logging.getLogger("rag.services")


@dataclass
class Services:
    settings: Settings
    engine: Optional[AsyncEngine]
    store: DocumentStore
    fineract: FineractClient
    embedder: Embedder
    llm: LLMClient
    indexer: Indexer
    search: SimilaritySearchEngine
    live_data: LiveDataFetcher
    answers: AnswerGenerator
    policies: PolicyDocumentService
    scheduler: JobScheduler
    jobs: BackgroundJobs

    async def startup(self) -> None:
        """Create the schema and start background jobs when enabled."""
        if self.engine is not None:
            await self.store.create_all(self.engine)

        if self.settings.enable_background_jobs:
            self.jobs.start_all()
        else:
            logger.info("Background jobs disabled (ENABLE_BACKGROUND_JOBS=false)")

    async def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop every job, let executing handlers finish, then release the
        database engine.
        """
        self.jobs.stop_all()

        if not await self.scheduler.wait_idle(timeout=timeout):
            logger.warning("Shutdown timed out with job runs still executing")

        if self.engine is not None:
            await self.engine.dispose()


def build_services(config: Optional[Settings] = None) -> Services:
    cfg = config or default_settings

    engine = create_engine(cfg.database_url)
    store = DocumentStore(create_session_factory(engine))

    fineract = FineractClient(
        base_url=str(cfg.fineract_base_url),
        username=cfg.fineract_username,
        password=cfg.fineract_password.get_secret_value(),
        tenant_id=cfg.fineract_tenant_id,
        timeout=cfg.http_timeout_seconds,
    )
    embedder = Embedder(
        api_key=cfg.openai_api_key.get_secret_value(),
        model=cfg.embedding_model,
        base_url=cfg.openai_base_url,
        timeout=cfg.http_timeout_seconds,
    )
    llm = LLMClient(
        api_key=cfg.openai_api_key.get_secret_value(),
        model=cfg.completion_model,
        base_url=cfg.openai_base_url,
        timeout=cfg.http_timeout_seconds,
        max_tokens=cfg.completion_max_tokens,
        temperature=cfg.completion_temperature,
    )

    indexer = Indexer(
        fineract,
        embedder,
        store,
        page_size=cfg.index_page_size,
        max_pages=cfg.index_max_pages,
    )
    search = SimilaritySearchEngine(
        store,
        embedder,
        threshold=cfg.relevance_threshold,
        default_top_k=cfg.search_top_k,
    )
    live_data = LiveDataFetcher(fineract, limit=cfg.live_fetch_limit)
    answers = AnswerGenerator(
        search,
        live_data,
        llm,
        store,
        max_context_chars=cfg.context_max_chars,
    )

    scheduler = JobScheduler()
    jobs = BackgroundJobs(scheduler, indexer, store, fineract)

    return Services(
        settings=cfg,
        engine=engine,
        store=store,
        fineract=fineract,
        embedder=embedder,
        llm=llm,
        indexer=indexer,
        search=search,
        live_data=live_data,
        answers=answers,
        policies=PolicyDocumentService(store, embedder),
        scheduler=scheduler,
        jobs=jobs,
    )
