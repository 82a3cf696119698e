"""
Fineract Indexer

Mirrors Fineract entities into the document store as embedded documents.

Workflow per category
---------------------
1. Fetch entities page by page from Fineract.
2. Skip entities without a usable identifier.
3. Render each entity to canonical text.
4. Embed the text.
5. Upsert the document keyed by (external id, document type).

Failure isolation
-----------------
- A failure embedding or storing one entity is logged and counted; the
  rest of the page is still processed.
- A failure fetching a page aborts that category only; the remaining
  categories in the run still proceed and the report lists the failure.
- Nothing is ever deleted, so a failed run leaves previously indexed
  documents untouched.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..config import settings
from ..db.document_store import DocumentStore
from ..fineract import FineractClient, FineractError
from ..llm.embedder import Embedder
from .formatting import CATEGORY_FORMATS, INDEXED_CATEGORIES, CategoryFormat, entity_id
from .models import CategoryReport, IndexingReport

logger = logging.getLogger("rag.indexer")


class Indexer:
    """
    Scheduled batch job mirroring Fineract into the document store.

    ``index_all`` never runs twice at the same time: a call made while a
    run is in progress returns immediately with ``skipped_run`` set.
    """

    def __init__(
        self,
        fineract: FineractClient,
        embedder: Embedder,
        store: DocumentStore,
        categories: Optional[Sequence[str]] = None,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> None:
        self._fineract = fineract
        self._embedder = embedder
        self._store = store
        self._categories = list(categories or INDEXED_CATEGORIES)
        self._page_size = page_size or settings.index_page_size
        self._max_pages = max_pages or settings.index_max_pages
        self._lock = asyncio.Lock()
        self.last_report: Optional[IndexingReport] = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def index_all(self) -> IndexingReport:
        """
        Run one full indexing pass over every tracked category.
        """
        if self._lock.locked():
            logger.warning("Indexing already in progress; skipping this run")
            return IndexingReport(started_at=datetime.now(timezone.utc), skipped_run=True)

        async with self._lock:
            report = IndexingReport(started_at=datetime.now(timezone.utc))
            start = time.monotonic()
            logger.info("Starting Fineract indexing for categories: %s", ", ".join(self._categories))

            for category in self._categories:
                category_report = await self._index_category(category)
                report.categories[category] = category_report
                if category_report.error is not None:
                    report.failed_categories.append(category)

            report.finished_at = datetime.now(timezone.utc)
            self.last_report = report

            if report.failed_categories:
                logger.warning(
                    "Fineract indexing finished in %.1fs with failed categories: %s (%d documents indexed)",
                    time.monotonic() - start,
                    ", ".join(report.failed_categories),
                    report.total_indexed,
                )
            else:
                logger.info(
                    "Fineract indexing finished in %.1fs (%d documents indexed)",
                    time.monotonic() - start,
                    report.total_indexed,
                )
            return report

    async def index_now(self) -> IndexingReport:
        """
        Manually triggered equivalent of the scheduled run, used for
        out-of-band refresh requests. Returns once the run has finished.
        """
        logger.info("Immediate Fineract indexing requested")
        return await self.index_all()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _index_category(self, category: str) -> CategoryReport:
        report = CategoryReport(category=category)
        fmt = CATEGORY_FORMATS[category]

        for page in range(self._max_pages):
            offset = page * self._page_size
            try:
                entities = await self._fineract.fetch_page(category, offset, self._page_size)
            except FineractError as exc:
                logger.error("Fetching %s (offset=%d) failed: %s", category, offset, exc)
                report.error = str(exc)
                return report

            logger.info("Processing %d %s entities (offset=%d)", len(entities), category, offset)
            await self._index_entities(entities, fmt, report)

            if len(entities) < self._page_size:
                break

        return report

    async def _index_entities(
        self,
        entities: List[Dict[str, Any]],
        fmt: CategoryFormat,
        report: CategoryReport,
    ) -> None:
        for entity in entities:
            external_id = entity_id(entity)
            if external_id is None:
                logger.warning("Skipping %s without identifier: %r", fmt.document_type, entity)
                report.skipped += 1
                continue

            try:
                content = fmt.render(entity)
                embedding = await self._embedder.embed_one(content)
                await self._store.upsert_document(
                    external_id=external_id,
                    document_type=fmt.document_type,
                    title=fmt.title(entity),
                    content=content,
                    embedding=embedding,
                    metadata=entity,
                )
            except Exception:
                logger.exception("Failed to index %s %s", fmt.document_type, external_id)
                report.failed += 1
                continue

            report.indexed += 1
