"""
Standing Background Jobs

The three jobs the service keeps scheduled while it runs:

- ``fineract-indexing`` every 6 hours: full re-index from Fineract
- ``cache-cleanup`` every hour: drop expired Fineract data cache rows
- ``health-check`` every 30 minutes: probe Fineract reachability

Failures of any one job are logged and never stop the others.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from ..db.document_store import DocumentStore
from ..fineract import FineractClient
from ..rag.indexer import Indexer
from ..rag.models import IndexingReport
from .scheduler import JobScheduler

logger = logging.getLogger("rag.jobs")

INDEXING_JOB = "fineract-indexing"
CACHE_CLEANUP_JOB = "cache-cleanup"
HEALTH_CHECK_JOB = "health-check"

JOB_INTERVALS: Dict[str, float] = {
    INDEXING_JOB: 6 * 60 * 60,
    CACHE_CLEANUP_JOB: 60 * 60,
    HEALTH_CHECK_JOB: 30 * 60,
}


class BackgroundJobs:
    def __init__(
        self,
        scheduler: JobScheduler,
        indexer: Indexer,
        store: DocumentStore,
        fineract: FineractClient,
    ) -> None:
        self.scheduler = scheduler
        self._indexer = indexer
        self._store = store
        self._fineract = fineract

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start_all(self) -> List[str]:
        """
        Register and start the standing jobs.

        Safe to call repeatedly: already registered jobs are not registered
        again and already running jobs are left alone.
        """
        handlers = {
            INDEXING_JOB: self.run_indexing,
            CACHE_CLEANUP_JOB: self.run_cache_cleanup,
            HEALTH_CHECK_JOB: self.run_health_check,
        }

        for name, handler in handlers.items():
            self.scheduler.register(name, JOB_INTERVALS[name], handler)
            self.scheduler.start(name)

        logger.info("Background jobs started")
        return list(handlers)

    def stop_all(self) -> List[str]:
        return self.scheduler.stop_all()

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def run_indexing(self) -> IndexingReport:
        return await self._indexer.index_all()

    async def run_cache_cleanup(self) -> int:
        try:
            removed = await self._store.delete_expired_cache()
        except Exception:
            logger.exception("Cache cleanup failed")
            return 0

        if removed:
            logger.info("Cache cleanup removed %d expired entries", removed)
        return removed

    async def run_health_check(self) -> bool:
        healthy = await self._fineract.health_check()
        if not healthy:
            logger.warning("Fineract health check failed")
        else:
            logger.debug("Fineract health check passed")
        return healthy
