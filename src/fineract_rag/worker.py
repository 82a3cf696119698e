"""
Standalone Job Worker

Runs the background job scheduler without the HTTP server:

    python -m fineract_rag.worker

SIGINT/SIGTERM stop every job; handlers already executing are allowed to
finish before the process exits.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from .config import settings
from .core.logging import configure_logging
from .services import build_services

logger = logging.getLogger("rag.worker")


async def run() -> None:
    services = build_services(settings)
    await services.store.create_all(services.engine)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    if not settings.enable_background_jobs:
        logger.warning("ENABLE_BACKGROUND_JOBS is false; worker has nothing to run")
    else:
        services.jobs.start_all()
        logger.info("Worker running jobs: %s", ", ".join(services.scheduler.get_job_status()))
        await stop_event.wait()
        logger.info("Shutdown signal received, stopping all jobs")

    await services.shutdown()
    logger.info("Worker stopped")


def main() -> None:
    configure_logging(settings.log_level)
    asyncio.run(run())


if __name__ == "__main__":
    main()
