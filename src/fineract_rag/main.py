"""
Fineract RAG Service Entry Point

This module defines the FastAPI application, registers all routers,
configures global exception handling, and ties service lifecycle to the
application lifespan.

Design Goals
------------
- Explicit service construction in one composition root
- Background jobs started and stopped with the application
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import settings
from .core.errors import answer_generation_exception_handler, unhandled_exception_handler
from .core.logging import configure_logging
from .rag.answer import AnswerGenerationError
from .services import Services, build_services

from .api import (
    health_routes,
    jobs_routes,
    rag_routes,
)


logger = logging.getLogger("rag.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    services : Optional[Services]
        Pre-built services, used by tests to inject fakes. When omitted,
        services are built from settings at startup.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        logger.info("Starting fineract-rag")

        svc = services or build_services(settings)
        app.state.services = svc
        await svc.startup()

        try:
            yield
        finally:
            logger.info("Shutting down fineract-rag")
            await svc.shutdown()

    app = FastAPI(
        title="fineract-rag",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    if services is not None:
        app.state.services = services

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(AnswerGenerationError, answer_generation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(rag_routes.router)
    app.include_router(jobs_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
