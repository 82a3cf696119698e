"""
Global Error Handling

This module defines application-wide exception handlers for the RAG service.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
- Report a failed answer as "could not generate a response", never as a
  partial answer
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ..rag.answer import AnswerGenerationError

logger = logging.getLogger("rag.errors")


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def answer_generation_exception_handler(
    request: Request,
    exc: AnswerGenerationError,
) -> JSONResponse:
    """
    Map a failed ``answer()`` call to a 502 response.

    The completion provider (or the retrieval step feeding it) failed, so
    no answer exists. The cause is logged; the client only learns that a
    response could not be generated.
    """
    logger.error(
        "Answer generation failed during request %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )

    payload: Dict[str, Any] = {
        "error": "answer_generation_failed",
        "detail": "Could not generate a response",
    }

    return JSONResponse(status_code=502, content=payload)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.
    - Ensures consistent error response format across the entire API.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
