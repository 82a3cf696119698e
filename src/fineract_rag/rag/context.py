"""
Context Assembly

Merges ranked documents and live Fineract data into the single text block
handed to the completion model.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Sequence

from ..config import settings
from .models import SearchResult

logger = logging.getLogger("rag.context")

DOCUMENTS_HEADER = "Relevant Documents:\n"
LIVE_DATA_HEADER = "Current Fineract Data:\n"


def _document_block(position: int, result: SearchResult) -> str:
    return f"{position}. {result.document.title}\n{result.document.content}\n\n"


def _live_block(position: int, item: Any) -> str:
    return f"{position}. {json.dumps(item, indent=2, default=str)}\n\n"


def _render(results: Sequence[SearchResult], live_data: Sequence[Any]) -> str:
    context = ""

    if results:
        context += DOCUMENTS_HEADER
        for i, result in enumerate(results, start=1):
            context += _document_block(i, result)

    if live_data:
        context += LIVE_DATA_HEADER
        for i, item in enumerate(live_data, start=1):
            context += _live_block(i, item)

    return context


def assemble(
    search_results: Sequence[SearchResult],
    live_data: Sequence[Any],
    max_chars: Optional[int] = None,
) -> str:
    """
    Build the prompt context: numbered documents first, then numbered live data.

    When the text exceeds ``max_chars`` whole records are dropped, never
    cut: lowest-ranked documents go first, then trailing live-data items.
    """
    budget = max_chars or settings.context_max_chars
    results: List[SearchResult] = list(search_results)
    items: List[Any] = list(live_data)

    context = _render(results, items)
    dropped = 0

    while len(context) > budget and (results or items):
        if results:
            results.pop()
        else:
            items.pop()
        dropped += 1
        context = _render(results, items)

    if dropped:
        logger.info(
            "Context over budget (%d chars); dropped %d record(s)",
            budget,
            dropped,
        )

    return context
