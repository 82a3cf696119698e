"""
Live Data Fetching

Executes intent-routing directives against Fineract so answers can use
fresh figures instead of (possibly stale) indexed snapshots.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from ..config import settings
from ..fineract import FineractClient, FineractError, CLIENTS, LOAN_PRODUCTS, LOANS
from .intent import LiveFetchDirective

logger = logging.getLogger("rag.live_data")

# Fixed order keeps the assembled context deterministic
_FETCH_ORDER = list(LiveFetchDirective)


class LiveDataFetcher:
    def __init__(self, fineract: FineractClient, limit: Optional[int] = None) -> None:
        self._fineract = fineract
        self._limit = limit or settings.live_fetch_limit

    async def fetch(self, directives: Iterable[LiveFetchDirective]) -> List[Any]:
        """
        Fetch the data for every directive.

        A failing directive is logged and contributes nothing; the others
        still contribute.
        """
        wanted = set(directives)
        data: List[Any] = []

        for directive in _FETCH_ORDER:
            if directive not in wanted:
                continue
            try:
                data.extend(await self._fetch_one(directive))
            except FineractError as exc:
                logger.warning("Live fetch for %s failed: %s", directive.value, exc)

        return data

    async def _fetch_one(self, directive: LiveFetchDirective) -> List[Any]:
        if directive is LiveFetchDirective.CLIENTS:
            return await self._fineract.fetch_page(CLIENTS, 0, self._limit)
        if directive is LiveFetchDirective.LOANS:
            return await self._fineract.fetch_page(LOANS, 0, self._limit)
        if directive is LiveFetchDirective.OVERDUE_LOANS:
            return await self._fineract.fetch_overdue()
        if directive is LiveFetchDirective.LOAN_PRODUCTS:
            return await self._fineract.fetch_page(LOAN_PRODUCTS, 0, self._limit)
        if directive is LiveFetchDirective.PORTFOLIO_SUMMARY:
            summary = await self._fineract.fetch_portfolio_summary()
            return [summary] if summary else []
        return []
