"""
Fineract Client

Thin asynchronous client for the Apache Fineract REST API. It is the entity
source for the indexer and the live-data path of the answer generator.

Only read operations are implemented. Every call is bounded by the
configured HTTP timeout so a stalled Fineract instance cannot wedge a
scheduled job.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings

logger = logging.getLogger("rag.fineract")


CLIENTS = "client"
LOAN_PRODUCTS = "loan_product"
LOANS = "loan"

# Category -> REST resource. Loan products are not paginated by Fineract.
_CATEGORY_PATHS: Dict[str, str] = {
    CLIENTS: "/clients",
    LOAN_PRODUCTS: "/loanproducts",
    LOANS: "/loans",
}

_PAGED_CATEGORIES = {CLIENTS, LOANS}

_OVERDUE_SQL_SEARCH = (
    "l.loan_status_id = 300 AND l.total_outstanding_derived > 0 "
    "AND DATEDIFF(CURDATE(), l.expected_maturedon_date) > 0"
)


class FineractError(RuntimeError):
    """Raised when a Fineract request fails (transport, timeout or HTTP status)."""


def normalize_entities(data: Any) -> List[Dict[str, Any]]:
    """
    Return the entity list from any Fineract list response.

    Fineract answers list endpoints either with a bare JSON array or with a
    ``pageItems`` envelope (``content`` on some reports). Anything else
    yields an empty list.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("pageItems", "content"):
            items = data.get(key)
            if isinstance(items, list):
                return items
    return []


class FineractClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        tenant_id: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        root = str(base_url or settings.fineract_base_url).rstrip("/")
        self.base_url = f"{root}/fineract-provider/api/v1"
        self.username = username or settings.fineract_username
        self.password = password or settings.fineract_password.get_secret_value()
        self.tenant_id = tenant_id or settings.fineract_tenant_id
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        headers = {
            "Fineract-Platform-TenantId": self.tenant_id,
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.username, self.password),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get(path, params=params, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Fineract request failed (%s): GET %s, error=%s",
                type(exc).__name__,
                path,
                str(exc),
            )
            raise FineractError(
                f"Fineract request failed: GET {path} ({type(exc).__name__})"
            ) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise FineractError(f"Fineract returned invalid JSON for GET {path}") from exc

    async def fetch_page(
        self,
        category: str,
        offset: int = 0,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of entities for an indexed category.

        Unpaginated categories return everything for offset 0 and nothing
        afterwards, so callers can page uniformly.
        """
        path = _CATEGORY_PATHS.get(category)
        if path is None:
            raise ValueError(f"Unknown Fineract category: {category!r}")

        if category not in _PAGED_CATEGORIES:
            if offset > 0:
                return []
            return normalize_entities(await self._get(path))

        params = {
            "offset": offset,
            "limit": limit,
            "orderBy": "id",
            "sortOrder": "desc",
        }
        return normalize_entities(await self._get(path, params=params))

    async def fetch_overdue(self) -> List[Dict[str, Any]]:
        """Active loans with an outstanding balance past their maturity date."""
        data = await self._get("/loans", params={"sqlSearch": _OVERDUE_SQL_SEARCH})
        return normalize_entities(data)

    async def fetch_portfolio_summary(self) -> Optional[Dict[str, Any]]:
        """Run the PortfolioAtRisk report. Returns None when the report is empty."""
        data = await self._get("/runreports/PortfolioAtRisk")
        return data or None

    async def health_check(self) -> bool:
        try:
            await self._get("/offices")
        except FineractError:
            return False
        return True
