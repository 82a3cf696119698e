"""
Intent Routing

Keyword heuristics deciding which live Fineract data to re-fetch for a
query. This is best effort: a query matching no keyword gets no live
augmentation and is answered from indexed documents only.
"""

from __future__ import annotations

import enum
from typing import FrozenSet


class LiveFetchDirective(str, enum.Enum):
    CLIENTS = "clients"
    LOANS = "loans"
    OVERDUE_LOANS = "overdue_loans"
    LOAN_PRODUCTS = "loan_products"
    PORTFOLIO_SUMMARY = "portfolio_summary"


CLIENT_TERMS = ("client", "customer", "account")
LOAN_TERMS = ("loan", "credit")
OVERDUE_TERMS = ("overdue", "late")
PRODUCT_TERMS = ("product",)
INTEREST_TERMS = ("interest", "rate")
PORTFOLIO_TERMS = ("portfolio", "summary", "report")


def _mentions(text: str, terms) -> bool:
    return any(term in text for term in terms)


def classify(query_text: str) -> FrozenSet[LiveFetchDirective]:
    """
    Map a raw query to the set of live fetches it calls for.

    Each keyword group fires independently, so one query may yield several
    directives. An empty set is a valid answer.
    """
    text = query_text.lower()
    directives = set()

    overdue = _mentions(text, OVERDUE_TERMS)

    if _mentions(text, CLIENT_TERMS):
        directives.add(
            LiveFetchDirective.OVERDUE_LOANS if overdue else LiveFetchDirective.CLIENTS
        )

    if _mentions(text, LOAN_TERMS):
        if _mentions(text, PRODUCT_TERMS):
            directives.add(LiveFetchDirective.LOAN_PRODUCTS)
        elif overdue:
            directives.add(LiveFetchDirective.OVERDUE_LOANS)
        else:
            directives.add(LiveFetchDirective.LOANS)

    if _mentions(text, INTEREST_TERMS):
        directives.add(LiveFetchDirective.LOAN_PRODUCTS)

    if _mentions(text, PORTFOLIO_TERMS):
        directives.add(LiveFetchDirective.PORTFOLIO_SUMMARY)

    return frozenset(directives)
