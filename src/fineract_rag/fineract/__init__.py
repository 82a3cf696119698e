from .client import (
    FineractClient,
    FineractError,
    normalize_entities,
    CLIENTS,
    LOAN_PRODUCTS,
    LOANS,
)

__all__ = [
    "FineractClient",
    "FineractError",
    "normalize_entities",
    "CLIENTS",
    "LOAN_PRODUCTS",
    "LOANS",
]
