from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from ..jobs import JobScheduler
from ..rag.answer import AnswerGenerator
from ..rag.indexer import Indexer
from ..rag.policies import PolicyDocumentService
from ..services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_answer_generator(services: Services = Depends(get_services)) -> AnswerGenerator:
    return services.answers


def get_indexer(services: Services = Depends(get_services)) -> Indexer:
    return services.indexer


def get_scheduler(services: Services = Depends(get_services)) -> JobScheduler:
    return services.scheduler


def get_policy_service(services: Services = Depends(get_services)) -> PolicyDocumentService:
    return services.policies


async def verify_admin(
    services: Services = Depends(get_services),
    x_admin_key: Optional[str] = Header(None, alias="x-admin-key"),
) -> None:
    """
    Require the configured admin key in the ``x-admin-key`` header.

    Admin routes are open when no ``ADMIN_API_KEY`` is configured.
    """
    configured = services.settings.admin_api_key
    if configured is None or not configured.get_secret_value():
        return

    if x_admin_key != configured.get_secret_value():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing admin API key",
        )
