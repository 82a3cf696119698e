from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_services
from ..services import Services

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(services: Annotated[Services, Depends(get_services)]):
    # Fineract being down degrades answers but does not make this service unhealthy
    fineract_ok = await services.fineract.health_check()
    return {
        "status": "ok",
        "fineract": "reachable" if fineract_ok else "unreachable",
        "fineract_url": str(services.settings.fineract_base_url),
    }
