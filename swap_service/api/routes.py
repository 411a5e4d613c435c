from fastapi import APIRouter

from shared.core.config import settings
from swap_service.api.v1.endpoints import swaps

swap_router = APIRouter(prefix=settings.API_V1_STR)
swap_router.include_router(
    swaps.router, prefix="/swaps", tags=["Swap Requests"]
)
