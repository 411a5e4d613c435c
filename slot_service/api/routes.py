from fastapi import APIRouter

from shared.core.config import settings
from slot_service.api.v1.endpoints import slots

slot_router = APIRouter(prefix=settings.API_V1_STR)
slot_router.include_router(slots.router, prefix="/slots", tags=["Slots"])
