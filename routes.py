from fastapi import APIRouter

from slot_service.api.routes import slot_router
from swap_service.api.routes import swap_router

api_router = APIRouter()

api_router.include_router(slot_router)
api_router.include_router(swap_router)
