from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import JSONResponse

from shared.core.api_response import api_response
from shared.db.sessions.database import get_db
from shared.dependencies.user import get_current_user_id
from shared.utils.exception_handlers import exception_handler
from slot_service.schemas.slots import (
    SlotCreateRequest,
    SlotResponse,
    SlotUpdateRequest,
)
from slot_service.services.slots import SlotService

router = APIRouter()

SlotId = Annotated[
    str, Path(min_length=6, max_length=6, description="Slot ID")
]


@router.get(
    "/",
    status_code=status.HTTP_200_OK,
    summary="List my slots",
)
@exception_handler
async def list_my_slots(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    slots = await SlotService(db).list_user_slots(user_id)
    return api_response(
        status_code=status.HTTP_200_OK,
        message="Slots retrieved successfully",
        data=[SlotResponse.model_validate(slot) for slot in slots],
    )


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Create a slot",
)
@exception_handler
async def create_slot(
    slot_data: SlotCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    slot = await SlotService(db).create_slot(user_id, slot_data)
    return api_response(
        status_code=status.HTTP_201_CREATED,
        message="Slot created successfully",
        data=SlotResponse.model_validate(slot),
    )


@router.get(
    "/swappable",
    status_code=status.HTTP_200_OK,
    summary="List other users' swappable slots",
)
@exception_handler
async def list_swappable_slots(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    slots = await SlotService(db).list_swappable_slots(user_id)
    return api_response(
        status_code=status.HTTP_200_OK,
        message="Swappable slots retrieved successfully",
        data=[SlotResponse.model_validate(slot) for slot in slots],
    )


@router.get(
    "/{slot_id}",
    status_code=status.HTTP_200_OK,
    summary="Get one of my slots",
)
@exception_handler
async def get_slot(
    slot_id: SlotId,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    slot = await SlotService(db).get_user_slot(user_id, slot_id)
    return api_response(
        status_code=status.HTTP_200_OK,
        message="Slot retrieved successfully",
        data=SlotResponse.model_validate(slot),
    )


@router.patch(
    "/{slot_id}",
    status_code=status.HTTP_200_OK,
    summary="Edit one of my slots",
    description="Refused with 409 while the slot is part of a pending swap.",
)
@exception_handler
async def update_slot(
    changes: SlotUpdateRequest,
    slot_id: SlotId,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    slot = await SlotService(db).update_slot(user_id, slot_id, changes)
    return api_response(
        status_code=status.HTTP_200_OK,
        message="Slot updated successfully",
        data=SlotResponse.model_validate(slot),
    )


@router.delete(
    "/{slot_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete one of my slots",
    description="Refused with 409 while the slot is part of a pending swap.",
)
@exception_handler
async def delete_slot(
    slot_id: SlotId,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    await SlotService(db).delete_slot(user_id, slot_id)
    return api_response(
        status_code=status.HTTP_200_OK,
        message="Slot deleted successfully",
        data={"slot_id": slot_id},
    )
