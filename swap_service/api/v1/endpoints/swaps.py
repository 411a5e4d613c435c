from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import JSONResponse

from shared.core.api_response import api_response
from shared.db.sessions.database import get_db
from shared.dependencies.user import get_current_user_id
from shared.utils.exception_handlers import exception_handler
from swap_service.schemas.swaps import (
    SwapCreateRequest,
    SwapRespondRequest,
    SwapResponse,
)
from swap_service.services.coordinator import SwapCoordinator, SwapDecision
from swap_service.services.queries import (
    list_incoming_swaps,
    list_outgoing_swaps,
)
from swap_service.services.sql_store import SqlSwapStore

router = APIRouter()


def get_swap_coordinator(
    db: AsyncSession = Depends(get_db),
) -> SwapCoordinator:
    return SwapCoordinator(SqlSwapStore(db))


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Propose a slot swap",
)
@exception_handler
async def create_swap_request(
    swap_data: SwapCreateRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: SwapCoordinator = Depends(get_swap_coordinator),
) -> JSONResponse:
    swap = await coordinator.propose(
        requester_id=user_id,
        requester_slot_id=swap_data.my_slot_id,
        recipient_slot_id=swap_data.their_slot_id,
    )
    return api_response(
        status_code=status.HTTP_201_CREATED,
        message="Swap request created successfully",
        data=SwapResponse.model_validate(swap),
    )


@router.post(
    "/{swap_id}/respond",
    status_code=status.HTTP_200_OK,
    summary="Accept or reject a swap request addressed to me",
)
@exception_handler
async def respond_to_swap_request(
    response_data: SwapRespondRequest,
    swap_id: str = Path(..., min_length=6, max_length=6),
    user_id: str = Depends(get_current_user_id),
    coordinator: SwapCoordinator = Depends(get_swap_coordinator),
) -> JSONResponse:
    swap = await coordinator.resolve(
        recipient_id=user_id,
        swap_id=swap_id,
        decision=SwapDecision.from_accept_flag(response_data.accept),
    )
    return api_response(
        status_code=status.HTTP_200_OK,
        message=f"Swap request {swap.status.value.lower()}",
        data=SwapResponse.model_validate(swap),
    )


@router.get(
    "/incoming",
    status_code=status.HTTP_200_OK,
    summary="Pending swap requests awaiting my decision",
)
@exception_handler
async def get_incoming_swap_requests(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    swaps = await list_incoming_swaps(db, user_id)
    return api_response(
        status_code=status.HTTP_200_OK,
        message="Incoming swap requests retrieved successfully",
        data=swaps,
    )


@router.get(
    "/outgoing",
    status_code=status.HTTP_200_OK,
    summary="Swap requests I have made",
)
@exception_handler
async def get_outgoing_swap_requests(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    swaps = await list_outgoing_swaps(db, user_id)
    return api_response(
        status_code=status.HTTP_200_OK,
        message="Outgoing swap requests retrieved successfully",
        data=swaps,
    )
