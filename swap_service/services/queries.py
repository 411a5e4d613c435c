"""
Read-only swap listings for the inbox views.
"""

from typing import Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.db.models import Slot, SwapRequest, SwapStatus
from slot_service.schemas.slots import SlotResponse
from swap_service.schemas.swaps import SwapDetailResponse


async def _with_slots(
    db: AsyncSession, swaps: Sequence[SwapRequest]
) -> List[SwapDetailResponse]:
    slot_ids = {s.requester_slot_id for s in swaps} | {
        s.recipient_slot_id for s in swaps
    }
    slots: Dict[str, Slot] = {}
    if slot_ids:
        result = await db.execute(
            select(Slot).where(Slot.slot_id.in_(slot_ids))
        )
        slots = {slot.slot_id: slot for slot in result.scalars().all()}

    details = []
    for swap in swaps:
        requester_slot = slots.get(swap.requester_slot_id)
        recipient_slot = slots.get(swap.recipient_slot_id)
        details.append(
            SwapDetailResponse.model_validate(swap).model_copy(
                update={
                    "requester_slot": (
                        SlotResponse.model_validate(requester_slot)
                        if requester_slot
                        else None
                    ),
                    "recipient_slot": (
                        SlotResponse.model_validate(recipient_slot)
                        if recipient_slot
                        else None
                    ),
                }
            )
        )
    return details


async def list_incoming_swaps(
    db: AsyncSession, user_id: str
) -> List[SwapDetailResponse]:
    """PENDING swaps awaiting the user's decision, newest first."""
    query = (
        select(SwapRequest)
        .where(
            SwapRequest.recipient_id == user_id,
            SwapRequest.status == SwapStatus.PENDING,
        )
        .order_by(SwapRequest.created_at.desc())
    )
    swaps = (await db.execute(query)).scalars().all()
    return await _with_slots(db, swaps)


async def list_outgoing_swaps(
    db: AsyncSession, user_id: str
) -> List[SwapDetailResponse]:
    """Every swap the user proposed, newest first."""
    query = (
        select(SwapRequest)
        .where(SwapRequest.requester_id == user_id)
        .order_by(SwapRequest.created_at.desc())
    )
    swaps = (await db.execute(query)).scalars().all()
    return await _with_slots(db, swaps)
