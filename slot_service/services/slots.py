"""
Slot service functions: create, list, edit and delete a user's slots.

Edits and deletes run inside a swap-store transaction with the slot row
locked, and consult the deletion guard first, so they cannot interleave with
a swap that is locking the same slot.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.core.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from shared.core.logging_config import get_logger
from shared.db.models import Slot, SlotStatus
from shared.utils.id_generators import generate_slot_id
from shared.utils.timezone_utils import ensure_utc
from slot_service.schemas.slots import SlotCreateRequest, SlotUpdateRequest
from swap_service.services.coordinator import SwapCoordinator
from swap_service.services.sql_store import SqlSwapStore

logger = get_logger(__name__)


class SlotService:
    """Service class for slot operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = SqlSwapStore(db)
        self.coordinator = SwapCoordinator(self.store)

    async def list_user_slots(self, owner_id: str) -> List[Slot]:
        query = (
            select(Slot)
            .where(Slot.owner_id == owner_id)
            .order_by(Slot.start_time.asc())
        )
        return list((await self.db.execute(query)).scalars().all())

    async def list_swappable_slots(self, user_id: str) -> List[Slot]:
        """Other users' SWAPPABLE slots, soonest first."""
        query = (
            select(Slot)
            .where(
                Slot.status == SlotStatus.SWAPPABLE,
                Slot.owner_id != user_id,
            )
            .order_by(Slot.start_time.asc())
        )
        return list((await self.db.execute(query)).scalars().all())

    async def get_user_slot(self, owner_id: str, slot_id: str) -> Slot:
        slot = await self.store.get_slot(slot_id)
        if slot is None or slot.owner_id != owner_id:
            raise NotFoundError("Slot not found")
        return slot

    async def create_slot(
        self, owner_id: str, slot_data: SlotCreateRequest
    ) -> Slot:
        async with self.store.transaction():
            slot = Slot(
                slot_id=generate_slot_id(),
                owner_id=owner_id,
                title=slot_data.title,
                start_time=slot_data.start_time,
                end_time=slot_data.end_time,
                status=slot_data.status,
            )
            self.db.add(slot)
            await self.db.flush()
            await self.db.refresh(slot)
        logger.info(f"Slot {slot.slot_id} created by {owner_id}")
        return slot

    async def update_slot(
        self, owner_id: str, slot_id: str, changes: SlotUpdateRequest
    ) -> Slot:
        """
        Apply a partial edit to one of the caller's slots.

        Raises:
            NotFoundError: Slot missing or owned by someone else.
            ConflictError: Slot is locked by a pending swap.
            ValidationError: Merged times are out of order.
        """
        fields = changes.model_dump(exclude_unset=True)
        async with self.store.transaction():
            slot = await self._lock_own_unlocked_slot(owner_id, slot_id)

            start_time = fields.get("start_time") or ensure_utc(
                slot.start_time
            )
            end_time = fields.get("end_time") or ensure_utc(slot.end_time)
            if start_time >= end_time:
                raise ValidationError("Start time must be before end time")

            for name, value in fields.items():
                if value is not None:
                    setattr(slot, name, value)
            await self.db.flush()
            await self.db.refresh(slot)
        logger.info(f"Slot {slot_id} updated by {owner_id}: {sorted(fields)}")
        return slot

    async def delete_slot(self, owner_id: str, slot_id: str) -> None:
        """
        Delete one of the caller's slots.

        Raises:
            NotFoundError: Slot missing or owned by someone else.
            ConflictError: Slot is locked by a pending swap.
        """
        async with self.store.transaction():
            await self._lock_own_unlocked_slot(owner_id, slot_id)
            await self.store.delete_slot(slot_id)
        logger.info(f"Slot {slot_id} deleted by {owner_id}")

    async def _lock_own_unlocked_slot(
        self, owner_id: str, slot_id: str
    ) -> Slot:
        slots = await self.store.lock_slots([slot_id])
        slot: Optional[Slot] = slots.get(slot_id)
        if slot is None or slot.owner_id != owner_id:
            raise NotFoundError("Slot not found")

        await self.coordinator.ensure_slot_unlocked(slot_id)
        if slot.status == SlotStatus.SWAP_PENDING:
            raise ConflictError(
                "Cannot modify a slot with pending swap requests",
                details={"slot_id": slot_id},
            )
        return slot
