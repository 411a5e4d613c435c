"""
SQLAlchemy implementation of the swap store.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Dict, List, Optional, Sequence

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.core.exceptions import NotFoundError, StorageFaultError
from shared.core.logging_config import get_logger
from shared.db.models import Slot, SlotStatus, SwapRequest, SwapStatus
from swap_service.services.store import SwapStore

logger = get_logger(__name__)


class SqlSwapStore(SwapStore):
    """Swap store backed by an ``AsyncSession``.

    Row locks come from ``SELECT ... FOR UPDATE``. SQLite ignores the clause
    and has no row locks: a transaction that overlaps another writer fails
    with SQLITE_BUSY, surfacing as StorageFaultError rather than as a
    ConflictError. Concurrent use needs Postgres.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Transaction rolled back on storage error: {e}")
            raise StorageFaultError() from e
        except BaseException:
            await self.db.rollback()
            raise

    # --- Slots -----------------------------------------------------------

    async def lock_slots(self, slot_ids: Sequence[str]) -> Dict[str, Slot]:
        locked: Dict[str, Slot] = {}
        # One statement per id keeps the acquisition order deterministic
        for slot_id in sorted(set(slot_ids)):
            query = (
                select(Slot)
                .where(Slot.slot_id == slot_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            slot = (await self.db.execute(query)).scalar_one_or_none()
            if slot is not None:
                locked[slot_id] = slot
        return locked

    async def get_slot(self, slot_id: str) -> Optional[Slot]:
        query = select(Slot).where(Slot.slot_id == slot_id)
        return (await self.db.execute(query)).scalar_one_or_none()

    async def set_slot_state(
        self,
        slot_id: str,
        status: SlotStatus,
        owner_id: Optional[str] = None,
    ) -> None:
        values: Dict[str, object] = {"status": status}
        if owner_id is not None:
            values["owner_id"] = owner_id
        result = await self.db.execute(
            update(Slot)
            .where(Slot.slot_id == slot_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise NotFoundError(f"Slot {slot_id} not found")

    async def delete_slot(self, slot_id: str) -> None:
        await self.db.execute(
            delete(Slot)
            .where(Slot.slot_id == slot_id)
            .execution_options(synchronize_session="fetch")
        )

    # --- Swap ledger -----------------------------------------------------

    async def find_pending_swaps(
        self, slot_ids: Sequence[str]
    ) -> List[SwapRequest]:
        ids = list(set(slot_ids))
        query = select(SwapRequest).where(
            SwapRequest.status == SwapStatus.PENDING,
            or_(
                SwapRequest.requester_slot_id.in_(ids),
                SwapRequest.recipient_slot_id.in_(ids),
            ),
        )
        return list((await self.db.execute(query)).scalars().all())

    async def add_swap(self, swap: SwapRequest) -> SwapRequest:
        self.db.add(swap)
        await self.db.flush()
        return swap

    async def lock_swap(self, swap_id: str) -> Optional[SwapRequest]:
        query = (
            select(SwapRequest)
            .where(SwapRequest.swap_id == swap_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(query)).scalar_one_or_none()

    async def finalize_swap(
        self, swap_id: str, status: SwapStatus, resolved_at: datetime
    ) -> SwapRequest:
        swap = await self.lock_swap(swap_id)
        if swap is None:
            raise NotFoundError(f"Swap request {swap_id} not found")
        swap.status = status
        swap.resolved_at = resolved_at
        await self.db.flush()
        return swap
