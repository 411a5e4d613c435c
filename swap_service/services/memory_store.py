"""
In-memory implementation of the swap store.

Records are kept as plain dicts and handed out as fresh, detached ORM
instances, so callers can only change state through the store methods.
"""

import asyncio
import copy
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from shared.core.exceptions import NotFoundError
from shared.core.logging_config import get_logger
from shared.db.models import Slot, SlotStatus, SwapRequest, SwapStatus
from swap_service.services.store import SwapStore

logger = get_logger(__name__)

SLOT_FIELDS = (
    "slot_id",
    "owner_id",
    "title",
    "start_time",
    "end_time",
    "status",
    "created_at",
    "updated_at",
)
SWAP_FIELDS = (
    "swap_id",
    "requester_id",
    "recipient_id",
    "requester_slot_id",
    "recipient_slot_id",
    "status",
    "created_at",
    "resolved_at",
)


class InMemorySwapStore(SwapStore):
    """Swap store holding slots and swaps in process memory.

    One transaction runs at a time; every other caller waits on the lock.
    That is stricter than per-slot locking but gives the same guarantees.
    """

    def __init__(self) -> None:
        self._slots: Dict[str, Dict[str, Any]] = {}
        self._swaps: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._in_transaction = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            snapshot = (copy.deepcopy(self._slots), copy.deepcopy(self._swaps))
            self._in_transaction = True
            try:
                yield
            except BaseException:
                self._slots, self._swaps = snapshot
                logger.debug("In-memory transaction rolled back")
                raise
            finally:
                self._in_transaction = False

    def _require_transaction(self) -> None:
        if not self._in_transaction:
            raise RuntimeError("Store operations must run inside transaction()")

    # --- Seeding / inspection (outside the exchange protocol) ------------

    def put_slot(self, slot: Slot) -> Slot:
        """Insert or replace a slot record directly."""
        self._slots[slot.slot_id] = {
            field: getattr(slot, field, None) for field in SLOT_FIELDS
        }
        return self.peek_slot(slot.slot_id)

    def peek_slot(self, slot_id: str) -> Optional[Slot]:
        record = self._slots.get(slot_id)
        return Slot(**record) if record is not None else None

    def peek_swap(self, swap_id: str) -> Optional[SwapRequest]:
        record = self._swaps.get(swap_id)
        return SwapRequest(**record) if record is not None else None

    def all_swaps(self) -> List[SwapRequest]:
        return [SwapRequest(**record) for record in self._swaps.values()]

    # --- Slots -----------------------------------------------------------

    async def lock_slots(self, slot_ids: Sequence[str]) -> Dict[str, Slot]:
        self._require_transaction()
        return {
            slot_id: Slot(**self._slots[slot_id])
            for slot_id in sorted(set(slot_ids))
            if slot_id in self._slots
        }

    async def get_slot(self, slot_id: str) -> Optional[Slot]:
        self._require_transaction()
        return self.peek_slot(slot_id)

    async def set_slot_state(
        self,
        slot_id: str,
        status: SlotStatus,
        owner_id: Optional[str] = None,
    ) -> None:
        self._require_transaction()
        record = self._slots.get(slot_id)
        if record is None:
            raise NotFoundError(f"Slot {slot_id} not found")
        record["status"] = status
        if owner_id is not None:
            record["owner_id"] = owner_id

    async def delete_slot(self, slot_id: str) -> None:
        self._require_transaction()
        self._slots.pop(slot_id, None)

    # --- Swap ledger -----------------------------------------------------

    async def find_pending_swaps(
        self, slot_ids: Sequence[str]
    ) -> List[SwapRequest]:
        self._require_transaction()
        wanted = set(slot_ids)
        return [
            SwapRequest(**record)
            for record in self._swaps.values()
            if record["status"] == SwapStatus.PENDING
            and (
                record["requester_slot_id"] in wanted
                or record["recipient_slot_id"] in wanted
            )
        ]

    async def add_swap(self, swap: SwapRequest) -> SwapRequest:
        self._require_transaction()
        if swap.swap_id in self._swaps:
            raise ValueError(f"Duplicate swap id {swap.swap_id}")
        self._swaps[swap.swap_id] = {
            field: getattr(swap, field, None) for field in SWAP_FIELDS
        }
        return SwapRequest(**self._swaps[swap.swap_id])

    async def lock_swap(self, swap_id: str) -> Optional[SwapRequest]:
        self._require_transaction()
        return self.peek_swap(swap_id)

    async def finalize_swap(
        self, swap_id: str, status: SwapStatus, resolved_at: datetime
    ) -> SwapRequest:
        self._require_transaction()
        record = self._swaps.get(swap_id)
        if record is None:
            raise NotFoundError(f"Swap request {swap_id} not found")
        record["status"] = status
        record["resolved_at"] = resolved_at
        return SwapRequest(**record)
