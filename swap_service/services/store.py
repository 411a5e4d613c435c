"""
Storage contract consumed by the swap coordinator.

A store exposes slot and swap-ledger operations that all take part in one
transaction, opened with ``async with store.transaction():``. The transaction
commits when the block exits normally and rolls back on any exception, so a
caller that raises half-way through leaves every touched record unchanged.

Two implementations exist:

- ``SqlSwapStore`` runs on an ``AsyncSession`` and locks rows with
  ``SELECT ... FOR UPDATE``.
- ``InMemorySwapStore`` serialises transactions behind an ``asyncio.Lock``
  and restores a snapshot on rollback. Used in tests and local tooling.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncContextManager, Dict, List, Optional, Sequence

from shared.db.models import Slot, SlotStatus, SwapRequest, SwapStatus


class SwapStore(ABC):
    """Abstract slot store and swap ledger with transactional semantics."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """Open the atomic unit every other method runs inside."""

    # --- Slots -----------------------------------------------------------

    @abstractmethod
    async def lock_slots(self, slot_ids: Sequence[str]) -> Dict[str, Slot]:
        """
        Lock the given slots for the rest of the transaction.

        Locks are taken in ascending id order so two transactions naming the
        same pair in opposite order cannot deadlock. Missing ids are absent
        from the returned mapping.
        """

    @abstractmethod
    async def get_slot(self, slot_id: str) -> Optional[Slot]:
        """Read one slot without locking it."""

    @abstractmethod
    async def set_slot_state(
        self,
        slot_id: str,
        status: SlotStatus,
        owner_id: Optional[str] = None,
    ) -> None:
        """Set a slot's status and, when given, its owner."""

    @abstractmethod
    async def delete_slot(self, slot_id: str) -> None:
        """Remove a slot."""

    # --- Swap ledger -----------------------------------------------------

    @abstractmethod
    async def find_pending_swaps(
        self, slot_ids: Sequence[str]
    ) -> List[SwapRequest]:
        """PENDING swaps naming any of the slots on either side."""

    @abstractmethod
    async def add_swap(self, swap: SwapRequest) -> SwapRequest:
        """Insert a new ledger entry."""

    @abstractmethod
    async def lock_swap(self, swap_id: str) -> Optional[SwapRequest]:
        """Read and lock one ledger entry for the rest of the transaction."""

    @abstractmethod
    async def finalize_swap(
        self, swap_id: str, status: SwapStatus, resolved_at: datetime
    ) -> SwapRequest:
        """Move a ledger entry to a terminal status and return it."""
