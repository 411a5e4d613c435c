"""
Swap coordinator: creates and resolves slot swap requests.

Each public operation runs as one store transaction. Slots are locked before
any check is made, and every check is repeated under those locks, so two
concurrent requests naming the same slot cannot both succeed.
"""

from enum import Enum
from typing import Dict

from shared.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
)
from shared.core.logging_config import get_logger
from shared.db.models import Slot, SlotStatus, SwapRequest, SwapStatus
from shared.utils.id_generators import generate_swap_id
from shared.utils.timezone_utils import utc_now
from swap_service.services.conflict_guard import (
    ensure_slot_unlocked,
    has_pending_swap,
)
from swap_service.services.store import SwapStore

logger = get_logger(__name__)


class SwapDecision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"

    @classmethod
    def from_accept_flag(cls, accept: bool) -> "SwapDecision":
        return cls.ACCEPT if accept else cls.REJECT


def _require_swappable(slot: Slot, side: str) -> None:
    if slot.status == SlotStatus.SWAPPABLE:
        return
    if slot.status == SlotStatus.SWAP_PENDING:
        raise ConflictError(
            f"{side.capitalize()} slot is already part of a pending swap",
            details={"slot_id": slot.slot_id},
        )
    raise InvalidStateError(
        f"{side.capitalize()} slot must be swappable",
        details={"slot_id": slot.slot_id, "status": slot.status.value},
    )


class SwapCoordinator:
    """Orchestrates swap proposals and their resolution against a store."""

    def __init__(self, store: SwapStore):
        self.store = store

    async def propose(
        self,
        requester_id: str,
        requester_slot_id: str,
        recipient_slot_id: str,
    ) -> SwapRequest:
        """
        Offer the requester's slot in exchange for another user's slot.

        Args:
            requester_id: User making the offer.
            requester_slot_id: Slot the requester gives up.
            recipient_slot_id: Slot the requester wants.

        Returns:
            The new PENDING swap request.

        Raises:
            NotFoundError: A slot is missing or owned by the wrong user.
                Naming the same slot twice fails here, since the requester
                owns the wanted slot.
            InvalidStateError: A slot is not swappable.
            ConflictError: A slot is already part of a pending swap.
        """
        async with self.store.transaction():
            slots: Dict[str, Slot] = await self.store.lock_slots(
                [requester_slot_id, recipient_slot_id]
            )

            my_slot = slots.get(requester_slot_id)
            if my_slot is None or my_slot.owner_id != requester_id:
                raise NotFoundError("Your slot not found")
            _require_swappable(my_slot, "your")

            their_slot = slots.get(recipient_slot_id)
            if their_slot is None or their_slot.owner_id == requester_id:
                raise NotFoundError("Their slot not found")
            _require_swappable(their_slot, "their")

            if await has_pending_swap(
                self.store, [requester_slot_id, recipient_slot_id]
            ):
                raise ConflictError(
                    "One or both slots already have pending swap requests"
                )

            swap = await self.store.add_swap(
                SwapRequest(
                    swap_id=generate_swap_id(),
                    requester_id=requester_id,
                    recipient_id=their_slot.owner_id,
                    requester_slot_id=requester_slot_id,
                    recipient_slot_id=recipient_slot_id,
                    status=SwapStatus.PENDING,
                    created_at=utc_now(),
                    resolved_at=None,
                )
            )
            await self.store.set_slot_state(
                requester_slot_id, SlotStatus.SWAP_PENDING
            )
            await self.store.set_slot_state(
                recipient_slot_id, SlotStatus.SWAP_PENDING
            )

        logger.info(
            f"Swap {swap.swap_id} proposed by {requester_id}: "
            f"{requester_slot_id} <-> {recipient_slot_id}"
        )
        return swap

    async def resolve(
        self,
        recipient_id: str,
        swap_id: str,
        decision: SwapDecision,
    ) -> SwapRequest:
        """
        Accept or reject a pending swap addressed to ``recipient_id``.

        Accepting exchanges the owners of both slots and marks them BUSY;
        rejecting returns both slots to SWAPPABLE with owners unchanged.

        Raises:
            NotFoundError: The swap is missing, addressed to someone else,
                or already resolved.
            InvalidStateError: On accept, a slot vanished or no longer
                matches the state the swap was created against.
        """
        async with self.store.transaction():
            swap = await self.store.lock_swap(swap_id)
            if (
                swap is None
                or swap.recipient_id != recipient_id
                or swap.status.is_terminal
            ):
                raise NotFoundError(
                    "Swap request not found or already processed"
                )

            slots = await self.store.lock_slots(
                [swap.requester_slot_id, swap.recipient_slot_id]
            )
            requester_slot = slots.get(swap.requester_slot_id)
            recipient_slot = slots.get(swap.recipient_slot_id)

            if decision == SwapDecision.ACCEPT:
                if requester_slot is None or recipient_slot is None:
                    raise InvalidStateError("One or both slots not found")
                self._check_locked_by(
                    requester_slot, swap.requester_id, swap_id
                )
                self._check_locked_by(
                    recipient_slot, swap.recipient_id, swap_id
                )

                await self.store.set_slot_state(
                    requester_slot.slot_id,
                    SlotStatus.BUSY,
                    owner_id=swap.recipient_id,
                )
                await self.store.set_slot_state(
                    recipient_slot.slot_id,
                    SlotStatus.BUSY,
                    owner_id=swap.requester_id,
                )
                final_status = SwapStatus.ACCEPTED
            else:
                for slot in (requester_slot, recipient_slot):
                    if slot is not None:
                        await self.store.set_slot_state(
                            slot.slot_id, SlotStatus.SWAPPABLE
                        )
                final_status = SwapStatus.REJECTED

            resolved = await self.store.finalize_swap(
                swap_id, final_status, utc_now()
            )

        logger.info(
            f"Swap {swap_id} {final_status.value.lower()} by {recipient_id}"
        )
        return resolved

    async def ensure_slot_unlocked(self, slot_id: str) -> None:
        """
        Deletion guard for slot CRUD: raise ConflictError while any PENDING
        swap references the slot. Must be awaited inside a transaction that
        has already locked the slot.
        """
        await ensure_slot_unlocked(self.store, slot_id)

    @staticmethod
    def _check_locked_by(slot: Slot, owner_id: str, swap_id: str) -> None:
        if slot.owner_id != owner_id or slot.status != SlotStatus.SWAP_PENDING:
            logger.error(
                f"Swap {swap_id}: slot {slot.slot_id} drifted "
                f"(owner={slot.owner_id}, status={slot.status})"
            )
            raise InvalidStateError(
                "Slot no longer matches the swap request",
                details={"slot_id": slot.slot_id},
            )
