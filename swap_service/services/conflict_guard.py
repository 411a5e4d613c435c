"""
Checks whether slots are tied up in an unresolved swap request.

Both helpers read the ledger through the caller's store and must run inside
the caller's open transaction, after the slots have been locked; checking in
one transaction and writing in another would let two requests for the same
slot both pass.
"""

from typing import Sequence

from shared.core.exceptions import ConflictError
from swap_service.services.store import SwapStore


async def has_pending_swap(store: SwapStore, slot_ids: Sequence[str]) -> bool:
    """True when any of the slots is on either side of a PENDING swap."""
    return bool(await store.find_pending_swaps(slot_ids))


async def ensure_slot_unlocked(store: SwapStore, slot_id: str) -> None:
    """
    Refuse mutation of a slot referenced by a PENDING swap request.

    Raises:
        ConflictError: If the slot is part of an unresolved swap.
    """
    pending = await store.find_pending_swaps([slot_id])
    if pending:
        raise ConflictError(
            "Cannot modify a slot with pending swap requests",
            details={"swap_ids": [swap.swap_id for swap in pending]},
        )
