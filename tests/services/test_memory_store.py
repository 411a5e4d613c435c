"""
Tests for the in-memory swap store.
"""

from datetime import datetime, timezone
from typing import Any

import pytest

from shared.core.exceptions import NotFoundError
from shared.db.models import SlotStatus, SwapRequest, SwapStatus
from swap_service.services.memory_store import InMemorySwapStore
from tests.utils.factories import AsyncTestDataFactory


def make_swap(swap_id: str = "swp001", **kwargs: Any) -> SwapRequest:
    return AsyncTestDataFactory.build_swap(swap_id=swap_id, **kwargs)


@pytest.fixture
def store() -> InMemorySwapStore:
    store = InMemorySwapStore()
    store.put_slot(AsyncTestDataFactory.build_slot(slot_id="slot0a"))
    store.put_slot(AsyncTestDataFactory.build_slot(slot_id="slot0b"))
    return store


@pytest.mark.asyncio
async def test_operations_require_transaction(store):
    with pytest.raises(RuntimeError):
        await store.get_slot("slot0a")


@pytest.mark.asyncio
async def test_returned_records_are_copies(store):
    async with store.transaction():
        slot = await store.get_slot("slot0a")
        slot.status = SlotStatus.BUSY

    assert store.peek_slot("slot0a").status == SlotStatus.SWAPPABLE


@pytest.mark.asyncio
async def test_lock_slots_skips_missing(store):
    async with store.transaction():
        locked = await store.lock_slots(["slot0b", "nosuch", "slot0a"])

    assert list(locked) == ["slot0a", "slot0b"]


@pytest.mark.asyncio
async def test_error_rolls_back_every_write(store):
    with pytest.raises(NotFoundError):
        async with store.transaction():
            await store.set_slot_state(
                "slot0a", SlotStatus.SWAP_PENDING, owner_id="usr_z"
            )
            await store.add_swap(make_swap())
            await store.set_slot_state("nosuch", SlotStatus.BUSY)

    slot = store.peek_slot("slot0a")
    assert slot.status == SlotStatus.SWAPPABLE
    assert slot.owner_id != "usr_z"
    assert store.all_swaps() == []


@pytest.mark.asyncio
async def test_duplicate_swap_id_rejected(store):
    async with store.transaction():
        await store.add_swap(make_swap())

    with pytest.raises(ValueError):
        async with store.transaction():
            await store.add_swap(make_swap())


@pytest.mark.asyncio
async def test_find_pending_swaps_matches_either_side(store):
    async with store.transaction():
        await store.add_swap(make_swap("swp001"))
        await store.add_swap(
            make_swap(
                "swp002",
                requester_slot_id="slot0c",
                recipient_slot_id="slot0d",
                status=SwapStatus.REJECTED,
            )
        )
        by_requester = await store.find_pending_swaps(["slot0a"])
        by_recipient = await store.find_pending_swaps(["slot0b"])
        resolved_only = await store.find_pending_swaps(["slot0c"])

    assert [s.swap_id for s in by_requester] == ["swp001"]
    assert [s.swap_id for s in by_recipient] == ["swp001"]
    assert resolved_only == []


@pytest.mark.asyncio
async def test_finalize_swap(store):
    resolved_at = datetime.now(timezone.utc)
    async with store.transaction():
        await store.add_swap(make_swap())
        swap = await store.finalize_swap(
            "swp001", SwapStatus.ACCEPTED, resolved_at
        )

    assert swap.status == SwapStatus.ACCEPTED
    assert store.peek_swap("swp001").resolved_at == resolved_at


@pytest.mark.asyncio
async def test_finalize_unknown_swap(store):
    with pytest.raises(NotFoundError):
        async with store.transaction():
            await store.finalize_swap(
                "nosuch", SwapStatus.REJECTED, datetime.now(timezone.utc)
            )


@pytest.mark.asyncio
async def test_delete_slot(store):
    async with store.transaction():
        await store.delete_slot("slot0a")
        assert await store.get_slot("slot0a") is None

    assert store.peek_slot("slot0b") is not None
