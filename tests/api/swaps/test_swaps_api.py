import pytest
import pytest_asyncio
from httpx import AsyncClient

from shared.db.models import SlotStatus, SwapStatus

ALICE = "usr_alice"
BOB = "usr_bob"
CAROL = "usr_carol"


@pytest.fixture
def propose(test_client: AsyncClient, auth_headers):
    async def _propose(user_id: str, my_slot_id: str, their_slot_id: str):
        return await test_client.post(
            "/api/v1/swaps/",
            json={"my_slot_id": my_slot_id, "their_slot_id": their_slot_id},
            headers=auth_headers(user_id),
        )

    return _propose


@pytest.fixture
def respond(test_client: AsyncClient, auth_headers):
    async def _respond(user_id: str, swap_id: str, accept: bool):
        return await test_client.post(
            f"/api/v1/swaps/{swap_id}/respond",
            json={"accept": accept},
            headers=auth_headers(user_id),
        )

    return _respond


@pytest_asyncio.fixture
async def offered_slots(db_helper):
    mine = await db_helper.create_slot(
        owner_id=ALICE, status=SlotStatus.SWAPPABLE
    )
    theirs = await db_helper.create_slot(
        owner_id=BOB, status=SlotStatus.SWAPPABLE
    )
    return mine, theirs


@pytest.mark.asyncio
async def test_create_swap_request(propose, offered_slots, db_helper):
    mine, theirs = offered_slots

    res = await propose(ALICE, mine.slot_id, theirs.slot_id)
    body = res.json()

    assert res.status_code == 201
    assert body["message"] == "Swap request created successfully"
    assert body["data"]["status"] == "PENDING"
    assert body["data"]["recipient_id"] == BOB
    assert body["data"]["resolved_at"] is None
    for slot in (mine, theirs):
        stored = await db_helper.get_slot(slot.slot_id)
        assert stored.status == SlotStatus.SWAP_PENDING


@pytest.mark.asyncio
async def test_swap_with_itself_is_not_found(
    propose, offered_slots, db_helper
):
    mine, _ = offered_slots

    res = await propose(ALICE, mine.slot_id, mine.slot_id)

    assert res.status_code == 404
    assert res.json()["message"] == "Their slot not found"
    assert await db_helper.list_swaps() == []


@pytest.mark.asyncio
async def test_swap_for_busy_slot_is_invalid_state(
    propose, offered_slots, db_helper
):
    mine, _ = offered_slots
    busy = await db_helper.create_slot(owner_id=BOB, status=SlotStatus.BUSY)

    res = await propose(ALICE, mine.slot_id, busy.slot_id)

    assert res.status_code == 400
    assert res.json()["errorCode"] == "INVALID_STATE"
    stored = await db_helper.get_slot(mine.slot_id)
    assert stored.status == SlotStatus.SWAPPABLE


@pytest.mark.asyncio
async def test_swap_with_unknown_slot_is_not_found(propose, offered_slots):
    mine, _ = offered_slots

    res = await propose(ALICE, mine.slot_id, "zzzzzz")

    assert res.status_code == 404
    assert res.json()["message"] == "Their slot not found"


@pytest.mark.asyncio
async def test_second_request_for_pending_slot_conflicts(
    propose, offered_slots, db_helper
):
    mine, theirs = offered_slots
    other = await db_helper.create_slot(
        owner_id=CAROL, status=SlotStatus.SWAPPABLE
    )
    await propose(ALICE, mine.slot_id, theirs.slot_id)

    res = await propose(CAROL, other.slot_id, theirs.slot_id)

    assert res.status_code == 409
    assert res.json()["errorCode"] == "CONFLICT"
    assert len(await db_helper.list_swaps()) == 1


@pytest.mark.asyncio
async def test_accept_swaps_owners(propose, respond, offered_slots, db_helper):
    mine, theirs = offered_slots
    swap_id = (await propose(ALICE, mine.slot_id, theirs.slot_id)).json()[
        "data"
    ]["swap_id"]

    res = await respond(BOB, swap_id, True)
    body = res.json()

    assert res.status_code == 200
    assert body["message"] == "Swap request accepted"
    assert body["data"]["status"] == "ACCEPTED"
    assert body["data"]["resolved_at"] is not None

    mine_after = await db_helper.get_slot(mine.slot_id)
    theirs_after = await db_helper.get_slot(theirs.slot_id)
    assert mine_after.owner_id == BOB
    assert theirs_after.owner_id == ALICE
    assert mine_after.status == theirs_after.status == SlotStatus.BUSY


@pytest.mark.asyncio
async def test_reject_keeps_owners(propose, respond, offered_slots, db_helper):
    mine, theirs = offered_slots
    swap_id = (await propose(ALICE, mine.slot_id, theirs.slot_id)).json()[
        "data"
    ]["swap_id"]

    res = await respond(BOB, swap_id, False)

    assert res.status_code == 200
    assert res.json()["message"] == "Swap request rejected"
    mine_after = await db_helper.get_slot(mine.slot_id)
    assert mine_after.owner_id == ALICE
    assert mine_after.status == SlotStatus.SWAPPABLE
    swap = await db_helper.get_swap(swap_id)
    assert swap.status == SwapStatus.REJECTED


@pytest.mark.asyncio
async def test_requester_cannot_respond(propose, respond, offered_slots):
    mine, theirs = offered_slots
    swap_id = (await propose(ALICE, mine.slot_id, theirs.slot_id)).json()[
        "data"
    ]["swap_id"]

    res = await respond(ALICE, swap_id, True)

    assert res.status_code == 404


@pytest.mark.asyncio
async def test_second_response_is_not_found(propose, respond, offered_slots):
    mine, theirs = offered_slots
    swap_id = (await propose(ALICE, mine.slot_id, theirs.slot_id)).json()[
        "data"
    ]["swap_id"]
    await respond(BOB, swap_id, True)

    res = await respond(BOB, swap_id, False)

    assert res.status_code == 404
    assert res.json()["message"] == (
        "Swap request not found or already processed"
    )


@pytest.mark.asyncio
async def test_respond_requires_accept_flag(
    test_client, auth_headers, propose, offered_slots
):
    mine, theirs = offered_slots
    swap_id = (await propose(ALICE, mine.slot_id, theirs.slot_id)).json()[
        "data"
    ]["swap_id"]

    res = await test_client.post(
        f"/api/v1/swaps/{swap_id}/respond",
        json={},
        headers=auth_headers(BOB),
    )

    assert res.status_code == 422


@pytest.mark.asyncio
async def test_incoming_and_outgoing_views(
    test_client, auth_headers, propose, respond, offered_slots, db_helper
):
    mine, theirs = offered_slots
    swap_id = (await propose(ALICE, mine.slot_id, theirs.slot_id)).json()[
        "data"
    ]["swap_id"]

    res = await test_client.get(
        "/api/v1/swaps/incoming", headers=auth_headers(BOB)
    )
    incoming = res.json()["data"]
    assert res.status_code == 200
    assert [s["swap_id"] for s in incoming] == [swap_id]
    assert incoming[0]["requester_slot"]["slot_id"] == mine.slot_id
    assert incoming[0]["recipient_slot"]["slot_id"] == theirs.slot_id

    res = await test_client.get(
        "/api/v1/swaps/incoming", headers=auth_headers(ALICE)
    )
    assert res.json()["data"] == []

    await respond(BOB, swap_id, False)
    await test_client.delete(
        f"/api/v1/slots/{mine.slot_id}", headers=auth_headers(ALICE)
    )

    res = await test_client.get(
        "/api/v1/swaps/incoming", headers=auth_headers(BOB)
    )
    assert res.json()["data"] == []

    res = await test_client.get(
        "/api/v1/swaps/outgoing", headers=auth_headers(ALICE)
    )
    outgoing = res.json()["data"]
    assert res.status_code == 200
    assert res.json()["message"] == (
        "Outgoing swap requests retrieved successfully"
    )
    assert outgoing[0]["status"] == "REJECTED"
    assert outgoing[0]["requester_slot"] is None
    assert outgoing[0]["recipient_slot"]["slot_id"] == theirs.slot_id
