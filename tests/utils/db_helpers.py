from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.db.models import Slot, SwapRequest

from .factories import AsyncTestDataFactory


class AsyncDatabaseTestHelper:
    """Seeds and inspects the test database, one short session per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create_slot(self, **kwargs: Any) -> Slot:
        slot = AsyncTestDataFactory.build_slot(**kwargs)
        async with self.session_factory() as session:
            session.add(slot)
            await session.commit()
            await session.refresh(slot)
        return slot

    async def get_slot(self, slot_id: str) -> Optional[Slot]:
        async with self.session_factory() as session:
            return (
                await session.execute(
                    select(Slot).where(Slot.slot_id == slot_id)
                )
            ).scalar_one_or_none()

    async def get_swap(self, swap_id: str) -> Optional[SwapRequest]:
        async with self.session_factory() as session:
            return (
                await session.execute(
                    select(SwapRequest).where(SwapRequest.swap_id == swap_id)
                )
            ).scalar_one_or_none()

    async def list_swaps(self) -> List[SwapRequest]:
        async with self.session_factory() as session:
            return list(
                (await session.execute(select(SwapRequest))).scalars().all()
            )
