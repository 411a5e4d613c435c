from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from shared.db.models.base import SlotSwapBase


class SlotStatus(str, Enum):
    BUSY = "BUSY"  # Not offered for exchange
    SWAPPABLE = "SWAPPABLE"  # Offered on the marketplace
    SWAP_PENDING = "SWAP_PENDING"  # Locked by an in-flight swap request

    def __str__(self):
        return self.name.lower()


# Statuses an owner may set directly; SWAP_PENDING is reserved for swaps
OWNER_SETTABLE_STATUSES = (SlotStatus.BUSY, SlotStatus.SWAPPABLE)


class Slot(SlotSwapBase):
    __tablename__ = "slots"

    slot_id: Mapped[str] = mapped_column(
        String(6),
        primary_key=True,
        nullable=False,
    )
    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    status: Mapped[SlotStatus] = mapped_column(
        SQLAlchemyEnum(SlotStatus, name="slot_status_enum", native_enum=False),
        nullable=False,
        default=SlotStatus.BUSY,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="slot_time_order"),
        Index("ix_slots_owner_start", "owner_id", "start_time"),
    )
