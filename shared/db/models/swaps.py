from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from shared.db.models.base import SlotSwapBase


class SwapStatus(str, Enum):
    PENDING = "PENDING"  # Awaiting the recipient's decision
    ACCEPTED = "ACCEPTED"  # Ownership exchanged
    REJECTED = "REJECTED"  # Slots released unchanged

    def __str__(self):
        return self.name.lower()

    @property
    def is_terminal(self) -> bool:
        return self is not SwapStatus.PENDING


class SwapRequest(SlotSwapBase):
    """Ledger entry for a pairwise slot exchange.

    Slot references are plain ids rather than foreign keys: once a request is
    resolved its slots may be deleted, and the row keeps the ids as history.
    """

    __tablename__ = "swap_requests"

    swap_id: Mapped[str] = mapped_column(
        String(6),
        primary_key=True,
        nullable=False,
    )
    requester_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    recipient_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    requester_slot_id: Mapped[str] = mapped_column(
        String(6), nullable=False, index=True
    )
    recipient_slot_id: Mapped[str] = mapped_column(
        String(6), nullable=False, index=True
    )
    status: Mapped[SwapStatus] = mapped_column(
        SQLAlchemyEnum(SwapStatus, name="swap_status_enum", native_enum=False),
        nullable=False,
        default=SwapStatus.PENDING,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(
            "requester_slot_id <> recipient_slot_id", name="distinct_slots"
        ),
        Index("ix_swap_requests_recipient_status", "recipient_id", "status"),
    )
