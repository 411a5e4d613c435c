"""
Database models package.

Exposes all ORM models so callers can write ``from shared.db.models import Slot``.
Importing this package also registers every table on ``SlotSwapBase.metadata``.
"""

from .base import SlotSwapBase
from .slots import OWNER_SETTABLE_STATUSES, Slot, SlotStatus
from .swaps import SwapRequest, SwapStatus

__all__ = [
    # Base
    "SlotSwapBase",
    # Slots
    "Slot",
    "SlotStatus",
    "OWNER_SETTABLE_STATUSES",
    # Swap ledger
    "SwapRequest",
    "SwapStatus",
]
