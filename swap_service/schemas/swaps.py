from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.db.models import SwapStatus
from shared.utils.timezone_utils import ensure_utc
from slot_service.schemas.slots import SlotResponse


class SwapCreateRequest(BaseModel):
    """Offer one of your slots for another user's slot"""

    my_slot_id: str = Field(
        ...,
        min_length=6,
        max_length=6,
        description="Slot you give up (must be yours and SWAPPABLE)",
    )
    their_slot_id: str = Field(
        ...,
        min_length=6,
        max_length=6,
        description="Slot you want (must belong to someone else)",
    )


class SwapRespondRequest(BaseModel):
    accept: bool = Field(..., description="True to accept, False to reject")


class SwapResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    swap_id: str
    requester_id: str
    recipient_id: str
    requester_slot_id: str
    recipient_slot_id: str
    status: SwapStatus
    created_at: datetime
    resolved_at: Optional[datetime] = None

    @field_validator("created_at", "resolved_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class SwapDetailResponse(SwapResponse):
    """Swap request with both slots embedded, for the inbox views.

    A slot deleted after its swap was resolved is reported as null.
    """

    requester_slot: Optional[SlotResponse] = None
    recipient_slot: Optional[SlotResponse] = None
