from datetime import datetime
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from shared.db.models import OWNER_SETTABLE_STATUSES, SlotStatus
from shared.utils.timezone_utils import ensure_utc


def _validate_owner_status(v: Optional[SlotStatus]) -> Optional[SlotStatus]:
    if v is not None and v not in OWNER_SETTABLE_STATUSES:
        raise ValueError("Status must be BUSY or SWAPPABLE")
    return v


def _validate_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = " ".join(v.split())
    if not v:
        raise ValueError("Title cannot be empty.")
    return v


class SlotCreateRequest(BaseModel):
    """Request schema for creating a slot"""

    title: str = Field(
        ..., min_length=1, max_length=255, description="Slot title"
    )
    start_time: datetime = Field(..., description="Slot start (ISO 8601)")
    end_time: datetime = Field(..., description="Slot end (ISO 8601)")
    status: SlotStatus = Field(
        SlotStatus.BUSY, description="Initial status, BUSY or SWAPPABLE"
    )

    check_title = field_validator("title")(_validate_title)
    check_status = field_validator("status")(_validate_owner_status)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalise_times(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode="after")
    def validate_time_order(self) -> "SlotCreateRequest":
        if self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        return self


class SlotUpdateRequest(BaseModel):
    """Partial update; ownership cannot be edited."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[SlotStatus] = None

    check_title = field_validator("title")(_validate_title)
    check_status = field_validator("status")(_validate_owner_status)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalise_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class SlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slot_id: str
    owner_id: str
    title: str
    start_time: datetime
    end_time: datetime
    status: SlotStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)
