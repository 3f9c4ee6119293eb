"""Domain models for the venue booking system."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, model_validator

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    CONFLICT_DETECTED = "conflict_detected"
    CONFLICT_OVERRIDDEN = "conflict_overridden"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Venue(BaseModel):
    id: str = Field(default_factory=_new_id)
    venue_name: str = Field(min_length=1)
    capacity: int | None = Field(default=None, gt=0)
    location: str | None = None
    available: bool = True
    created_at: datetime = Field(default_factory=_utcnow)


class Booking(BaseModel):
    """An existing booking of a venue, owned by the persistence layer."""

    id: str = Field(default_factory=_new_id)
    venue_id: str
    group_name: str
    title: str
    description: str | None = None
    start_time: UtcDatetime
    end_time: UtcDatetime
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> Booking:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    booking_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Engine inputs / outputs
# ---------------------------------------------------------------------------


class BookingRequest(BaseModel):
    """A proposed booking to be checked against a venue's existing bookings.

    ``exclude_id`` names a booking to leave out of the comparison, used when
    re-checking a booking that is being edited.
    """

    venue_id: str = Field(min_length=1)
    start_time: UtcDatetime
    end_time: UtcDatetime
    exclude_id: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> BookingRequest:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimeWindow(BaseModel):
    """Working-hours bound of a single day, as UTC instants: [start, end)."""

    start: UtcDatetime
    end: UtcDatetime

    @model_validator(mode="after")
    def _end_after_start(self) -> TimeWindow:
        if self.end <= self.start:
            raise ValueError("window end must be after window start")
        return self


class SuggestedSlot(BaseModel):
    start_time: UtcDatetime
    end_time: UtcDatetime
    available: bool = True


class ConflictResult(BaseModel):
    has_conflict: bool
    conflicting_bookings: list[Booking] = Field(default_factory=list)
    suggested_slots: list[SuggestedSlot] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class CreateVenueRequest(BaseModel):
    venue_name: str = Field(min_length=1)
    capacity: int | None = Field(default=None, gt=0)
    location: str | None = None
    available: bool = True


class ConflictCheckRequest(BaseModel):
    start_time: UtcDatetime
    end_time: UtcDatetime
    exclude_id: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> ConflictCheckRequest:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class CreateBookingRequest(BaseModel):
    venue_id: str = Field(min_length=1)
    group_name: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str | None = None
    start_time: UtcDatetime
    end_time: UtcDatetime
    override: bool = False

    @model_validator(mode="after")
    def _end_after_start(self) -> CreateBookingRequest:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class UpdateBookingRequest(BaseModel):
    """Partial edit. Only ``description`` may be cleared with an explicit null."""

    venue_id: str | None = Field(default=None, min_length=1)
    group_name: str | None = Field(default=None, min_length=1)
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    override: bool = False
