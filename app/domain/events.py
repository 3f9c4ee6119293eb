"""Domain events emitted during the booking lifecycle."""

from __future__ import annotations

from pydantic import BaseModel


class BookingCreated(BaseModel):
    """Fired when a new Booking is persisted."""

    booking_id: str


class BookingUpdated(BaseModel):
    """Fired when an existing Booking is edited and persisted."""

    booking_id: str
    changed_fields: list[str]


class ConflictDetected(BaseModel):
    """Fired when a booking request overlaps bookings at the same venue."""

    booking_id: str | None
    venue_id: str
    conflicting_booking_ids: list[str]
    suggested_slot_count: int


class ConflictOverridden(BaseModel):
    """Fired when a booking is stored despite known overlaps."""

    booking_id: str
    conflicting_booking_ids: list[str]


class BookingDeleted(BaseModel):
    """Fired after a Booking is removed from the store."""

    booking_id: str
    venue_id: str
