"""Service for detecting overlaps between a booking request and a venue's bookings."""

from __future__ import annotations

from app.domain.errors import BookingValidationError
from app.domain.models import Booking, BookingRequest
from app.services.intervals import overlaps


def ensure_valid(request: BookingRequest) -> None:
    """Raise BookingValidationError unless the request has a venue and start < end.

    Models built with ``model_construct`` skip pydantic validation, so the
    engine repeats the check itself.
    """
    if not request.venue_id:
        raise BookingValidationError("venue_id is required")
    if request.start_time >= request.end_time:
        raise BookingValidationError("start_time must be before end_time")


def find_conflicts(
    request: BookingRequest,
    existing_bookings: list[Booking],
) -> list[Booking]:
    """Return existing bookings that overlap the requested interval.

    *existing_bookings* is expected to hold only the same venue and calendar
    day as the request. Input order is preserved. The booking named by
    ``request.exclude_id`` is never reported.
    """
    ensure_valid(request)
    return [
        booking
        for booking in existing_bookings
        if booking.id != request.exclude_id
        and overlaps(
            request.start_time, request.end_time, booking.start_time, booking.end_time
        )
    ]
