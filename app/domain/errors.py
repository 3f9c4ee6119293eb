"""Errors raised by the venue booking engine and its persistence layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.models import Booking


class BookingError(Exception):
    """Base class for booking failures."""


class BookingValidationError(BookingError, ValueError):
    """Raised when a booking request is malformed (e.g. start >= end)."""


class DataUnavailableError(BookingError):
    """Raised when existing bookings could not be loaded.

    A failed fetch means the conflict state is unknown; it must never be
    reported as "no conflict".
    """


class BookingOverlapError(BookingError):
    """Raised at write time when a booking overlaps another at the same venue."""

    def __init__(self, conflicts: list[Booking]) -> None:
        self.conflicts = conflicts
        ids = ", ".join(b.id for b in conflicts)
        super().__init__(f"Booking overlaps existing bookings: {ids}")


class DuplicateVenueError(BookingError):
    """Raised when a venue name is already taken."""

    def __init__(self, venue_name: str) -> None:
        self.venue_name = venue_name
        super().__init__(f"Venue name already exists: {venue_name!r}")
