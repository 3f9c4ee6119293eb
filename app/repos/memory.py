"""In-memory repositories for venues, bookings and their timelines."""

from __future__ import annotations

import threading
from datetime import datetime

from app.domain.errors import BookingOverlapError, DuplicateVenueError
from app.domain.models import Booking, TimelineEntry, Venue
from app.services.intervals import overlaps


class VenueRepository:
    """Dict-backed store for Venue instances, keyed by id. Names are unique."""

    def __init__(self) -> None:
        self._store: dict[str, Venue] = {}
        self._lock = threading.Lock()

    def add(self, venue: Venue) -> None:
        with self._lock:
            if any(v.venue_name == venue.venue_name for v in self._store.values()):
                raise DuplicateVenueError(venue.venue_name)
            self._store[venue.id] = venue

    def get(self, venue_id: str) -> Venue | None:
        with self._lock:
            return self._store.get(venue_id)

    def list_all(self) -> list[Venue]:
        with self._lock:
            venues = list(self._store.values())
        return sorted(venues, key=lambda v: v.venue_name)


class BookingRepository:
    """Dict-backed store for Booking instances, keyed by id.

    Writes re-check overlap at the same venue under a lock, so two requests
    that both passed an earlier conflict check cannot both commit. Reads
    copy the store under the same lock.
    """

    def __init__(self) -> None:
        self._store: dict[str, Booking] = {}
        self._lock = threading.Lock()

    def _overlapping(self, booking: Booking) -> list[Booking]:
        return [
            other
            for other in self._store.values()
            if other.id != booking.id
            and other.venue_id == booking.venue_id
            and overlaps(
                booking.start_time, booking.end_time, other.start_time, other.end_time
            )
        ]

    def add(self, booking: Booking, allow_overlap: bool = False) -> None:
        """Store *booking*; raise BookingOverlapError unless *allow_overlap*."""
        with self._lock:
            if not allow_overlap:
                clashes = self._overlapping(booking)
                if clashes:
                    raise BookingOverlapError(clashes)
            self._store[booking.id] = booking

    def update(self, booking: Booking, allow_overlap: bool = False) -> None:
        with self._lock:
            if booking.id not in self._store:
                raise KeyError(booking.id)
            if not allow_overlap:
                clashes = self._overlapping(booking)
                if clashes:
                    raise BookingOverlapError(clashes)
            self._store[booking.id] = booking

    def get(self, booking_id: str) -> Booking | None:
        with self._lock:
            return self._store.get(booking_id)

    def list_all(self, venue_id: str | None = None) -> list[Booking]:
        with self._lock:
            snapshot = list(self._store.values())
        bookings = [b for b in snapshot if venue_id is None or b.venue_id == venue_id]
        return sorted(bookings, key=lambda b: b.start_time)

    def list_for_venue_day(
        self,
        venue_id: str,
        day_start: datetime,
        day_end: datetime,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        """Return bookings at *venue_id* starting in [day_start, day_end), by start."""
        return [
            b
            for b in self.list_all(venue_id)
            if day_start <= b.start_time < day_end and b.id != exclude_id
        ]

    def delete(self, booking_id: str) -> None:
        with self._lock:
            self._store.pop(booking_id, None)


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_booking(self, booking_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.booking_id == booking_id],
            key=lambda e: e.timestamp,
        )

    def delete_for_booking(self, booking_id: str) -> int:
        """Drop every entry of *booking_id*; return how many were removed."""
        kept = [e for e in self._entries if e.booking_id != booking_id]
        removed = len(self._entries) - len(kept)
        self._entries[:] = kept
        return removed
