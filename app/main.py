"""FastAPI application: entry point for the venue booking service."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException

from app.config import get_settings
from app.domain.bus import EventBus
from app.domain.errors import (
    BookingOverlapError,
    BookingValidationError,
    DataUnavailableError,
    DuplicateVenueError,
)
from app.domain.events import (
    BookingCreated,
    BookingDeleted,
    BookingUpdated,
    ConflictDetected,
    ConflictOverridden,
)
from app.domain.handlers import HandlerRegistry
from app.domain.models import (
    Booking,
    BookingRequest,
    ConflictCheckRequest,
    ConflictResult,
    CreateBookingRequest,
    CreateVenueRequest,
    TimelineEntry,
    UpdateBookingRequest,
    Venue,
)
from app.repos.memory import BookingRepository, TimelineRepository, VenueRepository
from app.services.venue_check import check_venue_conflict
from app.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()

app = FastAPI(title=settings.app_name)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
venue_repo = VenueRepository()
booking_repo = BookingRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    booking_repo=booking_repo,
    timeline_repo=timeline_repo,
)

# Optional fields a PUT may reset with an explicit null
_CLEARABLE_FIELDS = {"description"}


# ── Helpers ───────────────────────────────────────────────────────────


def _require_venue(venue_id: str) -> Venue:
    venue = venue_repo.get(venue_id)
    if venue is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


def _require_bookable_venue(venue_id: str) -> Venue:
    venue = _require_venue(venue_id)
    if not venue.available:
        raise HTTPException(status_code=400, detail="Venue is not available for booking")
    return venue


def _require_booking(booking_id: str) -> Booking:
    booking = booking_repo.get(booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def _run_check(request: BookingRequest) -> ConflictResult:
    try:
        return check_venue_conflict(request, booking_repo.list_for_venue_day, settings)
    except BookingValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except DataUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _conflict_response(result: ConflictResult) -> HTTPException:
    return HTTPException(status_code=409, detail=result.model_dump(mode="json"))


def _overlap_response(exc: BookingOverlapError) -> HTTPException:
    # Lost a race with a concurrent write; report it in the same shape.
    return _conflict_response(
        ConflictResult(has_conflict=True, conflicting_bookings=exc.conflicts)
    )


# ── Venues ────────────────────────────────────────────────────────────


@app.post("/venues", response_model=Venue)
def create_venue(body: CreateVenueRequest) -> Venue:
    venue = Venue(**body.model_dump())
    try:
        venue_repo.add(venue)
    except DuplicateVenueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return venue


@app.get("/venues", response_model=list[Venue])
def list_venues() -> list[Venue]:
    """Return all venues ordered by name."""
    return venue_repo.list_all()


@app.post("/venues/{venue_id}/conflicts", response_model=ConflictResult)
def check_conflicts(venue_id: str, body: ConflictCheckRequest) -> ConflictResult:
    """Check a proposed interval at a venue without booking it."""
    _require_venue(venue_id)
    return _run_check(
        BookingRequest(
            venue_id=venue_id,
            start_time=body.start_time,
            end_time=body.end_time,
            exclude_id=body.exclude_id,
        )
    )


# ── Bookings ──────────────────────────────────────────────────────────


@app.post("/bookings", response_model=Booking)
def create_booking(body: CreateBookingRequest) -> Booking:
    """Book a venue.

    Responds 409 with a ConflictResult when the interval overlaps existing
    bookings, unless ``override`` is set. To take a suggested slot, resubmit
    with that slot's times.
    """
    _require_bookable_venue(body.venue_id)

    result = _run_check(
        BookingRequest(
            venue_id=body.venue_id, start_time=body.start_time, end_time=body.end_time
        )
    )
    conflicting_ids = [b.id for b in result.conflicting_bookings]
    if result.has_conflict and not body.override:
        event_bus.publish(
            ConflictDetected(
                booking_id=None,
                venue_id=body.venue_id,
                conflicting_booking_ids=conflicting_ids,
                suggested_slot_count=len(result.suggested_slots),
            )
        )
        raise _conflict_response(result)

    booking = Booking(**body.model_dump(exclude={"override"}))
    try:
        booking_repo.add(booking, allow_overlap=body.override)
    except BookingOverlapError as exc:
        raise _overlap_response(exc) from exc

    event_bus.publish(BookingCreated(booking_id=booking.id))
    if result.has_conflict:
        event_bus.publish(
            ConflictOverridden(booking_id=booking.id, conflicting_booking_ids=conflicting_ids)
        )
    return booking


@app.get("/bookings", response_model=list[Booking])
def list_bookings(venue_id: str | None = None) -> list[Booking]:
    """Return bookings in ascending start order, optionally for one venue."""
    return booking_repo.list_all(venue_id)


@app.get("/bookings/{booking_id}", response_model=Booking)
def get_booking(booking_id: str) -> Booking:
    return _require_booking(booking_id)


@app.put("/bookings/{booking_id}", response_model=Booking)
def update_booking(booking_id: str, body: UpdateBookingRequest) -> Booking:
    """Edit a booking; the conflict check ignores the booking's own slot."""
    current = _require_booking(booking_id)
    changes = {
        field: value
        for field, value in body.model_dump(exclude={"override"}, exclude_unset=True).items()
        if value is not None or field in _CLEARABLE_FIELDS
    }
    merged = current.model_copy(update=changes)
    if merged.end_time <= merged.start_time:
        raise HTTPException(status_code=422, detail="end_time must be after start_time")
    if merged.venue_id != current.venue_id:
        _require_bookable_venue(merged.venue_id)

    result = _run_check(
        BookingRequest(
            venue_id=merged.venue_id,
            start_time=merged.start_time,
            end_time=merged.end_time,
            exclude_id=booking_id,
        )
    )
    conflicting_ids = [b.id for b in result.conflicting_bookings]
    if result.has_conflict and not body.override:
        event_bus.publish(
            ConflictDetected(
                booking_id=booking_id,
                venue_id=merged.venue_id,
                conflicting_booking_ids=conflicting_ids,
                suggested_slot_count=len(result.suggested_slots),
            )
        )
        raise _conflict_response(result)

    updated = Booking.model_validate(merged.model_dump())
    try:
        booking_repo.update(updated, allow_overlap=body.override)
    except BookingOverlapError as exc:
        raise _overlap_response(exc) from exc

    event_bus.publish(BookingUpdated(booking_id=booking_id, changed_fields=sorted(changes)))
    if result.has_conflict:
        event_bus.publish(
            ConflictOverridden(booking_id=booking_id, conflicting_booking_ids=conflicting_ids)
        )
    return updated


@app.delete("/bookings/{booking_id}", status_code=200)
def delete_booking(booking_id: str) -> dict:
    booking = _require_booking(booking_id)
    booking_repo.delete(booking_id)
    event_bus.publish(BookingDeleted(booking_id=booking_id, venue_id=booking.venue_id))
    return {"status": "deleted"}


@app.get("/bookings/{booking_id}/timeline", response_model=list[TimelineEntry])
def get_booking_timeline(booking_id: str) -> list[TimelineEntry]:
    _require_booking(booking_id)
    return timeline_repo.list_for_booking(booking_id)
