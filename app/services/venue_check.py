"""Venue conflict check: fetch the day's bookings, detect overlaps, suggest slots."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from app.config import Settings, get_settings
from app.domain.errors import DataUnavailableError
from app.domain.models import Booking, BookingRequest, ConflictResult, TimeWindow
from app.services.conflicts import ensure_valid, find_conflicts
from app.services.suggestions import suggest_slots
from app.utils.logger import get_logger

logger = get_logger(__name__)

# (venue_id, day_start, day_end, exclude_id) -> bookings starting in [day_start, day_end)
BookingFetcher = Callable[[str, datetime, datetime, Optional[str]], list[Booking]]


def local_day(instant: datetime, settings: Settings) -> date:
    """Return the calendar date of *instant* in the venue time zone."""
    return instant.astimezone(settings.tzinfo).date()


def resolve_day_bounds(day: date, settings: Settings) -> tuple[datetime, datetime]:
    """Return local midnight of *day* and of the next day, as UTC instants."""
    tz = settings.tzinfo
    start = datetime.combine(day, datetime.min.time(), tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), datetime.min.time(), tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def resolve_window(day: date, settings: Settings) -> TimeWindow:
    """Return the working-hours window of *day* as UTC instants."""
    tz = settings.tzinfo
    return TimeWindow(
        start=datetime.combine(day, settings.window_start, tzinfo=tz),
        end=datetime.combine(day, settings.window_end, tzinfo=tz),
    )


def check_venue_conflict(
    request: BookingRequest,
    fetch_bookings: BookingFetcher,
    settings: Settings | None = None,
) -> ConflictResult:
    """Check *request* against the venue's bookings on the same local day.

    Suggestions are only computed when a conflict exists. They are advisory:
    nothing is reserved, so persistence must re-check on write.

    Raises:
        BookingValidationError: the request is malformed.
        DataUnavailableError: *fetch_bookings* failed.
    """
    settings = settings or get_settings()
    ensure_valid(request)

    day = local_day(request.start_time, settings)
    day_start, day_end = resolve_day_bounds(day, settings)
    try:
        existing = fetch_bookings(
            request.venue_id, day_start, day_end, request.exclude_id
        )
    except Exception as exc:
        logger.error(
            "Could not load bookings for venue %s on %s: %s",
            request.venue_id,
            day.isoformat(),
            exc,
        )
        raise DataUnavailableError(
            f"Bookings for venue {request.venue_id} on {day.isoformat()} are unavailable"
        ) from exc

    conflicts = find_conflicts(request, existing)
    if not conflicts:
        logger.debug(
            "No conflict for venue %s %s-%s",
            request.venue_id,
            request.start_time.isoformat(),
            request.end_time.isoformat(),
        )
        return ConflictResult(has_conflict=False)

    window = resolve_window(day, settings)
    slots = suggest_slots(request, existing, window, settings.max_suggestions)
    logger.info(
        "Venue %s conflict: %d overlapping booking(s), %d suggestion(s)",
        request.venue_id,
        len(conflicts),
        len(slots),
    )
    return ConflictResult(
        has_conflict=True,
        conflicting_bookings=conflicts,
        suggested_slots=slots,
    )
