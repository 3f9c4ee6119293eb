"""Service for suggesting alternative slots when a booking request conflicts.

Each free gap in the venue's day yields at most one slot, placed at the
earliest point of the gap and lasting exactly as long as the request. Gaps are
probed in a fixed order:

1. before the first booking (from the window opening),
2. between each pair of adjacent bookings, chronologically,
3. after the last booking (up to the window close).

With no bookings at all, the window-opening slot is offered provided the
requested interval itself sits inside the window.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from app.config import DEFAULT_MAX_SUGGESTIONS
from app.domain.models import Booking, BookingRequest, SuggestedSlot, TimeWindow
from app.services.conflicts import ensure_valid
from app.services.intervals import contains


def _slot(start: datetime, duration: timedelta) -> SuggestedSlot:
    return SuggestedSlot(start_time=start, end_time=start + duration, available=True)


def suggest_slots(
    request: BookingRequest,
    existing_bookings: list[Booking],
    window: TimeWindow,
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
) -> list[SuggestedSlot]:
    """Return up to *max_suggestions* free slots with the request's duration.

    An empty list is a valid answer: no alternative exists in this window.
    """
    ensure_valid(request)
    duration = request.end_time - request.start_time
    if max_suggestions <= 0 or duration > window.end - window.start:
        return []

    # sorted() copies; stable on equal starts
    ordered = sorted(
        (b for b in existing_bookings if b.id != request.exclude_id),
        key=lambda b: b.start_time,
    )

    candidates: list[SuggestedSlot] = []
    if ordered:
        first = ordered[0]
        if window.start + duration <= first.start_time:
            candidates.append(_slot(window.start, duration))

        # Gaps open at the latest end seen so far, so a long booking that
        # encloses later ones keeps its span closed.
        frontier = first.end_time
        for following in ordered[1:]:
            if following.start_time - frontier >= duration:
                candidates.append(_slot(frontier, duration))
            frontier = max(frontier, following.end_time)

        if frontier + duration <= window.end:
            candidates.append(_slot(frontier, duration))
    elif contains(window.start, window.end, request.start_time, request.end_time):
        candidates.append(_slot(window.start, duration))

    return [
        slot
        for slot in candidates
        if contains(window.start, window.end, slot.start_time, slot.end_time)
    ][:max_suggestions]
