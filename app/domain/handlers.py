"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

from app.domain.bus import EventBus
from app.domain.events import (
    BookingCreated,
    BookingDeleted,
    BookingUpdated,
    ConflictDetected,
    ConflictOverridden,
)
from app.domain.models import TimelineEntry, TimelineEntryType
from app.repos.memory import BookingRepository, TimelineRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        booking_repo: BookingRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.booking_repo = booking_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(BookingCreated, self.on_booking_created)
        self.bus.subscribe(BookingUpdated, self.on_booking_updated)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)
        self.bus.subscribe(ConflictOverridden, self.on_conflict_overridden)
        self.bus.subscribe(BookingDeleted, self.on_booking_deleted)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_booking_created(self, event: BookingCreated) -> None:
        stored = self.booking_repo.get(event.booking_id)
        if stored is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                booking_id=event.booking_id,
                type=TimelineEntryType.CREATED,
                payload={
                    "venue_id": stored.venue_id,
                    "start_time": stored.start_time.isoformat(),
                    "end_time": stored.end_time.isoformat(),
                },
            )
        )
        logger.info("Booking %s created at venue %s", stored.id, stored.venue_id)

    def on_booking_updated(self, event: BookingUpdated) -> None:
        if self.booking_repo.get(event.booking_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                booking_id=event.booking_id,
                type=TimelineEntryType.UPDATED,
                payload={"changed_fields": event.changed_fields},
            )
        )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        logger.info(
            "Conflict at venue %s with %s (%d suggestion(s))",
            event.venue_id,
            ", ".join(event.conflicting_booking_ids),
            event.suggested_slot_count,
        )
        # New bookings have no id yet, so only edits get a timeline entry
        if event.booking_id is None or self.booking_repo.get(event.booking_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                booking_id=event.booking_id,
                type=TimelineEntryType.CONFLICT_DETECTED,
                payload={
                    "conflicting_booking_ids": event.conflicting_booking_ids,
                    "suggested_slot_count": event.suggested_slot_count,
                },
            )
        )

    def on_conflict_overridden(self, event: ConflictOverridden) -> None:
        if self.booking_repo.get(event.booking_id) is None:
            return

        logger.warning(
            "Booking %s stored despite overlapping %s",
            event.booking_id,
            ", ".join(event.conflicting_booking_ids),
        )
        self.timeline_repo.add(
            TimelineEntry(
                booking_id=event.booking_id,
                type=TimelineEntryType.CONFLICT_OVERRIDDEN,
                payload={"conflicting_booking_ids": event.conflicting_booking_ids},
            )
        )

    def on_booking_deleted(self, event: BookingDeleted) -> None:
        removed = self.timeline_repo.delete_for_booking(event.booking_id)
        logger.info(
            "Booking %s deleted from venue %s (%d timeline entries dropped)",
            event.booking_id,
            event.venue_id,
            removed,
        )
