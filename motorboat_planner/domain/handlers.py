"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from motorboat_planner.domain.bus import EventBus
from motorboat_planner.domain.events import (
    ConflictDetected,
    EventCreated,
    EventUpdated,
    MotorboatReassigned,
)
from motorboat_planner.domain.models import TimelineEntry, TimelineEntryType
from motorboat_planner.domain.registry import FleetRegistry
from motorboat_planner.repos.memory import EventRepository, TimelineRepository
from motorboat_planner.services.conflicts import conflicts_for_event

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        timeline_repo: TimelineRepository,
        fleet: FleetRegistry | None = None,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.timeline_repo = timeline_repo
        self.fleet = fleet
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventCreated, self.on_event_created)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)
        self.bus.subscribe(MotorboatReassigned, self.on_motorboat_reassigned)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_created(self, event: EventCreated) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.CREATED,
                payload={"assigned_motorboat": stored.assigned_motorboat},
            )
        )
        self._check_conflicts(event.event_id)

    def on_event_updated(self, event: EventUpdated) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.UPDATED,
                payload={"changed_fields": event.changed_fields},
            )
        )
        # Only date or boat changes can create a new double-booking.
        relevant = {
            "start_date",
            "end_date",
            "motorboat_loading_time",
            "assigned_motorboat",
        }
        if relevant.intersection(event.changed_fields):
            self._check_conflicts(event.event_id)

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        logger.warning(
            "Event %s double-books motorboat %s with %s",
            event.event_id,
            event.motorboat_id,
            ", ".join(event.conflicting_event_ids),
        )
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.CONFLICT_DETECTED,
                payload={
                    "motorboat_id": event.motorboat_id,
                    "conflicting_event_ids": event.conflicting_event_ids,
                },
            )
        )

    def on_motorboat_reassigned(self, event: MotorboatReassigned) -> None:
        if self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.MOTORBOAT_REASSIGNED,
                payload={
                    "from": event.previous_motorboat_id,
                    "to": event.new_motorboat_id,
                },
            )
        )

    # ------------------------------------------------------------------

    def _check_conflicts(self, event_id: str) -> None:
        conflicts = conflicts_for_event(self.event_repo.list_all(), event_id, self.fleet)
        if not conflicts:
            return
        others = [
            other_id
            for c in conflicts
            for other_id in c.event_ids
            if other_id != event_id
        ]
        self.bus.publish(
            ConflictDetected(
                event_id=event_id,
                motorboat_id=conflicts[0].motorboat_id,
                conflicting_event_ids=others,
            )
        )
