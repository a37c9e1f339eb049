"""Service for detecting motorboat double-bookings between events."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable

from motorboat_planner.domain.dates import overlaps
from motorboat_planner.domain.models import Conflict, Event, MotorboatUsage
from motorboat_planner.domain.registry import FleetRegistry, get_registry
from motorboat_planner.services.suggestions import suggest

logger = logging.getLogger(__name__)


def effective_window(event: Event) -> tuple[date, date]:
    """Days the assigned motorboat is unavailable: loading day through end day."""
    return event.occupancy_start, event.end_date


def _events_by_motorboat(events: Iterable[Event]) -> dict[str, list[Event]]:
    grouped: dict[str, list[Event]] = defaultdict(list)
    for event in events:
        if event.assigned_motorboat:
            grouped[event.assigned_motorboat].append(event)
    return grouped


def detect_conflicts(
    events: Iterable[Event], registry: FleetRegistry | None = None
) -> list[Conflict]:
    """Return one Conflict per pair of events whose windows overlap on the same motorboat.

    Conflicts are ordered by motorboat (registry order), then by the order in
    which pairs are found walking the input list. Events without an assigned
    motorboat, or assigned to a boat the registry does not know, never conflict.
    """
    registry = registry or get_registry()
    grouped = _events_by_motorboat(events)

    conflicts: list[Conflict] = []
    for motorboat in registry.motorboats:
        boat_events = grouped.get(motorboat.id, [])
        for i, event_a in enumerate(boat_events):
            start_a, end_a = effective_window(event_a)
            for event_b in boat_events[i + 1 :]:
                start_b, end_b = effective_window(event_b)
                if not overlaps(start_a, end_a, start_b, end_b):
                    continue
                conflicts.append(
                    Conflict(
                        id=f"{event_a.id}-{event_b.id}",
                        motorboat_id=motorboat.id,
                        events=[event_a, event_b],
                        suggestion=suggest(event_a, event_b, motorboat.id, registry),
                    )
                )

    logger.debug("Detected %d motorboat conflict(s)", len(conflicts))
    return conflicts


def conflicts_for_event(
    events: Iterable[Event], event_id: str, registry: FleetRegistry | None = None
) -> list[Conflict]:
    """Return only the conflicts the given event takes part in."""
    return [
        c for c in detect_conflicts(events, registry) if event_id in c.event_ids
    ]


def motorboat_usage(
    events: Iterable[Event], registry: FleetRegistry | None = None
) -> list[MotorboatUsage]:
    """Events currently assigned to each motorboat, in registry order."""
    registry = registry or get_registry()
    grouped = _events_by_motorboat(events)
    return [
        MotorboatUsage(
            motorboat=mb,
            events=grouped.get(mb.id, []),
            count=len(grouped.get(mb.id, [])),
        )
        for mb in registry.motorboats
    ]
