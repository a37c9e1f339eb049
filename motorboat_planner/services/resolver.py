"""Service for applying conflict suggestions back to the event store."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from motorboat_planner.domain.models import Conflict, Event
from motorboat_planner.domain.registry import FleetRegistry
from motorboat_planner.services.conflicts import detect_conflicts

logger = logging.getLogger(__name__)

# Liveness guard: the greedy rules can shuffle events between boats forever.
MAX_AUTO_RESOLUTIONS = 100

WriteBack = Callable[[str, str], None]


def apply_suggestion(conflict: Conflict, write_back: WriteBack) -> bool:
    """Move the suggestion's event to its new motorboat via *write_back*.

    Returns False (and changes nothing) when the conflict has no actionable
    suggestion. Does not re-detect; the caller decides whether to look again.
    """
    suggestion = conflict.suggestion
    if suggestion is None or not suggestion.resolvable:
        return False

    write_back(suggestion.move_event_id, suggestion.new_motorboat_id)
    logger.info(
        "Moved event %s from %s to %s: %s",
        suggestion.move_event_id,
        conflict.motorboat_id,
        suggestion.new_motorboat_id,
        suggestion.reason,
    )
    return True


def auto_resolve(
    events: Iterable[Event],
    write_back: WriteBack,
    registry: FleetRegistry | None = None,
    max_resolutions: int = MAX_AUTO_RESOLUTIONS,
) -> int:
    """Repeatedly apply the first conflict's suggestion until no conflicts remain.

    Works on a private copy of *events* so every write-back is visible to the
    next detection pass. Stops early if the first conflict cannot be resolved,
    and always after *max_resolutions* applied suggestions. Returns the number
    of suggestions applied; leftover conflicts are logged, not raised.
    """
    working = {event.id: event.model_copy() for event in events}

    def _write_back(event_id: str, motorboat_id: str) -> None:
        write_back(event_id, motorboat_id)
        working[event_id].assigned_motorboat = motorboat_id

    resolved = 0
    conflicts = detect_conflicts(working.values(), registry)
    while conflicts and resolved < max_resolutions:
        if not apply_suggestion(conflicts[0], _write_back):
            logger.warning(
                "Conflict %s has no alternative motorboat; stopping auto-resolve",
                conflicts[0].id,
            )
            break
        resolved += 1
        conflicts = detect_conflicts(working.values(), registry)

    if conflicts:
        logger.warning(
            "Auto-resolve finished after %d reassignment(s) with %d conflict(s) left",
            resolved,
            len(conflicts),
        )
    else:
        logger.info("Auto-resolve cleared all conflicts with %d reassignment(s)", resolved)
    return resolved
