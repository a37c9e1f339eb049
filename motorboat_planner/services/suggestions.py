"""Service for proposing how to settle a motorboat double-booking.

The rules are deliberately local and greedy: each conflict is looked at on its
own, one event keeps the boat and the other is offered a single replacement.

Decision order for a pair (A, B) competing for one motorboat:

1. Exactly one class holds priority on the boat -> that event keeps it.
2. Both classes hold priority -> A keeps it, B gets another boat of the same
   family (e.g. the other Tornado), else the general alternative.
3. Neither holds priority -> the earlier booking keeps it.
"""

from __future__ import annotations

from motorboat_planner.domain.models import Event, Motorboat, Suggestion
from motorboat_planner.domain.registry import FleetRegistry, get_registry

_NO_ALTERNATIVE = " (no alternative motorboat available)"


def find_alternative(
    boat_class_id: str,
    excluded_motorboat_id: str,
    registry: FleetRegistry | None = None,
) -> Motorboat | None:
    """Pick a replacement motorboat for *boat_class_id*, never the excluded one.

    Preference: a boat the class holds priority on, then a boat of the same
    family as the excluded one, then the first remaining boat.
    """
    registry = registry or get_registry()
    candidates = [mb for mb in registry.motorboats if mb.id != excluded_motorboat_id]
    if not candidates:
        return None

    for mb in candidates:
        if boat_class_id in mb.priority_classes:
            return mb

    excluded = registry.find_motorboat(excluded_motorboat_id)
    if excluded is not None and excluded.family is not None:
        for mb in candidates:
            if mb.family == excluded.family:
                return mb

    return candidates[0]


def _same_family_alternative(
    motorboat: Motorboat, registry: FleetRegistry
) -> Motorboat | None:
    if motorboat.family is None:
        return None
    for mb in registry.motorboats:
        if mb.id != motorboat.id and mb.family == motorboat.family:
            return mb
    return None


def _build(
    keep: Event, move: Event, alternative: Motorboat | None, reason: str
) -> Suggestion:
    if alternative is None:
        reason += _NO_ALTERNATIVE
    return Suggestion(
        keep_event_id=keep.id,
        move_event_id=move.id,
        new_motorboat_id=alternative.id if alternative else None,
        reason=reason,
    )


def suggest(
    event_a: Event,
    event_b: Event,
    motorboat_id: str,
    registry: FleetRegistry | None = None,
) -> Suggestion | None:
    """Decide which of two conflicting events keeps *motorboat_id* and where the other goes.

    Returns ``None`` only if the motorboat is not in the registry. A suggestion
    without ``new_motorboat_id`` means no replacement boat exists.
    """
    registry = registry or get_registry()
    motorboat = registry.find_motorboat(motorboat_id)
    if motorboat is None:
        return None

    a_has_priority = event_a.boat_class_id in motorboat.priority_classes
    b_has_priority = event_b.boat_class_id in motorboat.priority_classes

    if a_has_priority != b_has_priority:
        keep, move = (event_a, event_b) if a_has_priority else (event_b, event_a)
        return _build(
            keep,
            move,
            find_alternative(move.boat_class_id, motorboat.id, registry),
            f"{registry.boat_class_name(keep.boat_class_id)} has priority on {motorboat.name}",
        )

    if a_has_priority and b_has_priority:
        alternative = _same_family_alternative(motorboat, registry) or find_alternative(
            event_b.boat_class_id, motorboat.id, registry
        )
        moved_class = registry.boat_class_name(event_b.boat_class_id)
        if alternative is None:
            reason = f"Both classes have priority - {moved_class} must give way"
        else:
            reason = f"Both classes have priority - {moved_class} gets {alternative.name}"
        return _build(event_a, event_b, alternative, reason)

    # First booked, first served; a tie keeps the first event of the pair.
    if event_b.created_at < event_a.created_at:
        keep, move = event_b, event_a
    else:
        keep, move = event_a, event_b
    return _build(
        keep,
        move,
        find_alternative(move.boat_class_id, motorboat.id, registry),
        "No priority - earlier booking keeps the boat",
    )
