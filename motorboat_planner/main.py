"""FastAPI application: entry point for the motorboat planning service."""

from __future__ import annotations

from datetime import date

from fastapi import FastAPI, HTTPException

from motorboat_planner.config import load_settings
from motorboat_planner.domain.bus import EventBus
from motorboat_planner.domain.events import EventCreated, EventUpdated, MotorboatReassigned
from motorboat_planner.domain.handlers import HandlerRegistry
from motorboat_planner.domain.models import (
    AutoResolveResponse,
    BoatClass,
    Conflict,
    CreateEventRequest,
    Event,
    Motorboat,
    MotorboatUsage,
    Season,
    SeasonStatus,
    TimelineEntry,
    UpdateEventRequest,
    upcoming_season_year,
)
from motorboat_planner.domain.registry import (
    UnknownBoatClassError,
    UnknownMotorboatError,
    get_registry,
)
from motorboat_planner.logging_config import setup_logging
from motorboat_planner.repos.memory import (
    TimelineRepository,
    create_event_repository,
    seed_demo_events,
)
from motorboat_planner.services.conflicts import (
    conflicts_for_event,
    detect_conflicts,
    motorboat_usage,
)
from motorboat_planner.services.resolver import apply_suggestion, auto_resolve

settings = load_settings()
setup_logging(settings.log_level)

app = FastAPI(title="Motorboat Planning Service")

# ── Singletons (created at import time for simplicity) ────────────────
fleet = get_registry()
season = Season.for_year(
    settings.season_year or upcoming_season_year(), deadline=settings.deadline
)
event_bus = EventBus()
event_repo = create_event_repository(
    season.start.year if settings.seed_demo_data else None
)
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    timeline_repo=timeline_repo,
    fleet=fleet,
)


def _write_back(event_id: str, motorboat_id: str) -> None:
    """Persist a reassignment and announce it on the bus."""
    stored = event_repo.get(event_id)
    previous = stored.assigned_motorboat if stored else None
    event_repo.assign_motorboat(event_id, motorboat_id)
    event_bus.publish(
        MotorboatReassigned(
            event_id=event_id,
            previous_motorboat_id=previous,
            new_motorboat_id=motorboat_id,
        )
    )


def _require_event(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _require_motorboat(motorboat_id: str | None) -> None:
    if motorboat_id is None:
        return
    try:
        fleet.motorboat(motorboat_id)
    except UnknownMotorboatError:
        raise HTTPException(
            status_code=400, detail=f"Unknown motorboat: {motorboat_id}"
        ) from None


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/boat-classes", response_model=list[BoatClass])
def list_boat_classes() -> list[BoatClass]:
    return list(fleet.boat_classes)


@app.get("/motorboats", response_model=list[Motorboat])
def list_motorboats() -> list[Motorboat]:
    return list(fleet.motorboats)


@app.get("/motorboats/usage", response_model=list[MotorboatUsage])
def get_motorboat_usage() -> list[MotorboatUsage]:
    """Events currently assigned to each motorboat."""
    return motorboat_usage(event_repo.list_all(), fleet)


@app.get("/motorboats/by-priority/{boat_class_id}", response_model=list[Motorboat])
def list_motorboats_by_priority(boat_class_id: str) -> list[Motorboat]:
    """Motorboats to offer a trainer of *boat_class_id*, prioritized ones first."""
    try:
        fleet.boat_class(boat_class_id)
    except UnknownBoatClassError:
        raise HTTPException(status_code=404, detail="Boat class not found") from None
    return fleet.motorboats_by_priority(boat_class_id)


@app.post("/events", response_model=Event, status_code=201)
def create_event(payload: CreateEventRequest) -> Event:
    """Register a regatta or training camp; it gets the motorboat it requested."""
    try:
        fleet.boat_class(payload.boat_class_id)
    except UnknownBoatClassError:
        raise HTTPException(
            status_code=400, detail=f"Unknown boat class: {payload.boat_class_id}"
        ) from None
    _require_motorboat(payload.requested_motorboat)

    try:
        event = event_repo.create(payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    # Publish to the event bus; this records the timeline and checks for double-bookings.
    event_bus.publish(EventCreated(event_id=event.id))
    return event


@app.get("/events", response_model=list[Event])
def list_events(
    boat_class_id: str | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[Event]:
    """Return stored events, optionally filtered by boat class and date range."""
    if start is not None and end is not None:
        events = event_repo.list_in_range(start, end)
    else:
        events = event_repo.list_all()
    if boat_class_id is not None:
        events = [e for e in events if e.boat_class_id == boat_class_id]
    return events


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    return _require_event(event_id)


@app.patch("/events/{event_id}", response_model=Event)
def update_event(event_id: str, body: UpdateEventRequest) -> Event:
    _require_event(event_id)
    fields = body.model_dump(exclude_unset=True)
    _require_motorboat(fields.get("assigned_motorboat"))
    _require_motorboat(fields.get("requested_motorboat"))
    try:
        updated = event_repo.update(event_id, **fields)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    event_bus.publish(EventUpdated(event_id=event_id, changed_fields=sorted(fields)))
    return updated


@app.delete("/events/{event_id}", status_code=200)
def delete_event(event_id: str) -> dict:
    _require_event(event_id)
    event_repo.delete(event_id)
    return {"status": "deleted"}


@app.get("/events/{event_id}/conflicts", response_model=list[Conflict])
def list_event_conflicts(event_id: str) -> list[Conflict]:
    _require_event(event_id)
    return conflicts_for_event(event_repo.list_all(), event_id, fleet)


@app.get("/events/{event_id}/timeline", response_model=list[TimelineEntry])
def get_event_timeline(event_id: str) -> list[TimelineEntry]:
    _require_event(event_id)
    return timeline_repo.list_for_event(event_id)


@app.get("/conflicts", response_model=list[Conflict])
def list_conflicts() -> list[Conflict]:
    """Every current motorboat double-booking with its suggested fix."""
    return detect_conflicts(event_repo.list_all(), fleet)


@app.post("/conflicts/auto-resolve", response_model=AutoResolveResponse)
def auto_resolve_conflicts() -> AutoResolveResponse:
    resolved = auto_resolve(
        event_repo.list_all(),
        _write_back,
        fleet,
        max_resolutions=settings.max_auto_resolutions,
    )
    return AutoResolveResponse(
        resolved=resolved,
        remaining_conflicts=detect_conflicts(event_repo.list_all(), fleet),
    )


@app.post("/conflicts/{conflict_id}/resolve", response_model=Event)
def resolve_conflict(conflict_id: str) -> Event:
    """Apply one conflict's suggestion and return the event that was moved."""
    conflict = next(
        (c for c in detect_conflicts(event_repo.list_all(), fleet) if c.id == conflict_id),
        None,
    )
    if conflict is None:
        raise HTTPException(status_code=404, detail="Conflict not found")
    if not apply_suggestion(conflict, _write_back):
        raise HTTPException(
            status_code=409, detail="No alternative motorboat available"
        )
    return event_repo.get(conflict.suggestion.move_event_id)


@app.get("/season", response_model=SeasonStatus)
def get_season() -> SeasonStatus:
    return SeasonStatus(
        season=season,
        days=season.days,
        deadline_passed=season.is_deadline_passed(),
    )


@app.post("/demo-data")
def load_demo_data() -> dict:
    """Replace all events with the demo season (includes double-bookings)."""
    timeline_repo.clear()
    events = seed_demo_events(event_repo, season.start.year)
    return {"loaded": len(events)}
