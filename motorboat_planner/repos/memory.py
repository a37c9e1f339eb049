"""In-memory repositories for events and their timeline."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from motorboat_planner.domain.dates import DateLike, overlaps
from motorboat_planner.domain.models import (
    CreateEventRequest,
    Event,
    EventType,
    TimelineEntry,
)


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Insertion order is kept, which is the order the conflict detector walks.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def create(self, payload: CreateEventRequest) -> Event:
        """Book a new event; it is assigned the motorboat it requested."""
        event = Event(**payload.model_dump())
        self.add(event)
        return event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def list_by_boat_class(self, boat_class_id: str) -> list[Event]:
        return [e for e in self._store.values() if e.boat_class_id == boat_class_id]

    def list_in_range(self, start: DateLike, end: DateLike) -> list[Event]:
        """Events whose own dates (not the loading day) touch [start, end]."""
        return [
            e
            for e in self._store.values()
            if overlaps(e.start_date, e.end_date, start, end)
        ]

    def update(self, event_id: str, **fields) -> Event | None:
        """Replace fields on a stored event, re-running model validation.

        ``id``, ``boat_class_id`` and ``created_at`` are fixed at creation.
        """
        event = self._store.get(event_id)
        if event is None:
            return None
        for frozen in ("id", "boat_class_id", "created_at"):
            fields.pop(frozen, None)
        updated = Event.model_validate({**event.model_dump(), **fields})
        self._store[event_id] = updated
        return updated

    def assign_motorboat(self, event_id: str, motorboat_id: str) -> None:
        """Write-back used by the conflict resolver."""
        if event_id not in self._store:
            raise KeyError(event_id)
        self.update(event_id, assigned_motorboat=motorboat_id)

    def delete(self, event_id: str) -> None:
        self._store.pop(event_id, None)

    def clear(self) -> None:
        self._store.clear()


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_event(self, event_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.event_id == event_id],
            key=lambda e: e.timestamp,
        )

    def clear(self) -> None:
        self._entries.clear()


# ---------------------------------------------------------------------------
# Seed data – a season with two deliberate motorboat double-bookings
# ---------------------------------------------------------------------------

_DEMO_EVENTS = [
    # (type, name, class, start, end, loading (month, day, hour), boat, organizer/location)
    (EventType.REGATTA, "Berliner Jugendpokal", "opti-c", (5, 10), (5, 12), (5, 9, 8), "narwhal", "Berliner Yacht-Club"),
    (EventType.TRAINING_CAMP, "Ostertrainingslager Greifswald", "opti-b", (4, 12), (4, 18), (4, 11, 14), "zodiac", "Greifswald"),
    (EventType.REGATTA, "Norddeutsche Meisterschaft", "opti-a", (6, 20), (6, 23), (6, 19, 6), "tornado-rot", "Kieler Yacht-Club"),
    (EventType.REGATTA, "29er Euro Cup", "29er", (7, 15), (7, 18), (7, 14, 8), "tornado-rot", "TSC Berlin"),
    (EventType.REGATTA, "J70 Deutsche Meisterschaft", "j70", (7, 16), (7, 20), (7, 15, 10), "tornado-rot", "Warnemünder Woche"),
    (EventType.TRAINING_CAMP, "Sommertrainingslager Kühlungsborn", "pirat", (8, 1), (8, 7), (7, 31, 16), "narwhal", "Kühlungsborn"),
    (EventType.REGATTA, "Herbstpreis Wannsee", "opti-a", (9, 14), (9, 15), (9, 13, 8), "zodiac", "Verein Seglerhaus"),
    (EventType.REGATTA, "Piraten-Herbstcup", "pirat", (9, 14), (9, 16), (9, 13, 9), "zodiac", "SC Tegeler See"),
    (EventType.TRAINING_CAMP, "Herbst-Intensivtraining", "29er", (10, 5), (10, 10), (10, 4, 7), "tornado-grau", "Steinhuder Meer"),
]


def seed_demo_events(repo: EventRepository, year: int) -> list[Event]:
    """Replace the repository contents with a demo season for *year*."""
    repo.clear()
    base = datetime(year, 1, 1, tzinfo=timezone.utc)
    created: list[Event] = []
    for n, (kind, name, cls, start, end, loading, boat, where) in enumerate(_DEMO_EVENTS):
        event = Event(
            type=kind,
            name=name,
            boat_class_id=cls,
            start_date=date(year, *start),
            end_date=date(year, *end),
            motorboat_loading_time=datetime(year, *loading),
            requested_motorboat=boat,
            organizer=where if kind == EventType.REGATTA else None,
            location=where if kind == EventType.TRAINING_CAMP else None,
            # Spread creation times so "first booked" is well defined.
            created_at=base + timedelta(minutes=n),
        )
        repo.add(event)
        created.append(event)
    return created


def create_event_repository(year: int | None = None) -> EventRepository:
    """Return an EventRepository, pre-loaded with the demo season if *year* is given."""
    repo = EventRepository()
    if year is not None:
        seed_demo_events(repo, year)
    return repo
