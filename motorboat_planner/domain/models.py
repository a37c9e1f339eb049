"""Domain models for the motorboat planning system."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from motorboat_planner.domain.dates import days_between, parse_date, parse_datetime

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class EventType(StrEnum):
    REGATTA = "regatta"
    TRAINING_CAMP = "training_camp"


class ConflictType(StrEnum):
    OVERLAP = "overlap"


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    CONFLICT_DETECTED = "conflict_detected"
    MOTORBOAT_REASSIGNED = "motorboat_reassigned"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------


class BoatClass(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    color_tag: str = "#6b7280"


class Motorboat(BaseModel):
    """A shared coach/rescue boat.

    ``priority_classes`` lists the boat classes with a preferential claim on
    this boat. ``family`` groups interchangeable boats (e.g. the two fast
    Tornados) so a displaced class can be offered a like-for-like replacement.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    priority_classes: tuple[str, ...] = ()
    family: str | None = None


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    type: EventType = EventType.REGATTA
    name: str
    boat_class_id: str
    start_date: date
    end_date: date
    motorboat_loading_time: datetime | None = None
    requested_motorboat: str | None = None
    assigned_motorboat: str | None = None
    organizer: str | None = None
    location: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        return parse_date(value)

    @field_validator("motorboat_loading_time", mode="before")
    @classmethod
    def _coerce_loading_time(cls, value):
        if value is None or value == "":
            return None
        return parse_datetime(value)

    @field_validator("created_at", mode="after")
    @classmethod
    def _created_at_as_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC so booking order stays comparable.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_dates_and_assignment(self) -> Event:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if (
            self.motorboat_loading_time is not None
            and self.motorboat_loading_time.date() > self.start_date
        ):
            raise ValueError("motorboat_loading_time must not be after start_date")
        # A fresh booking is allocated the boat the trainer asked for.
        if "assigned_motorboat" not in self.model_fields_set:
            self.assigned_motorboat = self.requested_motorboat
        return self

    @property
    def occupancy_start(self) -> date:
        """First day the assigned motorboat is tied up (loading day)."""
        if self.motorboat_loading_time is not None:
            return self.motorboat_loading_time.date()
        return self.start_date


class Suggestion(BaseModel):
    keep_event_id: str
    move_event_id: str
    new_motorboat_id: str | None = None
    reason: str

    @property
    def resolvable(self) -> bool:
        return bool(self.move_event_id and self.new_motorboat_id)


class Conflict(BaseModel):
    id: str
    motorboat_id: str
    type: ConflictType = ConflictType.OVERLAP
    events: list[Event]
    suggestion: Suggestion | None = None

    @property
    def event_ids(self) -> tuple[str, str]:
        return self.events[0].id, self.events[1].id


class MotorboatUsage(BaseModel):
    motorboat: Motorboat
    events: list[Event] = Field(default_factory=list)
    count: int = 0


class Season(BaseModel):
    name: str
    start: date
    end: date
    deadline: date

    @classmethod
    def for_year(cls, year: int, deadline: date | None = None) -> Season:
        """April to October, registrations close on 1 March."""
        return cls(
            name=f"Season {year}",
            start=date(year, 4, 1),
            end=date(year, 10, 31),
            deadline=deadline or date(year, 3, 1),
        )

    @property
    def days(self) -> int:
        return days_between(self.start, self.end)

    def is_deadline_passed(self, today: date | None = None) -> bool:
        return (today or date.today()) > self.deadline


def upcoming_season_year(today: date | None = None) -> int:
    """Year of the next season to plan: from April onwards that is next year."""
    today = today or date.today()
    return today.year + 1 if today.month >= 4 else today.year


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class CreateEventRequest(BaseModel):
    type: EventType = EventType.REGATTA
    name: str
    boat_class_id: str
    start_date: date
    end_date: date
    motorboat_loading_time: datetime | None = None
    requested_motorboat: str | None = None
    organizer: str | None = None
    location: str | None = None
    notes: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        return parse_date(value)

    @field_validator("motorboat_loading_time", mode="before")
    @classmethod
    def _coerce_loading_time(cls, value):
        if value is None or value == "":
            return None
        return parse_datetime(value)


class UpdateEventRequest(BaseModel):
    type: EventType | None = None
    name: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    motorboat_loading_time: datetime | None = None
    requested_motorboat: str | None = None
    assigned_motorboat: str | None = None
    organizer: str | None = None
    location: str | None = None
    notes: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        if value is None:
            return None
        return parse_date(value)

    @field_validator("motorboat_loading_time", mode="before")
    @classmethod
    def _coerce_loading_time(cls, value):
        if value is None or value == "":
            return None
        return parse_datetime(value)


class AutoResolveResponse(BaseModel):
    resolved: int
    remaining_conflicts: list[Conflict] = Field(default_factory=list)


class SeasonStatus(BaseModel):
    season: Season
    days: int
    deadline_passed: bool
