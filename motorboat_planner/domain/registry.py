"""Static catalogs of boat classes and motorboats.

The catalogs are loaded once per process and treated as immutable; the
conflict engine only ever reads from them.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from motorboat_planner.config import load_settings
from motorboat_planner.domain.models import BoatClass, Motorboat

logger = logging.getLogger(__name__)


class UnknownBoatClassError(KeyError):
    pass


class UnknownMotorboatError(KeyError):
    pass


BOAT_CLASSES: tuple[BoatClass, ...] = (
    BoatClass(id="opti-c", name="Opti C", color_tag="#22c55e"),
    BoatClass(id="opti-b", name="Opti B", color_tag="#3b82f6"),
    BoatClass(id="opti-a", name="Opti A", color_tag="#8b5cf6"),
    BoatClass(id="29er", name="29er", color_tag="#f59e0b"),
    BoatClass(id="pirat", name="Pirat", color_tag="#ec4899"),
    BoatClass(id="j70", name="J70", color_tag="#06b6d4"),
)

MOTORBOATS: tuple[Motorboat, ...] = (
    Motorboat(
        id="tornado-rot",
        name="Tornado rot",
        description="Fastest boat",
        priority_classes=("29er", "j70"),
        family="tornado",
    ),
    Motorboat(
        id="tornado-grau",
        name="Tornado grau",
        description="Fast boat",
        priority_classes=("29er", "j70"),
        family="tornado",
    ),
    Motorboat(id="narwhal", name="Narwhal", description="No priority"),
    Motorboat(id="zodiac", name="Zodiac", description="No priority"),
)


class FleetRegistry:
    """Ordered, read-only lookup over the boat-class and motorboat catalogs.

    Registry order is significant: conflict reports are grouped by motorboat
    in this order and alternative boats are picked first-match in it.
    """

    def __init__(
        self,
        boat_classes: Iterable[BoatClass] = BOAT_CLASSES,
        motorboats: Iterable[Motorboat] = MOTORBOATS,
    ) -> None:
        self._boat_classes: tuple[BoatClass, ...] = tuple(boat_classes)
        self._motorboats: tuple[Motorboat, ...] = tuple(motorboats)
        self._classes_by_id = {bc.id: bc for bc in self._boat_classes}
        self._boats_by_id = {mb.id: mb for mb in self._motorboats}
        if len(self._boats_by_id) != len(self._motorboats):
            raise ValueError("motorboat ids must be unique")
        if len(self._classes_by_id) != len(self._boat_classes):
            raise ValueError("boat class ids must be unique")

    @classmethod
    def from_file(cls, path: str | Path) -> FleetRegistry:
        """Load a JSON catalog of the form ``{"boat_classes": [...], "motorboats": [...]}``."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        registry = cls(
            boat_classes=[BoatClass.model_validate(bc) for bc in raw.get("boat_classes", [])],
            motorboats=[Motorboat.model_validate(mb) for mb in raw.get("motorboats", [])],
        )
        logger.info(
            "Loaded fleet registry from %s: %d boat classes, %d motorboats",
            path,
            len(registry.boat_classes),
            len(registry.motorboats),
        )
        return registry

    @property
    def boat_classes(self) -> tuple[BoatClass, ...]:
        return self._boat_classes

    @property
    def motorboats(self) -> tuple[Motorboat, ...]:
        return self._motorboats

    def boat_class(self, boat_class_id: str) -> BoatClass:
        try:
            return self._classes_by_id[boat_class_id]
        except KeyError:
            raise UnknownBoatClassError(boat_class_id) from None

    def motorboat(self, motorboat_id: str) -> Motorboat:
        try:
            return self._boats_by_id[motorboat_id]
        except KeyError:
            raise UnknownMotorboatError(motorboat_id) from None

    def find_motorboat(self, motorboat_id: str | None) -> Motorboat | None:
        if motorboat_id is None:
            return None
        return self._boats_by_id.get(motorboat_id)

    def boat_class_name(self, boat_class_id: str) -> str:
        bc = self._classes_by_id.get(boat_class_id)
        return bc.name if bc else boat_class_id

    def has_priority(self, boat_class_id: str, motorboat_id: str) -> bool:
        mb = self._boats_by_id.get(motorboat_id)
        return mb is not None and boat_class_id in mb.priority_classes

    def priority_motorboats(self, boat_class_id: str) -> list[Motorboat]:
        """Motorboats on which *boat_class_id* holds priority, in registry order."""
        return [mb for mb in self._motorboats if boat_class_id in mb.priority_classes]

    def motorboats_by_priority(self, boat_class_id: str) -> list[Motorboat]:
        """All motorboats, prioritized ones first; registry order otherwise kept."""
        return sorted(
            self._motorboats,
            key=lambda mb: 0 if boat_class_id in mb.priority_classes else 1,
        )

    def same_family(self, motorboat_a: str, motorboat_b: str) -> bool:
        a = self._boats_by_id.get(motorboat_a)
        b = self._boats_by_id.get(motorboat_b)
        return a is not None and b is not None and a.family is not None and a.family == b.family


@lru_cache(maxsize=1)
def get_registry() -> FleetRegistry:
    """Process-wide registry: from the configured JSON file, else the built-in club fleet."""
    settings = load_settings()
    if settings.registry_path:
        return FleetRegistry.from_file(settings.registry_path)
    return FleetRegistry()
