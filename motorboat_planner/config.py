import os
from dataclasses import dataclass
from datetime import date

_PREFIX = "MOTORBOAT_PLANNER_"


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    # JSON catalog of boat classes and motorboats; built-in club fleet when unset
    registry_path: str | None = None
    max_auto_resolutions: int = 100
    seed_demo_data: bool = False
    season_year: int | None = None
    deadline: date | None = None


def _env(name: str) -> str:
    return os.getenv(_PREFIX + name, "").strip()


def load_settings() -> Settings:
    max_resolutions = _env("MAX_AUTO_RESOLUTIONS")
    season_year = _env("SEASON_YEAR")
    deadline = _env("DEADLINE")
    return Settings(
        log_level=_env("LOG_LEVEL").upper() or "INFO",
        registry_path=_env("REGISTRY_PATH") or None,
        max_auto_resolutions=int(max_resolutions) if max_resolutions else 100,
        seed_demo_data=_env("SEED_DEMO").lower() in ("1", "true", "yes"),
        season_year=int(season_year) if season_year else None,
        deadline=date.fromisoformat(deadline) if deadline else None,
    )
