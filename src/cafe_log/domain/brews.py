"""Domain models for brew sessions."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from cafe_log.domain.sensory import SensoryNote


@dataclass(frozen=True)
class Brew:
    """One concrete brewing session."""

    id: UUID
    user_id: UUID
    coffee_id: UUID
    method: str = "v60"
    recipe_id: UUID | None = None
    brew_date: datetime | None = None
    dose_g: float | None = None
    water_g: float | None = None
    ratio: float | None = None
    temp_c: float | None = None
    total_time_sec: int | None = None
    yield_g: float | None = None
    water_profile: str | None = None
    tds: float | None = None
    extraction_yield: float | None = None
    location: str | None = None
    cost_per_cup: float | None = None
    notes: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class BrewDetail:
    """A brew with its optional sensory note."""

    brew: Brew
    note: SensoryNote | None


@dataclass(frozen=True)
class BrewEntry:
    """Brew row for the journal list, joined with lookup labels."""

    brew: Brew
    coffee_name: str
    recipe_method: str | None
    score_total: float | None
