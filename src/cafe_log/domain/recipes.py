"""Domain models for brewing recipes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

BREW_METHODS = (
    "espresso",
    "v60",
    "origami",
    "aeropress",
    "frenchpress",
    "moka",
    "other",
)

METHOD_LABELS = {
    "espresso": "Espresso",
    "v60": "V60",
    "origami": "Origami",
    "aeropress": "Aeropress",
    "frenchpress": "French Press",
    "moka": "Moka",
    "other": "Other",
}


@dataclass(frozen=True)
class Recipe:
    """A reusable brewing parameter template for one method."""

    id: UUID
    user_id: UUID
    method: str = "v60"
    dose_g: float | None = None
    water_g: float | None = None
    ratio: float | None = None
    temp_c: float | None = None
    total_time_sec: int | None = None
    grinder: str | None = None
    grind_setting: str | None = None
    steps: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
