"""Domain models for sensory tasting notes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

SCA_AXES = (
    "aroma",
    "flavor",
    "aftertaste",
    "acidity",
    "body",
    "balance",
    "uniformity",
    "cleanliness",
    "sweetness",
)

# Breakdown keys written by the first version of the journal.
LEGACY_AXIS_KEYS = {
    "sabor": "flavor",
    "acidez": "acidity",
    "cuerpo": "body",
    "uniformidad": "uniformity",
    "limpieza": "cleanliness",
    "dulzor": "sweetness",
}


@dataclass(frozen=True)
class SensoryNote:
    """Subjective tasting evaluation attached to one brew."""

    id: UUID
    user_id: UUID
    brew_id: UUID
    score_total: float | None = None
    sca_breakdown: dict[str, float] = field(default_factory=dict)
    descriptors: list[str] = field(default_factory=list)
    would_repeat: bool | None = None
    created_at: datetime | None = None
