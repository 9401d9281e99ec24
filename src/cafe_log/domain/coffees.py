"""Domain models for coffee bags."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

PROCESSES = ("washed", "natural", "honey", "anaerobic", "other")
ROAST_LEVELS = ("light", "medium", "dark")
PURCHASE_TYPES = ("retail", "online", "cafe")

PROCESS_LABELS = {
    "washed": "Washed",
    "natural": "Natural",
    "honey": "Honey",
    "anaerobic": "Anaerobic",
    "other": "Other",
}
ROAST_LABELS = {"light": "Light", "medium": "Medium", "dark": "Dark"}


@dataclass(frozen=True)
class Coffee:
    """A bag or batch of roasted coffee being tracked."""

    id: UUID
    user_id: UUID
    display_name: str
    process: str = "washed"
    roast_level: str = "light"
    purchase_type: str = "retail"
    roaster: str | None = None
    origin_country: str | None = None
    origin_region: str | None = None
    origin_farm: str | None = None
    varieties: list[str] = field(default_factory=list)
    roast_date: date | None = None
    purchase_place: str | None = None
    purchase_price: float | None = None
    currency: str | None = None
    bag_weight_g: float | None = None
    notes: str | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def origin(self) -> str:
        """Return the origin parts joined for display."""
        parts = [self.origin_country, self.origin_region, self.origin_farm]
        return ", ".join(part for part in parts if part)
