"""Services for the coffee catalog."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from cafe_log.domain.brews import Brew, BrewDetail
from cafe_log.domain.coffees import Coffee
from cafe_log.services.analytics import average_score
from cafe_log.services.query_cache import QueryCache

DEFAULT_DOSE_G = 15.0


class CoffeeRepository(Protocol):
    """Persistence interface for coffees."""

    def list_coffees(self, user_id: UUID) -> list[Coffee]:
        """Return the user's coffees, newest first."""

    def get_coffee(self, user_id: UUID, coffee_id: UUID) -> Coffee | None:
        """Return a coffee by id, if present."""

    def create_coffee(self, user_id: UUID, payload: dict[str, object]) -> Coffee:
        """Create a coffee and return it."""

    def update_coffee(
        self, user_id: UUID, coffee_id: UUID, payload: dict[str, object]
    ) -> Coffee:
        """Update a coffee and return it."""


@dataclass(frozen=True)
class CoffeeStats:
    """Cups brewed and average score for one coffee."""

    cups: int
    average_score: float | None


@dataclass(frozen=True)
class LowStockCoffee:
    """A coffee whose estimated remaining beans fall below the threshold."""

    coffee: Coffee
    remaining_g: float


@dataclass
class CoffeeService:
    """Application service for coffee operations."""

    repository: CoffeeRepository
    cache: QueryCache

    def list_coffees(self, user_id: UUID) -> list[Coffee]:
        """Return all coffees for the user."""
        return self.cache.fetch(
            (user_id, "coffees"), lambda: self.repository.list_coffees(user_id)
        )

    def get(self, user_id: UUID, coffee_id: UUID) -> Coffee | None:
        """Return one coffee."""
        return self.cache.fetch(
            (user_id, "coffee", coffee_id),
            lambda: self.repository.get_coffee(user_id, coffee_id),
        )

    def save(
        self, user_id: UUID, coffee_id: UUID | None, payload: dict[str, object]
    ) -> Coffee:
        """Create a coffee, or update it when an id is given."""
        if coffee_id is None:
            coffee = self.repository.create_coffee(user_id, payload)
        else:
            coffee = self.repository.update_coffee(user_id, coffee_id, payload)
        self.cache.invalidate((user_id, "coffees"))
        self.cache.invalidate((user_id, "coffee", coffee.id))
        self.cache.invalidate((user_id, "brews"))
        return coffee


def filter_coffees(coffees: list[Coffee], term: str | None) -> list[Coffee]:
    """Match a search term against name, roaster and origin country."""
    needle = (term or "").strip().lower()
    if not needle:
        return coffees
    return [
        coffee
        for coffee in coffees
        if needle in coffee.display_name.lower()
        or needle in (coffee.roaster or "").lower()
        or needle in (coffee.origin_country or "").lower()
    ]


def coffee_stats(details: list[BrewDetail]) -> CoffeeStats:
    """Summarize the brews logged for a coffee."""
    notes = [detail.note for detail in details if detail.note is not None]
    return CoffeeStats(cups=len(details), average_score=average_score(notes))


def typical_dose(details: list[BrewDetail], default: float = DEFAULT_DOSE_G) -> float:
    """Average dose of the given brews, or a default when none recorded one."""
    doses = [detail.brew.dose_g for detail in details if detail.brew.dose_g]
    if not doses:
        return default
    return sum(doses) / len(doses)


def low_stock(
    coffees: list[Coffee], brews: list[Brew], threshold_g: float
) -> list[LowStockCoffee]:
    """Return coffees whose bag weight minus brewed doses is under threshold."""
    used: dict[UUID, float] = {}
    for brew in brews:
        if brew.dose_g:
            used[brew.coffee_id] = used.get(brew.coffee_id, 0.0) + brew.dose_g
    result = []
    for coffee in coffees:
        if not coffee.bag_weight_g:
            continue
        remaining = max(coffee.bag_weight_g - used.get(coffee.id, 0.0), 0.0)
        if remaining < threshold_g:
            result.append(LowStockCoffee(coffee=coffee, remaining_g=remaining))
    return sorted(result, key=lambda item: item.remaining_g)
