"""Brew logging service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from cafe_log.domain.brews import Brew, BrewDetail, BrewEntry
from cafe_log.domain.sensory import SensoryNote
from cafe_log.services.brew_drafts import (
    BrewDraft,
    brew_payload,
    note_payload,
    resolve_selection,
)
from cafe_log.services.coffees import CoffeeService
from cafe_log.services.query_cache import QueryCache
from cafe_log.services.recipes import RecipeService

logger = logging.getLogger(__name__)

RECENT_BREWS_PER_COFFEE = 10


class BrewNotFound(LookupError):
    """Raised when a brew does not exist or belongs to another user."""


class BrewRepository(Protocol):
    """Persistence interface for brews."""

    def list_brews(self, user_id: UUID) -> list[Brew]:
        """Return the user's brews, most recent brew date first."""

    def list_brews_for_coffee(
        self, user_id: UUID, coffee_id: UUID, limit: int
    ) -> list[Brew]:
        """Return recent brews of one coffee."""

    def get_brew(self, user_id: UUID, brew_id: UUID) -> Brew | None:
        """Return a brew by id, if present."""

    def create_brew(self, user_id: UUID, payload: dict[str, object]) -> Brew:
        """Create a brew and return it."""

    def update_brew(
        self, user_id: UUID, brew_id: UUID, payload: dict[str, object]
    ) -> Brew | None:
        """Update a brew of the user and return it; None when no row matched."""

    def delete_brew(self, user_id: UUID, brew_id: UUID) -> None:
        """Delete a brew."""


class SensoryNoteRepository(Protocol):
    """Persistence interface for sensory notes."""

    def list_notes(self, user_id: UUID) -> list[SensoryNote]:
        """Return every note of the user."""

    def list_notes_for_brews(
        self, user_id: UUID, brew_ids: list[UUID]
    ) -> list[SensoryNote]:
        """Return the notes attached to the given brews."""

    def get_note_for_brew(self, user_id: UUID, brew_id: UUID) -> SensoryNote | None:
        """Return the note of a brew, if one was written."""

    def upsert_note_for_brew(
        self, user_id: UUID, brew_id: UUID, payload: dict[str, object]
    ) -> None:
        """Insert or replace the single note of a brew."""

    def delete_notes_for_brew(self, user_id: UUID, brew_id: UUID) -> None:
        """Delete the notes of a brew."""


@dataclass
class BrewService:
    """Service that persists brews together with their tasting notes."""

    repository: BrewRepository
    note_repository: SensoryNoteRepository
    coffee_service: CoffeeService
    recipe_service: RecipeService
    cache: QueryCache

    def list_brews(self, user_id: UUID) -> list[Brew]:
        """Return raw brew rows."""
        return self.cache.fetch(
            (user_id, "brews", "rows"), lambda: self.repository.list_brews(user_id)
        )

    def list_entries(self, user_id: UUID) -> list[BrewEntry]:
        """Return brews joined with coffee name, recipe method and score."""
        return self.cache.fetch(
            (user_id, "brews", "entries"), lambda: self._load_entries(user_id)
        )

    def get_detail(self, user_id: UUID, brew_id: UUID) -> BrewDetail | None:
        """Return a brew with its note."""
        return self.cache.fetch(
            (user_id, "brew", brew_id), lambda: self._load_detail(user_id, brew_id)
        )

    def recent_for_coffee(
        self, user_id: UUID, coffee_id: UUID, limit: int = RECENT_BREWS_PER_COFFEE
    ) -> list[BrewDetail]:
        """Return the latest brews of a coffee with their notes."""
        return self.cache.fetch(
            (user_id, "coffee-brews", coffee_id),
            lambda: self._load_for_coffee(user_id, coffee_id, limit),
        )

    def save(self, user_id: UUID, brew_id: UUID | None, draft: BrewDraft) -> UUID:
        """Persist a draft as a new or existing brew and return its id."""
        coffees = self.coffee_service.list_coffees(user_id)
        recipes = self.recipe_service.list_recipes(user_id)
        draft = resolve_selection(draft, coffees, recipes)
        coffee = next((c for c in coffees if c.id == draft.coffee_id), None)
        if coffee is None:
            raise ValueError("Select the coffee you used for this brew.")
        recipe = next((r for r in recipes if r.id == draft.recipe_id), None)
        if recipe is None and draft.save_as_recipe:
            recipe = self.recipe_service.save(user_id, None, _quick_recipe(draft))
            logger.info("Created quick recipe", extra={"recipe_id": str(recipe.id)})

        payload = brew_payload(draft, coffee, recipe)
        if brew_id is None:
            brew_id = self.repository.create_brew(user_id, payload).id
        elif self.repository.update_brew(user_id, brew_id, payload) is None:
            raise BrewNotFound(f"Brew {brew_id} not found")

        note = note_payload(draft)
        if note is not None:
            self.note_repository.upsert_note_for_brew(user_id, brew_id, note)
        self._invalidate(user_id, brew_id)
        return brew_id

    def delete(self, user_id: UUID, brew_id: UUID) -> None:
        """Delete a brew and its notes."""
        self.note_repository.delete_notes_for_brew(user_id, brew_id)
        self.repository.delete_brew(user_id, brew_id)
        self._invalidate(user_id, brew_id)

    def _invalidate(self, user_id: UUID, brew_id: UUID) -> None:
        for key in ("brews", "coffee-brews", "analytics"):
            self.cache.invalidate((user_id, key))
        self.cache.invalidate((user_id, "brew", brew_id))

    def _load_entries(self, user_id: UUID) -> list[BrewEntry]:
        brews = self.list_brews(user_id)
        coffees = {c.id: c for c in self.coffee_service.list_coffees(user_id)}
        recipes = {r.id: r for r in self.recipe_service.list_recipes(user_id)}
        scores = {
            note.brew_id: note.score_total
            for note in self.note_repository.list_notes(user_id)
        }
        entries = []
        for brew in brews:
            coffee = coffees.get(brew.coffee_id)
            recipe = recipes.get(brew.recipe_id) if brew.recipe_id else None
            entries.append(
                BrewEntry(
                    brew=brew,
                    coffee_name=coffee.display_name if coffee else "—",
                    recipe_method=recipe.method if recipe else None,
                    score_total=scores.get(brew.id),
                )
            )
        return entries

    def _load_detail(self, user_id: UUID, brew_id: UUID) -> BrewDetail | None:
        brew = self.repository.get_brew(user_id, brew_id)
        if brew is None:
            return None
        note = self.note_repository.get_note_for_brew(user_id, brew_id)
        return BrewDetail(brew=brew, note=note)

    def _load_for_coffee(
        self, user_id: UUID, coffee_id: UUID, limit: int
    ) -> list[BrewDetail]:
        brews = self.repository.list_brews_for_coffee(user_id, coffee_id, limit)
        if not brews:
            return []
        notes = self.note_repository.list_notes_for_brews(
            user_id, [brew.id for brew in brews]
        )
        by_brew = {note.brew_id: note for note in notes}
        return [BrewDetail(brew=brew, note=by_brew.get(brew.id)) for brew in brews]


def _quick_recipe(draft: BrewDraft) -> dict[str, object]:
    return {
        "method": draft.method,
        "dose_g": draft.dose_g,
        "water_g": draft.water_g,
        "ratio": draft.ratio,
        "temp_c": draft.temp_c,
        "total_time_sec": draft.total_time_sec,
        "grinder": None,
        "grind_setting": None,
        "steps": None,
    }
