"""Services for brewing recipes."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from cafe_log.domain.recipes import Recipe
from cafe_log.services.query_cache import QueryCache


class RecipeRepository(Protocol):
    """Persistence interface for recipes."""

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        """Return the user's recipes, newest first."""

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id, if present."""

    def create_recipe(self, user_id: UUID, payload: dict[str, object]) -> Recipe:
        """Create a recipe and return it."""

    def update_recipe(
        self, user_id: UUID, recipe_id: UUID, payload: dict[str, object]
    ) -> Recipe:
        """Update a recipe and return it."""

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> None:
        """Delete a recipe."""


@dataclass
class RecipeService:
    """Application service for recipe operations."""

    repository: RecipeRepository
    cache: QueryCache

    def list_recipes(
        self, user_id: UUID, method: str | None = None
    ) -> list[Recipe]:
        """Return recipes, optionally filtered by brew method."""
        recipes = self.cache.fetch(
            (user_id, "recipes"), lambda: self.repository.list_recipes(user_id)
        )
        if not method:
            return recipes
        return [recipe for recipe in recipes if recipe.method == method]

    def get(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        """Return one recipe."""
        return self.cache.fetch(
            (user_id, "recipe", recipe_id),
            lambda: self.repository.get_recipe(user_id, recipe_id),
        )

    def save(
        self, user_id: UUID, recipe_id: UUID | None, payload: dict[str, object]
    ) -> Recipe:
        """Create a recipe, or update it when an id is given."""
        if recipe_id is None:
            recipe = self.repository.create_recipe(user_id, payload)
        else:
            recipe = self.repository.update_recipe(user_id, recipe_id, payload)
        self._invalidate(user_id, recipe.id)
        return recipe

    def delete(self, user_id: UUID, recipe_id: UUID) -> None:
        """Delete a recipe; brews keep their own copies of its parameters."""
        self.repository.delete_recipe(user_id, recipe_id)
        self._invalidate(user_id, recipe_id)

    def _invalidate(self, user_id: UUID, recipe_id: UUID) -> None:
        self.cache.invalidate((user_id, "recipes"))
        self.cache.invalidate((user_id, "recipe", recipe_id))
        self.cache.invalidate((user_id, "brews"))
