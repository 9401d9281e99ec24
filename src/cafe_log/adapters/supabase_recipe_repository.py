"""Supabase implementation for brewing recipes."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cafe_log.adapters.supabase_rows import parse_recipe
from cafe_log.domain.recipes import Recipe
from cafe_log.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for recipes."""

    client: Client

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_recipe(row) for row in response.data or []]

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("id", str(recipe_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_recipe(response.data[0])

    def create_recipe(self, user_id: UUID, payload: dict[str, object]) -> Recipe:
        response = (
            self.client.table("recipes")
            .insert({"user_id": str(user_id), **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe")
        return parse_recipe(response.data[0])

    def update_recipe(
        self, user_id: UUID, recipe_id: UUID, payload: dict[str, object]
    ) -> Recipe:
        response = (
            self.client.table("recipes")
            .update(payload)
            .eq("user_id", str(user_id))
            .eq("id", str(recipe_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update recipe")
        return parse_recipe(response.data[0])

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> None:
        self.client.table("recipes").delete().eq("user_id", str(user_id)).eq(
            "id", str(recipe_id)
        ).execute()
