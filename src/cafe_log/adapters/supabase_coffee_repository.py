"""Supabase implementation for the coffee catalog."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cafe_log.adapters.supabase_rows import parse_coffee
from cafe_log.domain.coffees import Coffee
from cafe_log.services.coffees import CoffeeRepository


@dataclass
class SupabaseCoffeeRepository(CoffeeRepository):
    """Supabase-backed repository for coffees."""

    client: Client

    def list_coffees(self, user_id: UUID) -> list[Coffee]:
        """Return the user's coffees, newest first."""
        response = (
            self.client.table("coffees")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_coffee(row) for row in response.data or []]

    def get_coffee(self, user_id: UUID, coffee_id: UUID) -> Coffee | None:
        """Return a coffee by id."""
        response = (
            self.client.table("coffees")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("id", str(coffee_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_coffee(response.data[0])

    def create_coffee(self, user_id: UUID, payload: dict[str, object]) -> Coffee:
        """Create a coffee and return it."""
        response = (
            self.client.table("coffees")
            .insert({"user_id": str(user_id), **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create coffee")
        return parse_coffee(response.data[0])

    def update_coffee(
        self, user_id: UUID, coffee_id: UUID, payload: dict[str, object]
    ) -> Coffee:
        """Update a coffee and return it."""
        response = (
            self.client.table("coffees")
            .update(payload)
            .eq("user_id", str(user_id))
            .eq("id", str(coffee_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update coffee")
        return parse_coffee(response.data[0])
