"""Supabase implementation for brew sessions."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cafe_log.adapters.supabase_rows import parse_brew
from cafe_log.domain.brews import Brew
from cafe_log.services.brews import BrewRepository


@dataclass
class SupabaseBrewRepository(BrewRepository):
    """Supabase-backed repository for brews."""

    client: Client

    def list_brews(self, user_id: UUID) -> list[Brew]:
        """Return the user's brews, most recent brew date first."""
        response = (
            self.client.table("brews")
            .select("*")
            .eq("user_id", str(user_id))
            .order("brew_date", desc=True)
            .execute()
        )
        return [parse_brew(row) for row in response.data or []]

    def list_brews_for_coffee(
        self, user_id: UUID, coffee_id: UUID, limit: int
    ) -> list[Brew]:
        """Return the latest brews of one coffee."""
        response = (
            self.client.table("brews")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("coffee_id", str(coffee_id))
            .order("brew_date", desc=True)
            .limit(limit)
            .execute()
        )
        return [parse_brew(row) for row in response.data or []]

    def get_brew(self, user_id: UUID, brew_id: UUID) -> Brew | None:
        response = (
            self.client.table("brews")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("id", str(brew_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_brew(response.data[0])

    def create_brew(self, user_id: UUID, payload: dict[str, object]) -> Brew:
        """Create a brew and return it."""
        response = (
            self.client.table("brews")
            .insert({"user_id": str(user_id), **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create brew")
        return parse_brew(response.data[0])

    def update_brew(
        self, user_id: UUID, brew_id: UUID, payload: dict[str, object]
    ) -> Brew | None:
        """Update a brew owned by the user; None when no row matched."""
        response = (
            self.client.table("brews")
            .update(payload)
            .eq("user_id", str(user_id))
            .eq("id", str(brew_id))
            .execute()
        )
        if not response.data:
            return None
        return parse_brew(response.data[0])

    def delete_brew(self, user_id: UUID, brew_id: UUID) -> None:
        self.client.table("brews").delete().eq("user_id", str(user_id)).eq(
            "id", str(brew_id)
        ).execute()
