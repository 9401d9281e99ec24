"""Supabase implementation for sensory notes."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cafe_log.adapters.supabase_rows import parse_note
from cafe_log.domain.sensory import SensoryNote
from cafe_log.services.brews import SensoryNoteRepository


@dataclass
class SupabaseSensoryNoteRepository(SensoryNoteRepository):
    """Supabase-backed repository for sensory notes."""

    client: Client

    def list_notes(self, user_id: UUID) -> list[SensoryNote]:
        response = (
            self.client.table("sensory_notes")
            .select("*")
            .eq("user_id", str(user_id))
            .execute()
        )
        return [parse_note(row) for row in response.data or []]

    def list_notes_for_brews(
        self, user_id: UUID, brew_ids: list[UUID]
    ) -> list[SensoryNote]:
        if not brew_ids:
            return []
        response = (
            self.client.table("sensory_notes")
            .select("*")
            .eq("user_id", str(user_id))
            .in_("brew_id", [str(brew_id) for brew_id in brew_ids])
            .execute()
        )
        return [parse_note(row) for row in response.data or []]

    def get_note_for_brew(self, user_id: UUID, brew_id: UUID) -> SensoryNote | None:
        response = (
            self.client.table("sensory_notes")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("brew_id", str(brew_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_note(response.data[0])

    def upsert_note_for_brew(
        self, user_id: UUID, brew_id: UUID, payload: dict[str, object]
    ) -> None:
        """Insert or replace the note; relies on the unique index on brew_id."""
        response = (
            self.client.table("sensory_notes")
            .upsert(
                {"user_id": str(user_id), "brew_id": str(brew_id), **payload},
                on_conflict="brew_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save sensory note")

    def delete_notes_for_brew(self, user_id: UUID, brew_id: UUID) -> None:
        self.client.table("sensory_notes").delete().eq("user_id", str(user_id)).eq(
            "brew_id", str(brew_id)
        ).execute()
