"""Supabase queries feeding the analytics page."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from cafe_log.adapters.supabase_rows import parse_datetime, parse_note
from cafe_log.domain.sensory import SensoryNote
from cafe_log.services.analytics import AnalyticsRepository


@dataclass
class SupabaseAnalyticsRepository(AnalyticsRepository):
    """Supabase-backed analytics reads."""

    client: Client

    def list_brew_dates(self, user_id: UUID) -> list[datetime | None]:
        """Return the brew date of every brew, newest first."""
        response = (
            self.client.table("brews")
            .select("brew_date")
            .eq("user_id", str(user_id))
            .order("brew_date", desc=True)
            .execute()
        )
        return [parse_datetime(row.get("brew_date")) for row in response.data or []]

    def list_notes(self, user_id: UUID) -> list[SensoryNote]:
        """Return every sensory note of the user."""
        response = (
            self.client.table("sensory_notes")
            .select("*")
            .eq("user_id", str(user_id))
            .execute()
        )
        return [parse_note(row) for row in response.data or []]
