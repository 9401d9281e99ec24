"""Domain models for authenticated sessions."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID


@dataclass(frozen=True)
class AuthSession:
    """Tokens and identity of a signed-in user."""

    user_id: UUID
    email: str | None
    access_token: str
    refresh_token: str
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True once the access token has expired."""
        if self.expires_at is None:
            return False
        return (now or datetime.now(tz=UTC)) >= self.expires_at

    @property
    def display_name(self) -> str:
        """Return a short greeting name derived from the email."""
        if self.email:
            return self.email.split("@")[0]
        return "barista"
