"""Ephemeral user-facing notifications."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

TOAST_VARIANTS = ("success", "error", "info")


@dataclass(frozen=True)
class Toast:
    """A message shown once and dismissed automatically."""

    id: str
    title: str
    variant: str
    expires_at: datetime | None
    description: str | None = None

    @property
    def duration_ms(self) -> int | None:
        """Milliseconds left before auto-dismiss, for the client-side timer."""
        if self.expires_at is None:
            return None
        remaining = self.expires_at - datetime.now(tz=UTC)
        return max(int(remaining.total_seconds() * 1000), 0)


@dataclass
class ToastCenter:
    """Per-session toast queues."""

    default_duration_ms: int = 4000
    _queues: dict[str, list[Toast]] = field(default_factory=dict)

    def toast(
        self,
        session_key: str,
        title: str,
        description: str | None = None,
        variant: str = "info",
        duration_ms: int | None = None,
    ) -> Toast:
        """Queue a toast; a duration of 0 keeps it until dismissed.

        Expired toasts of every session are dropped first.
        """
        item = self.make(title, description, variant, duration_ms)
        self.prune()
        self._queues.setdefault(session_key, []).append(item)
        return item

    def make(
        self,
        title: str,
        description: str | None = None,
        variant: str = "info",
        duration_ms: int | None = None,
    ) -> Toast:
        """Build a toast without queueing it, for pages rendered directly."""
        if variant not in TOAST_VARIANTS:
            raise ValueError(f"Unknown toast variant: {variant}")
        duration = self.default_duration_ms if duration_ms is None else duration_ms
        expires_at = (
            datetime.now(tz=UTC) + timedelta(milliseconds=duration)
            if duration
            else None
        )
        return Toast(
            id=uuid4().hex,
            title=title,
            description=description,
            variant=variant,
            expires_at=expires_at,
        )

    def prune(self) -> None:
        """Drop expired toasts and empty queues."""
        now = datetime.now(tz=UTC)
        for key in list(self._queues):
            live = [item for item in self._queues[key] if _is_live(item, now)]
            if live:
                self._queues[key] = live
            else:
                del self._queues[key]

    def pending(self, session_key: str) -> list[Toast]:
        """Return live toasts without consuming them."""
        now = datetime.now(tz=UTC)
        live = [
            item for item in self._queues.get(session_key, []) if _is_live(item, now)
        ]
        if live:
            self._queues[session_key] = live
        else:
            self._queues.pop(session_key, None)
        return list(live)

    def drain(self, session_key: str) -> list[Toast]:
        """Return live toasts and remove them from the queue."""
        live = self.pending(session_key)
        self._queues.pop(session_key, None)
        return live

    def dismiss(self, session_key: str, toast_id: str) -> None:
        """Remove a single toast."""
        queue = self._queues.get(session_key, [])
        self._queues[session_key] = [item for item in queue if item.id != toast_id]

    def clear(self, session_key: str) -> None:
        """Remove every toast for the session."""
        self._queues.pop(session_key, None)


def _is_live(item: Toast, now: datetime) -> bool:
    return item.expires_at is None or item.expires_at > now
