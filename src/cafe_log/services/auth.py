"""Authentication service and session-change notifications."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from cafe_log.domain.auth import AuthSession

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

SessionListener = Callable[[str, AuthSession], None]


class AuthFailed(Exception):
    """Raised when the identity provider rejects a request."""


class EmailNotConfirmed(AuthFailed):
    """Raised when signing in before the signup email was confirmed."""


class AuthUnavailable(Exception):
    """Raised when the identity provider cannot be reached."""


class AuthGateway(Protocol):
    """Interface to the hosted identity provider."""

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session."""

    def sign_up(
        self, email: str, password: str, redirect_to: str
    ) -> AuthSession | None:
        """Register an account; a session is returned when no confirmation is
        required."""

    def send_magic_link(self, email: str, redirect_to: str) -> None:
        """Email a one-time sign-in link and code."""

    def verify_email_token(self, token_hash: str, token_type: str) -> AuthSession:
        """Exchange an emailed token for a session."""

    def resend_confirmation(self, email: str, redirect_to: str) -> None:
        """Send the signup confirmation email again."""

    def refresh(self, refresh_token: str) -> AuthSession:
        """Obtain a new access token."""

    def sign_out(self, access_token: str) -> None:
        """Revoke the session on the provider."""


@dataclass
class AuthService:
    """Signs users in and out and notifies listeners of session changes."""

    gateway: AuthGateway
    login_redirect_url: str
    _listeners: list[SessionListener] = field(default_factory=list)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password.

        When the provider reports an unconfirmed email, the confirmation is
        sent again and ``EmailNotConfirmed`` is raised.
        """
        try:
            session = self.gateway.sign_in_with_password(email.strip(), password)
        except AuthFailed as exc:
            if "not confirmed" in str(exc).lower():
                self.gateway.resend_confirmation(
                    email.strip(), self.login_redirect_url
                )
                raise EmailNotConfirmed(
                    "Your email is not confirmed yet. We sent the link again."
                ) from exc
            raise
        self._emit(SIGNED_IN, session)
        return session

    def sign_up(self, email: str, password: str) -> AuthSession | None:
        session = self.gateway.sign_up(
            email.strip(), password, self.login_redirect_url
        )
        if session is not None:
            self._emit(SIGNED_IN, session)
        return session

    def send_magic_link(self, email: str, redirect_to: str) -> None:
        self.gateway.send_magic_link(email.strip(), redirect_to)

    def confirm(self, token_hash: str, token_type: str) -> AuthSession:
        """Complete a magic link or signup confirmation."""
        session = self.gateway.verify_email_token(token_hash, token_type)
        self._emit(SIGNED_IN, session)
        return session

    def ensure_fresh(
        self, session: AuthSession, now: datetime | None = None
    ) -> AuthSession | None:
        """Return a usable session, refreshing it once it expired.

        ``None`` means the refresh was rejected and the user must sign in again.
        ``AuthUnavailable`` propagates so the stored session survives an outage.
        """
        if not session.is_expired(now):
            return session
        try:
            refreshed = self.gateway.refresh(session.refresh_token)
        except AuthFailed:
            logger.warning(
                "Session refresh rejected", extra={"user_id": str(session.user_id)}
            )
            self._emit(SIGNED_OUT, session)
            return None
        self._emit(TOKEN_REFRESHED, refreshed)
        return refreshed

    def sign_out(self, session: AuthSession) -> None:
        """Revoke the session; local state is cleared even if that fails."""
        try:
            self.gateway.sign_out(session.access_token)
        except AuthFailed:
            logger.exception(
                "Failed to sign out", extra={"user_id": str(session.user_id)}
            )
        self._emit(SIGNED_OUT, session)

    def _emit(self, event: str, session: AuthSession) -> None:
        for listener in list(self._listeners):
            listener(event, session)
