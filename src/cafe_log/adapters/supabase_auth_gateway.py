"""Supabase Auth (GoTrue) gateway."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

import httpx
from supabase import AuthError, AuthRetryableError, Client, create_client
from supabase.client import ClientOptions

from cafe_log.domain.auth import AuthSession
from cafe_log.services.auth import AuthFailed, AuthGateway, AuthUnavailable


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Runs each auth call on a fresh anon client so no session is shared
    between users of the same process."""

    client_factory: Callable[[], Client]
    admin_client: Client

    @classmethod
    def create(
        cls, supabase_url: str, anon_key: str, admin_client: Client
    ) -> "SupabaseAuthGateway":
        """Create a gateway that talks to the project's auth endpoint."""

        def client_factory() -> Client:
            return create_client(
                supabase_url,
                anon_key,
                options=ClientOptions(
                    persist_session=False, auto_refresh_token=False
                ),
            )

        return cls(client_factory=client_factory, admin_client=admin_client)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            response = self.client_factory().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise AuthFailed(exc.message) from exc
        return _to_session(response.session)

    def sign_up(
        self, email: str, password: str, redirect_to: str
    ) -> AuthSession | None:
        try:
            response = self.client_factory().auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"email_redirect_to": redirect_to},
                }
            )
        except AuthError as exc:
            raise AuthFailed(exc.message) from exc
        if response.session is None:
            return None
        return _to_session(response.session)

    def send_magic_link(self, email: str, redirect_to: str) -> None:
        try:
            self.client_factory().auth.sign_in_with_otp(
                {"email": email, "options": {"email_redirect_to": redirect_to}}
            )
        except AuthError as exc:
            raise AuthFailed(exc.message) from exc

    def verify_email_token(self, token_hash: str, token_type: str) -> AuthSession:
        try:
            response = self.client_factory().auth.verify_otp(
                {"token_hash": token_hash, "type": token_type}
            )
        except AuthError as exc:
            raise AuthFailed(exc.message) from exc
        return _to_session(response.session)

    def resend_confirmation(self, email: str, redirect_to: str) -> None:
        try:
            self.client_factory().auth.resend(
                {
                    "type": "signup",
                    "email": email,
                    "options": {"email_redirect_to": redirect_to},
                }
            )
        except AuthError as exc:
            raise AuthFailed(exc.message) from exc

    def refresh(self, refresh_token: str) -> AuthSession:
        try:
            response = self.client_factory().auth.refresh_session(refresh_token)
        except AuthRetryableError as exc:
            raise AuthUnavailable(exc.message) from exc
        except AuthError as exc:
            raise AuthFailed(exc.message) from exc
        except httpx.HTTPError as exc:
            raise AuthUnavailable(str(exc)) from exc
        return _to_session(response.session)

    def sign_out(self, access_token: str) -> None:
        try:
            self.admin_client.auth.admin.sign_out(access_token)
        except AuthError as exc:
            raise AuthFailed(exc.message) from exc


def _to_session(session: object) -> AuthSession:
    """Convert a GoTrue session into the app's session record."""
    if session is None:
        raise AuthFailed("No session returned by the auth provider")
    user = session.user  # type: ignore[attr-defined]
    expires_at = session.expires_at  # type: ignore[attr-defined]
    return AuthSession(
        user_id=UUID(str(user.id)),
        email=user.email,
        access_token=session.access_token,  # type: ignore[attr-defined]
        refresh_token=session.refresh_token,  # type: ignore[attr-defined]
        expires_at=(
            datetime.fromtimestamp(expires_at, tz=UTC) if expires_at else None
        ),
    )
