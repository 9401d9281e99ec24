"""Signed session cookie carrying the Supabase tokens."""

from datetime import datetime
from uuid import UUID

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeTimedSerializer

from cafe_log.config import Settings
from cafe_log.domain.auth import AuthSession

SESSION_COOKIE = "cafe_log_session"

_PUBLIC_PATHS = frozenset(
    {"/login", "/offline", "/manifest.json", "/sw.js", "/health"}
)
_PUBLIC_PREFIXES = ("/login/", "/auth/", "/static/", "/icons/")


def is_public(path: str) -> bool:
    """Paths reachable without signing in."""
    return path in _PUBLIC_PATHS or path.startswith(_PUBLIC_PREFIXES)


def _signer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.secret_key, salt="cafe-log-session")


def encode_session(settings: Settings, session: AuthSession) -> str:
    return _signer(settings).dumps(
        {
            "user_id": str(session.user_id),
            "email": session.email,
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_at": (
                session.expires_at.isoformat() if session.expires_at else None
            ),
        }
    )


def decode_session(settings: Settings, token: str | None) -> AuthSession | None:
    """Return the session stored in a cookie value, or None if it is invalid."""
    if not token:
        return None
    try:
        data = _signer(settings).loads(
            token, max_age=settings.session_max_age_seconds
        )
    except BadSignature:
        return None
    try:
        expires_raw = data.get("expires_at")
        return AuthSession(
            user_id=UUID(data["user_id"]),
            email=data.get("email"),
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_at=datetime.fromisoformat(expires_raw) if expires_raw else None,
        )
    except (KeyError, TypeError, ValueError):
        return None


def set_session_cookie(
    response: Response, settings: Settings, session: AuthSession
) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        encode_session(settings, session),
        httponly=True,
        samesite="lax",
        secure=settings.environment != "local",
        max_age=settings.session_max_age_seconds,
    )


def clear_session_cookie(response: Response) -> None:
    """Drop the session cookie and the browser caches that held its pages."""
    response.delete_cookie(SESSION_COOKIE)
    response.headers["Clear-Site-Data"] = '"cache"'


def current_session(request: Request) -> AuthSession:
    """Session attached by the auth middleware."""
    return request.state.session


def session_key(request: Request) -> str | None:
    """Key for per-user state such as queued toasts."""
    session = getattr(request.state, "session", None)
    return str(session.user_id) if session is not None else None
