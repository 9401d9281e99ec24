"""Template rendering shared by the page routers."""

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from cafe_log.api.session import session_key
from cafe_log.containers import AppContainer
from cafe_log.domain.coffees import PROCESS_LABELS, ROAST_LABELS
from cafe_log.domain.recipes import METHOD_LABELS
from cafe_log.services.preferences import (
    PREFERENCES_COOKIE,
    Preferences,
    format_temperature,
    format_weight,
    load_preferences,
)
from cafe_log.services.toasts import Toast

templates = Jinja2Templates(directory=Path(__file__).parent.parent / "templates")


def _format_datetime(value: datetime | None, tz_name: str = "UTC") -> str:
    if value is None:
        return "—"
    if value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(tz_name))
    return value.strftime("%d %b %Y %H:%M")


def _format_number(value: float | None, suffix: str = "") -> str:
    if value is None:
        return "—"
    return f"{value:g}{suffix}"


templates.env.filters["temperature"] = format_temperature
templates.env.filters["weight"] = format_weight
templates.env.filters["local_datetime"] = _format_datetime
templates.env.filters["number"] = _format_number
templates.env.globals.update(
    method_labels=METHOD_LABELS,
    process_labels=PROCESS_LABELS,
    roast_labels=ROAST_LABELS,
)


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_preferences(request: Request) -> Preferences:
    return load_preferences(request.cookies.get(PREFERENCES_COOKIE))


def notify(
    request: Request,
    title: str,
    description: str | None = None,
    variant: str = "success",
) -> None:
    """Queue a toast shown on the next page the signed-in user opens."""
    key = session_key(request)
    if key is not None:
        get_container(request).toasts.toast(key, title, description, variant)


def render(
    request: Request,
    name: str,
    context: dict[str, object] | None = None,
    *,
    notices: list[Toast] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render a page with the session, preferences and pending toasts."""
    container = get_container(request)
    key = session_key(request)
    toasts = container.toasts.drain(key) if key is not None else []
    toasts.extend(notices or [])
    return templates.TemplateResponse(
        request,
        name,
        {
            "session": getattr(request.state, "session", None),
            "preferences": get_preferences(request),
            "display_timezone": container.settings.display_timezone,
            "toasts": toasts,
            **(context or {}),
        },
        status_code=status_code,
    )


def error_toast(
    request: Request, exc: Exception, fallback: str
) -> Toast:
    """Build an error toast from a backend failure, with local debug info."""
    container = get_container(request)
    message = getattr(exc, "message", None) or str(exc) or fallback
    if container.settings.environment == "local":
        message = f"{message} (debug: {type(exc).__name__})"
    return container.toasts.make(fallback, message, variant="error")
