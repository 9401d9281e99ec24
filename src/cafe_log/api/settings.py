"""Preferences page."""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError

from cafe_log.api.forms import parse_form, validation_message
from cafe_log.api.views import get_container, get_preferences, notify, render
from cafe_log.services.preferences import (
    PREFERENCES_COOKIE,
    Preferences,
    dump_preferences,
)

router = APIRouter(prefix="/settings", tags=["settings"])

# One year.
PREFERENCES_MAX_AGE = 60 * 60 * 24 * 365


@router.get("", response_class=HTMLResponse)
async def settings_page(request: Request) -> HTMLResponse:
    return render(
        request,
        "settings.html",
        {"active_tab": "settings", "values": get_preferences(request).model_dump()},
    )


@router.post("")
async def save_settings(request: Request) -> Response:
    values = parse_form(await request.form())
    values["enable_haptics"] = "true" if values.get("enable_haptics") else "false"
    try:
        preferences = Preferences.model_validate(values)
    except ValidationError as exc:
        notice = get_container(request).toasts.make(
            "Check your preferences", validation_message(exc), variant="error"
        )
        return render(
            request,
            "settings.html",
            {"active_tab": "settings", "values": values},
            notices=[notice],
            status_code=400,
        )
    notify(request, "Preferences saved")
    response = RedirectResponse(url="/settings", status_code=303)
    response.set_cookie(
        PREFERENCES_COOKIE,
        dump_preferences(preferences),
        max_age=PREFERENCES_MAX_AGE,
        samesite="lax",
    )
    return response
