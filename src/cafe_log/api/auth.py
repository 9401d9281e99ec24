"""Sign-in, magic link and sign-out routes."""

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from cafe_log.api.forms import parse_form
from cafe_log.api.session import (
    clear_session_cookie,
    current_session,
    set_session_cookie,
)
from cafe_log.api.views import error_toast, get_container, notify, render
from cafe_log.config import redirect_url
from cafe_log.domain.auth import AuthSession
from cafe_log.services.auth import AuthFailed, EmailNotConfirmed
from cafe_log.services.toasts import Toast

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


def _login_page(
    request: Request,
    email: str = "",
    *,
    notice: Toast | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return render(
        request,
        "login.html",
        {"email": email},
        notices=[notice] if notice else None,
        status_code=status_code,
    )


def _signed_in(request: Request, session: AuthSession) -> Response:
    notify(request, f"Welcome, {session.display_name}")
    response = RedirectResponse(url="/", status_code=303)
    set_session_cookie(response, get_container(request).settings, session)
    return response


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request) -> Response:
    if request.state.session is not None:
        return RedirectResponse(url="/", status_code=302)
    return _login_page(request)


@router.post("/login")
async def login(request: Request) -> Response:
    container = get_container(request)
    values = parse_form(await request.form())
    email = values.get("email", "")
    password = values.get("password", "")
    if not email or not password:
        notice = container.toasts.make(
            "Email and password are required", variant="error"
        )
        return _login_page(request, email, notice=notice, status_code=400)

    try:
        if values.get("action") == "sign_up":
            session = container.auth_service.sign_up(email, password)
            if session is None:
                notice = container.toasts.make(
                    "Check your inbox",
                    "Confirm your email to finish creating the account.",
                    variant="info",
                )
                return _login_page(request, email, notice=notice)
        else:
            session = container.auth_service.sign_in(email, password)
    except EmailNotConfirmed as exc:
        notice = container.toasts.make("Confirm your email", str(exc), variant="info")
        return _login_page(request, email, notice=notice)
    except AuthFailed as exc:
        notice = container.toasts.make("Could not sign in", str(exc), variant="error")
        return _login_page(request, email, notice=notice, status_code=401)
    except Exception as exc:
        logger.exception("Sign-in failed", extra={"email": email})
        notice = error_toast(request, exc, "Could not sign in")
        return _login_page(request, email, notice=notice, status_code=502)
    request.state.session = session
    return _signed_in(request, session)


@router.post("/login/magic-link")
async def magic_link(request: Request) -> Response:
    container = get_container(request)
    email = parse_form(await request.form()).get("email", "")
    if not email:
        notice = container.toasts.make("Enter your email", variant="error")
        return _login_page(request, notice=notice, status_code=400)
    try:
        container.auth_service.send_magic_link(
            email, redirect_url(container.settings, "/auth/confirm")
        )
    except AuthFailed as exc:
        notice = container.toasts.make(
            "Could not send the link", str(exc), variant="error"
        )
        return _login_page(request, email, notice=notice, status_code=400)
    except Exception as exc:
        logger.exception("Magic link failed", extra={"email": email})
        notice = error_toast(request, exc, "Could not send the link")
        return _login_page(request, email, notice=notice, status_code=502)
    notice = container.toasts.make(
        "Check your inbox", "We sent you a sign-in link.", variant="info"
    )
    return _login_page(request, email, notice=notice)


@router.get("/auth/confirm")
async def confirm(
    request: Request,
    token_hash: str = "",
    token_type: str = Query("magiclink", alias="type"),
) -> Response:
    container = get_container(request)
    if not token_hash:
        return RedirectResponse(url="/login", status_code=302)
    try:
        session = container.auth_service.confirm(token_hash, token_type)
    except AuthFailed as exc:
        notice = container.toasts.make(
            "The link is invalid or expired", str(exc), variant="error"
        )
        return _login_page(request, notice=notice, status_code=400)
    request.state.session = session
    return _signed_in(request, session)


@router.post("/logout")
async def logout(request: Request) -> Response:
    container = get_container(request)
    container.auth_service.sign_out(current_session(request))
    response = RedirectResponse(url="/login", status_code=303)
    clear_session_cookie(response)
    return response
