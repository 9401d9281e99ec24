"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from cafe_log.api.analytics import router as analytics_router
from cafe_log.api.auth import router as auth_router
from cafe_log.api.brews import router as brews_router
from cafe_log.api.coffees import router as coffees_router
from cafe_log.api.recipes import router as recipes_router
from cafe_log.api.session import (
    SESSION_COOKIE,
    clear_session_cookie,
    current_session,
    decode_session,
    is_public,
    set_session_cookie,
)
from cafe_log.api.settings import router as settings_router
from cafe_log.api.views import (
    error_toast,
    get_container,
    get_preferences,
    render,
    templates,
)
from cafe_log.app_logging import configure_logging
from cafe_log.containers import AppContainer
from cafe_log.domain.auth import AuthSession
from cafe_log.services.auth import SIGNED_OUT, AuthUnavailable
from cafe_log.services.coffees import low_stock

STATIC_DIR = Path(__file__).parent.parent / "static"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.environment)
    logger = logging.getLogger(__name__)

    def on_session_change(event: str, session: AuthSession) -> None:
        logger.info(
            "Session event", extra={"event": event, "user_id": str(session.user_id)}
        )
        if event == SIGNED_OUT:
            container.query_cache.invalidate((session.user_id,))
            container.toasts.clear(str(session.user_id))

    container.auth_service.subscribe(on_session_change)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.mount("/icons", StaticFiles(directory=STATIC_DIR / "icons"), name="icons")

    @app.middleware("http")
    async def session_guard(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        stored = decode_session(settings, request.cookies.get(SESSION_COOKIE))
        session = None
        provider_down = False
        if stored is not None:
            try:
                session = state_container.auth_service.ensure_fresh(stored)
            except AuthUnavailable:
                logger.exception(
                    "Session refresh failed", extra={"user_id": str(stored.user_id)}
                )
                provider_down = True
        request.state.session = session
        if session is None and not is_public(request.url.path):
            response = RedirectResponse(url="/login", status_code=302)
            if request.cookies.get(SESSION_COOKIE) and not provider_down:
                clear_session_cookie(response)
            return response
        response = await call_next(request)
        if (
            session is not None
            and session is not stored
            and request.url.path != "/logout"
        ):
            set_session_cookie(response, settings, session)
        return response

    app.include_router(auth_router)
    app.include_router(coffees_router)
    app.include_router(recipes_router)
    app.include_router(brews_router)
    app.include_router(analytics_router)
    app.include_router(settings_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    async def home(request: Request) -> HTMLResponse:
        state_container = get_container(request)
        user_id = current_session(request).user_id
        threshold = get_preferences(request).inventory_threshold
        notices = []
        try:
            entries = state_container.brew_service.list_entries(user_id)
            running_low = low_stock(
                state_container.coffee_service.list_coffees(user_id),
                [entry.brew for entry in entries],
                threshold,
            )
        except Exception as exc:
            logger.exception(
                "Failed to load home summary", extra={"user_id": str(user_id)}
            )
            notices.append(error_toast(request, exc, "We could not load your journal"))
            entries, running_low = [], []
        return render(
            request,
            "home.html",
            {
                "active_tab": "home",
                "recent_brews": entries[:5],
                "running_low": running_low,
                "threshold": threshold,
            },
            notices=notices,
        )

    @app.get("/sw.js")
    async def service_worker(request: Request) -> Response:
        """Offline service worker generated from the cache manifest."""
        manifest = get_container(request).offline_manifest
        return templates.TemplateResponse(
            request,
            "sw.js",
            {"config": manifest.worker_config()},
            media_type="application/javascript",
            headers={"Cache-Control": "no-cache"},
        )

    @app.get("/offline", response_class=HTMLResponse)
    async def offline_page(request: Request) -> HTMLResponse:
        """Static page precached by the service worker; it carries no user data."""
        return templates.TemplateResponse(request, "offline.html", {})

    @app.get("/manifest.json")
    async def web_manifest() -> dict[str, object]:
        """Installable web app manifest."""
        return {
            "name": "Cafe Log",
            "short_name": "Cafe Log",
            "start_url": "/",
            "display": "standalone",
            "background_color": "#faf7f2",
            "theme_color": "#6b4226",
            "icons": [
                {"src": "/icons/icon-192.png", "sizes": "192x192", "type": "image/png"},
                {"src": "/icons/icon-512.png", "sizes": "512x512", "type": "image/png"},
            ],
        }

    return app
