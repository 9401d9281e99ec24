"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from cafe_log.adapters.supabase_analytics_repository import (
    SupabaseAnalyticsRepository,
)
from cafe_log.adapters.supabase_auth_gateway import SupabaseAuthGateway
from cafe_log.adapters.supabase_brew_repository import SupabaseBrewRepository
from cafe_log.adapters.supabase_coffee_repository import SupabaseCoffeeRepository
from cafe_log.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from cafe_log.adapters.supabase_sensory_note_repository import (
    SupabaseSensoryNoteRepository,
)
from cafe_log.config import Settings, redirect_url
from cafe_log.services.analytics import AnalyticsService
from cafe_log.services.auth import AuthService
from cafe_log.services.brews import BrewService
from cafe_log.services.coffees import CoffeeService
from cafe_log.services.offline import OfflineManifest
from cafe_log.services.query_cache import QueryCache
from cafe_log.services.recipes import RecipeService
from cafe_log.services.toasts import ToastCenter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    query_cache: QueryCache
    toasts: ToastCenter
    auth_service: AuthService
    coffee_service: CoffeeService
    recipe_service: RecipeService
    brew_service: BrewService
    analytics_service: AnalyticsService
    offline_manifest: OfflineManifest
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    query_cache = QueryCache(
        default_stale_seconds=resolved_settings.query_stale_seconds
    )
    coffee_service = CoffeeService(
        SupabaseCoffeeRepository(supabase_client), query_cache
    )
    recipe_service = RecipeService(
        SupabaseRecipeRepository(supabase_client), query_cache
    )
    brew_service = BrewService(
        repository=SupabaseBrewRepository(supabase_client),
        note_repository=SupabaseSensoryNoteRepository(supabase_client),
        coffee_service=coffee_service,
        recipe_service=recipe_service,
        cache=query_cache,
    )
    analytics_service = AnalyticsService(
        repository=SupabaseAnalyticsRepository(supabase_client),
        cache=query_cache,
        timezone_name=resolved_settings.display_timezone,
        stale_seconds=resolved_settings.analytics_stale_seconds,
    )
    auth_gateway = SupabaseAuthGateway.create(
        resolved_settings.supabase_url,
        resolved_settings.supabase_anon_key,
        admin_client=supabase_client,
    )
    auth_service = AuthService(
        gateway=auth_gateway,
        login_redirect_url=redirect_url(resolved_settings, "/login"),
    )

    async def close_resources() -> None:
        query_cache.clear()

    return AppContainer(
        settings=resolved_settings,
        query_cache=query_cache,
        toasts=ToastCenter(default_duration_ms=resolved_settings.toast_duration_ms),
        auth_service=auth_service,
        coffee_service=coffee_service,
        recipe_service=recipe_service,
        brew_service=brew_service,
        analytics_service=analytics_service,
        offline_manifest=OfflineManifest(
            version=resolved_settings.offline_cache_version
        ),
        close_resources=close_resources,
    )
