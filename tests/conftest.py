"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from cafe_log.adapters.supabase_rows import (
    parse_brew,
    parse_coffee,
    parse_note,
    parse_recipe,
)
from cafe_log.api.app import create_app
from cafe_log.api.session import SESSION_COOKIE, encode_session
from cafe_log.config import Settings
from cafe_log.containers import AppContainer
from cafe_log.domain.auth import AuthSession
from cafe_log.domain.brews import Brew
from cafe_log.domain.coffees import Coffee
from cafe_log.domain.recipes import Recipe
from cafe_log.domain.sensory import SensoryNote
from cafe_log.services.analytics import AnalyticsRepository, AnalyticsService
from cafe_log.services.auth import (
    AuthFailed,
    AuthGateway,
    AuthService,
    AuthUnavailable,
)
from cafe_log.services.brews import (
    BrewRepository,
    BrewService,
    SensoryNoteRepository,
)
from cafe_log.services.coffees import CoffeeRepository, CoffeeService
from cafe_log.services.offline import OfflineManifest
from cafe_log.services.query_cache import QueryCache
from cafe_log.services.recipes import RecipeRepository, RecipeService
from cafe_log.services.toasts import ToastCenter


def _row(user_id: UUID, payload: dict[str, object], **extra: object) -> dict:
    return {"id": str(uuid4()), "user_id": str(user_id), **payload, **extra}


@dataclass
class InMemoryCoffeeRepository(CoffeeRepository):
    """In-memory coffee repository for tests."""

    coffees: dict[UUID, Coffee] = field(default_factory=dict)
    list_calls: int = 0

    def add(self, coffee: Coffee) -> Coffee:
        self.coffees[coffee.id] = coffee
        return coffee

    def list_coffees(self, user_id: UUID) -> list[Coffee]:
        self.list_calls += 1
        return [c for c in self.coffees.values() if c.user_id == user_id]

    def get_coffee(self, user_id: UUID, coffee_id: UUID) -> Coffee | None:
        coffee = self.coffees.get(coffee_id)
        return coffee if coffee and coffee.user_id == user_id else None

    def create_coffee(self, user_id: UUID, payload: dict[str, object]) -> Coffee:
        return self.add(parse_coffee(_row(user_id, payload)))

    def update_coffee(
        self, user_id: UUID, coffee_id: UUID, payload: dict[str, object]
    ) -> Coffee:
        row = _row(user_id, payload, id=str(coffee_id))
        return self.add(parse_coffee(row))


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    recipes: dict[UUID, Recipe] = field(default_factory=dict)

    def add(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        return recipe

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        return [r for r in self.recipes.values() if r.user_id == user_id]

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        recipe = self.recipes.get(recipe_id)
        return recipe if recipe and recipe.user_id == user_id else None

    def create_recipe(self, user_id: UUID, payload: dict[str, object]) -> Recipe:
        return self.add(parse_recipe(_row(user_id, payload)))

    def update_recipe(
        self, user_id: UUID, recipe_id: UUID, payload: dict[str, object]
    ) -> Recipe:
        return self.add(parse_recipe(_row(user_id, payload, id=str(recipe_id))))

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> None:
        self.recipes.pop(recipe_id, None)


@dataclass
class InMemoryBrewRepository(BrewRepository):
    """In-memory brew repository for tests."""

    brews: dict[UUID, Brew] = field(default_factory=dict)
    payloads: list[dict[str, object]] = field(default_factory=list)

    def add(self, brew: Brew) -> Brew:
        self.brews[brew.id] = brew
        return brew

    def list_brews(self, user_id: UUID) -> list[Brew]:
        brews = [b for b in self.brews.values() if b.user_id == user_id]
        floor = datetime.min.replace(tzinfo=UTC)
        return sorted(brews, key=lambda b: b.brew_date or floor, reverse=True)

    def list_brews_for_coffee(
        self, user_id: UUID, coffee_id: UUID, limit: int
    ) -> list[Brew]:
        brews = [b for b in self.list_brews(user_id) if b.coffee_id == coffee_id]
        return brews[:limit]

    def get_brew(self, user_id: UUID, brew_id: UUID) -> Brew | None:
        brew = self.brews.get(brew_id)
        return brew if brew and brew.user_id == user_id else None

    def create_brew(self, user_id: UUID, payload: dict[str, object]) -> Brew:
        self.payloads.append(payload)
        return self.add(parse_brew(_row(user_id, payload)))

    def update_brew(
        self, user_id: UUID, brew_id: UUID, payload: dict[str, object]
    ) -> Brew | None:
        self.payloads.append(payload)
        if self.get_brew(user_id, brew_id) is None:
            return None
        return self.add(parse_brew(_row(user_id, payload, id=str(brew_id))))

    def delete_brew(self, user_id: UUID, brew_id: UUID) -> None:
        self.brews.pop(brew_id, None)


@dataclass
class InMemorySensoryNoteRepository(SensoryNoteRepository):
    """In-memory note repository keyed by brew id."""

    notes: dict[UUID, SensoryNote] = field(default_factory=dict)
    deleted: list[UUID] = field(default_factory=list)

    def add(self, note: SensoryNote) -> SensoryNote:
        self.notes[note.brew_id] = note
        return note

    def list_notes(self, user_id: UUID) -> list[SensoryNote]:
        return [n for n in self.notes.values() if n.user_id == user_id]

    def list_notes_for_brews(
        self, user_id: UUID, brew_ids: list[UUID]
    ) -> list[SensoryNote]:
        return [n for n in self.list_notes(user_id) if n.brew_id in brew_ids]

    def get_note_for_brew(self, user_id: UUID, brew_id: UUID) -> SensoryNote | None:
        note = self.notes.get(brew_id)
        return note if note and note.user_id == user_id else None

    def upsert_note_for_brew(
        self, user_id: UUID, brew_id: UUID, payload: dict[str, object]
    ) -> None:
        existing = self.notes.get(brew_id)
        note_id = str(existing.id) if existing else str(uuid4())
        self.add(parse_note(_row(user_id, payload, id=note_id, brew_id=str(brew_id))))

    def delete_notes_for_brew(self, user_id: UUID, brew_id: UUID) -> None:
        self.deleted.append(brew_id)
        self.notes.pop(brew_id, None)


@dataclass
class InMemoryAnalyticsRepository(AnalyticsRepository):
    """Analytics reads over the in-memory brew and note repositories."""

    brew_repository: InMemoryBrewRepository
    note_repository: InMemorySensoryNoteRepository

    def list_brew_dates(self, user_id: UUID) -> list[datetime | None]:
        return [b.brew_date for b in self.brew_repository.list_brews(user_id)]

    def list_notes(self, user_id: UUID) -> list[SensoryNote]:
        return self.note_repository.list_notes(user_id)


@dataclass
class FakeAuthGateway(AuthGateway):
    """Fake identity provider that records calls."""

    users: dict[str, tuple[str, UUID]] = field(default_factory=dict)
    unconfirmed: set[str] = field(default_factory=set)
    calls: list[tuple[str, str]] = field(default_factory=list)
    refresh_fails: bool = False
    provider_down: bool = False
    sign_out_fails: bool = False

    def register(self, email: str, password: str) -> UUID:
        user_id = uuid4()
        self.users[email] = (password, user_id)
        return user_id

    def _session(self, email: str) -> AuthSession:
        _, user_id = self.users[email]
        return AuthSession(
            user_id=user_id,
            email=email,
            access_token=f"access-{uuid4().hex}",
            refresh_token=f"refresh-{email}",
            expires_at=datetime.now(tz=UTC) + timedelta(hours=1),
        )

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        self.calls.append(("sign_in", email))
        if email in self.unconfirmed:
            raise AuthFailed("Email not confirmed")
        stored = self.users.get(email)
        if stored is None or stored[0] != password:
            raise AuthFailed("Invalid login credentials")
        return self._session(email)

    def sign_up(
        self, email: str, password: str, redirect_to: str
    ) -> AuthSession | None:
        self.calls.append(("sign_up", email))
        self.register(email, password)
        self.unconfirmed.add(email)
        return None

    def send_magic_link(self, email: str, redirect_to: str) -> None:
        self.calls.append(("magic_link", redirect_to))

    def verify_email_token(self, token_hash: str, token_type: str) -> AuthSession:
        self.calls.append(("verify", token_type))
        if token_hash != "valid-hash":
            raise AuthFailed("Token has expired or is invalid")
        email = next(iter(self.users))
        return self._session(email)

    def resend_confirmation(self, email: str, redirect_to: str) -> None:
        self.calls.append(("resend", email))

    def refresh(self, refresh_token: str) -> AuthSession:
        self.calls.append(("refresh", refresh_token))
        if self.provider_down:
            raise AuthUnavailable("Connection refused")
        if self.refresh_fails:
            raise AuthFailed("Invalid Refresh Token")
        return self._session(refresh_token.removeprefix("refresh-"))

    def sign_out(self, access_token: str) -> None:
        self.calls.append(("sign_out", access_token))
        if self.sign_out_fails:
            raise AuthFailed("Session not found")


def make_coffee(user_id: UUID, **overrides: object) -> Coffee:
    values: dict[str, object] = {
        "id": uuid4(),
        "user_id": user_id,
        "display_name": "Finca La Esperanza",
        "roaster": "Puku Puku",
        "origin_country": "Peru",
        "purchase_price": 45.0,
        "currency": "PEN",
        "bag_weight_g": 340.0,
    }
    values.update(overrides)
    return Coffee(**values)  # type: ignore[arg-type]


def make_recipe(user_id: UUID, **overrides: object) -> Recipe:
    values: dict[str, object] = {
        "id": uuid4(),
        "user_id": user_id,
        "method": "v60",
        "dose_g": 18.0,
        "water_g": 300.0,
        "ratio": 16.7,
        "temp_c": 93.0,
        "total_time_sec": 180,
        "steps": ["Bloom 45 g for 40 s", "Pour to 300 g"],
    }
    values.update(overrides)
    return Recipe(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
        supabase_anon_key="test.anon.key",
        secret_key="test-secret",
        environment="test",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def coffee_repository() -> InMemoryCoffeeRepository:
    return InMemoryCoffeeRepository()


@pytest.fixture
def recipe_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def brew_repository() -> InMemoryBrewRepository:
    return InMemoryBrewRepository()


@pytest.fixture
def note_repository() -> InMemorySensoryNoteRepository:
    return InMemorySensoryNoteRepository()


@pytest.fixture
def auth_gateway() -> FakeAuthGateway:
    return FakeAuthGateway()


@pytest.fixture
def container(
    settings: Settings,
    coffee_repository: InMemoryCoffeeRepository,
    recipe_repository: InMemoryRecipeRepository,
    brew_repository: InMemoryBrewRepository,
    note_repository: InMemorySensoryNoteRepository,
    auth_gateway: FakeAuthGateway,
) -> AppContainer:
    query_cache = QueryCache(default_stale_seconds=settings.query_stale_seconds)
    coffee_service = CoffeeService(coffee_repository, query_cache)
    recipe_service = RecipeService(recipe_repository, query_cache)
    brew_service = BrewService(
        repository=brew_repository,
        note_repository=note_repository,
        coffee_service=coffee_service,
        recipe_service=recipe_service,
        cache=query_cache,
    )
    analytics_service = AnalyticsService(
        repository=InMemoryAnalyticsRepository(brew_repository, note_repository),
        cache=query_cache,
        stale_seconds=settings.analytics_stale_seconds,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        query_cache=query_cache,
        toasts=ToastCenter(default_duration_ms=settings.toast_duration_ms),
        auth_service=AuthService(
            gateway=auth_gateway, login_redirect_url="http://localhost:8000/login"
        ),
        coffee_service=coffee_service,
        recipe_service=recipe_service,
        brew_service=brew_service,
        analytics_service=analytics_service,
        offline_manifest=OfflineManifest(version=settings.offline_cache_version),
        close_resources=close_resources,
    )


def signed_in_client(
    container: AppContainer, user_id: UUID, email: str = "ana@example.com"
) -> TestClient:
    """Return a client carrying a valid session cookie for the user."""
    session = AuthSession(
        user_id=user_id,
        email=email,
        access_token="access-token",
        refresh_token=f"refresh-{email}",
        expires_at=datetime.now(tz=UTC) + timedelta(hours=1),
    )
    client = TestClient(create_app(container), follow_redirects=False)
    client.cookies.set(SESSION_COOKIE, encode_session(container.settings, session))
    return client
