"""Tests for the journal pages."""

from uuid import UUID, uuid4

import pytest

from cafe_log.containers import AppContainer
from cafe_log.services.brew_drafts import BrewDraft, recipe_label
from cafe_log.services.preferences import (
    PREFERENCES_COOKIE,
    Preferences,
    dump_preferences,
)
from tests.conftest import (
    InMemoryBrewRepository,
    InMemoryCoffeeRepository,
    InMemoryRecipeRepository,
    InMemorySensoryNoteRepository,
    make_coffee,
    make_recipe,
    signed_in_client,
)


def test_home_greets_user_and_lists_low_stock(
    container: AppContainer, coffee_repository: InMemoryCoffeeRepository, user_id: UUID
) -> None:
    coffee_repository.add(
        make_coffee(user_id, display_name="Last grams", bag_weight_g=30.0)
    )

    response = signed_in_client(container, user_id).get("/")

    assert response.status_code == 200
    assert "Hello ana" in response.text
    assert "Last grams" in response.text


def test_create_coffee_then_view_it(
    container: AppContainer, coffee_repository: InMemoryCoffeeRepository, user_id: UUID
) -> None:
    client = signed_in_client(container, user_id)

    response = client.post(
        "/coffees/new",
        data={
            "display_name": "Geisha",
            "roaster": "Tostaduria",
            "purchase_price": "45",
            "bag_weight_g": "250",
            "varieties": "Geisha, Caturra",
        },
    )

    assert response.status_code == 303
    [coffee] = coffee_repository.coffees.values()
    assert coffee.currency == "PEN"
    assert coffee.varieties == ["Geisha", "Caturra"]
    assert response.headers["location"] == f"/coffees/{coffee.id}"

    page = client.get(response.headers["location"])
    assert page.status_code == 200
    assert "Coffee created" in page.text
    assert 'value="Geisha"' in page.text


def test_invalid_coffee_is_shown_again(
    container: AppContainer, coffee_repository: InMemoryCoffeeRepository, user_id: UUID
) -> None:
    response = signed_in_client(container, user_id).post(
        "/coffees/new", data={"roaster": "Tostaduria", "process": "smoked"}
    )

    assert response.status_code == 400
    assert "Check the coffee fields" in response.text
    assert 'value="Tostaduria"' in response.text
    assert coffee_repository.coffees == {}


def test_coffee_list_filters_and_hides_other_users(
    container: AppContainer, coffee_repository: InMemoryCoffeeRepository, user_id: UUID
) -> None:
    coffee_repository.add(make_coffee(user_id, display_name="Geisha"))
    coffee_repository.add(make_coffee(user_id, display_name="Bourbon rojo"))
    coffee_repository.add(make_coffee(uuid4(), display_name="Someone else"))
    client = signed_in_client(container, user_id)

    everything = client.get("/coffees")
    filtered = client.get("/coffees", params={"q": "geis"})

    assert "Bourbon rojo" in everything.text
    assert "Someone else" not in everything.text
    assert "Geisha" in filtered.text
    assert "Bourbon rojo" not in filtered.text


def test_unknown_records_return_404(container: AppContainer, user_id: UUID) -> None:
    client = signed_in_client(container, user_id)

    assert client.get(f"/coffees/{uuid4()}").status_code == 404
    assert client.get(f"/recipes/{uuid4()}").status_code == 404
    assert client.get(f"/brews/{uuid4()}").status_code == 404


def test_recipe_lifecycle(
    container: AppContainer, recipe_repository: InMemoryRecipeRepository, user_id: UUID
) -> None:
    client = signed_in_client(container, user_id)

    created = client.post(
        "/recipes/new",
        data={"method": "aeropress", "dose_g": "15", "steps": "Stir\nPress"},
    )
    [recipe] = recipe_repository.recipes.values()
    listed = client.get("/recipes", params={"method": "aeropress"})
    other_method = client.get("/recipes", params={"method": "moka"})
    deleted = client.post(f"/recipes/{recipe.id}/delete")

    assert created.status_code == 303
    assert recipe.steps == ["Stir", "Press"]
    assert str(recipe.id) in listed.text
    assert str(recipe.id) not in other_method.text
    assert deleted.headers["location"] == "/recipes"
    assert recipe_repository.recipes == {}


def test_log_brew_reports_cost_per_cup(
    container: AppContainer,
    coffee_repository: InMemoryCoffeeRepository,
    brew_repository: InMemoryBrewRepository,
    user_id: UUID,
) -> None:
    coffee_repository.add(
        make_coffee(
            user_id, display_name="Geisha", purchase_price=45.0, bag_weight_g=250.0
        )
    )
    client = signed_in_client(container, user_id)

    response = client.post(
        "/brews/new",
        data={
            "coffee_label": "Geisha",
            "brew_date": "2024-05-01T07:30",
            "dose_g": "15",
            "score_total": "86",
            "sca_aroma": "8",
            "descriptors": "floral, Jasmine",
        },
    )
    journal = client.get("/brews")

    assert response.status_code == 303
    assert response.headers["location"] == "/brews"
    [brew] = brew_repository.brews.values()
    assert brew.cost_per_cup == 2.7
    assert "Cost per cup: 2.70 PEN" in journal.text
    assert "Geisha" in journal.text


def test_brew_without_coffee_is_rejected(
    container: AppContainer, brew_repository: InMemoryBrewRepository, user_id: UUID
) -> None:
    response = signed_in_client(container, user_id).post(
        "/brews/new", data={"coffee_label": "Unknown bag", "dose_g": "15"}
    )

    assert response.status_code == 400
    assert "Select the coffee you used for this brew." in response.text
    assert brew_repository.brews == {}


def test_apply_recipe_fills_parameters(
    container: AppContainer,
    recipe_repository: InMemoryRecipeRepository,
    brew_repository: InMemoryBrewRepository,
    user_id: UUID,
) -> None:
    recipe = recipe_repository.add(make_recipe(user_id, dose_g=18.0, water_g=300.0))
    client = signed_in_client(container, user_id)

    response = client.post(
        "/brews/new",
        data={"action": "apply_recipe", "recipe_label": recipe_label(recipe)},
    )
    missing = client.post("/brews/new", data={"action": "apply_recipe"})

    assert response.status_code == 200
    assert 'name="dose_g" value="18"' in response.text
    assert 'name="water_g" value="300"' in response.text
    assert "Choose a recipe first" in missing.text
    assert brew_repository.brews == {}


def test_new_brew_prefills_from_query(
    container: AppContainer,
    coffee_repository: InMemoryCoffeeRepository,
    recipe_repository: InMemoryRecipeRepository,
    user_id: UUID,
) -> None:
    coffee = coffee_repository.add(make_coffee(user_id, display_name="Geisha"))
    recipe = recipe_repository.add(make_recipe(user_id, temp_c=94.0))

    response = signed_in_client(container, user_id).get(
        "/brews/new", params={"coffee_id": str(coffee.id), "recipe_id": str(recipe.id)}
    )

    assert response.status_code == 200
    assert 'value="Geisha"' in response.text
    assert 'name="temp_c" value="94"' in response.text


def test_edit_and_delete_brew(
    container: AppContainer,
    coffee_repository: InMemoryCoffeeRepository,
    brew_repository: InMemoryBrewRepository,
    user_id: UUID,
) -> None:
    coffee = coffee_repository.add(make_coffee(user_id, display_name="Geisha"))
    client = signed_in_client(container, user_id)
    client.post(
        "/brews/new",
        data={"coffee_id": str(coffee.id), "dose_g": "16", "score_total": "82"},
    )
    [brew] = brew_repository.brews.values()

    edit = client.get(f"/brews/{brew.id}")
    updated = client.post(
        f"/brews/{brew.id}",
        data={"coffee_id": str(coffee.id), "dose_g": "17", "score_total": "84"},
    )
    deleted = client.post(f"/brews/{brew.id}/delete")

    assert edit.status_code == 200
    assert 'name="score_total" value="82"' in edit.text
    assert updated.status_code == 303
    assert deleted.headers["location"] == "/brews"
    assert brew_repository.brews == {}


def test_analytics_page_and_feed(
    container: AppContainer, coffee_repository: InMemoryCoffeeRepository, user_id: UUID
) -> None:
    coffee = coffee_repository.add(make_coffee(user_id))
    client = signed_in_client(container, user_id)
    client.post(
        "/brews/new",
        data={
            "coffee_id": str(coffee.id),
            "brew_date": "2024-05-01T07:30",
            "score_total": "86",
            "sca_aroma": "8",
            "descriptors": "Floral",
        },
    )

    feed = client.get("/api/analytics").json()
    page = client.get("/analytics")

    assert feed["total_brews"] == 1
    assert feed["average_score"] == 86
    assert feed["cups_by_month"][0]["key"] == "2024-05"
    assert feed["top_descriptors"] == [{"label": "floral", "frequency": 1}]
    assert feed["sca_averages"]["aroma"] == 8
    assert page.status_code == 200
    assert "radar-area" in page.text


def test_empty_analytics_has_no_radar(container: AppContainer, user_id: UUID) -> None:
    feed = signed_in_client(container, user_id).get("/api/analytics").json()

    assert feed["total_brews"] == 0
    assert feed["average_score"] is None
    assert feed["sca_averages"] is None


def test_settings_saved_to_cookie(container: AppContainer, user_id: UUID) -> None:
    client = signed_in_client(container, user_id)

    saved = client.post(
        "/settings",
        data={"locale": "en", "unit_system": "imperial", "inventory_threshold": "80"},
    )
    rejected = client.post("/settings", data={"inventory_threshold": "-1"})

    assert saved.status_code == 303
    assert PREFERENCES_COOKIE in saved.headers["set-cookie"]
    assert rejected.status_code == 400
    assert "Check your preferences" in rejected.text


def test_preferences_cookie_drives_rendering(
    container: AppContainer, user_id: UUID
) -> None:
    client = signed_in_client(container, user_id)
    client.cookies.set(
        PREFERENCES_COOKIE, dump_preferences(Preferences(locale="en"))
    )

    response = client.get("/settings")

    assert '<html lang="en">' in response.text


def test_editing_another_users_brew_is_not_found(
    container: AppContainer,
    coffee_repository: InMemoryCoffeeRepository,
    note_repository: InMemorySensoryNoteRepository,
    user_id: UUID,
) -> None:
    other_user = uuid4()
    other_coffee = coffee_repository.add(make_coffee(other_user))
    foreign = container.brew_service.save(
        other_user, None, BrewDraft(coffee_id=other_coffee.id, score_total=70)
    )
    coffee = coffee_repository.add(make_coffee(user_id))
    client = signed_in_client(container, user_id)

    response = client.post(
        f"/brews/{foreign}",
        data={"coffee_id": str(coffee.id), "score_total": "90"},
    )

    assert response.status_code == 404
    assert note_repository.notes[foreign].user_id == other_user
    assert note_repository.notes[foreign].score_total == 70
    assert container.toasts.pending(str(user_id)) == []


def _fail(*_args: object) -> None:
    raise RuntimeError("database unavailable")


@pytest.mark.parametrize(
    "path", ["/", "/coffees", "/recipes", "/brews", "/brews/new", "/analytics"]
)
def test_backend_failure_is_reported_as_toast(
    container: AppContainer,
    coffee_repository: InMemoryCoffeeRepository,
    recipe_repository: InMemoryRecipeRepository,
    brew_repository: InMemoryBrewRepository,
    user_id: UUID,
    monkeypatch: pytest.MonkeyPatch,
    path: str,
) -> None:
    monkeypatch.setattr(coffee_repository, "list_coffees", _fail)
    monkeypatch.setattr(recipe_repository, "list_recipes", _fail)
    monkeypatch.setattr(brew_repository, "list_brews", _fail)

    response = signed_in_client(container, user_id).get(path)

    assert response.status_code == 200
    assert "toast-error" in response.text
    assert "database unavailable" in response.text


def test_failed_record_lookup_returns_to_list_with_toast(
    container: AppContainer,
    coffee_repository: InMemoryCoffeeRepository,
    brew_repository: InMemoryBrewRepository,
    user_id: UUID,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(coffee_repository, "get_coffee", _fail)
    monkeypatch.setattr(brew_repository, "get_brew", _fail)
    client = signed_in_client(container, user_id)

    coffee = client.get(f"/coffees/{uuid4()}")
    brew = client.get(f"/brews/{uuid4()}")
    journal = client.get("/brews")

    assert coffee.status_code == brew.status_code == 303
    assert coffee.headers["location"] == "/coffees"
    assert brew.headers["location"] == "/brews"
    assert "We could not load the brew" in journal.text


def test_analytics_feed_failure_is_bad_gateway(
    container: AppContainer,
    brew_repository: InMemoryBrewRepository,
    user_id: UUID,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(brew_repository, "list_brews", _fail)

    response = signed_in_client(container, user_id).get("/api/analytics")

    assert response.status_code == 502
