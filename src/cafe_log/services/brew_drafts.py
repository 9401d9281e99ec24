"""Editable brew form state and its conversion to persisted payloads.

A draft is seeded once from a stored brew (or from defaults), may have a
recipe's parameters copied into it, and is finally normalized into the row
written to ``brews`` plus an optional ``sensory_notes`` row.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID

from cafe_log.domain.brews import BrewDetail
from cafe_log.domain.coffees import Coffee
from cafe_log.domain.recipes import Recipe
from cafe_log.domain.sensory import SCA_AXES
from cafe_log.services.calc import cost_per_cup

RECIPE_PARAMS = ("method", "dose_g", "water_g", "ratio", "temp_c", "total_time_sec")


@dataclass
class BrewDraft:
    """Form state for creating or editing a brew and its tasting note."""

    coffee_id: UUID | None = None
    coffee_label: str = ""
    recipe_id: UUID | None = None
    recipe_label: str = ""
    brew_date: datetime | None = None
    method: str = "v60"
    dose_g: float | None = None
    water_g: float | None = None
    ratio: float | None = None
    temp_c: float | None = None
    total_time_sec: int | None = None
    yield_g: float | None = None
    water_profile: str | None = None
    tds: float | None = None
    extraction_yield: float | None = None
    location: str | None = None
    cost_per_cup: float | None = None
    notes: str | None = None
    save_as_recipe: bool = False
    score_total: float | None = None
    sca_breakdown: dict[str, float] = field(default_factory=dict)
    descriptors: list[str] = field(default_factory=list)
    would_repeat: bool | None = None


def new_draft(now: datetime | None = None) -> BrewDraft:
    """Return an empty draft dated now, to the minute."""
    moment = (now or datetime.now(tz=UTC)).replace(second=0, microsecond=0)
    return BrewDraft(brew_date=moment)


def recipe_label(recipe: Recipe) -> str:
    """Label used by the recipe search-select input."""
    return f"{recipe.method.upper()} • {str(recipe.id)[:6]}"


def resolve_coffee(label: str, coffees: list[Coffee]) -> Coffee | None:
    """Find the coffee whose display name matches the typed label."""
    needle = label.strip().lower()
    if not needle:
        return None
    for coffee in coffees:
        if coffee.display_name.lower() == needle:
            return coffee
    return None


def resolve_recipe(label: str, recipes: list[Recipe]) -> Recipe | None:
    """Find the recipe whose search label matches the typed label."""
    needle = label.strip().lower()
    if not needle:
        return None
    for recipe in recipes:
        if recipe_label(recipe).lower() == needle:
            return recipe
    return None


def draft_from_detail(
    detail: BrewDetail, coffees: list[Coffee], recipes: list[Recipe]
) -> BrewDraft:
    """Seed a draft from a stored brew and its note."""
    brew = detail.brew
    draft = BrewDraft(
        coffee_id=brew.coffee_id,
        recipe_id=brew.recipe_id,
        brew_date=brew.brew_date,
        method=brew.method,
        dose_g=brew.dose_g,
        water_g=brew.water_g,
        ratio=brew.ratio,
        temp_c=brew.temp_c,
        total_time_sec=brew.total_time_sec,
        yield_g=brew.yield_g,
        water_profile=brew.water_profile,
        tds=brew.tds,
        extraction_yield=brew.extraction_yield,
        location=brew.location,
        cost_per_cup=brew.cost_per_cup,
        notes=brew.notes,
    )
    if detail.note is not None:
        draft.score_total = detail.note.score_total
        draft.sca_breakdown = dict(detail.note.sca_breakdown)
        draft.descriptors = list(detail.note.descriptors)
        draft.would_repeat = detail.note.would_repeat
    return resolve_selection(draft, coffees, recipes)


def resolve_selection(
    draft: BrewDraft, coffees: list[Coffee], recipes: list[Recipe]
) -> BrewDraft:
    """Reconcile typed labels with selected ids in both directions.

    A label that matches a known record wins; an unmatched label leaves the
    previous selection in place. Labels are then refreshed from the ids.
    """
    coffee = resolve_coffee(draft.coffee_label, coffees)
    coffee_id = coffee.id if coffee else draft.coffee_id
    recipe = resolve_recipe(draft.recipe_label, recipes)
    recipe_id = recipe.id if recipe else draft.recipe_id

    coffee_label = draft.coffee_label
    selected_coffee = _by_id(coffees, coffee_id)
    if selected_coffee is not None:
        coffee_label = selected_coffee.display_name
    recipe_text = draft.recipe_label
    selected_recipe = _by_id(recipes, recipe_id)
    if selected_recipe is not None:
        recipe_text = recipe_label(selected_recipe)
    return replace(
        draft,
        coffee_id=coffee_id,
        coffee_label=coffee_label,
        recipe_id=recipe_id,
        recipe_label=recipe_text,
    )


def apply_recipe(draft: BrewDraft, recipe: Recipe) -> BrewDraft:
    """Copy a recipe's parameters into the draft as defaults."""
    updates: dict[str, object] = {
        "recipe_id": recipe.id,
        "recipe_label": recipe_label(recipe),
    }
    for name in RECIPE_PARAMS:
        value = getattr(recipe, name)
        if value is not None:
            updates[name] = value
    return replace(draft, **updates)


def computed_cost(
    draft: BrewDraft, coffee: Coffee | None, recipe: Recipe | None = None
) -> float | None:
    """Cost per cup from the coffee's price and the draft or recipe dose."""
    if coffee is None:
        return None
    dose = draft.dose_g or (recipe.dose_g if recipe else None)
    return cost_per_cup(coffee.purchase_price, coffee.bag_weight_g, dose)


def brew_payload(
    draft: BrewDraft,
    coffee: Coffee,
    recipe: Recipe | None,
    now: datetime | None = None,
) -> dict[str, object]:
    """Build the ``brews`` row; blank parameters fall back to the recipe."""
    cost = (
        draft.cost_per_cup
        if draft.cost_per_cup is not None
        else computed_cost(draft, coffee, recipe)
    )
    brewed_at = draft.brew_date or now or datetime.now(tz=UTC)
    if brewed_at.tzinfo is None:
        brewed_at = brewed_at.replace(tzinfo=UTC)
    payload: dict[str, object] = {
        "coffee_id": str(coffee.id),
        "recipe_id": str(recipe.id) if recipe else None,
        "brew_date": brewed_at.isoformat(),
        "method": draft.method or (recipe.method if recipe else None) or "v60",
    }
    for name in RECIPE_PARAMS[1:]:
        value = getattr(draft, name)
        if value is None and recipe is not None:
            value = getattr(recipe, name)
        payload[name] = value
    payload.update(
        {
            "yield_g": draft.yield_g,
            "water_profile": _clean(draft.water_profile),
            "tds": draft.tds,
            "extraction_yield": draft.extraction_yield,
            "location": _clean(draft.location),
            "cost_per_cup": cost,
            "notes": _clean(draft.notes),
        }
    )
    return payload


def note_payload(draft: BrewDraft) -> dict[str, object] | None:
    """Build the ``sensory_notes`` row, only when a total score was entered."""
    if not draft.score_total:
        return None
    breakdown = {
        axis: draft.sca_breakdown[axis]
        for axis in SCA_AXES
        if draft.sca_breakdown.get(axis) is not None
    }
    return {
        "score_total": draft.score_total,
        "sca_breakdown": breakdown or None,
        "descriptors": draft.descriptors or None,
        "would_repeat": draft.would_repeat,
    }


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _by_id(items: list, item_id: UUID | None):  # type: ignore[no-untyped-def]
    if item_id is None:
        return None
    for item in items:
        if item.id == item_id:
            return item
    return None
