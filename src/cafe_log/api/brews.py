"""Brew journal pages."""

import logging
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError

from cafe_log.api.forms import BrewForm, draft_values, parse_form, validation_message
from cafe_log.api.session import current_session
from cafe_log.api.views import error_toast, get_container, notify, render
from cafe_log.domain.recipes import BREW_METHODS
from cafe_log.domain.sensory import SCA_AXES
from cafe_log.services.brew_drafts import (
    BrewDraft,
    apply_recipe,
    computed_cost,
    draft_from_detail,
    new_draft,
    recipe_label,
    resolve_selection,
)
from cafe_log.services.brews import BrewNotFound
from cafe_log.services.toasts import Toast

router = APIRouter(prefix="/brews", tags=["brews"])
logger = logging.getLogger(__name__)

APPLY_RECIPE = "apply_recipe"


def _form_page(
    request: Request,
    draft: BrewDraft | None,
    brew_id: UUID | None = None,
    *,
    values: dict[str, str] | None = None,
    notices: list[Toast] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render the brew form from a draft, or from raw values after a rejection."""
    container = get_container(request)
    user_id = current_session(request).user_id
    notices = list(notices or [])
    try:
        coffees = container.coffee_service.list_coffees(user_id)
        recipes = container.recipe_service.list_recipes(user_id)
    except Exception as exc:
        logger.exception(
            "Failed to load brew options", extra={"user_id": str(user_id)}
        )
        notices.append(error_toast(request, exc, "We could not load your coffees"))
        coffees, recipes = [], []
    tz = ZoneInfo(container.settings.display_timezone)
    cost = None
    currency = container.settings.default_currency
    if draft is not None:
        draft = resolve_selection(draft, coffees, recipes)
        coffee = next((c for c in coffees if c.id == draft.coffee_id), None)
        recipe = next((r for r in recipes if r.id == draft.recipe_id), None)
        cost = computed_cost(draft, coffee, recipe)
        if coffee is not None and coffee.currency:
            currency = coffee.currency
        values = draft_values(draft, tz)
    return render(
        request,
        "brews/form.html",
        {
            "active_tab": "brews",
            "values": values or {},
            "brew_id": brew_id,
            "coffees": coffees,
            "recipe_options": [(recipe, recipe_label(recipe)) for recipe in recipes],
            "methods": BREW_METHODS,
            "axes": SCA_AXES,
            "computed_cost": cost,
            "currency": currency,
        },
        notices=notices,
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def list_brews(request: Request) -> HTMLResponse:
    container = get_container(request)
    user_id = current_session(request).user_id
    notices = []
    try:
        entries = container.brew_service.list_entries(user_id)
    except Exception as exc:
        logger.exception("Failed to load brews", extra={"user_id": str(user_id)})
        notices.append(error_toast(request, exc, "We could not load your brews"))
        entries = []
    return render(
        request,
        "brews/list.html",
        {"active_tab": "brews", "entries": entries},
        notices=notices,
    )


@router.get("/new", response_class=HTMLResponse)
async def new_brew(
    request: Request, coffee_id: UUID | None = None, recipe_id: UUID | None = None
) -> HTMLResponse:
    container = get_container(request)
    user_id = current_session(request).user_id
    draft = new_draft()
    draft.coffee_id = coffee_id
    notices = []
    if recipe_id is not None:
        try:
            recipe = container.recipe_service.get(user_id, recipe_id)
        except Exception as exc:
            logger.exception(
                "Failed to load recipe",
                extra={"user_id": str(user_id), "recipe_id": str(recipe_id)},
            )
            notices.append(error_toast(request, exc, "We could not load the recipe"))
            recipe = None
        if recipe is not None:
            draft = apply_recipe(draft, recipe)
    return _form_page(request, draft, notices=notices)


@router.post("/new")
async def create_brew(request: Request) -> Response:
    return await _submit(request, None)


@router.get("/{brew_id}", response_class=HTMLResponse)
async def edit_brew(request: Request, brew_id: UUID) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    try:
        detail = container.brew_service.get_detail(user_id, brew_id)
        if detail is not None:
            draft = draft_from_detail(
                detail,
                container.coffee_service.list_coffees(user_id),
                container.recipe_service.list_recipes(user_id),
            )
    except Exception as exc:
        logger.exception(
            "Failed to load brew",
            extra={"user_id": str(user_id), "brew_id": str(brew_id)},
        )
        toast = error_toast(request, exc, "We could not load the brew")
        notify(request, toast.title, toast.description, variant="error")
        return RedirectResponse(url="/brews", status_code=303)
    if detail is None:
        raise HTTPException(status_code=404, detail="Brew not found")
    return _form_page(request, draft, brew_id)


@router.post("/{brew_id}")
async def update_brew(request: Request, brew_id: UUID) -> Response:
    return await _submit(request, brew_id)


@router.post("/{brew_id}/delete")
async def delete_brew(request: Request, brew_id: UUID) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    try:
        container.brew_service.delete(user_id, brew_id)
    except Exception as exc:
        logger.exception(
            "Failed to delete brew",
            extra={"user_id": str(user_id), "brew_id": str(brew_id)},
        )
        toast = error_toast(request, exc, "We could not delete the brew")
        notify(request, toast.title, toast.description, variant="error")
        return RedirectResponse(url=f"/brews/{brew_id}", status_code=303)
    notify(request, "Brew deleted")
    return RedirectResponse(url="/brews", status_code=303)


async def _submit(request: Request, brew_id: UUID | None) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    values = parse_form(await request.form())
    action = values.pop("action", "save")
    try:
        form = BrewForm.model_validate(values)
    except ValidationError as exc:
        notice = container.toasts.make(
            "Check the brew fields", validation_message(exc), variant="error"
        )
        return _form_page(
            request,
            None,
            brew_id,
            values=values,
            notices=[notice],
            status_code=400,
        )
    draft = form.to_draft(ZoneInfo(container.settings.display_timezone))

    if action == APPLY_RECIPE:
        return _apply_recipe(request, draft, brew_id)

    try:
        saved_id = container.brew_service.save(user_id, brew_id, draft)
    except BrewNotFound as exc:
        raise HTTPException(status_code=404, detail="Brew not found") from exc
    except ValueError as exc:
        notice = container.toasts.make("Select a coffee", str(exc), variant="error")
        return _form_page(request, draft, brew_id, notices=[notice], status_code=400)
    except Exception as exc:
        logger.exception(
            "Failed to save brew",
            extra={"user_id": str(user_id), "brew_id": str(brew_id)},
        )
        notice = error_toast(request, exc, "We could not save the brew")
        return _form_page(request, draft, brew_id, notices=[notice], status_code=502)

    notify(
        request,
        "Brew updated" if brew_id else "Brew created",
        _cost_description(request, saved_id),
    )
    return RedirectResponse(url="/brews", status_code=303)


def _apply_recipe(
    request: Request, draft: BrewDraft, brew_id: UUID | None
) -> HTMLResponse:
    container = get_container(request)
    user_id = current_session(request).user_id
    try:
        draft = resolve_selection(
            draft,
            container.coffee_service.list_coffees(user_id),
            container.recipe_service.list_recipes(user_id),
        )
        recipe = (
            container.recipe_service.get(user_id, draft.recipe_id)
            if draft.recipe_id
            else None
        )
    except Exception as exc:
        logger.exception("Failed to apply recipe", extra={"user_id": str(user_id)})
        notice = error_toast(request, exc, "We could not load the recipe")
        return _form_page(request, draft, brew_id, notices=[notice])
    if recipe is None:
        notice = container.toasts.make("Choose a recipe first", variant="info")
        return _form_page(request, draft, brew_id, notices=[notice])
    return _form_page(request, apply_recipe(draft, recipe), brew_id)


def _cost_description(request: Request, brew_id: UUID) -> str | None:
    """Cost per cup of a saved brew, shown in the confirmation toast."""
    container = get_container(request)
    user_id = current_session(request).user_id
    try:
        detail = container.brew_service.get_detail(user_id, brew_id)
        if detail is None or detail.brew.cost_per_cup is None:
            return None
        coffee = container.coffee_service.get(user_id, detail.brew.coffee_id)
    except Exception:
        logger.exception(
            "Failed to load saved brew",
            extra={"user_id": str(user_id), "brew_id": str(brew_id)},
        )
        return None
    currency = (coffee.currency if coffee else None) or (
        container.settings.default_currency
    )
    return f"Cost per cup: {detail.brew.cost_per_cup:.2f} {currency}"
