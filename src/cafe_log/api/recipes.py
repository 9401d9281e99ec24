"""Recipe pages."""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError

from cafe_log.api.forms import RecipeForm, parse_form, recipe_values, validation_message
from cafe_log.api.session import current_session
from cafe_log.api.views import error_toast, get_container, notify, render
from cafe_log.domain.recipes import BREW_METHODS
from cafe_log.services.toasts import Toast

router = APIRouter(prefix="/recipes", tags=["recipes"])
logger = logging.getLogger(__name__)


def _form_page(
    request: Request,
    values: dict[str, str],
    recipe_id: UUID | None = None,
    *,
    notices: list[Toast] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return render(
        request,
        "recipes/form.html",
        {
            "active_tab": "recipes",
            "values": values,
            "recipe_id": recipe_id,
            "methods": BREW_METHODS,
        },
        notices=notices,
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def list_recipes(request: Request, method: str = "") -> HTMLResponse:
    container = get_container(request)
    user_id = current_session(request).user_id
    notices = []
    try:
        recipes = container.recipe_service.list_recipes(user_id, method or None)
    except Exception as exc:
        logger.exception("Failed to load recipes", extra={"user_id": str(user_id)})
        notices.append(error_toast(request, exc, "We could not load your recipes"))
        recipes = []
    return render(
        request,
        "recipes/list.html",
        {
            "active_tab": "recipes",
            "recipes": recipes,
            "methods": BREW_METHODS,
            "method": method,
        },
        notices=notices,
    )


@router.get("/new", response_class=HTMLResponse)
async def new_recipe(request: Request) -> HTMLResponse:
    return _form_page(request, {"method": "v60"})


@router.post("/new")
async def create_recipe(request: Request) -> Response:
    return await _save(request, None)


@router.get("/{recipe_id}", response_class=HTMLResponse)
async def edit_recipe(request: Request, recipe_id: UUID) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    try:
        recipe = container.recipe_service.get(user_id, recipe_id)
    except Exception as exc:
        logger.exception(
            "Failed to load recipe",
            extra={"user_id": str(user_id), "recipe_id": str(recipe_id)},
        )
        toast = error_toast(request, exc, "We could not load the recipe")
        notify(request, toast.title, toast.description, variant="error")
        return RedirectResponse(url="/recipes", status_code=303)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return _form_page(request, recipe_values(recipe), recipe_id)


@router.post("/{recipe_id}")
async def update_recipe(request: Request, recipe_id: UUID) -> Response:
    return await _save(request, recipe_id)


@router.post("/{recipe_id}/delete")
async def delete_recipe(request: Request, recipe_id: UUID) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    try:
        container.recipe_service.delete(user_id, recipe_id)
    except Exception as exc:
        logger.exception(
            "Failed to delete recipe",
            extra={"user_id": str(user_id), "recipe_id": str(recipe_id)},
        )
        toast = error_toast(request, exc, "We could not delete the recipe")
        notify(request, toast.title, toast.description, variant="error")
        return RedirectResponse(url=f"/recipes/{recipe_id}", status_code=303)
    notify(request, "Recipe deleted")
    return RedirectResponse(url="/recipes", status_code=303)


async def _save(request: Request, recipe_id: UUID | None) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    values = parse_form(await request.form())
    try:
        form = RecipeForm.model_validate(values)
    except ValidationError as exc:
        notice = container.toasts.make(
            "Check the recipe fields", validation_message(exc), variant="error"
        )
        return _form_page(
            request, values, recipe_id, notices=[notice], status_code=400
        )
    try:
        recipe = container.recipe_service.save(user_id, recipe_id, form.to_payload())
    except Exception as exc:
        logger.exception(
            "Failed to save recipe",
            extra={"user_id": str(user_id), "recipe_id": str(recipe_id)},
        )
        notice = error_toast(request, exc, "We could not save the recipe")
        return _form_page(
            request, values, recipe_id, notices=[notice], status_code=502
        )
    notify(request, "Recipe updated" if recipe_id else "Recipe created")
    return RedirectResponse(url=f"/recipes/{recipe.id}", status_code=303)
