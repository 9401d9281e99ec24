"""Coffee catalog pages."""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError

from cafe_log.api.forms import CoffeeForm, coffee_values, parse_form, validation_message
from cafe_log.api.session import current_session
from cafe_log.api.views import error_toast, get_container, notify, render
from cafe_log.domain.coffees import PROCESSES, PURCHASE_TYPES, ROAST_LEVELS
from cafe_log.services.calc import cups_per_bag
from cafe_log.services.coffees import coffee_stats, filter_coffees, typical_dose
from cafe_log.services.toasts import Toast

router = APIRouter(prefix="/coffees", tags=["coffees"])
logger = logging.getLogger(__name__)


def _form_page(
    request: Request,
    values: dict[str, str],
    coffee_id: UUID | None = None,
    *,
    notices: list[Toast] | None = None,
    status_code: int = 200,
    **context: object,
) -> HTMLResponse:
    return render(
        request,
        "coffees/form.html",
        {
            "active_tab": "coffees",
            "values": values,
            "coffee_id": coffee_id,
            "processes": PROCESSES,
            "roast_levels": ROAST_LEVELS,
            "purchase_types": PURCHASE_TYPES,
            **context,
        },
        notices=notices,
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def list_coffees(request: Request, q: str = "") -> HTMLResponse:
    container = get_container(request)
    user_id = current_session(request).user_id
    notices = []
    try:
        coffees = container.coffee_service.list_coffees(user_id)
    except Exception as exc:
        logger.exception("Failed to load coffees", extra={"user_id": str(user_id)})
        notices.append(error_toast(request, exc, "We could not load your coffees"))
        coffees = []
    return render(
        request,
        "coffees/list.html",
        {"active_tab": "coffees", "coffees": filter_coffees(coffees, q), "q": q},
        notices=notices,
    )


@router.get("/new", response_class=HTMLResponse)
async def new_coffee(request: Request) -> HTMLResponse:
    settings = get_container(request).settings
    return _form_page(request, {"currency": settings.default_currency})


@router.post("/new")
async def create_coffee(request: Request) -> Response:
    return await _save(request, None)


@router.get("/{coffee_id}", response_class=HTMLResponse)
async def edit_coffee(request: Request, coffee_id: UUID) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    log_extra = {"user_id": str(user_id), "coffee_id": str(coffee_id)}
    try:
        coffee = container.coffee_service.get(user_id, coffee_id)
    except Exception as exc:
        logger.exception("Failed to load coffee", extra=log_extra)
        toast = error_toast(request, exc, "We could not load the coffee")
        notify(request, toast.title, toast.description, variant="error")
        return RedirectResponse(url="/coffees", status_code=303)
    if coffee is None:
        raise HTTPException(status_code=404, detail="Coffee not found")
    notices = []
    try:
        recent = container.brew_service.recent_for_coffee(user_id, coffee_id)
    except Exception as exc:
        logger.exception("Failed to load coffee history", extra=log_extra)
        notices.append(error_toast(request, exc, "We could not load recent brews"))
        recent = []
    return _form_page(
        request,
        coffee_values(coffee),
        coffee_id,
        notices=notices,
        coffee=coffee,
        recent_brews=recent,
        stats=coffee_stats(recent),
        cups_per_bag=cups_per_bag(coffee.bag_weight_g, typical_dose(recent)),
    )


@router.post("/{coffee_id}")
async def update_coffee(request: Request, coffee_id: UUID) -> Response:
    return await _save(request, coffee_id)


async def _save(request: Request, coffee_id: UUID | None) -> Response:
    container = get_container(request)
    user_id = current_session(request).user_id
    values = parse_form(await request.form())
    try:
        form = CoffeeForm.model_validate(values)
    except ValidationError as exc:
        notice = container.toasts.make(
            "Check the coffee fields", validation_message(exc), variant="error"
        )
        return _form_page(
            request, values, coffee_id, notices=[notice], status_code=400
        )
    try:
        coffee = container.coffee_service.save(
            user_id, coffee_id, form.to_payload(container.settings.default_currency)
        )
    except Exception as exc:
        logger.exception(
            "Failed to save coffee",
            extra={"user_id": str(user_id), "coffee_id": str(coffee_id)},
        )
        notice = error_toast(request, exc, "We could not save the coffee")
        return _form_page(
            request, values, coffee_id, notices=[notice], status_code=502
        )
    notify(request, "Coffee updated" if coffee_id else "Coffee created")
    return RedirectResponse(url=f"/coffees/{coffee.id}", status_code=303)
