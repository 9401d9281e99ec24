"""Form models for the journal pages.

Submitted forms are first collapsed into a dict of stripped, non-blank
strings, then validated by the pydantic models below. Templates render every
form from a flat ``values`` dict of strings so a rejected submission can be
shown again exactly as typed.
"""

from collections.abc import Mapping
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from cafe_log.domain.coffees import PROCESSES, PURCHASE_TYPES, ROAST_LEVELS, Coffee
from cafe_log.domain.recipes import BREW_METHODS, Recipe
from cafe_log.domain.sensory import SCA_AXES
from cafe_log.services.brew_drafts import BrewDraft

SCA_FIELD_PREFIX = "sca_"


def parse_form(form: Mapping[str, object]) -> dict[str, str]:
    """Keep text fields with a non-blank value, stripped."""
    values = {}
    for key, value in form.items():
        if isinstance(value, str) and value.strip():
            values[key] = value.strip()
    return values


def validation_message(exc: ValidationError) -> str:
    """Summarize pydantic errors as one line per field."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(item) for item in error["loc"]) or "form"
        parts.append(f"{field}: {error['msg']}")
    return "; ".join(parts)


def _split(value: object, separator: str) -> object:
    if isinstance(value, str):
        return [item.strip() for item in value.split(separator) if item.strip()]
    return value


def _choice(value: str, choices: tuple[str, ...]) -> str:
    if value not in choices:
        raise ValueError(f"must be one of {', '.join(choices)}")
    return value


def _join(items: list[str], separator: str = ", ") -> str:
    return separator.join(items)


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


class CoffeeForm(BaseModel):
    """Coffee bag fields."""

    display_name: str = Field(min_length=1)
    roaster: str | None = None
    origin_country: str | None = None
    origin_region: str | None = None
    origin_farm: str | None = None
    varieties: list[str] = Field(default_factory=list)
    process: str = "washed"
    roast_level: str = "light"
    roast_date: date | None = None
    purchase_place: str | None = None
    purchase_type: str = "retail"
    purchase_price: float | None = Field(default=None, ge=0)
    currency: str | None = None
    bag_weight_g: float | None = Field(default=None, gt=0)
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("varieties", "tags", mode="before")
    @classmethod
    def _comma_list(cls, value: object) -> object:
        return _split(value, ",")

    @field_validator("process")
    @classmethod
    def _process(cls, value: str) -> str:
        return _choice(value, PROCESSES)

    @field_validator("roast_level")
    @classmethod
    def _roast_level(cls, value: str) -> str:
        return _choice(value, ROAST_LEVELS)

    @field_validator("purchase_type")
    @classmethod
    def _purchase_type(cls, value: str) -> str:
        return _choice(value, PURCHASE_TYPES)

    def to_payload(self, default_currency: str) -> dict[str, object]:
        payload = self.model_dump(mode="json")
        payload["varieties"] = self.varieties or None
        payload["tags"] = self.tags or None
        payload["currency"] = (self.currency or default_currency).upper()
        return payload


class RecipeForm(BaseModel):
    """Recipe parameters; steps are entered one per line."""

    method: str = "v60"
    dose_g: float | None = Field(default=None, gt=0)
    water_g: float | None = Field(default=None, gt=0)
    ratio: float | None = Field(default=None, gt=0)
    temp_c: float | None = None
    total_time_sec: int | None = Field(default=None, ge=0)
    grinder: str | None = None
    grind_setting: str | None = None
    steps: list[str] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def _lines(cls, value: object) -> object:
        return _split(value, "\n")

    @field_validator("method")
    @classmethod
    def _method(cls, value: str) -> str:
        return _choice(value, BREW_METHODS)

    def to_payload(self) -> dict[str, object]:
        payload = self.model_dump(mode="json")
        payload["steps"] = self.steps or None
        return payload


class BrewForm(BaseModel):
    """Brew session fields plus the optional tasting note."""

    coffee_id: UUID | None = None
    coffee_label: str = ""
    recipe_id: UUID | None = None
    recipe_label: str = ""
    brew_date: datetime | None = None
    method: str = "v60"
    dose_g: float | None = Field(default=None, gt=0)
    water_g: float | None = Field(default=None, gt=0)
    ratio: float | None = Field(default=None, gt=0)
    temp_c: float | None = None
    total_time_sec: int | None = Field(default=None, ge=0)
    yield_g: float | None = Field(default=None, ge=0)
    water_profile: str | None = None
    tds: float | None = Field(default=None, ge=0)
    extraction_yield: float | None = Field(default=None, ge=0)
    location: str | None = None
    cost_per_cup: float | None = Field(default=None, ge=0)
    notes: str | None = None
    save_as_recipe: bool = False
    score_total: float | None = None
    sca_breakdown: dict[str, float] = Field(default_factory=dict)
    descriptors: list[str] = Field(default_factory=list)
    would_repeat: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _collect_axes(cls, data: object) -> object:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        breakdown = dict(data.get("sca_breakdown") or {})
        for axis in SCA_AXES:
            value = data.pop(f"{SCA_FIELD_PREFIX}{axis}", None)
            if value is not None:
                breakdown[axis] = value
        data["sca_breakdown"] = breakdown
        return data

    @field_validator("descriptors", mode="before")
    @classmethod
    def _comma_list(cls, value: object) -> object:
        return _split(value, ",")

    @field_validator("method")
    @classmethod
    def _method(cls, value: str) -> str:
        return _choice(value, BREW_METHODS)

    def to_draft(self, tz: ZoneInfo) -> BrewDraft:
        """Convert to a draft; a naive brew date is read in the display zone."""
        brew_date = self.brew_date
        if brew_date is not None and brew_date.tzinfo is None:
            brew_date = brew_date.replace(tzinfo=tz)
        return BrewDraft(
            **self.model_dump(exclude={"brew_date"}),
            brew_date=brew_date,
        )


def coffee_values(coffee: Coffee) -> dict[str, str]:
    return {
        "display_name": coffee.display_name,
        "roaster": _text(coffee.roaster),
        "origin_country": _text(coffee.origin_country),
        "origin_region": _text(coffee.origin_region),
        "origin_farm": _text(coffee.origin_farm),
        "varieties": _join(coffee.varieties),
        "process": coffee.process,
        "roast_level": coffee.roast_level,
        "roast_date": coffee.roast_date.isoformat() if coffee.roast_date else "",
        "purchase_place": _text(coffee.purchase_place),
        "purchase_type": coffee.purchase_type,
        "purchase_price": _text(coffee.purchase_price),
        "currency": _text(coffee.currency),
        "bag_weight_g": _text(coffee.bag_weight_g),
        "notes": _text(coffee.notes),
        "tags": _join(coffee.tags),
    }


def recipe_values(recipe: Recipe) -> dict[str, str]:
    return {
        "method": recipe.method,
        "dose_g": _text(recipe.dose_g),
        "water_g": _text(recipe.water_g),
        "ratio": _text(recipe.ratio),
        "temp_c": _text(recipe.temp_c),
        "total_time_sec": _text(recipe.total_time_sec),
        "grinder": _text(recipe.grinder),
        "grind_setting": _text(recipe.grind_setting),
        "steps": _join(recipe.steps, "\n"),
    }


def draft_values(draft: BrewDraft, tz: ZoneInfo) -> dict[str, str]:
    """Flatten a draft into form values, showing the date in the display zone."""
    brew_date = ""
    if draft.brew_date is not None:
        local = draft.brew_date
        if local.tzinfo is not None:
            local = local.astimezone(tz)
        brew_date = local.strftime("%Y-%m-%dT%H:%M")
    values = {
        "coffee_id": _text(draft.coffee_id),
        "coffee_label": draft.coffee_label,
        "recipe_id": _text(draft.recipe_id),
        "recipe_label": draft.recipe_label,
        "brew_date": brew_date,
        "method": draft.method,
        "dose_g": _text(draft.dose_g),
        "water_g": _text(draft.water_g),
        "ratio": _text(draft.ratio),
        "temp_c": _text(draft.temp_c),
        "total_time_sec": _text(draft.total_time_sec),
        "yield_g": _text(draft.yield_g),
        "water_profile": _text(draft.water_profile),
        "tds": _text(draft.tds),
        "extraction_yield": _text(draft.extraction_yield),
        "location": _text(draft.location),
        "cost_per_cup": _text(draft.cost_per_cup),
        "notes": _text(draft.notes),
        "save_as_recipe": "on" if draft.save_as_recipe else "",
        "score_total": _text(draft.score_total),
        "descriptors": _join(draft.descriptors),
        "would_repeat": (
            "" if draft.would_repeat is None else str(draft.would_repeat).lower()
        ),
    }
    for axis in SCA_AXES:
        values[f"{SCA_FIELD_PREFIX}{axis}"] = _text(draft.sca_breakdown.get(axis))
    return values
