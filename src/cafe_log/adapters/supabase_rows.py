"""Parsing helpers for PostgREST rows."""

import math
from datetime import date, datetime
from uuid import UUID

from cafe_log.domain.brews import Brew
from cafe_log.domain.coffees import Coffee
from cafe_log.domain.recipes import Recipe
from cafe_log.domain.sensory import LEGACY_AXIS_KEYS, SCA_AXES, SensoryNote


def parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def parse_date(value: object) -> date | None:
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    return None


def parse_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    return float(value)  # type: ignore[arg-type]


def parse_uuid(value: object) -> UUID | None:
    if not value:
        return None
    return UUID(str(value))


def parse_text_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def normalize_breakdown(value: object) -> dict[str, float]:
    """Map stored axis scores to the English axis names.

    Older rows used Spanish keys for some axes; an English key overrides its
    legacy twin. Unknown keys and scores that are not finite numbers are
    dropped.
    """
    if not isinstance(value, dict):
        return {}
    breakdown: dict[str, float] = {}
    legacy_first = sorted(value.items(), key=lambda item: item[0] in SCA_AXES)
    for key, raw in legacy_first:
        axis = LEGACY_AXIS_KEYS.get(key, key)
        if axis not in SCA_AXES:
            continue
        score = _finite(raw)
        if score is not None:
            breakdown[axis] = score
    return breakdown


def _finite(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_coffee(row: dict[str, object]) -> Coffee:
    """Parse a coffees row into a domain model."""
    return Coffee(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        display_name=str(row.get("display_name") or ""),
        process=str(row.get("process") or "washed"),
        roast_level=str(row.get("roast_level") or "light"),
        purchase_type=str(row.get("purchase_type") or "retail"),
        roaster=row.get("roaster"),
        origin_country=row.get("origin_country"),
        origin_region=row.get("origin_region"),
        origin_farm=row.get("origin_farm"),
        varieties=parse_text_list(row.get("varieties")),
        roast_date=parse_date(row.get("roast_date")),
        purchase_place=row.get("purchase_place"),
        purchase_price=parse_float(row.get("purchase_price")),
        currency=row.get("currency"),
        bag_weight_g=parse_float(row.get("bag_weight_g")),
        notes=row.get("notes"),
        tags=parse_text_list(row.get("tags")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
    )


def parse_recipe(row: dict[str, object]) -> Recipe:
    """Parse a recipes row into a domain model."""
    total_time = row.get("total_time_sec")
    return Recipe(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        method=str(row.get("method") or "v60"),
        dose_g=parse_float(row.get("dose_g")),
        water_g=parse_float(row.get("water_g")),
        ratio=parse_float(row.get("ratio")),
        temp_c=parse_float(row.get("temp_c")),
        total_time_sec=int(total_time) if total_time is not None else None,
        grinder=row.get("grinder"),
        grind_setting=row.get("grind_setting"),
        steps=_parse_steps(row.get("steps")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
    )


def _parse_steps(value: object) -> list[str]:
    # Early rows wrapped the list as {"steps": [...]}.
    if isinstance(value, dict):
        value = value.get("steps")
    return parse_text_list(value)


def parse_brew(row: dict[str, object]) -> Brew:
    """Parse a brews row into a domain model."""
    total_time = row.get("total_time_sec")
    return Brew(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        coffee_id=UUID(str(row["coffee_id"])),
        method=str(row.get("method") or "v60"),
        recipe_id=parse_uuid(row.get("recipe_id")),
        brew_date=parse_datetime(row.get("brew_date")),
        dose_g=parse_float(row.get("dose_g")),
        water_g=parse_float(row.get("water_g")),
        ratio=parse_float(row.get("ratio")),
        temp_c=parse_float(row.get("temp_c")),
        total_time_sec=int(total_time) if total_time is not None else None,
        yield_g=parse_float(row.get("yield_g")),
        water_profile=row.get("water_profile"),
        tds=parse_float(row.get("tds")),
        extraction_yield=parse_float(row.get("extraction_yield")),
        location=row.get("location"),
        cost_per_cup=parse_float(row.get("cost_per_cup")),
        notes=row.get("notes"),
        created_at=parse_datetime(row.get("created_at")),
    )


def parse_note(row: dict[str, object]) -> SensoryNote:
    """Parse a sensory_notes row into a domain model."""
    would_repeat = row.get("would_repeat")
    return SensoryNote(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        brew_id=UUID(str(row["brew_id"])),
        score_total=parse_float(row.get("score_total")),
        sca_breakdown=normalize_breakdown(row.get("sca_breakdown")),
        descriptors=parse_text_list(row.get("descriptors")),
        would_repeat=bool(would_repeat) if would_repeat is not None else None,
        created_at=parse_datetime(row.get("created_at")),
    )
