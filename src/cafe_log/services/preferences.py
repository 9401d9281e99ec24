"""Versioned client preference blob."""

import json
import logging
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

PREFERENCES_COOKIE = "cafe_log_preferences"
PREFERENCES_VERSION = 1

logger = logging.getLogger(__name__)


class Preferences(BaseModel):
    """User interface preferences kept on the client."""

    locale: Literal["es", "en"] = "es"
    unit_system: Literal["metric", "imperial"] = "metric"
    default_privacy: Literal["private", "public"] = "private"
    inventory_threshold: int = Field(default=50, ge=0)
    enable_haptics: bool = True


def load_preferences(raw: str | None) -> Preferences:
    """Decode a stored blob, falling back to defaults for stale or bad data."""
    if not raw:
        return Preferences()
    try:
        blob = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed preferences blob")
        return Preferences()
    if not isinstance(blob, dict) or blob.get("version") != PREFERENCES_VERSION:
        return Preferences()
    try:
        return Preferences.model_validate(blob.get("state") or {})
    except ValidationError:
        logger.warning("Ignoring invalid preferences state")
        return Preferences()


def dump_preferences(preferences: Preferences) -> str:
    """Encode preferences as the versioned blob stored in the cookie."""
    return json.dumps(
        {"version": PREFERENCES_VERSION, "state": preferences.model_dump()},
        separators=(",", ":"),
    )


def format_temperature(value: float | None, unit_system: str) -> str:
    """Render a Celsius temperature in the preferred unit."""
    if value is None:
        return "—"
    if unit_system == "imperial":
        return f"{value * 9 / 5 + 32:.0f} °F"
    return f"{value:g} °C"


def format_weight(value: float | None, unit_system: str) -> str:
    """Render grams in the preferred unit."""
    if value is None:
        return "—"
    if unit_system == "imperial":
        return f"{value / 28.349523125:.2f} oz"
    return f"{value:g} g"
