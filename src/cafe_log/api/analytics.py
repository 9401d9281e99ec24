"""Analytics page and its JSON feed."""

import logging
import math
from dataclasses import asdict, dataclass

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from cafe_log.api.session import current_session
from cafe_log.api.views import error_toast, get_container, render
from cafe_log.domain.analytics import AnalyticsSummary
from cafe_log.domain.sensory import SCA_AXES

router = APIRouter(tags=["analytics"])
logger = logging.getLogger(__name__)

RADAR_SIZE = 260
RADAR_MAX = 10.0


@dataclass(frozen=True)
class RadarPoint:
    axis: str
    value: float
    x: float
    y: float
    label_x: float
    label_y: float


def radar_points(
    averages: dict[str, float], size: int = RADAR_SIZE, max_value: float = RADAR_MAX
) -> list[RadarPoint]:
    """Place each axis average on a circle, starting at twelve o'clock."""
    center = size / 2
    radius = center - 40
    points = []
    for index, axis in enumerate(SCA_AXES):
        angle = -math.pi / 2 + 2 * math.pi * index / len(SCA_AXES)
        value = averages.get(axis, 0.0)
        scale = min(max(value / max_value, 0.0), 1.0)
        points.append(
            RadarPoint(
                axis=axis,
                value=value,
                x=round(center + radius * scale * math.cos(angle), 1),
                y=round(center + radius * scale * math.sin(angle), 1),
                label_x=round(center + (radius + 22) * math.cos(angle), 1),
                label_y=round(center + (radius + 22) * math.sin(angle), 1),
            )
        )
    return points


def radar_ring(level: float, size: int = RADAR_SIZE) -> str:
    """SVG points attribute for a background ring at a fraction of the radius."""
    ring = radar_points({axis: level * RADAR_MAX for axis in SCA_AXES}, size)
    return " ".join(f"{point.x},{point.y}" for point in ring)


@router.get("/analytics", response_class=HTMLResponse)
async def analytics_page(request: Request) -> HTMLResponse:
    container = get_container(request)
    user_id = current_session(request).user_id
    notices = []
    try:
        summary = container.analytics_service.summary(user_id)
    except Exception as exc:
        logger.exception("Failed to load analytics", extra={"user_id": str(user_id)})
        notices.append(error_toast(request, exc, "We could not load your analytics"))
        summary = AnalyticsSummary.empty()
    radar = radar_points(summary.sca_averages) if summary.sca_averages else None
    return render(
        request,
        "analytics.html",
        {
            "active_tab": "analytics",
            "summary": summary,
            "radar": radar,
            "radar_polygon": (
                " ".join(f"{point.x},{point.y}" for point in radar) if radar else ""
            ),
            "radar_rings": [radar_ring(level) for level in (0.25, 0.5, 0.75, 1.0)],
            "radar_size": RADAR_SIZE,
            "max_month": max(
                (month.count for month in summary.cups_by_month), default=0
            ),
        },
        notices=notices,
    )


@router.get("/api/analytics")
async def analytics_json(request: Request) -> dict[str, object]:
    """Analytics summary as JSON."""
    container = get_container(request)
    user_id = current_session(request).user_id
    try:
        summary = container.analytics_service.summary(user_id)
    except Exception as exc:
        logger.exception("Failed to load analytics", extra={"user_id": str(user_id)})
        raise HTTPException(status_code=502, detail="Analytics unavailable") from exc
    return asdict(summary)
