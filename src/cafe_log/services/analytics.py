"""Aggregate analytics over a user's brews and sensory notes."""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from cafe_log.domain.analytics import AnalyticsSummary, DescriptorCount, MonthCount
from cafe_log.domain.sensory import SCA_AXES, SensoryNote
from cafe_log.services.query_cache import QueryCache

RECENT_MONTHS = 6
TOP_DESCRIPTORS = 10


class AnalyticsRepository(Protocol):
    """Read-only queries backing the analytics page."""

    def list_brew_dates(self, user_id: UUID) -> list[datetime | None]:
        """Return the brew date of every brew of the user."""

    def list_notes(self, user_id: UUID) -> list[SensoryNote]:
        """Return every sensory note of the user."""


@dataclass
class AnalyticsService:
    """Service computing journal analytics in the display timezone."""

    repository: AnalyticsRepository
    cache: QueryCache
    timezone_name: str = "UTC"
    stale_seconds: int = 60

    def summary(self, user_id: UUID) -> AnalyticsSummary:
        """Return the cached analytics summary for a user."""
        return self.cache.fetch(
            (user_id, "analytics"),
            lambda: self._compute(user_id),
            stale_seconds=self.stale_seconds,
        )

    def _compute(self, user_id: UUID) -> AnalyticsSummary:
        brew_dates = self.repository.list_brew_dates(user_id)
        notes = self.repository.list_notes(user_id)
        return AnalyticsSummary(
            cups_by_month=cups_by_month(brew_dates, ZoneInfo(self.timezone_name)),
            average_score=average_score(notes),
            top_descriptors=top_descriptors(notes),
            sca_averages=sca_averages(notes),
            total_brews=len(brew_dates),
            total_notes=len(notes),
        )


def cups_by_month(
    brew_dates: list[datetime | None],
    tz: ZoneInfo | None = None,
    limit: int = RECENT_MONTHS,
) -> list[MonthCount]:
    """Count brews per calendar month, most recent months first."""
    counts: Counter[str] = Counter()
    for brewed_at in brew_dates:
        if brewed_at is None:
            continue
        local = brewed_at.astimezone(tz) if tz and brewed_at.tzinfo else brewed_at
        counts[f"{local.year:04d}-{local.month:02d}"] += 1
    recent = sorted(counts, reverse=True)[:limit]
    return [
        MonthCount(key=key, label=_month_label(key), count=counts[key])
        for key in recent
    ]


def average_score(notes: list[SensoryNote]) -> float | None:
    """Mean of positive total scores rounded to one decimal, or None."""
    scores = [
        note.score_total
        for note in notes
        if note.score_total is not None and note.score_total > 0
    ]
    if not scores:
        return None
    return round(sum(scores) / len(scores), 1)


def top_descriptors(
    notes: list[SensoryNote], limit: int = TOP_DESCRIPTORS
) -> list[DescriptorCount]:
    """Most frequent descriptors, case-insensitive; ties keep first-seen order."""
    counter: Counter[str] = Counter()
    for note in notes:
        for descriptor in note.descriptors:
            counter[descriptor.lower()] += 1
    return [
        DescriptorCount(label=label, frequency=frequency)
        for label, frequency in counter.most_common(limit)
    ]


def sca_averages(notes: list[SensoryNote]) -> dict[str, float] | None:
    """Per-axis mean over positive values; None when every mean is zero."""
    sums = dict.fromkeys(SCA_AXES, 0.0)
    counts = dict.fromkeys(SCA_AXES, 0)
    for note in notes:
        for axis in SCA_AXES:
            value = note.sca_breakdown.get(axis)
            if value is not None and value > 0:
                sums[axis] += value
                counts[axis] += 1
    averages = {
        axis: round(sums[axis] / counts[axis], 2) if counts[axis] else 0.0
        for axis in SCA_AXES
    }
    if all(value == 0 for value in averages.values()):
        return None
    return averages


def _month_label(key: str) -> str:
    year, month = (int(part) for part in key.split("-"))
    return datetime(year, month, 1).strftime("%b %Y")
