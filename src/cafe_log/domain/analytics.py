"""Domain models for journal analytics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MonthCount:
    """Number of brews logged in one calendar month."""

    key: str
    label: str
    count: int


@dataclass(frozen=True)
class DescriptorCount:
    """How often a lower-cased descriptor appears across notes."""

    label: str
    frequency: int


@dataclass(frozen=True)
class AnalyticsSummary:
    """Aggregates shown on the analytics page."""

    cups_by_month: list[MonthCount]
    average_score: float | None
    top_descriptors: list[DescriptorCount]
    sca_averages: dict[str, float] | None
    total_brews: int
    total_notes: int

    @classmethod
    def empty(cls) -> "AnalyticsSummary":
        return cls(
            cups_by_month=[],
            average_score=None,
            top_descriptors=[],
            sca_averages=None,
            total_brews=0,
            total_notes=0,
        )
