from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .period_record import PeriodRecord, TimeSeries

"""Catalog and RankingEntry models.

The Catalog is the canonical entity -> TimeSeries mapping. It is built once
per ingestion and never patched afterwards; a new ingestion produces a new
Catalog object.
"""

__all__ = [
    "Catalog",
    "RankingEntry",
]


@dataclass(frozen=True, eq=False)
class Catalog(Mapping[str, TimeSeries]):
    """Read-only entity -> TimeSeries mapping."""
    series: Mapping[str, TimeSeries] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the backing dict so no consumer can patch it in place
        object.__setattr__(self, "series", MappingProxyType(dict(self.series)))

    def __getitem__(self, entity: str) -> TimeSeries:
        return self.series[entity]

    def __iter__(self) -> Iterator[str]:
        return iter(self.series)

    def __len__(self) -> int:
        return len(self.series)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return dict(self.series) == dict(other.series)

    # a mapping compared by content; not usable as a dict key
    __hash__ = None  # type: ignore[assignment]

    def entities(self) -> list[str]:
        return sorted(self.series)

    def series_for(self, entity: str) -> TimeSeries:
        """Time series of one entity; empty tuple for unknown entities."""
        return self.series.get(entity, ())

    def record_for(self, entity: str, period: int) -> PeriodRecord | None:
        for record in self.series_for(entity):
            if record.period == period:
                return record
        return None

    @property
    def record_count(self) -> int:
        return sum(len(s) for s in self.series.values())


@dataclass(frozen=True)
class RankingEntry:
    """One row of a ranking: an entity and its mean for the ranked metric."""
    entity: str
    mean: float
