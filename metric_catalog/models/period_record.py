from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Tuple

from .metric import Metric

"""PeriodRecord / TimeSeries models.

PeriodRecord carries one optional slot per registered metric. A slot stays
None until some sheet provides a value for that (entity, period); readers go
through get(), which defaults missing slots to 0.
"""

__all__ = [
    "PeriodRecord",
    "TimeSeries",
]


@dataclass(frozen=True)
class PeriodRecord:
    """Metric values of one entity for one period."""
    entity: str
    period: int
    exercise_index: float | None = None
    access_count: float | None = None
    accuracy_index: float | None = None

    def get(self, metric: Metric, default: float = 0.0) -> float:
        value = getattr(self, metric.value)
        return default if value is None else value

    def has(self, metric: Metric) -> bool:
        return getattr(self, metric.value) is not None

    def with_value(self, metric: Metric, value: float) -> PeriodRecord:
        return replace(self, **{metric.value: value})

    def present_metrics(self) -> dict[Metric, float]:
        """Only the metrics that some sheet actually populated."""
        out: dict[Metric, float] = {}
        for f in fields(self):
            if f.name in ("entity", "period"):
                continue
            value = getattr(self, f.name)
            if value is not None:
                out[Metric(f.name)] = value
        return out


# Ordered ascending by period, no duplicate periods.
TimeSeries = Tuple[PeriodRecord, ...]
