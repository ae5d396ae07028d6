from __future__ import annotations

import pandas as pd

from ..models.catalog import Catalog, RankingEntry
from ..models.metric import Metric

"""Aggregations over a Catalog.

A PeriodRecord that lacks the requested metric counts as 0 everywhere in this
module, so an entity that only reported some periods for a metric is pulled
down by the periods it missed.
"""

__all__ = [
    "mean_for",
    "sum_for",
    "ranking_for",
    "snapshot_for",
    "series_frame",
]


def mean_for(catalog: Catalog, entity: str, metric: Metric) -> float:
    """Arithmetic mean of the metric over the entity's series (0 for an empty series)."""
    series = catalog.series_for(entity)
    if not series:
        return 0.0
    return sum(r.get(metric) for r in series) / len(series)


def sum_for(catalog: Catalog, entity: str, metric: Metric) -> float:
    return sum((r.get(metric) for r in catalog.series_for(entity)), 0.0)


def ranking_for(catalog: Catalog, metric: Metric) -> list[RankingEntry]:
    """One entry per entity, highest mean first.

    Ties are broken by entity identifier ascending.
    """
    entries = [RankingEntry(entity=e, mean=mean_for(catalog, e, metric)) for e in catalog.entities()]
    # entities() is sorted, and sort() is stable, so equal means keep entity order
    entries.sort(key=lambda entry: entry.mean, reverse=True)
    return entries


def snapshot_for(catalog: Catalog, entity: str, period: int | None = None) -> dict[Metric, float]:
    """Per-metric values for one period, or totals over the whole series.

    With period=None the values are summed across the series. An unknown
    period yields an empty mapping.
    """
    if period is None:
        return {m: sum_for(catalog, entity, m) for m in Metric}
    record = catalog.record_for(entity, period)
    if record is None:
        return {}
    return {m: record.get(m) for m in Metric}


def series_frame(catalog: Catalog, entity: str) -> pd.DataFrame:
    """Chart feed: one row per period, one column per metric key, NaN where absent."""
    columns = [m.value for m in Metric]
    rows = [
        {m.value: r.present_metrics().get(m) for m in Metric} | {"period": r.period}
        for r in catalog.series_for(entity)
    ]
    if not rows:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="period"), dtype=float)
    df = pd.DataFrame(rows).set_index("period")
    return df[columns].astype(float)
