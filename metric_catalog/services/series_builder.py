from __future__ import annotations

from collections.abc import Iterable

from ..excel.normalizer import NormalizedSheet
from ..models.catalog import Catalog
from ..models.period_record import PeriodRecord, TimeSeries

"""SeriesBuilder: join the normalized sheets into one Catalog.

Each entity gets one PeriodRecord per period seen in any sheet, holding the
metrics that were present for that (entity, period). Records are sorted by
period once, here, and never touched again.
"""

__all__ = [
    "build_catalog",
]


def build_catalog(sheets: Iterable[NormalizedSheet]) -> Catalog:
    """Build a Catalog from normalized sheets.

    Sheets are applied in iteration order; if two sheets resolve to the same
    metric the later sheet's values win for the overlapping (entity, period).
    """
    merged: dict[str, dict[int, PeriodRecord]] = {}
    for sheet in sheets:
        for (entity, period), value in sheet.values.items():
            by_period = merged.setdefault(entity, {})
            record = by_period.get(period) or PeriodRecord(entity=entity, period=period)
            by_period[period] = record.with_value(sheet.metric, value)

    series: dict[str, TimeSeries] = {}
    for entity in sorted(merged):
        by_period = merged[entity]
        series[entity] = tuple(by_period[p] for p in sorted(by_period))
    return Catalog(series)
