from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from metric_catalog.excel.coercion import ValueCoercer
from metric_catalog.models.metric import Metric
from metric_catalog.models.raw_sheet import CellValue, PeriodHeader, RawSheet

"""Sheet normalizer: one RawSheet (one metric) -> (entity, period) -> value.

Layout expected in each sheet:
- row 0: header; column 0 names the entity column, every other header holds
  a period label such as "Semana 3" or "Period 12"
- rows 1..n: entity key in column 0, one value per period column

Irregular sheets degrade instead of failing: short sheets are reported as
empty, headers without digits drop their column, rows without an entity key
are dropped and every cell goes through ValueCoercer.
"""

__all__ = [
    "EmptySheetError",
    "NormalizedSheet",
    "parse_period",
    "parse_headers",
    "entity_key",
    "normalize_sheet",
]

_DIGITS = re.compile(r"\d+")


class EmptySheetError(Exception):
    """Raised when a sheet has no data row under its header."""


@dataclass
class NormalizedSheet:
    """Values of one metric keyed by (entity, period), in first-seen order."""
    sheet_name: str
    metric: Metric
    values: dict[tuple[str, int], float] = field(default_factory=dict)
    headers: list[PeriodHeader] = field(default_factory=list)
    data_rows: int = 0
    dropped_rows: int = 0

    @property
    def dropped_headers(self) -> list[PeriodHeader]:
        return [h for h in self.headers if h.dropped]


def parse_period(header: CellValue) -> int | None:
    """First contiguous digit run of the header text as int, or None."""
    if header is None:
        return None
    if isinstance(header, float) and header.is_integer():
        header = int(header)
    m = _DIGITS.search(str(header))
    return int(m.group(0)) if m else None


def parse_headers(header_row: tuple[CellValue, ...]) -> list[PeriodHeader]:
    """Period headers for every column after the entity column."""
    headers: list[PeriodHeader] = []
    for col, cell in enumerate(header_row):
        if col == 0:
            continue
        text = "" if cell is None else str(cell).strip()
        headers.append(PeriodHeader(text=text, column=col, period=parse_period(cell)))
    return headers


def entity_key(cell: CellValue) -> str | None:
    """Entity identifier from column 0; None when the cell is empty."""
    if cell is None:
        return None
    if isinstance(cell, float):
        if math.isnan(cell):
            return None
        if cell.is_integer():
            return str(int(cell))
    key = str(cell).strip()
    return key or None


def normalize_sheet(
    sheet: RawSheet,
    metric: Metric,
    coercer: ValueCoercer,
    on_dropped_header: Callable[[PeriodHeader], None] | None = None,
) -> NormalizedSheet:
    """Normalize one sheet for the given metric.

    Raises:
        EmptySheetError: fewer than 2 rows (header + at least one data row)
    """
    if len(sheet.rows) < 2:
        raise EmptySheetError(f"sheet '{sheet.name}' has no data rows")

    headers = parse_headers(sheet.header)
    if on_dropped_header is not None:
        for h in headers:
            if h.dropped:
                on_dropped_header(h)
    period_columns = [(h.column, h.period) for h in headers if h.period is not None]

    result = NormalizedSheet(sheet_name=sheet.name, metric=metric, headers=headers)
    for row in sheet.data_rows:
        entity = entity_key(row[0] if row else None)
        if entity is None:
            result.dropped_rows += 1
            continue
        result.data_rows += 1
        for col, period in period_columns:
            # the row ends at its last non-empty cell; nothing is recorded past it
            if col >= len(row):
                break
            # later occurrences of the same (entity, period) overwrite earlier ones
            result.values[(entity, period)] = coercer.coerce(row[col], metric)
    return result
