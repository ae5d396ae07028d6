from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

"""Ingestion result models.

IngestionResult is what one ingestion attempt (upload or cache restore)
reports back: whether a new Catalog was published and the per-sheet tallies
that feed the SUMMARY log line.
"""

__all__ = [
    "IngestionStatus",
    "SheetStat",
    "IngestionResult",
]


class IngestionStatus(Enum):
    """Outcome of one ingestion attempt.

    - SUCCESS: a new Catalog was built and published
    - FAILED: nothing was published; the previous Catalog stays active
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SheetStat:
    """Per-sheet normalization tallies."""
    sheet_name: str
    metric: str | None  # canonical metric key, None when the sheet was skipped
    skipped: bool = False
    skip_reason: str | None = None  # EMPTY_SHEET / UNKNOWN_SHEET
    data_rows: int = 0  # rows that produced values
    dropped_rows: int = 0  # rows without an entity key
    dropped_columns: int = 0  # headers without a period number
    values: int = 0  # (entity, period) values written


@dataclass(frozen=True)
class IngestionResult:
    """Aggregated result of one ingestion attempt."""
    status: IngestionStatus
    source: str
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    entities: int = 0
    records: int = 0  # PeriodRecords in the published Catalog
    sheet_stats: list[SheetStat] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is IngestionStatus.SUCCESS

    @property
    def total_sheets(self) -> int:
        return len(self.sheet_stats)

    @property
    def used_sheets(self) -> int:
        return sum(1 for s in self.sheet_stats if not s.skipped)

    @property
    def skipped_sheets(self) -> int:
        return sum(1 for s in self.sheet_stats if s.skipped)
