"""Domain models for the workbook -> per-entity time-series pipeline."""

from .catalog import Catalog, RankingEntry
from .error_record import ErrorRecord
from .ingestion_result import IngestionResult, IngestionStatus, SheetStat
from .metric import THRESHOLDS, Metric, ThresholdSpec, Tier, resolve_metric
from .period_record import PeriodRecord, TimeSeries
from .raw_sheet import CellValue, PeriodHeader, RawSheet

__all__ = [
    # Sheet-level models
    "CellValue",
    "RawSheet",
    "PeriodHeader",
    # Metric registry
    "Metric",
    "Tier",
    "ThresholdSpec",
    "THRESHOLDS",
    "resolve_metric",
    # Series models
    "PeriodRecord",
    "TimeSeries",
    "Catalog",
    "RankingEntry",
    # Results
    "ErrorRecord",
    "IngestionResult",
    "IngestionStatus",
    "SheetStat",
]
