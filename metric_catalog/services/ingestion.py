from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ..config.loader import CatalogConfig, default_config
from ..excel.coercion import ValueCoercer
from ..excel.normalizer import EmptySheetError, NormalizedSheet, normalize_sheet
from ..excel.reader import MalformedWorkbookError, read_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import LOGGER_NAME, log_summary
from ..models.catalog import Catalog, RankingEntry
from ..models.error_record import (
    CORRUPT_CACHE,
    EMPTY_SHEET,
    MALFORMED_WORKBOOK,
    UNKNOWN_SHEET,
    UNPARSEABLE_HEADER,
    WORKBOOK_LEVEL,
    ErrorRecord,
)
from ..models.ingestion_result import IngestionResult, IngestionStatus, SheetStat
from ..models.metric import Metric, Tier, resolve_metric
from ..models.period_record import TimeSeries
from ..models.raw_sheet import RawSheet
from ..storage.snapshot import CacheDecodeError, decode_sheets, encode_sheets
from ..storage.store import KeyValueStore, MemoryStore, StoreError
from . import aggregate, classifier
from .progress import SheetProgress
from .series_builder import build_catalog
from .summary import render_summary_line

"""Ingestion service: workbook bytes / cached snapshot -> published Catalog.

Flow per ingestion:
1. decode the workbook into RawSheets (MalformedWorkbookError is fatal)
2. normalize every sheet whose name resolves to a registered metric;
   empty sheets, unknown sheets and undated columns are recorded and skipped
3. build the Catalog from the normalized sheets
4. publish it with a single reference swap, then cache the RawSheets

Consumers only ever see the previous Catalog or the new, fully built one.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "CatalogService",
    "Selection",
    "normalize_sheets",
    "catalog_from_sheets",
    "NO_DATA_STATUS",
]

NO_DATA_STATUS = "No workbook loaded"
CACHE_SOURCE = "<cache>"


@dataclass(frozen=True)
class Selection:
    """Initial selection for the presentation layer: first entity, its last period."""
    entity: str | None
    period: int | None


def normalize_sheets(
    sheets: Mapping[str, RawSheet],
    coercer: ValueCoercer,
    *,
    source: str = "",
    error_log: ErrorLogBuffer | None = None,
    show_progress: bool = False,
) -> tuple[list[NormalizedSheet], list[SheetStat]]:
    """Normalize every recognized sheet, in workbook order.

    Never raises for per-sheet irregularities; each one is logged, recorded
    in error_log (when given) and reflected in the returned SheetStats.
    """
    def record(sheet: str, error_type: str, message: str, column: int = -1) -> None:
        if error_log is not None:
            error_log.append(ErrorRecord.create(source, sheet, error_type, message, column=column))

    normalized: list[NormalizedSheet] = []
    stats: list[SheetStat] = []
    with SheetProgress(len(sheets), enabled=show_progress) as progress:
        for name, sheet in sheets.items():
            progress.start_sheet(name)
            metric = resolve_metric(name)
            if metric is None:
                logger.info("sheet=%s skipped: not a registered metric", name)
                record(name, UNKNOWN_SHEET, f"sheet '{name}' does not name a registered metric")
                stats.append(SheetStat(sheet_name=name, metric=None, skipped=True, skip_reason=UNKNOWN_SHEET))
                progress.finish_sheet(skipped=True)
                continue

            def on_dropped(header, _name=name):
                logger.debug("sheet=%s column=%d header=%r has no period number", _name, header.column, header.text)
                record(_name, UNPARSEABLE_HEADER, f"header {header.text!r} has no period number", column=header.column)

            try:
                sheet_data = normalize_sheet(sheet, metric, coercer, on_dropped_header=on_dropped)
            except EmptySheetError as e:
                logger.warning("sheet=%s skipped: %s", name, e)
                record(name, EMPTY_SHEET, str(e))
                stats.append(SheetStat(sheet_name=name, metric=metric.value, skipped=True, skip_reason=EMPTY_SHEET))
                progress.finish_sheet(skipped=True)
                continue

            normalized.append(sheet_data)
            stats.append(
                SheetStat(
                    sheet_name=name,
                    metric=metric.value,
                    data_rows=sheet_data.data_rows,
                    dropped_rows=sheet_data.dropped_rows,
                    dropped_columns=len(sheet_data.dropped_headers),
                    values=len(sheet_data.values),
                )
            )
            logger.debug(
                "sheet=%s metric=%s rows=%d dropped_rows=%d values=%d",
                name, metric.value, sheet_data.data_rows, sheet_data.dropped_rows, len(sheet_data.values),
            )
            progress.finish_sheet(values=len(sheet_data.values))
    return normalized, stats


def catalog_from_sheets(sheets: Mapping[str, RawSheet], coercer: ValueCoercer | None = None) -> Catalog:
    """Pure RawSheet set -> Catalog (no logging side channel, no store)."""
    normalized, _ = normalize_sheets(sheets, coercer or ValueCoercer())
    return build_catalog(normalized)


class CatalogService:
    """Owns the active Catalog and the injected snapshot store.

    All read accessors work on whatever Catalog is published at call time;
    before the first successful ingestion that is an empty Catalog.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        config: CatalogConfig | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.config = config or default_config()
        if self.config.debug:
            logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG)
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.coercer = ValueCoercer.from_keys(self.config.percentage_metrics, self.config.percent_rule)
        if error_log is None:
            log_dir = self.config.error_log_dir
            error_log = ErrorLogBuffer(Path(log_dir) if log_dir else None)
        self.error_log = error_log
        self._catalog = Catalog()
        self._status = NO_DATA_STATUS
        self.last_result: IngestionResult | None = None
        self.last_errors: list[ErrorRecord] = []

    # -- state -------------------------------------------------------------

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def status(self) -> str:
        return self._status

    @property
    def cache_key(self) -> str:
        return self.config.cache.key

    # -- ingestion ---------------------------------------------------------

    def ingest_bytes(self, data: bytes, source: str = "<upload>") -> IngestionResult:
        """Ingest workbook bytes; publishes a new Catalog on success."""
        start = datetime.now(UTC)
        logger.info("ingesting workbook: %s (%d bytes)", source, len(data))
        try:
            sheets = read_workbook(data)
        except MalformedWorkbookError as e:
            logger.error("workbook %s: %s", source, e)
            self.error_log.append(ErrorRecord.create(source, WORKBOOK_LEVEL, MALFORMED_WORKBOOK, str(e)))
            self._status = f"Could not read workbook: {source}"
            return self._finish(IngestionStatus.FAILED, source, start, error=str(e))

        result = self._build_and_publish(sheets, source, start)
        self._status = f"Workbook loaded: {source}"
        self._save_snapshot(sheets)
        return result

    def ingest_path(self, path: Path) -> IngestionResult:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.error("cannot read %s: %s", path, e)
            self._status = f"Could not read workbook: {path.name}"
            return self._finish(IngestionStatus.FAILED, path.name, datetime.now(UTC), error=str(e))
        return self.ingest_bytes(data, source=path.name)

    def restore(self) -> IngestionResult | None:
        """Rebuild the Catalog from the cached RawSheets.

        Returns None when the store holds no snapshot. A corrupt snapshot or
        an unreachable store yields a FAILED result and leaves the current
        Catalog in place.
        """
        start = datetime.now(UTC)
        try:
            data = self.store.get(self.cache_key)
        except StoreError as e:
            logger.warning("cache read failed: %s", e)
            return self._finish(IngestionStatus.FAILED, CACHE_SOURCE, start, error=str(e))
        if data is None:
            logger.debug("no cached snapshot under key %s", self.cache_key)
            return None
        try:
            sheets = decode_sheets(data)
        except CacheDecodeError as e:
            logger.warning("cached snapshot ignored: %s", e)
            self.error_log.append(ErrorRecord.create(CACHE_SOURCE, WORKBOOK_LEVEL, CORRUPT_CACHE, str(e)))
            return self._finish(IngestionStatus.FAILED, CACHE_SOURCE, start, error=str(e))
        result = self._build_and_publish(sheets, CACHE_SOURCE, start)
        self._status = "Data restored from cache"
        return result

    def _build_and_publish(self, sheets: Mapping[str, RawSheet], source: str, start: datetime) -> IngestionResult:
        normalized, stats = normalize_sheets(
            sheets,
            self.coercer,
            source=source,
            error_log=self.error_log,
            show_progress=self.config.progress,
        )
        catalog = build_catalog(normalized)
        # single reference swap; readers never observe a half-built Catalog
        self._catalog = catalog
        return self._finish(IngestionStatus.SUCCESS, source, start, stats=stats, catalog=catalog)

    def _save_snapshot(self, sheets: Mapping[str, RawSheet]) -> None:
        try:
            self.store.set(self.cache_key, encode_sheets(sheets))
        except (StoreError, ValueError) as e:
            logger.warning("cache write failed, catalog kept in memory only: %s", e)

    def _finish(
        self,
        status: IngestionStatus,
        source: str,
        start: datetime,
        *,
        stats: list[SheetStat] | None = None,
        catalog: Catalog | None = None,
        error: str | None = None,
    ) -> IngestionResult:
        end = datetime.now(UTC)
        result = IngestionResult(
            status=status,
            source=source,
            start_time=start,
            end_time=end,
            elapsed_seconds=(end - start).total_seconds(),
            entities=len(catalog) if catalog is not None else 0,
            records=catalog.record_count if catalog is not None else 0,
            sheet_stats=stats or [],
            error=error,
        )
        self.last_errors = self.error_log.records
        try:
            self.error_log.flush()
        except OSError as e:
            logger.warning("error log flush failed: %s", e)
        self.last_result = result
        log_summary(render_summary_line(result)[len("SUMMARY "):])
        return result

    # -- read accessors ----------------------------------------------------

    def list_entities(self) -> list[str]:
        return self._catalog.entities()

    def series_for(self, entity: str) -> TimeSeries:
        return self._catalog.series_for(entity)

    def mean_for(self, entity: str, metric: Metric | str) -> float:
        return aggregate.mean_for(self._catalog, entity, _metric(metric))

    def sum_for(self, entity: str, metric: Metric | str) -> float:
        return aggregate.sum_for(self._catalog, entity, _metric(metric))

    def ranking_for(self, metric: Metric | str) -> list[RankingEntry]:
        return aggregate.ranking_for(self._catalog, _metric(metric))

    def snapshot_for(self, entity: str, period: int | None = None) -> dict[Metric, float]:
        return aggregate.snapshot_for(self._catalog, entity, period)

    def series_frame(self, entity: str) -> pd.DataFrame:
        return aggregate.series_frame(self._catalog, entity)

    def tier_for(self, metric: Metric | str, value: float) -> Tier:
        return classifier.tier_for(_metric(metric), value)

    def default_selection(self) -> Selection:
        entities = self.list_entities()
        if not entities:
            return Selection(entity=None, period=None)
        series = self.series_for(entities[0])
        return Selection(entity=entities[0], period=series[-1].period if series else None)


def _metric(metric: Metric | str) -> Metric:
    if isinstance(metric, Metric):
        return metric
    return Metric.from_key(metric)
