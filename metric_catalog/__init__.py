"""Workbook -> per-entity time series, with averages, rankings and threshold tiers.

Typical use:

    from metric_catalog import CatalogService, FileStore

    service = CatalogService(store=FileStore(Path(".cache")))
    service.restore()                      # last snapshot, if any
    service.ingest_path(Path("weekly.xlsx"))
    service.ranking_for("accuracy_index")
"""

from .config.loader import CatalogConfig, ConfigError, default_config, load_config
from .excel.reader import MalformedWorkbookError
from .logging.init import setup_logging
from .models import Catalog, IngestionResult, Metric, PeriodRecord, RankingEntry, Tier
from .services.ingestion import CatalogService, Selection
from .storage.factory import build_store
from .storage.store import FileStore, KeyValueStore, MemoryStore, StoreError

__version__ = "0.1.0"

__all__ = [
    "CatalogService",
    "Selection",
    "CatalogConfig",
    "ConfigError",
    "default_config",
    "load_config",
    "setup_logging",
    "MalformedWorkbookError",
    "Catalog",
    "IngestionResult",
    "Metric",
    "PeriodRecord",
    "RankingEntry",
    "Tier",
    "build_store",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "StoreError",
]
