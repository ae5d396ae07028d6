from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from dotenv import load_dotenv

"""Configuration loading.

- Load a YAML config file (e.g. config/catalog.yml)
- Validate it against the bundled JSON schema (config_schema.json)
- Apply defaults for everything left out
- Let environment variables (optionally read from .env) override the cache
  location: DATABASE_URL / PGDSN -> cache.dsn, METRIC_CATALOG_CACHE_DIR ->
  cache.path
"""

if TYPE_CHECKING:
    import jsonschema
    from jsonschema.exceptions import ValidationError
else:
    try:
        import jsonschema
        from jsonschema.exceptions import ValidationError
    except ImportError:  # pragma: no cover
        jsonschema = None  # type: ignore[assignment]
        ValidationError = Exception  # type: ignore[misc,assignment]

__all__ = [
    "ConfigError",
    "CacheConfig",
    "CatalogConfig",
    "SCHEMA_PATH",
    "DEFAULT_CACHE_KEY",
    "default_config",
    "load_config",
    "load_env_file",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DEFAULT_CACHE_KEY = "metric_catalog.raw_sheets"
DEFAULT_CACHE_DIR = ".metric_catalog"
DEFAULT_CACHE_TABLE = "metric_catalog_cache"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class CacheConfig:
    """Where the raw sheet snapshot is persisted between sessions."""
    backend: str = "memory"  # memory | file | postgres
    key: str = DEFAULT_CACHE_KEY
    path: str = DEFAULT_CACHE_DIR  # file backend directory
    dsn: str | None = None  # postgres backend
    table: str = DEFAULT_CACHE_TABLE  # postgres backend


@dataclass(frozen=True)
class CatalogConfig:
    percent_rule: str = "conditional"
    percentage_metrics: tuple[str, ...] = ("accuracy_index",)
    cache: CacheConfig = field(default_factory=CacheConfig)
    error_log_dir: str | None = None
    progress: bool = True
    debug: bool = False


def default_config() -> CatalogConfig:
    return _apply_env(CatalogConfig())


def load_env_file(path: Path = Path(".env"), override: bool = False) -> bool:
    """Load a .env file into os.environ; returns False when there is none."""
    if not path.exists():
        return False
    return load_dotenv(dotenv_path=path, override=override)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: jsonschema missing, schema file missing or broken, or
            the data violates the schema
    """
    if jsonschema is None:
        raise ConfigError("jsonschema library is required for config validation")

    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _apply_env(cfg: CatalogConfig) -> CatalogConfig:
    # variables already set in the process win over .env entries
    load_env_file()
    cache = cfg.cache
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or cache.dsn
    path = os.getenv("METRIC_CATALOG_CACHE_DIR") or cache.path
    if dsn == cache.dsn and path == cache.path:
        return cfg
    cache = CacheConfig(backend=cache.backend, key=cache.key, path=path, dsn=dsn, table=cache.table)
    return CatalogConfig(
        percent_rule=cfg.percent_rule,
        percentage_metrics=cfg.percentage_metrics,
        cache=cache,
        error_log_dir=cfg.error_log_dir,
        progress=cfg.progress,
        debug=cfg.debug,
    )


def load_config(path: Path) -> CatalogConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    cache_raw = data.get("cache", {})
    cache = CacheConfig(
        backend=cache_raw.get("backend", "memory"),
        key=cache_raw.get("key", DEFAULT_CACHE_KEY),
        path=cache_raw.get("path", DEFAULT_CACHE_DIR),
        dsn=cache_raw.get("dsn"),
        table=cache_raw.get("table", DEFAULT_CACHE_TABLE),
    )
    cfg = CatalogConfig(
        percent_rule=data.get("percent_rule", "conditional"),
        percentage_metrics=tuple(data.get("percentage_metrics", ["accuracy_index"])),
        cache=cache,
        error_log_dir=data.get("error_log_dir"),
        progress=data.get("progress", True),
        debug=data.get("debug", False),
    )
    return _apply_env(cfg)
