# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from metric_catalog.logging.init import reset_logging


def make_workbook_bytes(sheets: dict[str, list[list[object]]]) -> bytes:
    """Build an .xlsx workbook in memory; each sheet is written as a raw grid (no header/index)."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return buf.getvalue()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def clean_env(monkeypatch):
    for var in ("DATABASE_URL", "PGDSN", "METRIC_CATALOG_CACHE_DIR"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _fresh_logging(clean_env):
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """percent_rule: conditional
percentage_metrics: [accuracy_index]
cache:
  backend: file
  key: weekly_dashboard
  path: ./cache
error_log_dir: ./logs
progress: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "catalog.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def workbook_factory() -> Callable[[dict[str, list[list[object]]]], bytes]:
    return make_workbook_bytes


@pytest.fixture()
def school_sheets() -> dict[str, list[list[object]]]:
    """Three-metric workbook in the layout of the weekly school dashboards."""
    return {
        "Índice de exercícios": [
            ["Escola", "Semana 1", "Semana 2", "Semana 3"],
            ["Escola Norte", 2.5, 1.5, 3],
            ["Escola Sul", 0.5, 1, 1.2],
        ],
        "Acessos no período": [
            ["Escola", "Semana 1", "Semana 2", "Semana 3"],
            ["Escola Norte", 80, 60, 90],
            ["Escola Sul", 40, 55, 20],
        ],
        "Índice de acerto": [
            ["Escola", "Semana 1", "Semana 2", "Semana 3"],
            ["Escola Norte", 0.72, 0.65, 80],
            ["Escola Sul", 0.4, None, 0.5],
        ],
    }
