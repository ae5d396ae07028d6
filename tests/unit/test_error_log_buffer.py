from __future__ import annotations

import json
from pathlib import Path

from metric_catalog.logging.error_log import ErrorLogBuffer, ErrorRecord

KEYS = {"timestamp", "source", "sheet", "row", "column", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create("week.xlsx", "Índice de acerto", "UNPARSEABLE_HEADER", "header 'Obs'", column=3)
    data = json.loads(rec.to_json_line())
    assert data["source"] == "week.xlsx"
    assert data["sheet"] == "Índice de acerto"
    assert data["row"] == -1
    assert data["column"] == 3
    assert data["error_type"] == "UNPARSEABLE_HEADER"
    assert data["timestamp"].endswith("Z")
    assert set(data) == KEYS
    # non-ASCII kept as-is
    assert "Índice" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ErrorRecord.create("f.xlsx", "S", "EMPTY_SHEET", "no rows"))
    buf.append(ErrorRecord.create("f.xlsx", "T", "UNKNOWN_SHEET", "unknown"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw)) == KEYS
    assert len(buf) == 0


def test_error_log_buffer_multiple_flushes_append(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ErrorRecord.create("f.xlsx", "S", "EMPTY_SHEET", "a"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("f.xlsx", "S", "EMPTY_SHEET", "b"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1


def test_error_log_buffer_without_directory_keeps_nothing_on_disk(temp_workdir: Path):
    buf = ErrorLogBuffer()
    assert not buf.enabled
    buf.append(ErrorRecord.create("f.xlsx", "S", "EMPTY_SHEET", "a"))
    assert [r.error_type for r in buf.records] == ["EMPTY_SHEET"]
    assert buf.flush() is None
    assert len(buf) == 0
    assert not any((temp_workdir / "logs").iterdir())
