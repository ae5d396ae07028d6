from __future__ import annotations

import json
import pathlib

import jsonschema
import pytest

from metric_catalog.logging.error_log import ErrorLogBuffer
from metric_catalog.models.error_record import CORRUPT_CACHE, WORKBOOK_LEVEL, ErrorRecord
from metric_catalog.services.ingestion import CatalogService
from metric_catalog.storage.store import MemoryStore

"""Error log JSON Lines contract."""

SCHEMA_PATH = pathlib.Path(__file__).parent / "contracts" / "error_log_schema.json"


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_error_log_schema_valid_example(schema):
    record = {
        "timestamp": "2024-03-01T10:12:33.120000Z",
        "source": "semanal.xlsx",
        "sheet": "Índice de acerto",
        "row": -1,
        "column": 3,
        "error_type": "UNPARSEABLE_HEADER",
        "message": "header 'Total' has no period number",
    }
    jsonschema.validate(record, schema)


def test_error_log_schema_rejects_extra_key(schema):
    record = json.loads(ErrorRecord.create("w.xlsx", "s", "EMPTY_SHEET", "m").to_json_line())
    record["db_message"] = "not allowed"
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, schema)


def test_error_log_schema_rejects_row_below_sentinel(schema):
    record = json.loads(ErrorRecord.create("w.xlsx", "s", "EMPTY_SHEET", "m", row=-2).to_json_line())
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, schema)


def test_written_lines_satisfy_schema(schema, tmp_path, workbook_factory):
    log = ErrorLogBuffer(tmp_path / "logs")
    store = MemoryStore({"metric_catalog.raw_sheets": b"{broken"})
    service = CatalogService(store=store, error_log=log)
    service.restore()
    service.ingest_bytes(
        workbook_factory(
            {
                "Resumo": [["x"], ["y"]],
                "exercise index": [["Entity", "Total"], ["A", 1]],
                "access count": [["Entity"]],
            }
        ),
        source="week.xlsx",
    )

    lines = log.file_path.read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    for rec in records:
        jsonschema.validate(rec, schema)
    assert records[0]["error_type"] == CORRUPT_CACHE
    assert records[0]["sheet"] == WORKBOOK_LEVEL
    assert {r["error_type"] for r in records[1:]} == {"UNKNOWN_SHEET", "UNPARSEABLE_HEADER", "EMPTY_SHEET"}
