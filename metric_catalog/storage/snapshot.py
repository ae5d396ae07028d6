from __future__ import annotations

import json
from collections.abc import Mapping

from metric_catalog.models.raw_sheet import RawSheet

"""Raw sheet snapshot codec.

The cached form is the pre-normalization sheet set, UTF-8 JSON:

    {"version": 1, "rawSheets": {"<sheet name>": [[cell, ...], ...], ...}}

Sheet order is preserved so that a Catalog rebuilt from the snapshot applies
sheets in the same order as the original ingestion.
"""

__all__ = [
    "SNAPSHOT_VERSION",
    "CacheDecodeError",
    "encode_sheets",
    "decode_sheets",
]

SNAPSHOT_VERSION = 1

_SCALARS = (type(None), bool, int, float, str)


class CacheDecodeError(Exception):
    """Raised when cached bytes are not a valid raw sheet snapshot."""


def encode_sheets(sheets: Mapping[str, RawSheet]) -> bytes:
    payload = {
        "version": SNAPSHOT_VERSION,
        "rawSheets": {name: sheet.to_json_obj() for name, sheet in sheets.items()},
    }
    return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")


def decode_sheets(data: bytes) -> dict[str, RawSheet]:
    """Rebuild the RawSheet set from snapshot bytes.

    Raises:
        CacheDecodeError: not UTF-8 JSON, unknown version or wrong shape
    """
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CacheDecodeError(f"snapshot is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise CacheDecodeError("snapshot root must be an object")
    if payload.get("version") != SNAPSHOT_VERSION:
        raise CacheDecodeError(f"unsupported snapshot version: {payload.get('version')!r}")
    raw = payload.get("rawSheets")
    if not isinstance(raw, dict):
        raise CacheDecodeError("snapshot lacks a rawSheets object")

    sheets: dict[str, RawSheet] = {}
    for name, rows in raw.items():
        if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
            raise CacheDecodeError(f"sheet '{name}' is not a list of rows")
        for r in rows:
            if not all(isinstance(c, _SCALARS) for c in r):
                raise CacheDecodeError(f"sheet '{name}' holds a non-scalar cell")
        sheets[name] = RawSheet.from_rows(name, rows)
    return sheets
