from __future__ import annotations

import io
import math
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from typing import Any

import numpy as np
import pandas as pd

from metric_catalog.models.raw_sheet import CellValue, RawSheet

"""Workbook reader: raw workbook bytes -> named RawSheets.

The workbook is decoded with pandas (openpyxl for .xlsx, xlrd for legacy .xls)
without a header row, so row 0 of every RawSheet is the sheet's own header
row. Cells are reduced to JSON-safe scalars here; NaN becomes None and
date/time cells become ISO strings. Only truly empty cells are NaN: text such
as "NA" or "None" stays text, it can be a real entity name.
"""

__all__ = [
    "MalformedWorkbookError",
    "read_workbook",
    "to_cell_value",
    "engine_for",
]


# OLE2 compound document header of legacy .xls files
XLS_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

# pandas NA strings disabled; an empty cell is the only missing value
NA_VALUES = [""]


class MalformedWorkbookError(Exception):
    """Raised when the bytes cannot be decoded as a workbook container."""


def to_cell_value(val: Any) -> CellValue:
    """Reduce one pandas cell to None | bool | int | float | str."""
    if val is None:
        return None
    if isinstance(val, (bool, np.bool_)):
        return bool(val)
    if isinstance(val, (int, np.integer)):
        return int(val)
    if isinstance(val, (float, np.floating)):
        f = float(val)
        return None if math.isnan(f) else f
    if isinstance(val, str):
        return val if val else None
    if isinstance(val, (pd.Timestamp, datetime, date, time)):
        if val is pd.NaT:
            return None
        return val.isoformat()
    if isinstance(val, (pd.Timedelta, timedelta)):
        return str(val)
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        pass
    return str(val)


def _frame_to_rows(df: pd.DataFrame) -> list[list[CellValue]]:
    rows: list[list[CellValue]] = []
    for raw in df.itertuples(index=False, name=None):
        row = [to_cell_value(v) for v in raw]
        # trailing empty cells carry no data; drop them like sheet_to_json does
        while row and row[-1] is None:
            row.pop()
        rows.append(row)
    # fully empty trailing rows are formatting leftovers
    while rows and not rows[-1]:
        rows.pop()
    return rows


def engine_for(data: bytes) -> str:
    """pandas engine for the payload: xlrd for OLE2 (.xls), openpyxl otherwise."""
    return "xlrd" if data.startswith(XLS_MAGIC) else "openpyxl"


def read_workbook(data: bytes, target_sheets: Iterable[str] | None = None) -> dict[str, RawSheet]:
    """Decode workbook bytes into RawSheets keyed by sheet name.

    Parameters
    ----------
    data: raw workbook bytes (.xlsx / .xls)
    target_sheets: restrict to these sheet names (None = every sheet)

    Raises
    ------
    MalformedWorkbookError: the bytes are empty or not a readable workbook
    """
    if not data:
        raise MalformedWorkbookError("empty workbook payload")
    try:
        xls = pd.ExcelFile(io.BytesIO(data), engine=engine_for(data))
    except Exception as e:
        raise MalformedWorkbookError(f"cannot decode workbook: {e}") from e

    wanted = set(target_sheets) if target_sheets is not None else None
    sheets: dict[str, RawSheet] = {}
    with xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            try:
                df = xls.parse(name, header=None, keep_default_na=False, na_values=NA_VALUES)
            except Exception as e:
                raise MalformedWorkbookError(f"cannot read sheet '{name}': {e}") from e
            sheets[str(name)] = RawSheet.from_rows(str(name), _frame_to_rows(df))
    return sheets
