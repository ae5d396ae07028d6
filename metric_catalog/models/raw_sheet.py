from __future__ import annotations

from dataclasses import dataclass
from typing import Union

"""RawSheet and PeriodHeader models.

A RawSheet is the decoded, pre-normalization form of one workbook sheet. Its
cells are limited to JSON-safe scalars so that the whole sheet set can be
cached in a key/value store and rebuilt later without loss.
"""

__all__ = [
    "CellValue",
    "RawSheet",
    "PeriodHeader",
]

CellValue = Union[None, bool, int, float, str]


@dataclass(frozen=True)
class RawSheet:
    """One workbook sheet: its name and its grid of raw cell values.

    rows[0] is the header row; rows[1:] are data rows. Rows may have
    different lengths (trailing empty cells are not padded).
    """
    name: str  # sheet name, doubles as metric identifier
    rows: tuple[tuple[CellValue, ...], ...]

    @property
    def header(self) -> tuple[CellValue, ...]:
        return self.rows[0] if self.rows else ()

    @property
    def data_rows(self) -> tuple[tuple[CellValue, ...], ...]:
        return self.rows[1:]

    def to_json_obj(self) -> list[list[CellValue]]:
        return [list(row) for row in self.rows]

    @staticmethod
    def from_rows(name: str, rows: list[list[CellValue]]) -> RawSheet:
        return RawSheet(name=name, rows=tuple(tuple(r) for r in rows))


@dataclass(frozen=True)
class PeriodHeader:
    """A header cell and the period number parsed out of it (None = dropped column)."""
    text: str
    column: int  # 0-based column index in the sheet
    period: int | None

    @property
    def dropped(self) -> bool:
        return self.period is None
