from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the structured ingestion error log.

Every irregularity met while ingesting a workbook (skipped sheet, dropped
column, undecodable workbook or cache) becomes one ErrorRecord. Row and column
use -1 as the sentinel for sheet- or workbook-level records.
"""

__all__ = [
    "ErrorRecord",
    "EMPTY_SHEET",
    "UNKNOWN_SHEET",
    "UNPARSEABLE_HEADER",
    "MALFORMED_WORKBOOK",
    "CORRUPT_CACHE",
    "WORKBOOK_LEVEL",
]

EMPTY_SHEET = "EMPTY_SHEET"
UNKNOWN_SHEET = "UNKNOWN_SHEET"
UNPARSEABLE_HEADER = "UNPARSEABLE_HEADER"
MALFORMED_WORKBOOK = "MALFORMED_WORKBOOK"
CORRUPT_CACHE = "CORRUPT_CACHE"

WORKBOOK_LEVEL = "<WORKBOOK>"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: workbook name (file name, or "<cache>" for restored snapshots)
        sheet: sheet name, or WORKBOOK_LEVEL
        row: 0-based sheet row, -1 when not row-specific
        column: 0-based sheet column, -1 when not column-specific
        error_type: classification in UPPER_SNAKE_CASE
        message: human-readable description
    """
    timestamp: str
    source: str
    sheet: str
    row: int
    column: int
    error_type: str
    message: str

    @staticmethod
    def create(
        source: str,
        sheet: str,
        error_type: str,
        message: str,
        row: int = -1,
        column: int = -1,
    ) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            sheet=sheet,
            row=row,
            column=column,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
