from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from metric_catalog.models.error_record import ErrorRecord

"""Error log buffering.

Records collected during one ingestion are written as JSON Lines to
`<directory>/errors-YYYYMMDD-HHMMSS.log` (UTC) on flush(). Without a
directory the buffer only keeps the records in memory so that callers can
still inspect them.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer of ErrorRecords; flush() appends them to the log file.

    The file path is fixed on first access. Not thread safe (ingestion is
    serial).
    """
    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None

    @property
    def enabled(self) -> bool:
        return self._directory is not None

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    @property
    def file_path(self) -> Path | None:
        if self._directory is None:
            return None
        if self._file_path is None:
            self._directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._directory / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records and clear the buffer.

        Returns the log file path, or None when no directory is configured
        (records are then just dropped from the buffer).
        """
        fp = self.file_path
        if fp is None or not self._records:
            self._records.clear()
            return fp
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
