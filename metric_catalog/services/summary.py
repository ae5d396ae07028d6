from __future__ import annotations

from ..models.ingestion_result import IngestionResult

"""SUMMARY line rendering for one ingestion attempt.

Format:
SUMMARY source={name} status={success|failed} sheets={total} used_sheets={used}
skipped_sheets={skipped} entities={n} records={n} elapsed_sec={elapsed}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(seconds: float) -> str:
    """Render seconds without scientific notation; integral values lose the decimal part."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_summary_line(result: IngestionResult) -> str:
    """Render the SUMMARY line for an IngestionResult.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from metric_catalog.models.ingestion_result import IngestionResult, IngestionStatus
        >>> t = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)
        >>> render_summary_line(IngestionResult(
        ...     status=IngestionStatus.SUCCESS, source="week.xlsx", start_time=t,
        ...     end_time=t, elapsed_seconds=2.0, entities=4, records=12))
        'SUMMARY source=week.xlsx status=success sheets=0 used_sheets=0 skipped_sheets=0 entities=4 records=12 elapsed_sec=2'
    """
    source = result.source.replace(" ", "_") or "-"
    return (
        f"SUMMARY source={source} "
        f"status={result.status.value} "
        f"sheets={result.total_sheets} "
        f"used_sheets={result.used_sheets} "
        f"skipped_sheets={result.skipped_sheets} "
        f"entities={result.entities} "
        f"records={result.records} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
