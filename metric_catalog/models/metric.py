from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum

"""Metric registry for the workbook -> time-series pipeline.

Each workbook sheet carries exactly one metric. The sheet name is matched
against this registry; sheets that do not resolve to a registered metric are
skipped by policy.

The Portuguese aliases are the sheet titles used by the school dashboard
workbooks this pipeline was first fed with.
"""

__all__ = [
    "Metric",
    "Tier",
    "ThresholdSpec",
    "THRESHOLDS",
    "resolve_metric",
]


class Metric(Enum):
    """Recognized metrics (one per workbook sheet).

    The enum value is the canonical key used in config files and in
    PeriodRecord slot names.
    """
    EXERCISE_INDEX = "exercise_index"
    ACCESS_COUNT = "access_count"
    ACCURACY_INDEX = "accuracy_index"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def aliases(self) -> tuple[str, ...]:
        return _ALIASES[self]

    @classmethod
    def from_key(cls, key: str) -> Metric:
        """Look up a metric by canonical key, label or alias.

        Raises:
            KeyError: if nothing in the registry matches
        """
        metric = resolve_metric(key)
        if metric is None:
            raise KeyError(f"unknown metric: {key!r}")
        return metric


class Tier(Enum):
    """Classification bucket used by the presentation layer to color values."""
    ON_TARGET = "on_target"
    WARNING = "warning"
    BELOW_TARGET = "below_target"


@dataclass(frozen=True)
class ThresholdSpec:
    """Per-metric thresholds: value >= target is on target, >= warning is a warning."""
    target: float
    warning: float


_LABELS: dict[Metric, str] = {
    Metric.EXERCISE_INDEX: "exercise index",
    Metric.ACCESS_COUNT: "access count (period)",
    Metric.ACCURACY_INDEX: "accuracy index",
}

_ALIASES: dict[Metric, tuple[str, ...]] = {
    Metric.EXERCISE_INDEX: ("exercise index", "Índice de exercícios"),
    Metric.ACCESS_COUNT: ("access count", "access count (period)", "Acessos no período"),
    Metric.ACCURACY_INDEX: ("accuracy index", "accuracy rate", "Índice de acerto"),
}

THRESHOLDS: dict[Metric, ThresholdSpec] = {
    Metric.EXERCISE_INDEX: ThresholdSpec(target=2, warning=1),
    Metric.ACCESS_COUNT: ThresholdSpec(target=75, warning=50),
    Metric.ACCURACY_INDEX: ThresholdSpec(target=70, warning=50),
}


def _fold(name: str) -> str:
    return unicodedata.normalize("NFC", name).strip().casefold()


_LOOKUP: dict[str, Metric] = {}
for _metric in Metric:
    _LOOKUP[_fold(_metric.value)] = _metric
    for _alias in _ALIASES[_metric]:
        _LOOKUP[_fold(_alias)] = _metric


def resolve_metric(name: object) -> Metric | None:
    """Resolve a sheet name (or metric key) to a registered Metric.

    Matching ignores case, surrounding whitespace and Unicode composition.
    Returns None when the name is not registered.
    """
    if isinstance(name, Metric):
        return name
    if not isinstance(name, str):
        return None
    return _LOOKUP.get(_fold(name))
