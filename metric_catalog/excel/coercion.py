from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from metric_catalog.models.metric import Metric

"""Cell value coercion.

Rules, applied in order:
1. None / NaN / blank / non-numeric / non-finite -> 0
2. anything else parses to float (strings are stripped first)
3. percentage-like metrics: a value in [0, 1] is read as a fraction and
   scaled by 100 (PercentRule.CONDITIONAL), or every value is scaled
   (PercentRule.ALWAYS)

Rule 3 cannot tell "0.5%" from "50%": anything in [0, 1] is taken as a
fraction.
"""

__all__ = [
    "PercentRule",
    "ValueCoercer",
    "to_number",
    "DEFAULT_PERCENTAGE_METRICS",
]

DEFAULT_PERCENTAGE_METRICS: frozenset[Metric] = frozenset({Metric.ACCURACY_INDEX})


class PercentRule(Enum):
    CONDITIONAL = "conditional"
    ALWAYS = "always"


def to_number(value: Any) -> float:
    """Parse a raw cell into a finite float, 0.0 when that is not possible."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0.0
        try:
            number = float(stripped)
        except ValueError:
            return 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass(frozen=True)
class ValueCoercer:
    """Metric-aware coercion of raw cell values."""
    percentage_metrics: frozenset[Metric] = DEFAULT_PERCENTAGE_METRICS
    percent_rule: PercentRule = PercentRule.CONDITIONAL

    @classmethod
    def from_keys(cls, keys: Iterable[str], percent_rule: str | PercentRule = PercentRule.CONDITIONAL) -> ValueCoercer:
        return cls(
            percentage_metrics=frozenset(Metric.from_key(k) for k in keys),
            percent_rule=PercentRule(percent_rule),
        )

    def is_percentage(self, metric: Metric) -> bool:
        return metric in self.percentage_metrics

    def coerce(self, value: Any, metric: Metric) -> float:
        number = to_number(value)
        if not self.is_percentage(metric):
            return number
        if self.percent_rule is PercentRule.ALWAYS:
            return number * 100
        if 0 <= number <= 1:
            return number * 100
        return number

    __call__ = coerce
