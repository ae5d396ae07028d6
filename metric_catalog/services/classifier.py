from __future__ import annotations

from ..models.metric import THRESHOLDS, Metric, ThresholdSpec, Tier

"""Threshold classification of metric values (on target / warning / below target)."""

__all__ = [
    "threshold_for",
    "tier_for",
]


def threshold_for(metric: Metric) -> ThresholdSpec:
    return THRESHOLDS[metric]


def tier_for(metric: Metric, value: float) -> Tier:
    """Tier of a value: >= target is on target, >= warning is a warning, else below."""
    threshold = threshold_for(metric)
    if value >= threshold.target:
        return Tier.ON_TARGET
    if value >= threshold.warning:
        return Tier.WARNING
    return Tier.BELOW_TARGET
