from __future__ import annotations

import pytest

from metric_catalog.models.metric import Metric
from metric_catalog.models.period_record import PeriodRecord


def test_missing_metric_reads_as_zero():
    rec = PeriodRecord(entity="A", period=1, exercise_index=3.0)
    assert rec.get(Metric.EXERCISE_INDEX) == 3.0
    assert rec.get(Metric.ACCURACY_INDEX) == 0.0
    assert rec.get(Metric.ACCURACY_INDEX, default=-1) == -1
    assert rec.has(Metric.EXERCISE_INDEX)
    assert not rec.has(Metric.ACCESS_COUNT)


def test_present_metrics_only_lists_populated_slots():
    rec = PeriodRecord(entity="A", period=1, accuracy_index=0.0)
    assert rec.present_metrics() == {Metric.ACCURACY_INDEX: 0.0}


def test_with_value_returns_new_record():
    rec = PeriodRecord(entity="A", period=1)
    updated = rec.with_value(Metric.ACCESS_COUNT, 80.0)
    assert rec.access_count is None
    assert updated.access_count == 80.0
    assert updated.entity == "A" and updated.period == 1


def test_period_record_is_frozen():
    rec = PeriodRecord(entity="A", period=1)
    with pytest.raises(AttributeError):
        rec.period = 2
