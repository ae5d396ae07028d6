from __future__ import annotations

import unicodedata

import pytest

from metric_catalog.models.metric import THRESHOLDS, Metric, resolve_metric


@pytest.mark.parametrize(
    "name,expected",
    [
        ("exercise index", Metric.EXERCISE_INDEX),
        ("Exercise Index", Metric.EXERCISE_INDEX),
        ("  accuracy index ", Metric.ACCURACY_INDEX),
        ("access count (period)", Metric.ACCESS_COUNT),
        ("access_count", Metric.ACCESS_COUNT),
        ("Índice de exercícios", Metric.EXERCISE_INDEX),
        ("Acessos no período", Metric.ACCESS_COUNT),
        ("ÍNDICE DE ACERTO", Metric.ACCURACY_INDEX),
    ],
)
def test_resolve_metric(name, expected):
    assert resolve_metric(name) is expected


def test_resolve_metric_ignores_unicode_composition():
    decomposed = unicodedata.normalize("NFD", "Índice de acerto")
    assert resolve_metric(decomposed) is Metric.ACCURACY_INDEX


@pytest.mark.parametrize("name", ["Resumo", "", None, 3])
def test_unregistered_names_resolve_to_none(name):
    assert resolve_metric(name) is None


def test_from_key_raises_for_unknown():
    with pytest.raises(KeyError):
        Metric.from_key("Resumo")


def test_every_metric_has_label_aliases_and_thresholds():
    for m in Metric:
        assert m.label
        assert m.aliases
        assert m in THRESHOLDS
