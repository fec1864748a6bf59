# tests/workflow/test_aggregate.py
"""
Testes da agregação de métricas entre splits.
"""

import math

import pytest

from flowengine.workflow.aggregate import aggregate_results


def _result(mse=None, stats=None):
    output_eval = {}
    if mse is not None:
        output_eval["mse"] = {"metrics": {"mse": mse}}
    if stats is not None:
        output_eval["summarystats"] = {"metrics": {"summary_stats": stats}}
    return {"output_eval": output_eval}


def test_scalar_metric_statistics():
    agg = aggregate_results({"1": _result(mse=1.0), "2": _result(mse=2.0), "3": _result(mse=3.0)})

    assert agg["mse"] == {"mean": 2.0, "sd": pytest.approx(1.0), "min": 1.0, "max": 3.0}


def test_nested_metric_statistics():
    agg = aggregate_results(
        {
            "1": _result(stats={"mean": 1.0, "sd": 0.5}),
            "2": _result(stats={"mean": 3.0, "sd": 1.5}),
        }
    )

    assert agg["summary_stats"]["mean"]["mean"] == pytest.approx(2.0)
    assert agg["summary_stats"]["sd"]["mean"] == pytest.approx(1.0)
    assert set(agg["summary_stats"]["mean"]) == {"mean", "sd"}


def test_single_result_has_nan_sd():
    agg = aggregate_results({"fold1": _result(mse=4.0)})

    assert agg["mse"]["mean"] == 4.0
    assert math.isnan(agg["mse"]["sd"])


def test_nan_values_are_dropped():
    agg = aggregate_results({"1": _result(mse=float("nan")), "2": _result(mse=2.0)})

    assert agg["mse"]["mean"] == 2.0
    assert agg["mse"]["min"] == agg["mse"]["max"] == 2.0


def test_results_without_evaluation_are_ignored():
    agg = aggregate_results({"1": {"split_id": "1"}, "2": "opaque", "3": _result(mse=1.0)})

    assert list(agg) == ["mse"]


def test_empty_results_aggregate_to_empty_mapping():
    assert aggregate_results({}) == {}
