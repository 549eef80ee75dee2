from __future__ import annotations

import pytest

from brewmon.core.errors import InvalidAggregationError, ValidationError
from brewmon.query.aggregations import AggregationFunction, aggregate_keys, normalize


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_empty_input_means_raw_fetch(raw: str | None) -> None:
    assert normalize(raw) == []


def test_normalize_keeps_order_and_case_insensitive() -> None:
    assert normalize(" Mean, max ,MIN") == [
        AggregationFunction.MEAN,
        AggregationFunction.MAX,
        AggregationFunction.MIN,
    ]


def test_normalize_collapses_repeats() -> None:
    assert normalize("sum,mean,sum") == [AggregationFunction.SUM, AggregationFunction.MEAN]


@pytest.mark.parametrize("raw", ["median", "mean,count", "mean,,max", "mean,"])
def test_unknown_token_is_rejected(raw: str) -> None:
    with pytest.raises(InvalidAggregationError):
        normalize(raw)


def test_invalid_aggregation_is_a_validation_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize("p95")
    assert excinfo.value.token == "p95"


def test_aggregate_keys_cover_both_metrics() -> None:
    names = [k.field_name for k in aggregate_keys([AggregationFunction.MEAN, AggregationFunction.MAX])]
    assert names == ["mean_temperature", "mean_humidity", "max_temperature", "max_humidity"]
