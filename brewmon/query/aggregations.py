from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from brewmon.core.errors import InvalidAggregationError


class AggregationFunction(str, Enum):
    SUM = "sum"
    MAX = "max"
    MEAN = "mean"
    MIN = "min"


SUPPORTED_AGGREGATIONS: tuple[AggregationFunction, ...] = tuple(AggregationFunction)

METRICS: tuple[str, ...] = ("temperature", "humidity")


class AggregateKey(NamedTuple):
    """Identifies one aggregated output column, e.g. ``mean_temperature``."""

    function: AggregationFunction
    metric: str

    @property
    def field_name(self) -> str:
        return f"{self.function.value}_{self.metric}"


def aggregate_keys(functions: list[AggregationFunction]) -> list[AggregateKey]:
    return [AggregateKey(fn, metric) for fn in functions for metric in METRICS]


def normalize(raw: str | None) -> list[AggregationFunction]:
    """Split a comma-delimited aggregation token into supported functions.

    ``None`` or a blank string means no aggregation (raw fetch). Names are
    case-insensitive; repeats keep their first position.
    """
    if raw is None or not raw.strip():
        return []

    functions: list[AggregationFunction] = []
    for token in raw.split(","):
        name = token.strip().lower()
        try:
            fn = AggregationFunction(name)
        except ValueError:
            raise InvalidAggregationError(token.strip()) from None
        if fn not in functions:
            functions.append(fn)
    return functions
