from __future__ import annotations


class BrewmonError(Exception):
    """Base class for errors raised by the records core."""


class ValidationError(BrewmonError):
    """Input rejected before any store interaction."""


class InvalidAggregationError(ValidationError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Unsupported aggregation function: {token!r}")
        self.token = token


class StoreError(BrewmonError):
    """The time-series store failed or rejected a request."""


class QueryExecutionError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass
