from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from brewmon.core.errors import ValidationError
from brewmon.query.aggregations import METRICS, AggregationFunction

_DURATION_RE = re.compile(r"^-?(?:\d+(?:ns|us|µs|ms|s|m|h|d|w))+$")
_DURATION_PART_RE = re.compile(r"(\d+)(ns|us|µs|ms|s|m|h|d|w)")

_UNIT_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "ms": 1_000_000,
    "s": 10**9,
    "m": 60 * 10**9,
    "h": 3_600 * 10**9,
    "d": 86_400 * 10**9,
    "w": 604_800 * 10**9,
}

_NOW_LITERALS = {"now", "now()"}


@dataclass(frozen=True)
class Duration:
    """A Flux duration literal such as ``1d``, ``-30d`` or ``1h30m``."""

    literal: str

    @classmethod
    def parse(cls, value: str) -> Duration:
        candidate = value.strip()
        if not _DURATION_RE.match(candidate):
            raise ValidationError(f"Invalid duration: {value!r}")
        return cls(candidate)

    @property
    def is_negative(self) -> bool:
        return self.literal.startswith("-")

    @property
    def nanoseconds(self) -> int:
        total = sum(
            int(amount) * _UNIT_NANOSECONDS[unit]
            for amount, unit in _DURATION_PART_RE.findall(self.literal)
        )
        return -total if self.is_negative else total

    def to_timedelta(self) -> timedelta:
        # timedelta resolution is one microsecond.
        return timedelta(microseconds=self.nanoseconds // 1_000)


@dataclass(frozen=True)
class TimeBound:
    """One end of a query range: ``now``, an offset from now, or an instant."""

    offset: Duration | None = None
    at: datetime | None = None

    @classmethod
    def parse(cls, value: str) -> TimeBound:
        candidate = value.strip()
        if candidate.lower() in _NOW_LITERALS:
            return cls()
        if _DURATION_RE.match(candidate):
            return cls(offset=Duration(candidate))
        try:
            dt = datetime.fromisoformat(candidate.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid time expression: {value!r}") from None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return cls(at=dt.astimezone(timezone.utc))

    @property
    def is_now(self) -> bool:
        return self.offset is None and self.at is None

    def resolve(self, now: datetime) -> datetime:
        if self.at is not None:
            return self.at
        if self.offset is not None:
            return now + self.offset.to_timedelta()
        return now


@dataclass(frozen=True)
class TimeRange:
    start: TimeBound
    stop: TimeBound

    @classmethod
    def parse(cls, start: str, stop: str | None = None) -> TimeRange:
        time_range = cls(TimeBound.parse(start), TimeBound.parse(stop or "now"))
        now = datetime.now(tz=timezone.utc)
        if time_range.start.resolve(now) >= time_range.stop.resolve(now):
            raise ValidationError("'start' must be before 'stop'")
        return time_range


class ScopeKind(str, Enum):
    ALL = "all"
    DEVICE = "device"
    LOCATION = "location"


@dataclass(frozen=True)
class EntityScope:
    kind: ScopeKind = ScopeKind.ALL
    value: str | None = None

    @classmethod
    def all_devices(cls) -> EntityScope:
        return cls()

    @classmethod
    def for_device(cls, device_id: str) -> EntityScope:
        if not device_id or not device_id.strip():
            raise ValidationError("deviceId parameter is required")
        return cls(ScopeKind.DEVICE, device_id)

    @classmethod
    def for_location(cls, location: str) -> EntityScope:
        if not location or not location.strip():
            raise ValidationError("location parameter is required")
        return cls(ScopeKind.LOCATION, location)


class QueryMode(str, Enum):
    RAW = "raw"
    SINGLE_AGGREGATION = "single_aggregation"
    MULTI_AGGREGATION = "multi_aggregation"


@dataclass(frozen=True)
class AggregateStage:
    function: AggregationFunction
    every: Duration

    @property
    def name(self) -> str:
        return f"{self.function.value}_data"

    @property
    def field_prefix(self) -> str:
        return f"{self.function.value}_"


@dataclass(frozen=True)
class QueryPlan:
    bucket: str
    measurement: str
    scope: EntityScope
    time_range: TimeRange
    fields: tuple[str, ...] = ()
    stages: tuple[AggregateStage, ...] = ()

    @property
    def mode(self) -> QueryMode:
        if not self.stages:
            return QueryMode.RAW
        if len(self.stages) == 1:
            return QueryMode.SINGLE_AGGREGATION
        return QueryMode.MULTI_AGGREGATION

    @property
    def aggregations(self) -> list[AggregationFunction]:
        return [stage.function for stage in self.stages]


class QueryBuilder:
    def __init__(self, *, bucket: str, measurement: str) -> None:
        self._bucket = bucket
        self._measurement = measurement

    def build(
        self,
        scope: EntityScope,
        time_range: TimeRange,
        aggregations: list[AggregationFunction],
        window: Duration | None = None,
    ) -> QueryPlan:
        if not aggregations:
            return QueryPlan(
                bucket=self._bucket,
                measurement=self._measurement,
                scope=scope,
                time_range=time_range,
            )

        if scope.kind is ScopeKind.LOCATION:
            # location is stored as a field, so it does not survive aggregateWindow.
            raise ValidationError("Aggregation is not supported for location queries")
        if window is None:
            raise ValidationError("An aggregation window is required")
        if window.nanoseconds <= 0:
            raise ValidationError(f"Aggregation window must be positive: {window.literal!r}")

        return QueryPlan(
            bucket=self._bucket,
            measurement=self._measurement,
            scope=scope,
            time_range=time_range,
            fields=METRICS,
            stages=tuple(AggregateStage(fn, window) for fn in aggregations),
        )
