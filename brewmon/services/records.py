from __future__ import annotations

import logging
from typing import Iterator

from brewmon.core.errors import ValidationError
from brewmon.models.record import SensorReading
from brewmon.query.aggregations import normalize
from brewmon.query.plan import Duration, EntityScope, QueryBuilder, TimeRange
from brewmon.query.shaper import OutputRecord, shape
from brewmon.repositories.base import RecordRepository

logger = logging.getLogger(__name__)

HUMIDITY_MIN = 0.0
HUMIDITY_MAX = 100.0


class RecordService:
    def __init__(
        self,
        repo: RecordRepository,
        builder: QueryBuilder,
        *,
        default_start: str = "-30d",
        default_window: str = "1d",
    ) -> None:
        self._repo = repo
        self._builder = builder
        self._default_start = default_start
        self._default_window = default_window

    def ingest(self, reading: SensorReading) -> SensorReading:
        if not HUMIDITY_MIN <= reading.humidity <= HUMIDITY_MAX:
            raise ValidationError("Humidity must be in range [0.0, 100.0]")
        self._repo.write_reading(reading)
        logger.info("Stored reading", extra={"device_id": reading.device_id})
        return reading

    def list_all(
        self, *, start: str | None = None, stop: str | None = None
    ) -> Iterator[OutputRecord]:
        return self._query(EntityScope.all_devices(), start=start, stop=stop)

    def list_by_device(
        self,
        device_id: str,
        *,
        start: str | None = None,
        stop: str | None = None,
        aggr: str | None = None,
        window: str | None = None,
    ) -> Iterator[OutputRecord]:
        return self._query(
            EntityScope.for_device(device_id), start=start, stop=stop, aggr=aggr, window=window
        )

    def list_by_location(
        self, location: str, *, start: str | None = None, stop: str | None = None
    ) -> Iterator[OutputRecord]:
        return self._query(EntityScope.for_location(location), start=start, stop=stop)

    def _query(
        self,
        scope: EntityScope,
        *,
        start: str | None,
        stop: str | None,
        aggr: str | None = None,
        window: str | None = None,
    ) -> Iterator[OutputRecord]:
        aggregations = normalize(aggr)
        time_range = TimeRange.parse(start or self._default_start, stop)
        every = Duration.parse(window or self._default_window) if aggregations else None
        plan = self._builder.build(scope, time_range, aggregations, every)

        logger.info(
            "Running records query",
            extra={
                "scope": scope.kind.value,
                "mode": plan.mode.value,
                "aggregations": ",".join(fn.value for fn in aggregations) or None,
                "window": every.literal if every else None,
            },
        )
        return shape(self._repo.execute(plan), plan.mode, plan.aggregations)
