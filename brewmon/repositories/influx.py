from __future__ import annotations

import logging
from datetime import timezone
from typing import Any, Iterable, Iterator

from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.flux_table import FluxRecord
from influxdb_client.client.write_api import SYNCHRONOUS

from brewmon.core.errors import QueryExecutionError, StoreWriteError
from brewmon.models.record import SensorReading
from brewmon.query.flux import render
from brewmon.query.plan import QueryPlan

logger = logging.getLogger(__name__)


class InfluxRecordRepository:
    def __init__(
        self,
        *,
        client: InfluxDBClient,
        org: str,
        bucket: str,
        measurement: str,
    ) -> None:
        self._client = client
        self._org = org
        self._bucket = bucket
        self._measurement = measurement

    def ping(self) -> None:
        self._client.ping()

    def write_reading(self, reading: SensorReading) -> None:
        ts = reading.timestamp_sampled
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)

        point = (
            Point(self._measurement)
            .tag("device_id", reading.device_id)
            .field("temperature", float(reading.temperature))
            .field("humidity", float(reading.humidity))
            .field("location", reading.location)
            .time(ts, WritePrecision.NS)
        )

        try:
            write_api = self._client.write_api(write_options=SYNCHRONOUS)
            write_api.write(bucket=self._bucket, org=self._org, record=point)
        except Exception as e:  # noqa: BLE001 - normalize storage failures
            logger.exception("Error writing to database", extra={"device_id": reading.device_id})
            raise StoreWriteError("Failed to store data") from e

    def execute(self, plan: QueryPlan) -> Iterator[dict[str, Any]]:
        """Run ``plan`` and return its rows lazily.

        Errors raised while the caller is consuming rows are reported as
        QueryExecutionError too, so rows already read must be discarded.
        """
        query = render(plan)
        logger.debug("QUERY: %s", query, extra={"mode": plan.mode.value})
        try:
            records = self._client.query_api().query_stream(query=query, org=self._org)
        except Exception as e:  # noqa: BLE001 - normalize storage failures
            logger.exception("Error querying data", extra={"mode": plan.mode.value})
            raise QueryExecutionError("Failed to retrieve data") from e
        return _stream_rows(records)


def _stream_rows(records: Iterable[FluxRecord]) -> Iterator[dict[str, Any]]:
    try:
        for record in records:
            yield dict(record.values)
    except Exception as e:  # noqa: BLE001 - normalize storage failures
        logger.exception("Query error while reading results")
        raise QueryExecutionError("Failed to process data") from e
