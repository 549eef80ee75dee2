from __future__ import annotations

from datetime import datetime, timezone

import pytest

from brewmon.core.errors import QueryExecutionError, StoreWriteError
from brewmon.models.record import SensorReading
from brewmon.query.aggregations import AggregationFunction
from brewmon.query.plan import Duration, EntityScope, QueryBuilder, TimeRange
from brewmon.repositories.influx import InfluxRecordRepository
from tests.fakes import FakeInfluxClient, FakeQueryApi, FakeWriteApi


def _repo(client: FakeInfluxClient) -> InfluxRecordRepository:
    return InfluxRecordRepository(
        client=client, org="test", bucket="brewing", measurement="sensor_data"
    )


def test_write_reading_builds_tagged_point(reading: SensorReading) -> None:
    write_api = FakeWriteApi()
    _repo(FakeInfluxClient(write_api=write_api)).write_reading(reading)

    (write,) = write_api.writes
    assert write["bucket"] == "brewing"
    assert write["org"] == "test"
    line = write["record"].to_line_protocol()
    assert line.startswith("sensor_data,device_id=sensor_123 ")
    assert "temperature=18.5" in line
    assert "humidity=55" in line
    assert 'location="Room 1"' in line
    assert line.endswith(" 1706745600000000000")


def test_naive_timestamp_is_written_as_utc(reading: SensorReading) -> None:
    write_api = FakeWriteApi()
    naive = SensorReading(
        device_id=reading.device_id,
        temperature=reading.temperature,
        humidity=reading.humidity,
        location=reading.location,
        timestamp_sampled=datetime(2024, 2, 1),
    )
    _repo(FakeInfluxClient(write_api=write_api)).write_reading(naive)
    assert write_api.writes[0]["record"].to_line_protocol().endswith(" 1706745600000000000")


def test_write_failure_is_wrapped(reading: SensorReading) -> None:
    client = FakeInfluxClient(write_api=FakeWriteApi(error=OSError("connection refused")))
    with pytest.raises(StoreWriteError):
        _repo(client).write_reading(reading)


def test_execute_renders_and_streams(builder: QueryBuilder) -> None:
    ts = datetime(2024, 2, 2, tzinfo=timezone.utc)
    query_api = FakeQueryApi([{"_time": ts, "device_id": "sensor_123", "mean_temperature": 18.5}])
    plan = builder.build(
        EntityScope.for_device("sensor_123"),
        TimeRange.parse("-7d"),
        [AggregationFunction.MEAN],
        Duration.parse("1d"),
    )

    rows = list(_repo(FakeInfluxClient(query_api=query_api)).execute(plan))

    assert rows == [{"_time": ts, "device_id": "sensor_123", "mean_temperature": 18.5}]
    (query,) = query_api.queries
    assert "aggregateWindow(every: 1d, fn: mean, createEmpty: false)" in query


def test_execute_call_failure_is_wrapped(builder: QueryBuilder) -> None:
    client = FakeInfluxClient(query_api=FakeQueryApi([], error=OSError("unreachable")))
    plan = builder.build(EntityScope.all_devices(), TimeRange.parse("-1d"), [])
    with pytest.raises(QueryExecutionError):
        _repo(client).execute(plan)


def test_execute_stream_failure_is_wrapped(builder: QueryBuilder) -> None:
    query_api = FakeQueryApi([{"_time": 1}], stream_error=RuntimeError("broken chunk"))
    plan = builder.build(EntityScope.all_devices(), TimeRange.parse("-1d"), [])
    rows = _repo(FakeInfluxClient(query_api=query_api)).execute(plan)

    assert next(rows) == {"_time": 1}
    with pytest.raises(QueryExecutionError):
        next(rows)


def test_ping_delegates_to_client() -> None:
    client = FakeInfluxClient()
    _repo(client).ping()
    assert client.pinged
