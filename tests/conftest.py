from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from brewmon.api import deps
from brewmon.core.config import Settings
from brewmon.factory import create_app
from brewmon.models.record import SensorReading
from brewmon.query.plan import QueryBuilder
from brewmon.services.records import RecordService
from tests.fakes import FakeRecordRepository


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        log_level="DEBUG",
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        influx_url="http://example.com:8086",
        influx_token="test-token-1234567890",
        influx_org="test",
        influx_bucket="brewing",
        influx_measurement="sensor_data",
        influx_timeout_ms=5000,
    )


@pytest.fixture()
def repo() -> FakeRecordRepository:
    return FakeRecordRepository()


@pytest.fixture()
def builder() -> QueryBuilder:
    return QueryBuilder(bucket="brewing", measurement="sensor_data")


@pytest.fixture()
def service(repo: FakeRecordRepository, builder: QueryBuilder) -> RecordService:
    return RecordService(repo, builder)


@pytest.fixture()
def client(settings: Settings, repo: FakeRecordRepository) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_record_repository] = lambda: repo
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def reading() -> SensorReading:
    return SensorReading(
        device_id="sensor_123",
        temperature=18.5,
        humidity=55.0,
        location="Room 1",
        timestamp_sampled=datetime(2024, 2, 1, tzinfo=timezone.utc),
    )
