from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from brewmon.core.config import Settings
from brewmon.query.plan import QueryBuilder
from brewmon.repositories.base import RecordRepository
from brewmon.repositories.influx import InfluxRecordRepository
from brewmon.services.records import RecordService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_record_repository(
    request: Request, settings: Annotated[Settings, Depends(get_settings)]
) -> RecordRepository:
    return InfluxRecordRepository(
        client=request.app.state.influx_client,
        org=settings.influx_org,
        bucket=settings.influx_bucket,
        measurement=settings.influx_measurement,
    )


def get_query_builder(settings: Annotated[Settings, Depends(get_settings)]) -> QueryBuilder:
    return QueryBuilder(bucket=settings.influx_bucket, measurement=settings.influx_measurement)


def get_record_service(
    repo: Annotated[RecordRepository, Depends(get_record_repository)],
    builder: Annotated[QueryBuilder, Depends(get_query_builder)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RecordService:
    return RecordService(
        repo,
        builder,
        default_start=settings.default_range_start,
        default_window=settings.default_window,
    )
