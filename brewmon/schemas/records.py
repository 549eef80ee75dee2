from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from brewmon.models.record import SensorReading


class SensorReadingPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    device_id: str = Field(alias="deviceId", min_length=1, max_length=128)
    temperature: float
    humidity: float
    location: str
    timestamp_sampled: datetime = Field(alias="timestampSampled")

    @field_validator("device_id")
    @classmethod
    def _device_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("deviceId must not be blank")
        return v

    @field_validator("timestamp_sampled")
    @classmethod
    def _timestamp_to_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_validator("temperature", "humidity")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v

    def to_reading(self) -> SensorReading:
        return SensorReading(
            device_id=self.device_id,
            temperature=self.temperature,
            humidity=self.humidity,
            location=self.location,
            timestamp_sampled=self.timestamp_sampled,
        )


class RecordWriteResponse(BaseModel):
    message: str
    data: SensorReadingPayload


class RecordsResponse(BaseModel):
    data: list[dict[str, Any]]
