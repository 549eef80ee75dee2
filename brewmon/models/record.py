from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SensorReading:
    device_id: str
    temperature: float
    humidity: float
    location: str
    timestamp_sampled: datetime
