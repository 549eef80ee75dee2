from __future__ import annotations

from typing import Any, Iterator, Protocol

from brewmon.models.record import SensorReading
from brewmon.query.plan import QueryPlan


class RecordRepository(Protocol):
    def ping(self) -> None: ...

    def write_reading(self, reading: SensorReading) -> None: ...

    def execute(self, plan: QueryPlan) -> Iterator[dict[str, Any]]: ...
