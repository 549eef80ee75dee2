from __future__ import annotations

import logging
from typing import Annotated, Callable, Iterator

from fastapi import APIRouter, Depends, HTTPException, Query, status

from brewmon.api.deps import get_record_service
from brewmon.core.errors import StoreError, StoreWriteError, ValidationError
from brewmon.query.shaper import OutputRecord
from brewmon.schemas.records import RecordsResponse, RecordWriteResponse, SensorReadingPayload
from brewmon.services.records import RecordService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records")

Service = Annotated[RecordService, Depends(get_record_service)]
Start = Annotated[str | None, Query(description="Range start, e.g. '-30d' or an RFC 3339 time")]
Stop = Annotated[str | None, Query(description="Range stop, RFC 3339 time or 'now'")]


def _collect(run: Callable[[], Iterator[OutputRecord]]) -> RecordsResponse:
    # Rows are consumed here so a store error mid-stream still becomes a 500.
    try:
        data = list(run())
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve data",
        ) from e
    logger.info("Returning records", extra={"row_count": len(data)})
    return RecordsResponse(data=data)


@router.post("", response_model=RecordWriteResponse)
def create_record(payload: SensorReadingPayload, service: Service) -> RecordWriteResponse:
    try:
        service.ingest(payload.to_reading())
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except StoreWriteError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store data",
        ) from e
    return RecordWriteResponse(message="Data stored successfully", data=payload)


@router.get("", response_model=RecordsResponse)
def list_records(service: Service, start: Start = None, stop: Stop = None) -> RecordsResponse:
    return _collect(lambda: service.list_all(start=start, stop=stop))


@router.get("/devices/{device_id}", response_model=RecordsResponse)
def list_device_records(
    device_id: str,
    service: Service,
    start: Start = None,
    stop: Stop = None,
    aggr: Annotated[
        str | None, Query(description="Aggregation functions, e.g. 'mean' or 'mean,max,min'")
    ] = None,
    agg_freq: Annotated[
        str | None, Query(alias="aggFreq", description="Aggregation window, e.g. '1d'")
    ] = None,
) -> RecordsResponse:
    return _collect(
        lambda: service.list_by_device(
            device_id, start=start, stop=stop, aggr=aggr, window=agg_freq
        )
    )


@router.get("/locations/{location}", response_model=RecordsResponse)
def list_location_records(
    location: str, service: Service, start: Start = None, stop: Stop = None
) -> RecordsResponse:
    return _collect(lambda: service.list_by_location(location, start=start, stop=stop))
