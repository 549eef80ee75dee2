from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from brewmon.api.deps import get_record_repository
from brewmon.repositories.base import RecordRepository

router = APIRouter()


@router.get("/health")
def health(
    repo: Annotated[RecordRepository, Depends(get_record_repository)],
) -> dict[str, str]:
    try:
        repo.ping()
    except Exception as e:  # noqa: BLE001 - expose as 503 without leaking internals
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="InfluxDB unavailable",
        ) from e
    return {"status": "ok"}
