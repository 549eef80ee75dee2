from fastapi import APIRouter

from brewmon.api.routes import health, records

api_router = APIRouter()
api_router.include_router(records.router, tags=["records"])
api_router.include_router(health.router, tags=["meta"])
