"""Liveness and readiness endpoints."""

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.config import get_settings
from core.database import check_db_connection
from schemas import HealthResponse

router = APIRouter(tags=["health"])

DB_UNAVAILABLE = "Database unavailable"


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy", service=get_settings().service_name)


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"description": DB_UNAVAILABLE}},
)
async def ready(request: Request) -> HealthResponse:
    """200 while the IOU store answers a trivial query, 503 otherwise.

    Startup either finishes initializing the store or aborts, so a serving
    process only needs the live connectivity check.
    """
    try:
        await check_db_connection(request.app.state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=DB_UNAVAILABLE
        ) from e

    return HealthResponse(status="ready", service=get_settings().service_name)
