"""IOU Ledger API application: wiring, startup and error mapping."""

import asyncio
import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.database import (
    create_engine,
    create_session_maker,
    create_tables,
    dispose_engine,
    init_db,
)
from core.logger import configure_logging
from core.telemetry import RequestTimingMiddleware
from routes import health_router, ious_router

STARTUP_TIMEOUT_SECONDS = 60

configure_logging()
logger = logging.getLogger(__name__)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything no route mapped becomes a 500 with the failure's own message."""
    logger.exception(
        "iou.request.failed",
        extra={"exc_type": type(exc).__name__, "path": request.url.path},
    )
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc) or type(exc).__name__},
    )


async def invalid_request_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed ids and bodies: 422 with a trimmed error list."""
    errors = [
        {"type": err["type"], "loc": list(err["loc"]), "msg": err["msg"]}
        for err in exc.errors()
    ]
    logger.info(
        "iou.request.invalid",
        extra={"path": request.url.path, "error_count": len(errors)},
    )
    return JSONResponse(status_code=422, content={"detail": errors})


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Connect to the database (and create tables if configured) before serving.

    A startup failure aborts the process; there is no degraded mode.
    """
    settings = get_settings()
    engine = create_engine()
    app.state.engine = engine
    app.state.session_maker = create_session_maker(engine)

    try:
        async with asyncio.timeout(STARTUP_TIMEOUT_SECONDS):
            await init_db(engine)
            if settings.db_create_tables:
                await create_tables(engine)
    except Exception:
        logger.exception("iou.startup.failed")
        await dispose_engine(engine)
        raise
    logger.info(
        "iou.startup.complete", extra={"create_tables": settings.db_create_tables}
    )

    try:
        yield
    finally:
        await dispose_engine(engine)


def create_app() -> fastapi.FastAPI:
    settings = get_settings()
    show_docs = settings.enable_docs or settings.debug

    application = fastapi.FastAPI(
        title="IOU Ledger API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if show_docs else None,
        redoc_url="/redoc" if show_docs else None,
        openapi_url="/openapi.json" if show_docs else None,
    )
    application.add_exception_handler(RequestValidationError, invalid_request_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)
    application.add_middleware(RequestTimingMiddleware)
    application.include_router(health_router)
    application.include_router(ious_router)
    return application


app = create_app()
