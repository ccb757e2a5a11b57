"""Per-request id, timing headers and the ``request.completed`` log line."""

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.config import get_settings
from core.logger import bind_contextvars, clear_contextvars, get_logger
from core.wide_event import clear_wide_event, get_wide_event, init_wide_event

logger = get_logger(__name__)

SLOW_REQUEST_THRESHOLD_MS = 1000


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _should_log(event: dict) -> bool:
    """Successful fast requests stay quiet; everything else gets a line."""
    status_code = event.get("http_status_code")
    return (
        status_code is None
        or status_code >= 400
        or event["duration_ms"] > SLOW_REQUEST_THRESHOLD_MS
        or bool(event.get("db_query_error"))
    )


class RequestTimingMiddleware:
    """Pure ASGI middleware wrapping every HTTP request to the ledger.

    Tags the response with ``x-request-id`` and ``x-request-duration-ms``,
    binds the request id into the log context, and logs the accumulated
    wide event once the last body chunk has been sent.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        request_id = str(uuid.uuid4())
        event = init_wide_event()
        event.update(
            service_name=get_settings().service_name,
            request_id=request_id,
            http_method=scope.get("method"),
            http_path=scope.get("path"),
        )
        bind_contextvars(request_id=request_id)

        def finish(**fields) -> None:
            route = scope.get("route")
            event.update(
                http_route=getattr(route, "path", None) or scope.get("path"),
                duration_ms=_elapsed_ms(start),
                **fields,
            )
            if _should_log(event):
                logger.info("request.completed", **get_wide_event())
            clear_wide_event()
            clear_contextvars()

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                event["http_status_code"] = message["status"]
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-request-id", request_id.encode()),
                    (b"x-request-duration-ms", str(_elapsed_ms(start)).encode()),
                ]
            await send(message)
            if message["type"] == "http.response.body" and not message.get(
                "more_body", False
            ):
                finish()

        try:
            await self.app(scope, receive, send_with_headers)
        except Exception as exc:
            finish(exception_type=type(exc).__name__)
            raise
