"""Timing instrumentation shared by the repository classes."""

import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from core.logger import get_logger
from core.wide_event import set_wide_event_fields

logger = get_logger(__name__)

SLOW_QUERY_THRESHOLD_MS = 500

P = ParamSpec("P")
R = TypeVar("R")


def log_slow_query(
    operation_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Tag the request's wide event when a store call is slow or fails.

    Failures are recorded and re-raised unchanged, so the service layer
    still decides how to report them.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def timed(*args: P.args, **kwargs: P.kwargs) -> R:
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                set_wide_event_fields(
                    db_query_error=True,
                    db_operation=operation_name,
                    db_error_type=type(e).__name__,
                    db_error=str(e),
                )
                raise

            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            if elapsed_ms > SLOW_QUERY_THRESHOLD_MS:
                logger.debug("iou.store.slow", operation=operation_name, ms=elapsed_ms)
                set_wide_event_fields(
                    db_slow_query=True,
                    db_operation=operation_name,
                    db_duration_ms=elapsed_ms,
                )
            return result

        return timed

    return decorator
