"""
Request logging middleware.
"""
import logging
import time

from fastapi import Request

logger = logging.getLogger(__name__)


async def request_logging_middleware(request: Request, call_next):
    """
    Log method, path, status and duration of every request.

    Exceptions are logged and re-raised so FastAPI's handlers still run.
    """
    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.exception(f"[REQUEST] {request.method} {request.url.path} failed after {elapsed_ms}ms")
        raise

    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    response.headers["X-Response-Time-Ms"] = str(elapsed_ms)
    logger.info(f"[REQUEST] {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)")
    return response
