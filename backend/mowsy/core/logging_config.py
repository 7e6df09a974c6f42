"""Logging setup and per-request access logging."""

import logging
import time

from fastapi import Request

logger = logging.getLogger("mowsy.access")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def log_requests(request: Request, call_next):
    """Log method, path, status, latency and client IP for every request."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    client_ip = request.client.host if request.client else "-"
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        client_ip,
    )
    return response
