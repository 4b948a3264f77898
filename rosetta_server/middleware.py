"""
Request logging middleware.
"""
import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status and latency of every request.
    """
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        elapsed = (time.time() - start_time) * 1000
        if response.status_code >= 500:
            logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f}ms)")
        else:
            logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f}ms)")
        return response
