"""
Middleware to add trace_id to each request.

The trace_id ties together every log line written while serving one
request and is echoed back to the caller in the X-Trace-ID header.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from sidrotator.core.logging import logger
from sidrotator.core.trace_context import trace_id_context
from sidrotator.exception_handlers import general_exception_handler

TRACE_ID_HEADER = "X-Trace-ID"


class TraceIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique trace_id to each request.

    Flow:
    1. Request arrives -> generates UUID as trace_id
    2. Stores trace_id in contextvars
    3. All logs automatically include the trace_id
    4. Unexpected exceptions become a 500 Problem Detail inside the trace
    5. Response includes X-Trace-ID header
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Processes the request by adding trace_id.

        Args:
            request: HTTP request
            call_next: Next middleware/handler

        Returns:
            Response with X-Trace-ID header
        """
        trace_id = str(uuid.uuid4())
        token = trace_id_context.set(trace_id)
        started = time.perf_counter()

        logger.info(f"Request started: {request.method} {request.url.path}")

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await general_exception_handler(request, exc)
            response.headers[TRACE_ID_HEADER] = trace_id

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"Request completed: {request.method} {request.url.path} - "
                f"Status: {response.status_code} ({elapsed_ms:.1f} ms)"
            )
            return response

        finally:
            trace_id_context.reset(token)


__all__ = ["TraceIDMiddleware", "TRACE_ID_HEADER"]
