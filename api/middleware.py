# ============================================================================
# File: api/middleware.py
# ============================================================================

import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from core.logging import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Injects:
    - request_id (reuses an incoming X-Request-ID so RequestDesk calls can be correlated)
    - api_latency_ms

    The request id is also published to the logging context for the
    duration of the request.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        start_time = time.perf_counter()

        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-API-Latency-ms"] = str(latency_ms)

        logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({latency_ms}ms)")

        return response
