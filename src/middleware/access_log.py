"""Structured JSON access log for the operator API.

One record per request with ``method``, ``path``, ``status``, ``duration_ms``,
``client`` and ``request_id``.  Server errors are logged at ``ERROR``, client
errors at ``WARNING``, everything else at ``INFO``.
"""

import json
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.middleware.request_id import REQUEST_ID_CTX

logger = logging.getLogger(__name__)


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.log(
            level_for_status(response.status_code),
            json.dumps(
                {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "client": request.client.host if request.client else None,
                    "request_id": REQUEST_ID_CTX.get(),
                }
            ),
        )
        return response
