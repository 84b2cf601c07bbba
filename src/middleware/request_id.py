"""Request ID middleware for the operator API.

Reuses a caller-supplied ``X-Request-Id`` (so a seed job's log lines can be
correlated with the operator's own tooling) or assigns a fresh UUID4.  The ID
is echoed back in the response header and stored in a ``ContextVar`` for the
access log.

Add this middleware *last* via ``app.add_middleware`` so it runs outermost.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-Id"

# Defaults to "" so consumers never receive ``None``.
REQUEST_ID_CTX: ContextVar[str] = ContextVar("request_id", default="")

_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(incoming: str | None) -> str:
    """Return *incoming* if it is a short token of safe characters, else a new UUID4."""
    if incoming and _ACCEPTED_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = REQUEST_ID_CTX.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            REQUEST_ID_CTX.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
