"""
ConnectPair Backend: Request ID Middleware
===========================================

What:  Tags each request with a correlation ID, echoed in X-Request-ID.
How:   A well-formed client-supplied X-Request-ID (a proxy's, typically) is
       kept; anything else is replaced with 8 hex characters. The ID sits in
       a ContextVar so any log line written during the request can read it,
       including the exception handlers in main.py.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"

# Each concurrent request on the event loop sees its own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client-supplied IDs outside this alphabet are replaced
_VALID_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(supplied: Optional[str]) -> str:
    if supplied and _VALID_ID.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(HEADER))
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[HEADER] = rid
        return response
