"""
ConnectPair Backend: Security Headers Middleware
=================================================

What:  Adds the standard hardening headers to every response.
How:   A fixed header set suited to a JSON API that is never framed or
       rendered as a page. HSTS is only sent in production, where the API
       sits behind TLS.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'none'",
}

HSTS_HEADER = "max-age=15552000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, enable_hsts: bool = False, **kwargs):
        super().__init__(app, **kwargs)
        self.headers = dict(DEFAULT_HEADERS)
        if enable_hsts:
            self.headers["Strict-Transport-Security"] = HSTS_HEADER

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        # Swagger UI loads its assets from a CDN
        if request.url.path in ("/docs", "/redoc"):
            del response.headers["Content-Security-Policy"]
        return response
