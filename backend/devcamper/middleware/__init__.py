"""
DevCamper API — Middleware Package
===================================

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [Security Headers]
            → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any other work
    2. Request ID: correlation id for every log line of the request
    3. Access Log: sees the request id and the final status/duration
    4. Security headers, compression and CORS decorate the response

Responses travel the chain in reverse.
"""

from devcamper.middleware.logging import RequestLoggingMiddleware
from devcamper.middleware.rate_limit import RateLimitMiddleware
from devcamper.middleware.request_id import RequestIDMiddleware, request_id_var
from devcamper.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "request_id_var",
]
