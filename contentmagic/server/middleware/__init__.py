"""
Middleware modules for the ContentMagic server.

Request context (request id, timing, access logging, general rate limit) and
security response headers.
"""

from .request_context import RequestContextMiddleware
from .security_headers import SecurityHeadersMiddleware

__all__ = ["RequestContextMiddleware", "SecurityHeadersMiddleware"]
