"""
Project middleware, referenced from ``MIDDLEWARE`` by its package path,
e.g. ``affiliatexchange.middleware.RateLimitMiddleware``.
"""

from .security import RateLimitMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware

__all__ = ["RateLimitMiddleware", "RequestLoggingMiddleware", "SecurityHeadersMiddleware"]
