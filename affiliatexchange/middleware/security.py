"""
Request-level protection for the marketplace API.

SecurityHeadersMiddleware hardens every response, RateLimitMiddleware
throttles the endpoints that are attractive to abuse (sign-in, sign-up,
password reset, uploads and the public tracking redirect) and
RequestLoggingMiddleware leaves an access trail for API traffic.
"""

import logging
import time

from django.conf import settings
from django.core.cache import cache
from django.http import JsonResponse

from core.exceptions import RateLimitError
from core.http import get_client_ip

logger = logging.getLogger(__name__)

RATE_WINDOW_SECONDS = 60


class SecurityHeadersMiddleware:

    CSP = "; ".join([
        "default-src 'self'",
        "img-src 'self' data: https: blob:",
        "media-src 'self' https: blob:",
        "connect-src 'self' https: wss:",
        "frame-ancestors 'none'",
    ])

    STATIC_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    }

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        for header, value in self.STATIC_HEADERS.items():
            response.setdefault(header, value)
        if not settings.DEBUG:
            response["Content-Security-Policy"] = self.CSP
        return response


class RateLimitMiddleware:
    """
    Fixed-window per-IP limits, counted in the Django cache.

    ``RATE_LIMITS`` maps a path fragment to the number of requests allowed
    per minute. The first matching fragment wins.
    """

    RATE_LIMITS = {
        "/auth/login": 10,
        "/auth/register": 5,
        "/auth/password-reset": 5,
        "/conversations/attachments": 30,
        "/go/": 120,
    }

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith(("/api/", "/go/")):
            rule = self.rule_for(request.path)
            if rule and self.is_rate_limited(get_client_ip(request), *rule):
                error = RateLimitError()
                return JsonResponse(error.to_dict(), status=error.status_code)
        return self.get_response(request)

    def rule_for(self, path: str):
        for fragment, limit in self.RATE_LIMITS.items():
            if fragment in path:
                return fragment, limit
        return None

    def is_rate_limited(self, ip: str, fragment: str, allowed: int) -> bool:
        key = f"ratelimit:{fragment}:{ip}"
        if cache.add(key, 1, RATE_WINDOW_SECONDS):
            return False
        try:
            count = cache.incr(key)
        except ValueError:
            # Window expired between add() and incr()
            cache.set(key, 1, RATE_WINDOW_SECONDS)
            return False
        if count > allowed:
            logger.warning("Rate limit hit: %s on %s (%d/%d)", ip, fragment, count, allowed)
            return True
        return False


class RequestLoggingMiddleware:

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        user = getattr(request, "user", None)
        user_id = user.pk if user is not None and user.is_authenticated else "-"
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "%s %s -> %d in %.0fms (ip=%s user=%s)",
            request.method, request.path, response.status_code, elapsed_ms,
            get_client_ip(request), user_id,
        )
        return response
