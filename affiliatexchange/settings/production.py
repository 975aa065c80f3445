"""
Production overrides. Startup refuses to continue on critical
configuration issues (see core.config.validators).
"""

import os
from datetime import timedelta

from .base import *  # noqa: F401,F403
from .base import CACHES, DATABASES, LOGGING, REST_FRAMEWORK, SIMPLE_JWT
from affiliatexchange.config import config

DEBUG = False

if not config.database.is_sqlite:
    DATABASES["default"]["OPTIONS"] = {"sslmode": os.getenv("DB_SSL_MODE", "require")}

# Rate-limit counters and cached fee settings must be shared across workers
CACHES["default"] = {
    "BACKEND": "django.core.cache.backends.redis.RedisCache",
    "LOCATION": config.redis.url,
}

SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_HSTS_SECONDS = 60 * 60 * 24 * 365
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "strict-origin-when-cross-origin"
X_FRAME_OPTIONS = "DENY"

SESSION_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"
SESSION_COOKIE_AGE = 60 * 60 * 8
CSRF_COOKIE_SECURE = True
CSRF_COOKIE_HTTPONLY = True
CSRF_COOKIE_SAMESITE = "Lax"

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {"anon": "60/minute", "user": "300/minute"}

SIMPLE_JWT.update({
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=30),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "SIGNING_KEY": config.security.secret_key,
})

LOGGING["root"]["level"] = "WARNING"
