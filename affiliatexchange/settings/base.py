"""
Settings shared by every environment. Values that vary per deployment
come from ``affiliatexchange.config``; the environment modules only
override what differs.
"""

import os
from datetime import timedelta
from pathlib import Path

from corsheaders.defaults import default_headers

from affiliatexchange.config import config

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = config.security.secret_key
DEBUG = config.debug
ALLOWED_HOSTS = config.security.allowed_hosts

LOCAL_APPS = [
    "users",
    "offers",
    "applications",
    "analytics",
    "retainers",
    "messaging",
    "notifications",
    "reviews",
    "payments",
    "moderation",
    "administration",
]

INSTALLED_APPS = [
    # jazzmin replaces the admin templates, so it has to load first
    "jazzmin",
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "rest_framework_simplejwt",
    "rest_framework_simplejwt.token_blacklist",
    "corsheaders",
    "channels",
    "core.apps.CoreConfig",
    *LOCAL_APPS,
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "affiliatexchange.middleware.SecurityHeadersMiddleware",
    "affiliatexchange.middleware.RateLimitMiddleware",
    "affiliatexchange.middleware.RequestLoggingMiddleware",
]

ROOT_URLCONF = "affiliatexchange.urls"
WSGI_APPLICATION = "affiliatexchange.wsgi.application"
# Daphne/uvicorn entry point; serves HTTP and the chat socket
ASGI_APPLICATION = "affiliatexchange.asgi.application"

TEMPLATES = [{
    "BACKEND": "django.template.backends.django.DjangoTemplates",
    "DIRS": [],
    "APP_DIRS": True,
    "OPTIONS": {
        "context_processors": [
            "django.template.context_processors.request",
            "django.contrib.auth.context_processors.auth",
            "django.contrib.messages.context_processors.messages",
        ],
    },
}]

DATABASES = {"default": config.database.as_django()}
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "users.User"
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": f"django.contrib.auth.password_validation.{name}"}
    for name in (
        "UserAttributeSimilarityValidator",
        "MinimumLengthValidator",
        "CommonPasswordValidator",
        "NumericPasswordValidator",
    )
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = os.getenv("STATIC_ROOT", BASE_DIR / "staticfiles")

# Chat attachments, company logos and offer imagery
MEDIA_URL = "media/"
MEDIA_ROOT = os.getenv("MEDIA_ROOT", BASE_DIR / "media")
FILE_UPLOAD_MAX_MEMORY_SIZE = config.platform.max_upload_bytes
DATA_UPLOAD_MAX_MEMORY_SIZE = config.platform.max_upload_bytes

# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["rest_framework_simplejwt.authentication.JWTAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.MultiPartParser",
        "rest_framework.parsers.FormParser",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {"anon": "100/hour", "user": "1000/hour"},
    "EXCEPTION_HANDLER": "core.exceptions.handlers.affiliatexchange_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=1),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
    "AUTH_HEADER_TYPES": ("Bearer",),
}

CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = config.security.cors_origins
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_HEADERS = (*default_headers, "x-request-id")
CSRF_TRUSTED_ORIGINS = config.security.csrf_trusted_origins

# ---------------------------------------------------------------------------
# Realtime, background jobs, cache
# ---------------------------------------------------------------------------

CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels_redis.core.RedisChannelLayer",
        "CONFIG": {"hosts": [config.redis.channel_layer_url]},
    },
}

CELERY_BROKER_URL = config.redis.broker_url
CELERY_RESULT_BACKEND = config.redis.result_backend
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = "UTC"

# Fee settings and rate-limit counters live here; production swaps in Redis
CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------

EMAIL_BACKEND = config.email.backend
EMAIL_HOST = config.email.host
EMAIL_PORT = config.email.port
EMAIL_USE_TLS = config.email.use_tls
EMAIL_HOST_USER = config.email.user
EMAIL_HOST_PASSWORD = config.email.password
DEFAULT_FROM_EMAIL = config.email.from_email
SITE_URL = config.email.site_url

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {"format": "{asctime} {levelname} [{name}] {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "root": {"handlers": ["console"], "level": "INFO"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "affiliatexchange": {"handlers": ["console"], "level": "INFO", "propagate": False},
        **{
            app: {"handlers": ["console"], "level": "DEBUG", "propagate": False}
            for app in ("core", *LOCAL_APPS)
        },
    },
}

# ---------------------------------------------------------------------------
# Back office (jazzmin)
# ---------------------------------------------------------------------------

JAZZMIN_SETTINGS = {
    "site_title": "AffiliateXchange Admin",
    "site_header": "AffiliateXchange",
    "site_brand": "AffiliateXchange",
    "welcome_sign": "Marketplace back office",
    "search_model": ["users.User", "offers.Offer", "payments.Payment"],
    "topmenu_links": [
        {"name": "Dashboard", "url": "admin:index", "permissions": ["auth.view_user"]},
        {"name": "Open marketplace", "url": config.email.site_url, "new_window": True},
    ],
    "order_with_respect_to": ["users", "offers", "applications", "retainers", "payments", "moderation"],
    "icons": {
        "users.User": "fas fa-user",
        "users.CreatorProfile": "fas fa-video",
        "users.CompanyProfile": "fas fa-building",
        "offers.Offer": "fas fa-bullhorn",
        "offers.Niche": "fas fa-tags",
        "applications.Application": "fas fa-file-signature",
        "retainers.RetainerContract": "fas fa-file-contract",
        "retainers.RetainerDeliverable": "fas fa-film",
        "messaging.Conversation": "fas fa-comments",
        "notifications.Notification": "fas fa-bell",
        "reviews.Review": "fas fa-star",
        "payments.Payment": "fas fa-dollar-sign",
        "payments.RetainerPayment": "fas fa-money-check-alt",
        "moderation.BannedKeyword": "fas fa-ban",
        "moderation.ContentFlag": "fas fa-flag",
        "administration.AuditLog": "fas fa-clipboard-list",
        "administration.PlatformSetting": "fas fa-sliders-h",
    },
    "show_ui_builder": False,
    "changeform_format": "horizontal_tabs",
}

JAZZMIN_UI_TWEAKS = {
    "theme": "flatly",
    "dark_mode_theme": "darkly",
    "navbar": "navbar-dark",
    "sidebar": "sidebar-dark-primary",
    "navbar_fixed": True,
    "sidebar_fixed": True,
}
