"""
Environment-backed configuration.

Every environment variable the marketplace reads is declared here, once,
with its default. Settings modules and services import ``config`` rather
than calling ``os.getenv`` themselves::

    from affiliatexchange.config import config

    delay = config.platform.auto_approval_delay_minutes
    if config.is_production:
        ...
"""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from typing import Callable, List, NamedTuple

logger = logging.getLogger(__name__)


def env(name: str, default: str = "", cast: Callable = str):
    """default_factory that reads ``name`` when the dataclass is built."""
    return field(default_factory=lambda: cast(os.getenv(name, default)))


def env_flag(name: str, default: bool):
    return field(default_factory=lambda: os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes"))


def env_list(name: str, default: str):
    return field(default_factory=lambda: [
        item.strip() for item in os.getenv(name, default).split(",") if item.strip()
    ])


LOCAL_FRONTENDS = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000"


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = env("DATABASE_URL", "sqlite:///db.sqlite3")
    name: str = env("DB_NAME", "db.sqlite3")
    host: str = env("DB_HOST", "localhost")
    port: int = env("DB_PORT", "5432", int)
    user: str = env("DB_USER")
    password: str = env("DB_PASSWORD")

    @property
    def is_sqlite(self) -> bool:
        return self.url.lower().startswith("sqlite")

    def as_django(self) -> dict:
        """``DATABASES["default"]`` for this connection."""
        if self.is_sqlite:
            return {"ENGINE": "django.db.backends.sqlite3", "NAME": self.name}
        return {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": self.name,
            "HOST": self.host,
            "PORT": self.port,
            "USER": self.user,
            "PASSWORD": self.password,
            "CONN_MAX_AGE": 60,
        }


@dataclass(frozen=True)
class RedisConfig:
    """Redis roles: Django cache, Celery broker/results and the Channels layer."""
    url: str = env("REDIS_URL", "redis://localhost:6379/0")
    broker_url: str = env("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend: str = env("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
    channel_layer_url: str = env("CHANNEL_LAYER_URL", "redis://localhost:6379/1")


@dataclass(frozen=True)
class SecurityConfig:
    secret_key: str = env("SECRET_KEY", "django-insecure-dev-key-change-in-production")
    allowed_hosts: List[str] = env_list("ALLOWED_HOSTS", "localhost,127.0.0.1")
    cors_origins: List[str] = env_list("CORS_ORIGINS", LOCAL_FRONTENDS)
    csrf_trusted_origins: List[str] = env_list("CSRF_TRUSTED_ORIGINS", LOCAL_FRONTENDS)
    admin_url: str = env("ADMIN_URL", "admin")

    @property
    def is_secure_key(self) -> bool:
        return len(self.secret_key) >= 50 and "insecure" not in self.secret_key.lower()


@dataclass(frozen=True)
class EmailConfig:
    """Outgoing mail for notification emails, verification and password resets."""
    backend: str = env("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")
    host: str = env("EMAIL_HOST", "localhost")
    port: int = env("EMAIL_PORT", "587", int)
    use_tls: bool = env_flag("EMAIL_USE_TLS", True)
    user: str = env("EMAIL_HOST_USER")
    password: str = env("EMAIL_HOST_PASSWORD")
    from_email: str = env("DEFAULT_FROM_EMAIL", "AffiliateXchange <noreply@affiliatexchange.com>")
    # Frontend origin used to build links inside emails
    site_url: str = env("SITE_URL", "http://localhost:5173")

    @property
    def delivers_mail(self) -> bool:
        return not self.backend.endswith(("console.EmailBackend", "locmem.EmailBackend", "dummy.EmailBackend"))


@dataclass(frozen=True)
class OAuthConfig:
    google_client_id: str = env("GOOGLE_CLIENT_ID")
    google_client_secret: str = env("GOOGLE_CLIENT_SECRET")
    google_redirect_uri: str = env("GOOGLE_REDIRECT_URI")

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


@dataclass(frozen=True)
class PlatformConfig:
    """Marketplace rules that operators may tune per deployment."""
    tracking_base_url: str = env("BASE_URL", "http://localhost:8000")
    auto_approval_delay_minutes: int = env("AUTO_APPROVAL_DELAY_MINUTES", "7", int)
    # Fractions of gross; admins can override both at runtime
    default_platform_fee: Decimal = env("DEFAULT_PLATFORM_FEE", "0.04", Decimal)
    default_processing_fee: Decimal = env("DEFAULT_PROCESSING_FEE", "0.03", Decimal)
    fee_cache_seconds: int = env("FEE_CACHE_SECONDS", "300", int)
    max_upload_bytes: int = env("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024), int)
    default_sale_amount: Decimal = Decimal("100")
    max_offer_videos: int = 12
    max_retainer_tiers: int = 5
    typing_timeout_seconds: int = 3
    reconnect_backoff_seconds: int = 3


class ConfigIssue(NamedTuple):
    level: int
    message: str

    @property
    def is_critical(self) -> bool:
        return self.level >= logging.CRITICAL


@dataclass(frozen=True)
class AppConfig:
    environment: str = env("DJANGO_ENV", "development")
    debug: bool = env_flag("DEBUG", True)

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    oauth: OAuthConfig = field(default_factory=OAuthConfig)
    platform: PlatformConfig = field(default_factory=PlatformConfig)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate(self) -> List[ConfigIssue]:
        issues = []
        platform = self.platform

        if not platform.tracking_base_url.startswith(("http://", "https://")):
            issues.append(ConfigIssue(logging.CRITICAL, "BASE_URL must be an absolute http(s) URL; tracking links use it"))
        for name, fee in (("DEFAULT_PLATFORM_FEE", platform.default_platform_fee),
                          ("DEFAULT_PROCESSING_FEE", platform.default_processing_fee)):
            if not Decimal("0") <= fee <= Decimal("0.5"):
                issues.append(ConfigIssue(logging.CRITICAL, f"{name} must be a fraction between 0 and 0.5, got {fee}"))
        if platform.auto_approval_delay_minutes < 0:
            issues.append(ConfigIssue(logging.CRITICAL, "AUTO_APPROVAL_DELAY_MINUTES cannot be negative"))

        if self.is_production:
            if not self.security.is_secure_key:
                issues.append(ConfigIssue(logging.CRITICAL, "SECRET_KEY is the development default or too short"))
            if self.debug:
                issues.append(ConfigIssue(logging.WARNING, "DEBUG is on in production"))
            if self.database.is_sqlite:
                issues.append(ConfigIssue(logging.WARNING, "SQLite in production; payments rely on row locks"))
            if not self.email.delivers_mail:
                issues.append(ConfigIssue(logging.WARNING, "EMAIL_BACKEND does not deliver mail; notification emails are dropped"))
            if platform.tracking_base_url.startswith("http://localhost"):
                issues.append(ConfigIssue(logging.WARNING, "BASE_URL points at localhost; creators will share dead links"))

        if not self.oauth.google_configured:
            issues.append(ConfigIssue(logging.INFO, "Google sign-in disabled (GOOGLE_CLIENT_ID/SECRET unset)"))

        return issues

    def log_status(self, issues: List[ConfigIssue] = None) -> None:
        logger.info(
            "AffiliateXchange starting: env=%s debug=%s tracking=%s",
            self.environment, self.debug, self.platform.tracking_base_url,
        )
        for issue in self.validate() if issues is None else issues:
            logger.log(issue.level, issue.message)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return AppConfig()


config = get_config()
