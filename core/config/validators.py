"""
Startup checks, run from ``CoreConfig.ready()``.

Environment problems come from ``AppConfig.validate()``; this module adds
the ones that can only be seen once Django settings are loaded (channel
layer, Celery mode). In production any critical issue aborts startup.
"""

import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from affiliatexchange.config import ConfigIssue, config

logger = logging.getLogger(__name__)


def settings_issues():
    issues = []
    if not config.is_production:
        return issues

    layer = getattr(settings, "CHANNEL_LAYERS", {}).get("default", {}).get("BACKEND", "")
    if "InMemoryChannelLayer" in layer:
        # Sockets served by different workers would never see each other's messages
        issues.append(ConfigIssue(logging.CRITICAL, "CHANNEL_LAYERS uses the in-memory layer in production"))
    if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
        issues.append(ConfigIssue(logging.WARNING, "Celery runs tasks eagerly; emails and payouts block requests"))
    if getattr(settings, "CORS_ALLOW_ALL_ORIGINS", False):
        issues.append(ConfigIssue(logging.CRITICAL, "CORS_ALLOW_ALL_ORIGINS is enabled in production"))
    return issues


def validate_config_on_startup():
    issues = config.validate() + settings_issues()
    config.log_status(issues)

    critical = [issue.message for issue in issues if issue.is_critical]
    if critical and config.is_production:
        raise ImproperlyConfigured("Refusing to start:\n" + "\n".join(f"  - {message}" for message in critical))
    if not issues:
        logger.info("Configuration OK")
