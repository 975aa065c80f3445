"""
REST_FRAMEWORK["EXCEPTION_HANDLER"] hook.

Marketplace errors are rendered from their own ``to_dict``; DRF's own
exceptions (serializer validation, throttling, auth) keep DRF's shape.
"""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .base import AffiliateXchangeError

logger = logging.getLogger(__name__)


def affiliatexchange_exception_handler(exc, context):
    if not isinstance(exc, AffiliateXchangeError):
        response = drf_exception_handler(exc, context)
        if response is None:
            logger.exception("Unhandled exception in %s", context.get("view", "unknown"))
        return response

    log = logger.error if exc.status_code >= 500 else logger.warning
    log("%s [%s] %s %s", type(exc).__name__, exc.error_code, exc.message, exc.details or "")
    return Response(exc.to_dict(), status=exc.status_code)
