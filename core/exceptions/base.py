"""
Marketplace error types.

Services raise these and the DRF exception handler renders them as
``{"error": <code>, "message": <text>, "detail": {...}}``. Extra keyword
arguments become the ``detail`` object, so callers attach context such
as the offending field or the resource kind::

    raise ConflictError("You have already applied to this offer", resource="application")
    raise ValidationError("Sale amount cannot be negative", field="sale_amount")
"""

from rest_framework import status


class AffiliateXchangeError(Exception):
    """Root of every error the API reports in its own envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "server_error"
    default_message = "An unexpected error occurred"

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        # None values are dropped so optional context never shows up as null
        self.details = {key: value for key, value in details.items() if value is not None}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"error": self.error_code, "message": self.message}
        if self.details:
            payload["detail"] = dict(self.details)
        return payload

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, status={self.status_code})"


# -- 4xx ---------------------------------------------------------------------

class ValidationError(AffiliateXchangeError):
    """Rejected input: bad commission setup, missing reason, out-of-range slot."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"
    default_message = "Invalid request data"

    def __init__(self, message=None, field=None, **details):
        super().__init__(message, field=field, **details)


class AuthenticationError(AffiliateXchangeError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "authentication_error"
    default_message = "Authentication required"


class AuthorizationError(AffiliateXchangeError):
    """Wrong role, or acting on another party's offer, contract or conversation."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "permission_denied"
    default_message = "You do not have permission"


class NotFoundError(AffiliateXchangeError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_message = "Resource not found"

    def __init__(self, message=None, resource=None, **details):
        super().__init__(message, resource=resource, **details)


class ConflictError(AffiliateXchangeError):
    """
    The request is well formed but the target is in the wrong state:
    a duplicate application, an already-filled deliverable slot, a
    payment that has left the status it needs to be in.
    """

    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"
    default_message = "Resource conflict"

    def __init__(self, message=None, resource=None, **details):
        super().__init__(message, resource=resource, **details)


class RateLimitError(AffiliateXchangeError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "rate_limit"
    default_message = "Rate limit exceeded. Please try again later."


# -- 5xx ---------------------------------------------------------------------

class ConfigurationError(AffiliateXchangeError):
    """A feature was used whose credentials or settings are not present."""

    error_code = "configuration_error"
    default_message = "This feature is not configured"

    def __init__(self, message=None, setting=None, **details):
        super().__init__(message, setting=setting, **details)


class ServiceError(AffiliateXchangeError):
    """A third party (Google, a creator's website) failed or was unreachable."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "service_error"
    default_message = "External service unavailable"

    def __init__(self, message=None, vendor=None, **details):
        super().__init__(message, vendor=vendor, **details)
