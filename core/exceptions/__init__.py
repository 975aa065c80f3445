from .base import (
    AffiliateXchangeError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ServiceError,
    ValidationError,
)
from .handlers import affiliatexchange_exception_handler

__all__ = [
    "AffiliateXchangeError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "ConflictError",
    "NotFoundError",
    "RateLimitError",
    "ServiceError",
    "ValidationError",
    "affiliatexchange_exception_handler",
]
