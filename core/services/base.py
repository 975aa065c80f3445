"""
Base class for the business-logic layer.

Services are stateless: every method is a classmethod taking the acting
user and the objects involved. Views stay thin and call exactly one
service method per request.
"""

import logging

from django.db import transaction

from core.exceptions import AuthorizationError


class BaseService:
    logger: logging.Logger = logging.getLogger(__name__)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.logger = logging.getLogger(cls.__module__)

    @staticmethod
    def atomic():
        return transaction.atomic()

    @staticmethod
    def on_commit(callback):
        """Run ``callback`` once the surrounding transaction commits (now, if none)."""
        transaction.on_commit(callback)

    @staticmethod
    def ensure_owner(owner_id, user, message="You do not have permission"):
        """
        Raise ``AuthorizationError`` unless ``user`` is the owner.

        Platform admins act on anyone's objects, so they always pass.
        """
        if getattr(user, "is_admin", False) or owner_id == user.id:
            return
        raise AuthorizationError(message)
