"""
WebSocket authentication.

Browsers cannot set headers on a WebSocket handshake, so the access
token travels in the query string: ``/ws/?token=<jwt>``.
"""

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)

User = get_user_model()


@database_sync_to_async
def get_user_for_token(raw_token: str):
    try:
        token = AccessToken(raw_token)
    except TokenError as e:
        logger.info("Rejected socket token: %s", e)
        return AnonymousUser()
    user = User.objects.filter(pk=token.get(api_settings.USER_ID_CLAIM)).first()
    if user is None or not user.is_account_active:
        return AnonymousUser()
    return user


class JWTAuthMiddleware(BaseMiddleware):
    """Sets ``scope["user"]`` from the ``token`` query parameter."""

    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get("query_string", b"").decode())
        token = (query.get("token") or [""])[0]
        scope["user"] = await get_user_for_token(token) if token else AnonymousUser()
        return await super().__call__(scope, receive, send)
