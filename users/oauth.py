"""
Google sign-in.

The browser is sent to ``authorization_url``; Google redirects back with
a one-time ``code`` which ``get_user_info`` trades for the account's
profile. Only accounts whose email Google has verified are accepted,
because sign-in links by email to existing marketplace accounts.
"""

import logging
from urllib.parse import urlencode

import jwt
import requests

from affiliatexchange.config import config
from core.exceptions import ConfigurationError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

GOOGLE_TIMEOUT = 10


class GoogleOAuth:

    AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USER_INFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
    SCOPES = ("openid", "email", "profile")

    def __init__(self):
        settings = config.oauth
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.default_redirect_uri = settings.google_redirect_uri

    def _require_credentials(self, need_secret: bool = True):
        if not self.client_id:
            raise ConfigurationError("Google sign-in is not configured", setting="GOOGLE_CLIENT_ID")
        if need_secret and not self.client_secret:
            raise ConfigurationError("Google sign-in is not configured", setting="GOOGLE_CLIENT_SECRET")

    def get_authorization_url(self, redirect_uri: str = None, state: str = None) -> str:
        self._require_credentials(need_secret=False)
        query = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri or self.default_redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            query["state"] = state
        return f"{self.AUTH_URL}?{urlencode(query)}"

    def _exchange_code(self, code: str, redirect_uri: str) -> dict:
        response = requests.post(
            self.TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            timeout=GOOGLE_TIMEOUT,
        )
        if response.status_code != 200:
            logger.error("Google token exchange failed (%s): %s", response.status_code, response.text[:300])
            raise ValidationError("Google rejected the sign-in code", field="code")

        tokens = response.json()
        if not tokens.get("access_token"):
            raise ServiceError("Google returned no access token", vendor="google")
        return tokens

    def _fetch_profile(self, access_token: str) -> dict:
        response = requests.get(
            self.USER_INFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=GOOGLE_TIMEOUT,
        )
        if response.status_code != 200:
            logger.error("Google userinfo failed (%s): %s", response.status_code, response.text[:300])
            raise ServiceError("Could not load your Google profile", vendor="google")
        return response.json()

    def get_user_info(self, code: str, redirect_uri: str = None) -> dict:
        """Return ``{email, first_name, last_name, uid, picture}`` for a sign-in code."""
        self._require_credentials()
        try:
            tokens = self._exchange_code(code, redirect_uri or self.default_redirect_uri)
            profile = self._fetch_profile(tokens["access_token"])
        except requests.RequestException as exc:
            raise ServiceError("Google is unreachable", vendor="google") from exc

        verified = profile.get("verified_email")
        if verified is None and tokens.get("id_token"):
            # userinfo v2 can omit the flag; the ID token always carries it
            claims = jwt.decode(tokens["id_token"], options={"verify_signature": False})
            verified = claims.get("email_verified", False)
        if not verified:
            raise ValidationError("Google account email is not verified", field="email")

        return {
            "email": profile.get("email"),
            "first_name": profile.get("given_name", ""),
            "last_name": profile.get("family_name", ""),
            "uid": profile.get("id"),
            "picture": profile.get("picture", ""),
        }
