"""Boundary to the external identity provider (Auth0).

The rest of the application only sees :class:`IdentityProvider` and the
:class:`ExternalIdentity` / :class:`TokenGrant` value objects, so the vendor's
payload shapes never leak past this module.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol
from urllib.parse import quote

import requests

from birdguide.core.config import Settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 15


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects a call or is unreachable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class ExternalIdentity:
    user_id: str
    email: str
    nickname: Optional[str] = None
    name: Optional[str] = None
    locale: Optional[str] = None


@dataclass(frozen=True)
class TokenGrant:
    user_id: str
    access_token: str
    refresh_token: Optional[str] = None


@dataclass(frozen=True)
class NewIdentity:
    email: str
    password: str
    username: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


class IdentityProvider(Protocol):
    def exchange_code(self, code: str) -> TokenGrant: ...

    def get_user(self, user_id: str) -> ExternalIdentity: ...

    def create_user(self, params: NewIdentity) -> ExternalIdentity: ...


def _identity_from_payload(payload: dict[str, Any]) -> ExternalIdentity:
    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id:
        raise IdentityProviderError("Identity payload without user id")
    return ExternalIdentity(
        user_id=str(user_id),
        email=payload.get("email") or "",
        nickname=payload.get("nickname") or payload.get("username"),
        name=payload.get("name"),
        locale=payload.get("locale"),
    )


class Auth0Client:
    """``IdentityProvider`` backed by the Auth0 authentication and management APIs."""

    # Refresh the management token a little before Auth0 expires it.
    TOKEN_EXPIRY_MARGIN_SECONDS = 60

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        if not settings.auth0_configured:
            raise IdentityProviderError("Auth0 is not configured")
        self.domain = str(settings.AUTH0_DOMAIN).rstrip("/")
        self.client_id = settings.AUTH0_CLIENT_ID
        self.client_secret = settings.AUTH0_CLIENT_SECRET
        self.redirect_uri = settings.AUTH0_REDIRECT_URI
        self.connection = settings.AUTH0_CONNECTION
        self.management_client_id = settings.AUTH0_MANAGEMENT_API_CLIENT_ID
        self.management_client_secret = settings.AUTH0_MANAGEMENT_API_CLIENT_SECRET
        self.management_audience = (
            settings.AUTH0_MANAGEMENT_API_AUDIENCE or f"{self.base_url}/api/v2/"
        )
        self.http = session or requests.Session()
        self._management_token: str | None = None
        self._management_token_expires_at = 0.0

    @property
    def base_url(self) -> str:
        if self.domain.startswith("http"):
            return self.domain
        return f"https://{self.domain}"

    # ------------------------------------------------------------------
    # IdentityProvider
    # ------------------------------------------------------------------
    def exchange_code(self, code: str) -> TokenGrant:
        payload = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        if self.redirect_uri:
            payload["redirect_uri"] = self.redirect_uri

        tokens = self._request("POST", "/oauth/token", json=payload)
        access_token = tokens.get("access_token")
        if not access_token:
            raise IdentityProviderError("Token response without access_token")

        userinfo = self._request(
            "GET",
            "/userinfo",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        identity = _identity_from_payload(userinfo)
        return TokenGrant(
            user_id=identity.user_id,
            access_token=access_token,
            refresh_token=tokens.get("refresh_token"),
        )

    def get_user(self, user_id: str) -> ExternalIdentity:
        payload = self._management_request("GET", f"/api/v2/users/{quote(user_id, safe='')}")
        return _identity_from_payload(payload)

    def create_user(self, params: NewIdentity) -> ExternalIdentity:
        body: dict[str, Any] = {
            "connection": self.connection,
            "email": params.email,
            "password": params.password,
            **params.extra,
        }
        if params.username:
            body["nickname"] = params.username
        payload = self._management_request("POST", "/api/v2/users", json=body)
        return _identity_from_payload(payload)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------
    def _management_request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self._get_management_token()}"
        return self._request(method, path, headers=headers, **kwargs)

    def _get_management_token(self) -> str:
        now = time.monotonic()
        if self._management_token and now < self._management_token_expires_at:
            return self._management_token

        payload = self._request(
            "POST",
            "/oauth/token",
            json={
                "grant_type": "client_credentials",
                "client_id": self.management_client_id,
                "client_secret": self.management_client_secret,
                "audience": self.management_audience,
            },
        )
        token = payload.get("access_token")
        if not token:
            raise IdentityProviderError("Management token response without access_token")

        expires_in = int(payload.get("expires_in") or 0)
        self._management_token = token
        self._management_token_expires_at = now + max(expires_in - self.TOKEN_EXPIRY_MARGIN_SECONDS, 0)
        return token

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=REQUEST_TIMEOUT_SECONDS, **kwargs)
        except requests.RequestException as exc:
            logger.error("Auth0 request %s %s failed: %s", method, path, exc)
            raise IdentityProviderError(f"Auth0 unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "Auth0 request %s %s rejected (%s): %s",
                method,
                path,
                response.status_code,
                response.text[:200],
            )
            try:
                detail = response.json()
            except ValueError:
                detail = {}
            message = (
                detail.get("error_description")
                or detail.get("message")
                or detail.get("error")
                or f"Auth0 returned HTTP {response.status_code}"
            )
            raise IdentityProviderError(message, status_code=response.status_code)

        return response.json()
