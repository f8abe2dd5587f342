from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from birdguide.core import security
from birdguide.core.identity_provider import IdentityProvider, IdentityProviderError, NewIdentity
from birdguide.crud import user_crud
from birdguide.models.user.user_model import User

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthError(Exception):
    """Échec d'authentification ou d'inscription, avec le statut HTTP à renvoyer."""

    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


@dataclass
class AuthResult:
    user: User
    token: str
    refresh_token: Optional[str] = None


def _provider_error(exc: IdentityProviderError) -> AuthError:
    # Les 4xx du fournisseur sont des erreurs du client, le reste est une panne amont.
    if exc.status_code is not None and 400 <= exc.status_code < 500:
        return AuthError(str(exc) or "identity_provider_rejected", status_code=400)
    return AuthError("identity_provider_unavailable", status_code=502)


class AuthService:
    """Fait le lien entre le fournisseur d'identité et les utilisateurs locaux."""

    def __init__(self, db: Session, identity_provider: IdentityProvider):
        self.db = db
        self.identity_provider = identity_provider

    def handle_callback(self, code: str) -> AuthResult:
        try:
            grant = self.identity_provider.exchange_code(code)
            identity = self.identity_provider.get_user(grant.user_id)
        except IdentityProviderError as exc:
            logger.warning("Auth callback rejected by identity provider: %s", exc)
            raise _provider_error(exc) from exc

        user = self._sync_user(
            auth0_id=identity.user_id,
            email=identity.email,
            username_hint=identity.nickname,
            preferred_locale=identity.locale,
        )
        logger.info("User %s signed in via identity provider", user.id)
        return AuthResult(user=user, token=security.create_access_token(user.id), refresh_token=grant.refresh_token)

    def register(
        self,
        email: str,
        password: str,
        username: Optional[str] = None,
        preferred_locale: Optional[str] = None,
    ) -> AuthResult:
        if username and user_crud.get_user_by_username(self.db, username):
            raise AuthError("username_taken", status_code=409)

        try:
            identity = self.identity_provider.create_user(
                NewIdentity(email=email, password=password, username=username)
            )
        except IdentityProviderError as exc:
            logger.warning("Registration rejected by identity provider for %s: %s", email, exc)
            raise _provider_error(exc) from exc

        user = self._sync_user(
            auth0_id=identity.user_id,
            email=identity.email or email,
            username_hint=username or identity.nickname,
            preferred_locale=preferred_locale,
        )
        logger.info("User %s registered", user.id)
        return AuthResult(user=user, token=security.create_access_token(user.id))

    def _sync_user(
        self,
        *,
        auth0_id: str,
        email: str,
        username_hint: Optional[str],
        preferred_locale: Optional[str],
    ) -> User:
        existing = user_crud.get_user_by_auth0_id(self.db, auth0_id)
        if existing is not None and existing.is_deleted:
            logger.warning("Deleted user %s attempted to sign in", existing.id)
            raise AuthError("account_deleted", status_code=403)

        try:
            user = user_crud.create_or_update_from_identity(
                self.db,
                auth0_id=auth0_id,
                email=email,
                username_hint=username_hint,
                preferred_locale=preferred_locale,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user
