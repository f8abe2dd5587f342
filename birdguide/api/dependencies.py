import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from birdguide.core import security
from birdguide.core.config import settings
from birdguide.core.identity_provider import Auth0Client, IdentityProvider, IdentityProviderError
from birdguide.db.session import get_db
from birdguide.models.user.user_model import User

log = logging.getLogger(__name__)

__all__ = ["get_db", "get_current_user", "get_identity_provider"]


def _extract_bearer_token(raw: str | None) -> str | None:
    if not raw:
        return None
    parts = raw.strip().split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = _extract_bearer_token(request.headers.get("Authorization"))
    if not token:
        log.warning("Validation échouée: Pas de token fourni.")
        raise credentials_exception

    try:
        payload = security.decode_access_token(token)
        user_id = int(payload.get("sub"))
    except ExpiredSignatureError:
        log.warning("Validation échouée: Le token a expiré.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")
    except (JWTError, ValueError, TypeError):
        log.warning("Validation échouée: Le token est invalide ou mal formé.")
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        log.warning("Validation échouée: Utilisateur avec ID %s non trouvé.", user_id)
        raise credentials_exception

    if user.is_deleted:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="account_deleted")

    return user


@lru_cache
def _auth0_client() -> Auth0Client:
    return Auth0Client(settings)


def get_identity_provider() -> IdentityProvider:
    try:
        return _auth0_client()
    except IdentityProviderError as exc:
        log.error("Identity provider unavailable: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="identity_provider_not_configured")
