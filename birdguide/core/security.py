# Fichier: birdguide/core/security.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from jose import jwt

from birdguide.core.config import settings

# --- Configuration de la Sécurité ---
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)


def create_access_token(
    subject: Union[str, Any],
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Sign a bearer token whose ``sub`` is the local user id."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode: dict[str, Any] = dict(extra_claims or {})
    to_encode.update({"exp": expire, "sub": str(subject)})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a token; jose raises ``JWTError`` on any failure."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
