import re
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from birdguide.models.user.user_model import DEFAULT_LOCALE, User

USERNAME_MAX_LENGTH = 50
_USERNAME_FORBIDDEN_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


def get_user_by_auth0_id(db: Session, auth0_id: str) -> Optional[User]:
    return db.query(User).filter(User.auth0_id == auth0_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def _base_username(candidate: Optional[str], email: str) -> str:
    raw = candidate or email.split("@", 1)[0] or "birder"
    cleaned = _USERNAME_FORBIDDEN_CHARS.sub("", raw)
    return (cleaned or "birder")[: USERNAME_MAX_LENGTH - 6]


def generate_unique_username(db: Session, candidate: Optional[str], email: str) -> str:
    """Dérive un nom d'utilisateur libre : ``alice``, puis ``alice1``, ``alice2``..."""
    base = _base_username(candidate, email)
    username = base
    suffix = 0
    while get_user_by_username(db, username) is not None:
        suffix += 1
        username = f"{base}{suffix}"
    return username


def create_or_update_from_identity(
    db: Session,
    *,
    auth0_id: str,
    email: str,
    username_hint: Optional[str] = None,
    preferred_locale: Optional[str] = None,
) -> User:
    user = get_user_by_auth0_id(db, auth0_id)
    now = datetime.now(timezone.utc)

    if user is None:
        user = User(
            auth0_id=auth0_id,
            email=email,
            username=generate_unique_username(db, username_hint, email),
            preferred_locale=preferred_locale or DEFAULT_LOCALE,
            xp=0,
            current_streak=0,
            longest_streak=0,
            is_admin=False,
        )
        db.add(user)
    elif email and user.email != email:
        user.email = email

    user.last_active_at = now
    db.flush()
    return user
