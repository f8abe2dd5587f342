from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from birdguide.schemas.common_schema import CamelModel


# --- Schéma pour l'inscription ---
class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)
    username: Optional[str] = None
    preferred_locale: Optional[str] = None


# --- Retour du fournisseur d'identité ---
class Auth0CallbackRequest(CamelModel):
    code: str = Field(min_length=1)
    state: Optional[str] = None


# --- Schéma de réponse ---
class User(CamelModel):
    id: int
    auth0_id: str
    email: str
    username: str
    preferred_locale: str
    preferred_region_id: Optional[str] = None
    xp: int
    current_streak: int
    longest_streak: int
    last_active_at: Optional[datetime] = None
    is_admin: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    user: User
    token: str
    refresh_token: Optional[str] = None
