import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from birdguide.api.dependencies import get_current_user, get_db, get_identity_provider
from birdguide.core.identity_provider import IdentityProvider
from birdguide.models.user.user_model import User
from birdguide.schemas.common_schema import ApiResponse
from birdguide.schemas.user.user_schema import (
    Auth0CallbackRequest,
    AuthResponse,
    RegisterRequest,
    User as UserSchema,
)
from birdguide.services.auth_service import AuthError, AuthResult, AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(result: AuthResult) -> ApiResponse[AuthResponse]:
    return ApiResponse.ok(
        AuthResponse(
            user=UserSchema.model_validate(result.user),
            token=result.token,
            refresh_token=result.refresh_token,
        )
    )


@router.post("/callback", response_model=ApiResponse[AuthResponse], summary="Retour du fournisseur d'identité")
def auth_callback(
    payload: Auth0CallbackRequest,
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    try:
        result = AuthService(db, identity_provider).handle_callback(payload.code)
    except AuthError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code)
    return _to_response(result)


@router.post("/register", response_model=ApiResponse[AuthResponse], summary="Inscription")
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    try:
        result = AuthService(db, identity_provider).register(
            email=payload.email,
            password=payload.password,
            username=payload.username,
            preferred_locale=payload.preferred_locale,
        )
    except AuthError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code)
    return _to_response(result)


@router.get("/me", response_model=ApiResponse[UserSchema], summary="Utilisateur courant")
def read_me(current_user: User = Depends(get_current_user)):
    return ApiResponse.ok(UserSchema.model_validate(current_user))


@router.post("/logout", response_model=ApiResponse[None], summary="Déconnexion")
def logout(current_user: User = Depends(get_current_user)):
    # Jetons sans état : rien à révoquer côté serveur
    logger.info("User %s logged out", current_user.id)
    return ApiResponse(success=True, message="Logged out")
