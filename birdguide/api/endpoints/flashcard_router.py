import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from birdguide.api.dependencies import get_current_user, get_db
from birdguide.models.user.user_model import User
from birdguide.schemas.flashcard_schema import (
    ProgressSummary,
    ReviewCreate,
    ReviewResponse,
    SessionComplete,
    SessionCreate,
    SessionCreateResponse,
    SessionSpecies,
    SessionSummary,
)
from birdguide.schemas.user.badge_schema import BadgeRead, BadgeWithStatus
from birdguide.services.flashcard_service import FlashcardError, FlashcardService

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> FlashcardService:
    return FlashcardService(db, current_user)


@router.get("/species", response_model=List[SessionSpecies], summary="Espèces tirées pour une session")
def get_species_for_session(service: FlashcardService = Depends(_get_service)):
    return service.get_species_for_session()


@router.post("/review", response_model=ReviewResponse, summary="Enregistre une réponse")
def submit_review(payload: ReviewCreate, service: FlashcardService = Depends(_get_service)):
    try:
        badges = service.submit_review(payload.species_id, payload.result)
    except Exception as exc:
        logger.error("Review submission failed: %s", exc, exc_info=True)
        return ReviewResponse(success=False, error=str(exc), message="Failed to submit review")
    return ReviewResponse(success=True, badges_awarded=[BadgeRead.model_validate(b) for b in badges])


@router.post("/session", response_model=SessionCreateResponse, summary="Démarre une session")
def start_session(payload: SessionCreate, service: FlashcardService = Depends(_get_service)):
    session = service.start_session(payload.species_ids)
    return SessionCreateResponse(session_id=str(session.id))


@router.post(
    "/session/{session_id}/complete",
    response_model=SessionSummary,
    summary="Clôture une session",
)
def complete_session(
    session_id: int,
    payload: SessionComplete,
    service: FlashcardService = Depends(_get_service),
):
    try:
        return service.complete_session(session_id, payload.correct_answers, payload.incorrect_answers)
    except FlashcardError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code)


@router.get("/progress", response_model=ProgressSummary, summary="Résumé de progression")
def get_progress(service: FlashcardService = Depends(_get_service)):
    return service.get_progress_summary()


@router.get("/badges", response_model=List[BadgeWithStatus], summary="Badges et statut d'obtention")
def list_badges(service: FlashcardService = Depends(_get_service)):
    return service.list_badges()
