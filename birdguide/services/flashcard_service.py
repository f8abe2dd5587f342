from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Sequence

from sqlalchemy.orm import Session

from birdguide.core.config import settings
from birdguide.crud import badge_crud, event_crud, progress_crud, review_crud, session_crud, species_crud
from birdguide.models.analytics.event_model import EventType
from birdguide.models.flashcard.flashcard_review_model import ReviewResult
from birdguide.models.flashcard.flashcard_session_model import FlashcardSession
from birdguide.models.user.badge_model import Badge
from birdguide.models.user.user_model import User
from birdguide.schemas.flashcard_schema import ProgressSummary, SessionSpecies, SessionSummary
from birdguide.schemas.user.badge_schema import BadgeWithStatus
from birdguide.services import badge_service, progress_service
from birdguide.services.species_service import default_media_payload

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FlashcardError(Exception):
    """Erreur métier des sessions de flashcards, convertie en HTTP par le routeur."""

    code: str
    status_code: int = 400

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.code


def round_percentage(numerator: int, denominator: int) -> int:
    """Pourcentage entier arrondi demi vers le haut, calculé en entiers (33/40 -> 83)."""
    return (numerator * 200 + denominator) // (2 * denominator)


def _as_utc(value: datetime) -> datetime:
    # SQLite restitue des datetimes naïfs
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FlashcardService:
    """Logique métier des flashcards pour un utilisateur authentifié."""

    def __init__(self, db: Session, user: User, session_size: int | None = None):
        self.db = db
        self.user = user
        self.session_size = session_size or settings.FLASHCARD_SESSION_SIZE

    # ------------------------------------------------------------------
    # Tirage
    # ------------------------------------------------------------------
    def get_species_for_session(self) -> List[SessionSpecies]:
        species = species_crud.get_random_species(self.db, self.session_size)
        media = species_crud.get_default_media_for_species(self.db, [s.id for s in species])

        result = []
        for s in species:
            item = SessionSpecies.model_validate(s)
            item.default_photo, item.default_audio = default_media_payload(media.get(s.id))
            result.append(item)
        return result

    # ------------------------------------------------------------------
    # Réponses
    # ------------------------------------------------------------------
    def submit_review(self, species_id: int, result: ReviewResult) -> List[Badge]:
        """
        Enregistre une réponse puis met à jour progression, badges et journal.
        Tout est validé en une seule transaction ; en cas d'échec rien n'est conservé.
        """
        user_id = self.user.id
        try:
            review_crud.create_review(self.db, user_id, species_id, result)

            update = progress_service.update_progress(self.db, user_id, species_id, result)
            if update.became_mastered:
                event_crud.log_event(self.db, user_id, EventType.SPECIES_MASTERED, {"speciesId": species_id})

            awarded = badge_service.check_and_award_badges(self.db, user_id)

            event_crud.log_event(
                self.db,
                user_id,
                EventType.FLASHCARD_REVIEW,
                {"speciesId": species_id, "result": result.value},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                "Review submission failed for user %s / species %s",
                user_id,
                species_id,
                exc_info=True,
            )
            raise

        logger.info(
            "Review recorded for user %s / species %s (%s), %s badge(s) awarded",
            user_id,
            species_id,
            result.value,
            len(awarded),
        )
        return awarded

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def start_session(self, species_ids: Sequence[int]) -> FlashcardSession:
        session = session_crud.create_session(self.db, self.user.id, list(species_ids))
        event_crud.log_event(
            self.db,
            self.user.id,
            EventType.SESSION_STARTED,
            {"sessionId": session.id, "speciesCount": len(session.species_ids)},
        )
        self.db.commit()
        self.db.refresh(session)
        logger.info("Flashcard session %s started for user %s", session.id, self.user.id)
        return session

    def complete_session(self, session_id: int, correct_answers: int, incorrect_answers: int) -> SessionSummary:
        session = session_crud.get_session(self.db, session_id)
        if session is None or session.user_id != self.user.id:
            raise FlashcardError("session_not_found", status_code=404)
        if session.is_completed:
            raise FlashcardError("session_already_completed", status_code=409)

        now = datetime.now(timezone.utc)
        total = correct_answers + incorrect_answers

        session.completed_at = now
        session.correct_answers = correct_answers
        session.incorrect_answers = incorrect_answers
        session.total_cards = total
        session.accuracy = (correct_answers / total) if total else None
        session.duration_seconds = max(int((now - _as_utc(session.started_at)).total_seconds()), 0)

        event_crud.log_event(
            self.db,
            self.user.id,
            EventType.SESSION_COMPLETED,
            {
                "sessionId": session.id,
                "correctAnswers": correct_answers,
                "incorrectAnswers": incorrect_answers,
                "accuracy": session.accuracy,
            },
        )
        self.db.commit()
        self.db.refresh(session)
        logger.info("Flashcard session %s completed for user %s", session.id, self.user.id)
        return self.to_summary(session)

    @staticmethod
    def to_summary(session: FlashcardSession) -> SessionSummary:
        return SessionSummary(
            session_id=str(session.id),
            species_ids=list(session.species_ids or []),
            started_at=session.started_at,
            completed_at=session.completed_at,
            total_cards=session.total_cards,
            correct_answers=session.correct_answers or 0,
            incorrect_answers=session.incorrect_answers or 0,
            accuracy=session.accuracy,
            duration=session.duration_seconds,
        )

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------
    def get_progress_summary(self) -> ProgressSummary:
        total_species, mastered, seen, correct = progress_crud.get_totals_for_user(self.db, self.user.id)
        accuracy = round_percentage(correct, seen) if seen else 0
        return ProgressSummary(total_species=total_species, mastered_species=mastered, accuracy=accuracy)

    def list_badges(self) -> List[BadgeWithStatus]:
        return badge_crud.get_badges_with_status(self.db, self.user.id)
