import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from birdguide.crud import progress_crud
from birdguide.models.flashcard.flashcard_review_model import ReviewResult
from birdguide.models.progress.user_species_progress_model import MAX_MASTERY_LEVEL, UserSpeciesProgress

logger = logging.getLogger(__name__)

MASTERY_ACCURACY_THRESHOLD = 0.8
MASTERY_MIN_TIMES_SEEN = 5


@dataclass
class ProgressUpdate:
    progress: UserSpeciesProgress
    became_mastered: bool = False


def new_progress(user_id: int, species_id: int, is_correct: bool, now: datetime) -> UserSpeciesProgress:
    times_correct = 1 if is_correct else 0
    return UserSpeciesProgress(
        user_id=user_id,
        species_id=species_id,
        times_seen=1,
        times_correct=times_correct,
        accuracy=float(times_correct),
        mastery_level=1,
        is_mastered=False,
        last_seen=now,
    )


def apply_review(progress: UserSpeciesProgress, is_correct: bool, now: datetime) -> bool:
    """
    Met à jour les compteurs d'une ligne existante.
    Retourne True si la ligne vient de passer à ``is_mastered``.
    """
    was_mastered = bool(progress.is_mastered)

    progress.times_seen = (progress.times_seen or 0) + 1
    if is_correct:
        progress.times_correct = (progress.times_correct or 0) + 1
    progress.accuracy = progress.times_correct / progress.times_seen
    progress.last_seen = now

    if progress.accuracy >= MASTERY_ACCURACY_THRESHOLD and progress.times_seen >= MASTERY_MIN_TIMES_SEEN:
        progress.mastery_level = min((progress.mastery_level or 0) + 1, MAX_MASTERY_LEVEL)
    # Jamais de retour en arrière une fois maîtrisée
    progress.is_mastered = was_mastered or progress.mastery_level >= MAX_MASTERY_LEVEL

    return progress.is_mastered and not was_mastered


def update_progress(db: Session, user_id: int, species_id: int, result: ReviewResult) -> ProgressUpdate:
    """
    Lit (verrou de ligne) ou crée la progression du couple utilisateur/espèce.
    Pas de commit : s'exécute dans la transaction de l'appelant.
    """
    is_correct = result == ReviewResult.CORRECT
    now = datetime.now(timezone.utc)

    progress = progress_crud.get_progress(db, user_id, species_id, for_update=True)
    if progress is None:
        try:
            with db.begin_nested():
                progress = new_progress(user_id, species_id, is_correct, now)
                db.add(progress)
            logger.info("Progress created for user %s / species %s", user_id, species_id)
            return ProgressUpdate(progress=progress)
        except IntegrityError:
            # Une requête concurrente a créé la ligne entre-temps.
            logger.info(
                "Concurrent progress insert for user %s / species %s, retrying as update",
                user_id,
                species_id,
            )
            progress = progress_crud.get_progress(db, user_id, species_id, for_update=True)
            if progress is None:
                raise

    became_mastered = apply_review(progress, is_correct, now)
    db.flush()
    logger.info(
        "Progress updated for user %s / species %s: seen=%s correct=%s level=%s",
        user_id,
        species_id,
        progress.times_seen,
        progress.times_correct,
        progress.mastery_level,
    )
    return ProgressUpdate(progress=progress, became_mastered=became_mastered)
