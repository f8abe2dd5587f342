from typing import Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from birdguide.models.progress.user_species_progress_model import UserSpeciesProgress


def get_progress(
    db: Session, user_id: int, species_id: int, *, for_update: bool = False
) -> Optional[UserSpeciesProgress]:
    query = db.query(UserSpeciesProgress).filter(
        UserSpeciesProgress.user_id == user_id,
        UserSpeciesProgress.species_id == species_id,
    )
    if for_update:
        # Verrou de ligne sur PostgreSQL, ignoré par SQLite
        query = query.with_for_update()
    return query.first()


def get_totals_for_user(db: Session, user_id: int) -> Tuple[int, int, int, int]:
    """(espèces suivies, espèces maîtrisées, vues cumulées, réponses justes cumulées)."""
    row = (
        db.query(
            func.count(UserSpeciesProgress.id),
            func.coalesce(func.sum(case((UserSpeciesProgress.is_mastered.is_(True), 1), else_=0)), 0),
            func.coalesce(func.sum(UserSpeciesProgress.times_seen), 0),
            func.coalesce(func.sum(UserSpeciesProgress.times_correct), 0),
        )
        .filter(UserSpeciesProgress.user_id == user_id)
        .one()
    )
    return int(row[0]), int(row[1]), int(row[2]), int(row[3])
