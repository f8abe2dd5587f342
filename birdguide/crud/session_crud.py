from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from birdguide.models.flashcard.flashcard_session_model import FlashcardSession


def create_session(db: Session, user_id: int, species_ids: List[int]) -> FlashcardSession:
    session = FlashcardSession(
        user_id=user_id,
        species_ids=list(species_ids),
        started_at=datetime.now(timezone.utc),
    )
    db.add(session)
    db.flush()
    return session


def get_session(db: Session, session_id: int) -> Optional[FlashcardSession]:
    return db.get(FlashcardSession, session_id)
