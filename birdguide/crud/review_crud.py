from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from birdguide.models.flashcard.flashcard_review_model import FlashcardReview, ReviewResult


def create_review(db: Session, user_id: int, species_id: int, result: ReviewResult) -> FlashcardReview:
    # Aucune déduplication : chaque soumission crée une ligne.
    review = FlashcardReview(
        user_id=user_id,
        species_id=species_id,
        result=result,
        reviewed_at=datetime.now(timezone.utc),
    )
    db.add(review)
    db.flush()
    return review


def count_reviews_for_user(db: Session, user_id: int) -> int:
    return (
        db.query(func.count(FlashcardReview.id))
        .filter(FlashcardReview.user_id == user_id)
        .scalar()
        or 0
    )
