import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from birdguide.db.base_class import Base

if TYPE_CHECKING:
    from ..species_model import Species
    from ..user.user_model import User


class ReviewResult(str, enum.Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


class FlashcardReview(Base):
    """
    Une ligne par réponse à une flashcard. Table en ajout seul.
    """

    __tablename__ = "flashcard_reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    # Pas de vérification applicative de l'espèce : la contrainte FK relève du stockage.
    species_id: Mapped[int] = mapped_column(ForeignKey("species.id"), index=True, nullable=False)
    result: Mapped[ReviewResult] = mapped_column(
        Enum(ReviewResult, name="reviewresult", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    reviewed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    response_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    difficulty: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Champs SM-2 déclarés mais jamais calculés
    interval: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    repetitions: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ease_factor: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    next_review_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship()
    species: Mapped["Species"] = relationship()
