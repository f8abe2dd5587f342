from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, UniqueConstraint, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from birdguide.db.base_class import Base

if TYPE_CHECKING:
    from ..species_model import Species
    from ..user.user_model import User

MAX_MASTERY_LEVEL = 5


class UserSpeciesProgress(Base):
    """
    Compteurs de progression d'un utilisateur pour une espèce.
    Une seule ligne par couple (user_id, species_id).
    """

    __tablename__ = "user_species_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    species_id: Mapped[int] = mapped_column(ForeignKey("species.id"), index=True, nullable=False)

    times_seen: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    times_correct: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    last_seen: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # times_correct / times_seen
    accuracy: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
    # Échelle 0-5
    mastery_level: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    is_mastered: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="species_progress")
    species: Mapped["Species"] = relationship()

    __table_args__ = (UniqueConstraint("user_id", "species_id", name="_user_species_uc"),)
