from sqlalchemy import Integer, String, Boolean, DateTime, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from birdguide.db.base_class import Base
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from .badge_model import UserBadge
    from ..progress.user_species_progress_model import UserSpeciesProgress

DEFAULT_LOCALE = "es-AR"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Identifiant émis par le fournisseur d'identité (Auth0)
    auth0_id: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    preferred_locale: Mapped[str] = mapped_column(
        String(10), nullable=False, default=DEFAULT_LOCALE, server_default=DEFAULT_LOCALE
    )
    preferred_region_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # --- Gamification ---
    xp: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    current_streak: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    last_active_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    # Suppression logique
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user_badges: Mapped[List["UserBadge"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    species_progress: Mapped[List["UserSpeciesProgress"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
