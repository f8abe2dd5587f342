import enum
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from birdguide.db.base_class import Base


class EventType(str, enum.Enum):
    FLASHCARD_REVIEW = "flashcard_review"
    SESSION_STARTED = "session_started"
    SESSION_COMPLETED = "session_completed"
    BADGE_EARNED = "badge_earned"
    STREAK_UPDATED = "streak_updated"
    XP_GAINED = "xp_gained"
    SPECIES_MASTERED = "species_mastered"


class Event(Base):
    """Journal d'événements métier, en écriture seule pour l'API."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    event_type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="eventtype", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_events_user_event_type", "user_id", "event_type"),
        Index("ix_events_timestamp", "timestamp"),
    )
