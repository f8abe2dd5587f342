from datetime import datetime
from typing import List, Optional

from pydantic import Field

from birdguide.models.flashcard.flashcard_review_model import ReviewResult
from birdguide.schemas.common_schema import CamelModel
from birdguide.schemas.species_schema import SpeciesMediaRead
from birdguide.schemas.user.badge_schema import BadgeRead


# --- Tirage des espèces ---
class SessionSpecies(CamelModel):
    id: int
    scientific_name: str
    ebird_id: str = Field(alias="eBirdId")
    default_photo: Optional[SpeciesMediaRead] = None
    default_audio: Optional[SpeciesMediaRead] = None


# --- Réponses aux flashcards ---
class ReviewCreate(CamelModel):
    species_id: int
    result: ReviewResult


class ReviewResponse(CamelModel):
    success: bool
    badges_awarded: List[BadgeRead] = Field(default_factory=list)
    error: Optional[str] = None
    message: Optional[str] = None


# --- Sessions ---
class SessionCreate(CamelModel):
    species_ids: List[int] = Field(default_factory=list)


class SessionCreateResponse(CamelModel):
    session_id: str


class SessionComplete(CamelModel):
    correct_answers: int = Field(ge=0)
    incorrect_answers: int = Field(ge=0)


class SessionSummary(CamelModel):
    session_id: str
    species_ids: List[int]
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_cards: Optional[int] = None
    correct_answers: int
    incorrect_answers: int
    accuracy: Optional[float] = None
    duration: Optional[int] = None


# --- Progression ---
class ProgressSummary(CamelModel):
    total_species: int
    mastered_species: int
    # Pourcentage entier arrondi
    accuracy: int
