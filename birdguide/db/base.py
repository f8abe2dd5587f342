"""Imports every model so ``Base.metadata`` knows the full schema."""

from birdguide.db.base_class import Base

# Utilisateurs & badges
from birdguide.models.user.user_model import User
from birdguide.models.user.badge_model import Badge, UserBadge

# Référentiel espèces
from birdguide.models.species_model import Species, SpeciesCommonName, SpeciesMedia

# Flashcards & progression
from birdguide.models.flashcard.flashcard_review_model import FlashcardReview
from birdguide.models.flashcard.flashcard_session_model import FlashcardSession
from birdguide.models.progress.user_species_progress_model import UserSpeciesProgress

# Analytics
from birdguide.models.analytics.event_model import Event

__all__ = (
    "Base",
    "User",
    "Badge",
    "UserBadge",
    "Species",
    "SpeciesCommonName",
    "SpeciesMedia",
    "FlashcardReview",
    "FlashcardSession",
    "UserSpeciesProgress",
    "Event",
)
