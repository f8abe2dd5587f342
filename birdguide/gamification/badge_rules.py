"""
Règles d'attribution des badges et catalogue de référence.

 - Le catalogue (name, title, description, icon, color) est inséré en base par
   ``scripts/seed_badges.py``.
 - Les critères sont évalués après chaque réponse à une flashcard par
   ``badge_service.check_and_award_badges``.

Le catalogue ne contient que ``first_review``, seul badge doté d'un critère.
Un badge n'y entre qu'accompagné de son critère dans ``BADGE_CRITERIA``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

FIRST_REVIEW = "first_review"


@dataclass(frozen=True)
class BadgeDefinition:
    name: str
    title: str
    description: str
    icon: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class ReviewStats:
    """Instantané des compteurs utilisateur juste après l'insertion d'une réponse."""

    total_reviews: int


BadgeCriterion = Callable[[ReviewStats], bool]


BADGE_CATALOGUE: List[BadgeDefinition] = [
    BadgeDefinition(
        name=FIRST_REVIEW,
        title="Primer vuelo",
        description="Respondiste tu primera tarjeta.",
        icon="feather",
        color="#4caf50",
    ),
]


# Critères par nom de badge ; un badge absent de ce mapping n'est jamais attribué automatiquement.
BADGE_CRITERIA: Dict[str, BadgeCriterion] = {
    FIRST_REVIEW: lambda stats: stats.total_reviews == 1,
}
