import logging
from typing import List

from sqlalchemy.orm import Session

from birdguide.crud import badge_crud, event_crud, review_crud
from birdguide.gamification.badge_rules import BADGE_CRITERIA, ReviewStats
from birdguide.models.analytics.event_model import EventType
from birdguide.models.user.badge_model import Badge

logger = logging.getLogger(__name__)


def check_and_award_badges(db: Session, user_id: int) -> List[Badge]:
    """Évalue les critères et retourne uniquement les badges obtenus par cet appel."""
    stats = ReviewStats(total_reviews=review_crud.count_reviews_for_user(db, user_id))
    awarded: List[Badge] = []

    for badge_name, criterion in BADGE_CRITERIA.items():
        if not criterion(stats):
            continue

        badge = badge_crud.get_badge_by_name(db, badge_name)
        if badge is None or not badge.is_active:
            logger.warning("Badge '%s' is not seeded or inactive, skipping award", badge_name)
            continue

        user_badge = badge_crud.award_badge(db, user_id, badge)
        if user_badge is None:
            continue

        event_crud.log_event(
            db,
            user_id,
            EventType.BADGE_EARNED,
            {"badgeId": badge.id, "badgeName": badge.name},
        )
        logger.info("Badge '%s' awarded to user %s", badge.name, user_id)
        awarded.append(badge)

    return awarded
