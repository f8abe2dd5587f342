from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from birdguide.models.user.badge_model import Badge, UserBadge
from birdguide.schemas.user.badge_schema import BadgeWithStatus


def get_badge_by_name(db: Session, name: str) -> Optional[Badge]:
    return db.query(Badge).filter(Badge.name == name).first()


def user_has_badge(db: Session, user_id: int, badge_id: int) -> bool:
    return (
        db.query(UserBadge.id)
        .filter(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        .first()
        is not None
    )


def award_badge(db: Session, user_id: int, badge: Badge) -> Optional[UserBadge]:
    """Crée le lien utilisateur/badge ; ``None`` si le badge est déjà acquis."""
    if user_has_badge(db, user_id, badge.id):
        return None

    user_badge = UserBadge(user_id=user_id, badge_id=badge.id, earned_at=datetime.now(timezone.utc))
    db.add(user_badge)
    db.flush()
    return user_badge


def get_badges_with_status(db: Session, user_id: int) -> List[BadgeWithStatus]:
    badges = db.query(Badge).filter(Badge.is_active.is_(True)).order_by(Badge.id).all()
    user_badges = db.query(UserBadge).filter(UserBadge.user_id == user_id).all()
    earned_map = {ub.badge_id: ub.earned_at for ub in user_badges}

    return [
        BadgeWithStatus(
            id=badge.id,
            name=badge.name,
            title=badge.title,
            description=badge.description,
            earned=badge.id in earned_map,
            earned_at=earned_map.get(badge.id),
        )
        for badge in badges
    ]


def upsert_badge(
    db: Session,
    *,
    name: str,
    title: str,
    description: str,
    icon: Optional[str] = None,
    color: Optional[str] = None,
) -> tuple[Badge, bool]:
    """Retourne ``(badge, created)`` ; un badge existant n'est pas modifié."""
    badge = get_badge_by_name(db, name)
    if badge:
        return badge, False

    badge = Badge(name=name, title=title, description=description, icon=icon, color=color)
    db.add(badge)
    db.flush()
    return badge, True
