import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from birdguide.models.analytics.event_model import Event, EventType

logger = logging.getLogger(__name__)


def log_event(
    db: Session,
    user_id: int,
    event_type: EventType,
    data: Optional[Dict[str, Any]] = None,
) -> Event:
    """
    Ajoute une ligne au journal d'événements.
    Pas de commit ici : l'appelant décide de la transaction.
    """
    event = Event(
        user_id=user_id,
        event_type=event_type,
        data=data or {},
        timestamp=datetime.now(timezone.utc),
    )
    db.add(event)
    db.flush()
    logger.debug("Event %s logged for user %s", event_type.value, user_id)
    return event
