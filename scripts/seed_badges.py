# -*- coding: utf-8 -*-

import logging
import sys

# Pour que les imports 'birdguide....' fonctionnent si on lance depuis la racine
sys.path.append('.')
from birdguide.db import base as _base  # noqa: F401

from sqlalchemy.orm import Session

from birdguide.crud import badge_crud
from birdguide.db.session import SessionLocal
from birdguide.gamification.badge_rules import BADGE_CATALOGUE

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("seed_badges")


def seed_badges(db: Session) -> int:
    """Insère les badges du catalogue absents de la base ; retourne le nombre créé."""
    created = 0
    for definition in BADGE_CATALOGUE:
        _, was_created = badge_crud.upsert_badge(
            db,
            name=definition.name,
            title=definition.title,
            description=definition.description,
            icon=definition.icon,
            color=definition.color,
        )
        if was_created:
            created += 1
            logger.info("Badge '%s' créé.", definition.name)
        else:
            logger.info("Badge '%s' déjà présent.", definition.name)
    return created


def main() -> int:
    db = SessionLocal()
    try:
        created = seed_badges(db)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Seeding des badges interrompu.")
        return 1
    finally:
        db.close()
    logger.info("✅ SUCCÈS : %s badge(s) créé(s).", created)
    return 0


if __name__ == "__main__":
    sys.exit(main())
