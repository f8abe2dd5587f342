# -*- coding: utf-8 -*-
"""
Rattache photos et enregistrements sonores aux espèces déjà importées.

Usage :
    python scripts/populate_species_media.py data/argentina-media.json

Chaque entrée ressemble à ``{birdID, scientificName, photos: [...], sounds: [...]}``
où photos et sons portent ``url``, ``MLId``, ``contributor``, ``date`` et ``location``.
Les espèces inconnues sont ignorées ; relancer le script n'ajoute rien.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

# Pour que les imports 'birdguide....' fonctionnent si on lance depuis la racine
sys.path.append('.')
from birdguide.db import base as _base  # noqa: F401

from sqlalchemy.orm import Session

from birdguide.crud import species_crud
from birdguide.db.session import SessionLocal
from birdguide.models.species_model import MediaType

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("populate_species_media")

MEDIA_SOURCE = "macaulay"
ATTRIBUTION_SUFFIX = "Macaulay Library, Cornell Lab of Ornithology"

_MEDIA_KEYS = (("photos", MediaType.PHOTO), ("sounds", MediaType.AUDIO))


def parse_media_content(content: str) -> List[Dict[str, Any]]:
    """Tableau JSON ou une entrée par ligne ; seules les entrées avec ``birdID`` sont gardées."""
    stripped = content.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        data = json.loads(stripped)
    else:
        data = [json.loads(line) for line in stripped.splitlines() if line.strip()]

    records = []
    for item in data:
        if not isinstance(item, dict) or not item.get("birdID"):
            logger.warning("Élément ignoré : %r", item)
            continue
        records.append(item)
    return records


def attribution_for(contributor: str | None) -> str:
    if contributor:
        return f"{contributor} / {ATTRIBUTION_SUFFIX}"
    return ATTRIBUTION_SUFFIX


def import_media(db: Session, records: List[Dict[str, Any]]) -> Dict[str, int]:
    """Retourne les compteurs ``photos``, ``sounds`` et ``skipped_species``. Ne commit pas."""
    stats = {"photos": 0, "sounds": 0, "skipped_species": 0}

    for record in records:
        ebird_id = str(record["birdID"]).strip()
        species = species_crud.get_species_by_ebird_id(db, ebird_id)
        if species is None:
            logger.warning("Espèce inconnue %s (%s), ignorée.", ebird_id, record.get("scientificName"))
            stats["skipped_species"] += 1
            continue

        for key, media_type in _MEDIA_KEYS:
            for entry in record.get(key) or []:
                url = (entry.get("url") or "").strip()
                if not url:
                    continue
                added = species_crud.add_media(
                    db,
                    species,
                    media_type=media_type,
                    url=url,
                    source=MEDIA_SOURCE,
                    source_id=str(entry["MLId"]) if entry.get("MLId") else None,
                    contributor=entry.get("contributor"),
                    attribution_text=attribution_for(entry.get("contributor")),
                    quality_rank=1,
                    date=entry.get("date"),
                    location=entry.get("location"),
                )
                if added is not None:
                    stats[key] += 1

    return stats


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Importe les médias (photos, sons) des espèces.")
    parser.add_argument("file", help="Fichier JSON des médias")
    args = parser.parse_args(argv)

    path = Path(args.file)
    if not path.exists():
        logger.error("Fichier introuvable : %s", path.resolve())
        return 1

    records = parse_media_content(path.read_text(encoding="utf-8"))
    logger.info("%s espèces lues depuis %s", len(records), path)

    db = SessionLocal()
    try:
        stats = import_media(db, records)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Import interrompu, aucune modification conservée.")
        return 1
    finally:
        db.close()

    logger.info(
        "✅ SUCCÈS : %s photos, %s sons ajoutés ; %s espèces inconnues.",
        stats["photos"],
        stats["sounds"],
        stats["skipped_species"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
