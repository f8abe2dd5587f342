# -*- coding: utf-8 -*-
"""
Importe un fichier d'espèces et leurs noms vernaculaires.

Usage :
    python scripts/populate_species.py data/argentina-es_AR.json

Le fichier est un tableau JSON (ou du JSON ligne par ligne) d'objets
``{birdID, commonName, scientificName}``. La locale des noms vernaculaires est
déduite du nom de fichier (``...-es_AR.json`` -> ``es-AR``).
"""

import argparse
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

# Pour que les imports 'birdguide....' fonctionnent si on lance depuis la racine
sys.path.append('.')
from birdguide.db import base as _base  # noqa: F401

from sqlalchemy.orm import Session

from birdguide.crud import species_crud
from birdguide.db.session import SessionLocal

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("populate_species")

_LOCALE_IN_FILENAME = re.compile(r"-([a-z]{2})_([A-Z]{2})\.json$")


def extract_locale_from_filename(file_path: str) -> str:
    match = _LOCALE_IN_FILENAME.search(Path(file_path).name)
    if not match:
        raise ValueError(
            "Filename must end with -<ll_CC>.json (e.g. argentina-es_AR.json, argentina-en_US.json)"
        )
    return f"{match.group(1)}-{match.group(2)}"


def parse_species_content(content: str) -> List[Dict[str, Any]]:
    """Accepte un tableau JSON ou une entrée JSON par ligne."""
    stripped = content.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        data = json.loads(stripped)
    else:
        data = [json.loads(line) for line in stripped.splitlines() if line.strip()]

    records = []
    for item in data:
        if not isinstance(item, dict):
            logger.warning("Élément ignoré (pas un objet) : %r", item)
            continue
        if not item.get("birdID") or not item.get("scientificName"):
            logger.warning("Élément ignoré (birdID ou scientificName manquant) : %r", item)
            continue
        records.append(item)
    return records


def import_species(db: Session, records: List[Dict[str, Any]], locale: str) -> Tuple[int, int]:
    """Retourne ``(espèces créées, noms ajoutés)``. Ne commit pas."""
    created = 0
    names_added = 0

    for record in records:
        ebird_id = str(record["birdID"]).strip()
        scientific_name = str(record["scientificName"]).strip()

        species = species_crud.get_species_by_ebird_id(db, ebird_id)
        if species is None:
            species = species_crud.create_species(
                db,
                scientific_name=scientific_name,
                ebird_id=ebird_id,
                genus=scientific_name.split()[0] if scientific_name else None,
            )
            created += 1

        common_name = (record.get("commonName") or "").strip()
        if common_name and species_crud.add_common_name(db, species, locale, common_name):
            names_added += 1

    return created, names_added


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Importe des espèces et leurs noms vernaculaires.")
    parser.add_argument("file", help="Fichier <nom>-<ll_CC>.json")
    args = parser.parse_args(argv)

    locale = extract_locale_from_filename(args.file)
    path = Path(args.file)
    if not path.exists():
        logger.error("Fichier introuvable : %s", path.resolve())
        return 1

    records = parse_species_content(path.read_text(encoding="utf-8"))
    logger.info("%s espèces lues depuis %s (locale %s)", len(records), path, locale)

    db = SessionLocal()
    try:
        created, names_added = import_species(db, records, locale)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Import interrompu, aucune modification conservée.")
        return 1
    finally:
        db.close()

    logger.info("✅ SUCCÈS : %s espèces créées, %s noms ajoutés.", created, names_added)
    return 0


if __name__ == "__main__":
    sys.exit(main())
