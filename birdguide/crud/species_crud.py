from typing import Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from birdguide.models.species_model import MediaType, Species, SpeciesCommonName, SpeciesMedia


def get_species(db: Session, species_id: int) -> Optional[Species]:
    return db.get(Species, species_id)


def get_all_species(db: Session) -> List[Species]:
    return db.query(Species).all()


def get_species_by_ebird_id(db: Session, ebird_id: str) -> Optional[Species]:
    return db.query(Species).filter(Species.ebird_id == ebird_id).first()


def get_common_names_for_species(
    db: Session, species_ids: Sequence[int], lang_code: str
) -> Dict[int, str]:
    """Un seul aller-retour pour toutes les espèces ; première ligne par espèce."""
    if not species_ids:
        return {}

    rows = (
        db.query(SpeciesCommonName.species_id, SpeciesCommonName.common_name)
        .filter(
            SpeciesCommonName.species_id.in_(list(species_ids)),
            SpeciesCommonName.lang_code == lang_code,
        )
        .all()
    )
    names: Dict[int, str] = {}
    for species_id, common_name in rows:
        names.setdefault(species_id, common_name)
    return names


def get_default_media_for_species(
    db: Session, species_ids: Sequence[int]
) -> Dict[int, Dict[MediaType, SpeciesMedia]]:
    """
    Photo et son affichés pour chaque espèce, en une requête.
    Le média marqué par défaut gagne, sinon le mieux classé.
    """
    if not species_ids:
        return {}

    rows = (
        db.query(SpeciesMedia)
        .filter(
            SpeciesMedia.species_id.in_(list(species_ids)),
            SpeciesMedia.media_type.in_([MediaType.PHOTO, MediaType.AUDIO]),
        )
        .order_by(SpeciesMedia.is_default.desc(), SpeciesMedia.quality_rank.desc(), SpeciesMedia.id)
        .all()
    )
    media: Dict[int, Dict[MediaType, SpeciesMedia]] = {}
    for row in rows:
        media.setdefault(row.species_id, {}).setdefault(row.media_type, row)
    return media


def get_random_species(db: Session, limit: int) -> List[Species]:
    return db.query(Species).order_by(func.random()).limit(limit).all()


def create_species(
    db: Session,
    *,
    scientific_name: str,
    ebird_id: str,
    genus: Optional[str] = None,
    family: Optional[str] = None,
    order_name: Optional[str] = None,
) -> Species:
    species = Species(
        scientific_name=scientific_name,
        ebird_id=ebird_id,
        genus=genus,
        family=family,
        order_name=order_name,
    )
    db.add(species)
    db.flush()
    return species


def add_common_name(
    db: Session, species: Species, lang_code: str, common_name: str
) -> Optional[SpeciesCommonName]:
    """Ajoute un nom vernaculaire sauf s'il existe déjà à l'identique."""
    existing = (
        db.query(SpeciesCommonName)
        .filter(
            SpeciesCommonName.species_id == species.id,
            SpeciesCommonName.lang_code == lang_code,
            SpeciesCommonName.common_name == common_name,
        )
        .first()
    )
    if existing:
        return None

    row = SpeciesCommonName(species_id=species.id, lang_code=lang_code, common_name=common_name)
    db.add(row)
    db.flush()
    return row


def add_media(
    db: Session,
    species: Species,
    *,
    media_type: MediaType,
    url: str,
    source: Optional[str] = None,
    source_id: Optional[str] = None,
    contributor: Optional[str] = None,
    attribution_text: Optional[str] = None,
    quality_rank: int = 0,
    date: Optional[str] = None,
    location: Optional[str] = None,
) -> Optional[SpeciesMedia]:
    """
    Ajoute un média sauf s'il est déjà connu (même espèce, type et identifiant source).
    Le premier média d'un type devient celui par défaut.
    """
    base_query = db.query(SpeciesMedia).filter(
        SpeciesMedia.species_id == species.id,
        SpeciesMedia.media_type == media_type,
    )
    if source_id and base_query.filter(SpeciesMedia.source_id == source_id).first():
        return None

    has_default = base_query.filter(SpeciesMedia.is_default.is_(True)).first() is not None
    media = SpeciesMedia(
        species_id=species.id,
        media_type=media_type,
        url=url,
        source=source,
        source_id=source_id,
        contributor=contributor,
        attribution_text=attribution_text,
        quality_rank=quality_rank,
        is_default=not has_default,
        date=date,
        location=location,
    )
    db.add(media)
    db.flush()
    return media
