"""Lecture du référentiel d'espèces avec leur nom vernaculaire localisé."""

from __future__ import annotations

import logging
import unicodedata
from typing import Dict, List, Optional, Union

from sqlalchemy.orm import Session

from birdguide.crud import species_crud
from birdguide.models.species_model import MediaType, Species, SpeciesMedia
from birdguide.schemas.species_schema import SpeciesMediaRead, SpeciesWithCommonName

logger = logging.getLogger(__name__)


class InvalidSpeciesIdError(ValueError):
    """L'identifiant fourni n'est pas un entier ; levée avant tout accès en base."""


def _strip_accents(s: str) -> str:
    return "".join(c for c in unicodedata.normalize("NFD", s) if unicodedata.category(c) != "Mn")


def common_name_sort_key(common_name: Optional[str]) -> tuple[str, str]:
    """Clé de tri proche d'une collation : accents puis casse ignorés, la chaîne brute départage."""
    name = common_name or ""
    return _strip_accents(name).casefold(), name


def default_media_payload(
    media: Optional[Dict[MediaType, SpeciesMedia]],
) -> tuple[Optional[SpeciesMediaRead], Optional[SpeciesMediaRead]]:
    """Photo et son par défaut, ou None quand l'espèce n'en a pas."""
    media = media or {}
    photo = media.get(MediaType.PHOTO)
    audio = media.get(MediaType.AUDIO)
    return (
        SpeciesMediaRead.model_validate(photo) if photo else None,
        SpeciesMediaRead.model_validate(audio) if audio else None,
    )


def parse_species_id(raw: Union[str, int]) -> int:
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise InvalidSpeciesIdError(raw)


class SpeciesService:
    def __init__(self, db: Session):
        self.db = db

    def list_species(self, locale: str) -> List[SpeciesWithCommonName]:
        species = species_crud.get_all_species(self.db)
        ids = [s.id for s in species]
        names = species_crud.get_common_names_for_species(self.db, ids, locale)
        media = species_crud.get_default_media_for_species(self.db, ids)

        result = [self._with_common_name(s, names.get(s.id), media.get(s.id)) for s in species]
        result.sort(key=lambda item: common_name_sort_key(item.common_name))
        logger.info("Listed %s species for locale %s", len(result), locale)
        return result

    def get_species(self, species_id: Union[str, int], locale: str) -> Optional[SpeciesWithCommonName]:
        parsed_id = parse_species_id(species_id)

        species = species_crud.get_species(self.db, parsed_id)
        if species is None:
            logger.warning("Species %s not found", parsed_id)
            return None

        names = species_crud.get_common_names_for_species(self.db, [species.id], locale)
        media = species_crud.get_default_media_for_species(self.db, [species.id])
        return self._with_common_name(species, names.get(species.id), media.get(species.id))

    @staticmethod
    def _with_common_name(
        species: Species,
        common_name: Optional[str],
        media: Optional[Dict[MediaType, SpeciesMedia]] = None,
    ) -> SpeciesWithCommonName:
        item = SpeciesWithCommonName.model_validate(species)
        item.common_name = common_name
        item.default_photo, item.default_audio = default_media_payload(media)
        return item
