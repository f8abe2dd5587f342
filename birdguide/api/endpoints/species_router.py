import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from birdguide.api.dependencies import get_db
from birdguide.core.config import settings
from birdguide.schemas.common_schema import ApiResponse
from birdguide.schemas.species_schema import SpeciesWithCommonName
from birdguide.services.species_service import InvalidSpeciesIdError, SpeciesService

logger = logging.getLogger(__name__)

router = APIRouter()

FETCH_FAILED_MESSAGE = "Failed to fetch species"


@router.get("", response_model=ApiResponse[List[SpeciesWithCommonName]], summary="Liste des espèces")
def list_species(
    lang: Optional[str] = Query(None, description="Code de langue, ex: es-AR"),
    db: Session = Depends(get_db),
):
    locale = lang or settings.DEFAULT_LOCALE
    try:
        species = SpeciesService(db).list_species(locale)
    except Exception as exc:
        logger.error("Species list request failed: %s", exc, exc_info=True)
        return ApiResponse.fail(str(exc), FETCH_FAILED_MESSAGE)
    return ApiResponse.ok(species)


@router.get("/{species_id}", response_model=ApiResponse[SpeciesWithCommonName], summary="Détail d'une espèce")
def get_species(
    species_id: str,
    lang: Optional[str] = Query(None, description="Code de langue, ex: es-AR"),
    db: Session = Depends(get_db),
):
    locale = lang or settings.DEFAULT_LOCALE
    try:
        species = SpeciesService(db).get_species(species_id, locale)
    except InvalidSpeciesIdError:
        return ApiResponse.fail("Invalid species ID", "Species ID must be a number")
    except Exception as exc:
        logger.error("Species detail request failed for %s: %s", species_id, exc, exc_info=True)
        return ApiResponse.fail(str(exc), FETCH_FAILED_MESSAGE)

    if species is None:
        return ApiResponse.fail("Species not found", "Species not found")
    return ApiResponse.ok(species)
