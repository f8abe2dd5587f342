from datetime import datetime
from typing import Optional

from pydantic import Field

from birdguide.models.species_model import ConservationStatus, MediaType
from birdguide.schemas.common_schema import CamelModel


class SpeciesMediaRead(CamelModel):
    id: int
    media_type: MediaType
    url: str
    thumbnail_url: Optional[str] = None
    duration_seconds: Optional[int] = None
    contributor: Optional[str] = None
    source: Optional[str] = None
    attribution_text: Optional[str] = None


class SpeciesRead(CamelModel):
    id: int
    scientific_name: str
    ebird_id: str = Field(alias="eBirdId")
    genus: Optional[str] = None
    family: Optional[str] = None
    order_name: Optional[str] = None
    iucn_status: Optional[ConservationStatus] = None
    size_mm: Optional[int] = None
    summary: Optional[str] = None
    range_map_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SpeciesWithCommonName(SpeciesRead):
    common_name: Optional[str] = None
    default_photo: Optional[SpeciesMediaRead] = None
    default_audio: Optional[SpeciesMediaRead] = None
