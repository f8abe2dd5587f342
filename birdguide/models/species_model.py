import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from birdguide.db.base_class import Base


class ConservationStatus(str, enum.Enum):
    LC = "LC"  # Least Concern
    NT = "NT"  # Near Threatened
    VU = "VU"  # Vulnerable
    EN = "EN"  # Endangered
    CR = "CR"  # Critically Endangered
    EW = "EW"  # Extinct in the Wild
    EX = "EX"  # Extinct


class MediaType(str, enum.Enum):
    PHOTO = "photo"
    AUDIO = "audio"
    SPECTROGRAM = "spectrogram"


class Species(Base):
    """Espèce d'oiseau (données de référence, importées par script)."""

    __tablename__ = "species"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    scientific_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    ebird_id: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    genus: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    family: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    iucn_status: Mapped[Optional[ConservationStatus]] = mapped_column(
        Enum(ConservationStatus, name="conservationstatus", values_callable=lambda obj: [e.value for e in obj]),
        nullable=True,
    )
    size_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    range_map_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    common_names: Mapped[List["SpeciesCommonName"]] = relationship(
        back_populates="species", cascade="all, delete-orphan"
    )
    media: Mapped[List["SpeciesMedia"]] = relationship(back_populates="species", cascade="all, delete-orphan")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Species(id={self.id}, scientific_name='{self.scientific_name}')>"


class SpeciesCommonName(Base):
    """Nom vernaculaire d'une espèce pour une locale donnée."""

    __tablename__ = "species_common_names"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    species_id: Mapped[int] = mapped_column(ForeignKey("species.id"), index=True, nullable=False)
    lang_code: Mapped[str] = mapped_column(String(10), index=True, nullable=False)
    common_name: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    species: Mapped["Species"] = relationship(back_populates="common_names")


class SpeciesMedia(Base):
    """
    Photo, enregistrement ou spectrogramme d'une espèce.
    ``is_default`` marque le média affiché sur les flashcards.
    """

    __tablename__ = "species_media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    species_id: Mapped[int] = mapped_column(ForeignKey("species.id"), index=True, nullable=False)
    media_type: Mapped[MediaType] = mapped_column(
        Enum(MediaType, name="mediatype", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    # Audio uniquement
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    contributor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # ex: 'macaulay', 'xeno-canto', 'wikimedia'
    source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    source_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    attribution_text: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # 0 = inconnu, plus haut = meilleur
    quality_rank: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    date: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    species: Mapped["Species"] = relationship(back_populates="media")

    __table_args__ = (
        UniqueConstraint("species_id", "media_type", "source_id", name="_species_media_source_uc"),
    )
