"""Utility helpers for test factories."""

from __future__ import annotations

from itertools import count

from birdguide.core.security import create_access_token
from birdguide.models.species_model import MediaType, Species, SpeciesCommonName, SpeciesMedia
from birdguide.models.user.badge_model import Badge
from birdguide.models.user.user_model import User

_sequence = count(1)


def create_user(db, **kwargs) -> User:
    n = next(_sequence)
    defaults = {
        "auth0_id": f"auth0|user{n}",
        "username": f"user{n}",
        "email": f"user{n}@example.com",
        "preferred_locale": "es-AR",
        "xp": 0,
        "current_streak": 0,
        "longest_streak": 0,
        "is_admin": False,
    }
    defaults.update(kwargs)
    user = User(**defaults)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_species(db, *, common_names: dict[str, str] | None = None, **kwargs) -> Species:
    n = next(_sequence)
    defaults = {
        "scientific_name": f"Avis testus{n}",
        "ebird_id": f"avtes{n}",
        "genus": "Avis",
    }
    defaults.update(kwargs)
    species = Species(**defaults)
    for lang_code, name in (common_names or {}).items():
        species.common_names.append(SpeciesCommonName(lang_code=lang_code, common_name=name))
    db.add(species)
    db.commit()
    db.refresh(species)
    return species


def create_media(db, species: Species, media_type: MediaType = MediaType.PHOTO, **kwargs) -> SpeciesMedia:
    n = next(_sequence)
    defaults = {
        "url": f"https://cdn.example.org/media/{n}",
        "source": "macaulay",
        "source_id": str(n),
    }
    defaults.update(kwargs)
    media = SpeciesMedia(species_id=species.id, media_type=media_type, **defaults)
    db.add(media)
    db.commit()
    db.refresh(media)
    return media


def create_badge(db, name: str = "first_review", **kwargs) -> Badge:
    defaults = {
        "name": name,
        "title": "Primer vuelo",
        "description": "Respondiste tu primera tarjeta.",
        "is_active": True,
    }
    defaults.update(kwargs)
    badge = Badge(**defaults)
    db.add(badge)
    db.commit()
    db.refresh(badge)
    return badge


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
