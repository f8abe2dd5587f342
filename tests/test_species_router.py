from sqlalchemy.exc import OperationalError

from birdguide.api.endpoints import species_router
from birdguide.services.species_service import SpeciesService
from birdguide.models.species_model import MediaType
from tests.utils import create_media, create_species


def test_list_species_envelope(client, db_session):
    create_species(db_session, scientific_name="Pitangus sulphuratus", ebird_id="grekis",
                   common_names={"es-AR": "Benteveo", "en-US": "Great Kiskadee"})

    response = client.get("/api/species", params={"lang": "en-US"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    item = body["data"][0]
    assert item["scientificName"] == "Pitangus sulphuratus"
    assert item["eBirdId"] == "grekis"
    assert item["commonName"] == "Great Kiskadee"


def test_list_species_defaults_to_es_ar(client, db_session):
    create_species(db_session, common_names={"es-AR": "Hornero", "en-US": "Rufous Hornero"})

    body = client.get("/api/species").json()

    assert body["data"][0]["commonName"] == "Hornero"


def test_get_species_invalid_id(client):
    body = client.get("/api/species/abc").json()

    assert body == {
        "success": False,
        "data": None,
        "error": "Invalid species ID",
        "message": "Species ID must be a number",
    }


def test_get_species_not_found(client):
    body = client.get("/api/species/4242").json()

    assert body["success"] is False
    assert body["error"] == "Species not found"
    assert body["message"] == "Species not found"


def test_get_species_detail(client, db_session):
    species = create_species(db_session, common_names={"es-AR": "Tero"})

    body = client.get(f"/api/species/{species.id}", params={"lang": "es-AR"}).json()

    assert body["success"] is True
    assert body["data"]["id"] == species.id
    assert body["data"]["commonName"] == "Tero"


def test_storage_failure_is_reported_in_envelope(db_session, monkeypatch):
    def _boom(self, locale):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(SpeciesService, "list_species", _boom)

    result = species_router.list_species(lang="es-AR", db=db_session)

    assert result.success is False
    assert result.message == "Failed to fetch species"
    assert "connection lost" in result.error


def test_unexpected_error_on_list_is_reported_in_envelope(client, monkeypatch):
    def _boom(self, locale):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(SpeciesService, "list_species", _boom)

    response = client.get("/api/species")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "unexpected"
    assert body["message"] == "Failed to fetch species"


def test_unexpected_error_on_detail_is_reported_in_envelope(client, monkeypatch):
    def _boom(self, species_id, locale):
        raise ValueError("bad row")

    monkeypatch.setattr(SpeciesService, "get_species", _boom)

    body = client.get("/api/species/1").json()

    assert body["success"] is False
    assert body["error"] == "bad row"
    assert body["message"] == "Failed to fetch species"


def test_species_detail_exposes_default_media(client, db_session):
    species = create_species(db_session, common_names={"es-AR": "Benteveo"})
    create_media(db_session, species, MediaType.PHOTO, url="https://cdn.example.org/benteveo.jpg",
                 attribution_text="Ana Pérez / Macaulay Library, Cornell Lab of Ornithology", is_default=True)

    data = client.get(f"/api/species/{species.id}").json()["data"]

    assert data["defaultPhoto"]["url"] == "https://cdn.example.org/benteveo.jpg"
    assert data["defaultPhoto"]["attributionText"].endswith("Cornell Lab of Ornithology")
    assert data["defaultAudio"] is None
