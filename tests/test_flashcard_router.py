from datetime import datetime, timezone

from sqlalchemy.exc import OperationalError

from birdguide.services.flashcard_service import FlashcardService
from birdguide.models.species_model import MediaType
from tests.utils import auth_headers, create_badge, create_media, create_species, create_user


def test_review_requires_authentication(client):
    response = client.post("/api/flashcards/review", json={"speciesId": 1, "result": "correct"})
    assert response.status_code == 401


def test_review_with_invalid_token(client):
    response = client.get("/api/flashcards/progress", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_deleted_user_is_forbidden(client, db_session):
    user = create_user(db_session, deleted_at=datetime.now(timezone.utc))

    response = client.get("/api/flashcards/progress", headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["detail"] == "account_deleted"


def test_first_review_returns_badge(client, db_session):
    create_badge(db_session)
    user = create_user(db_session)
    species = create_species(db_session)
    headers = auth_headers(user)

    response = client.post(
        "/api/flashcards/review",
        json={"speciesId": species.id, "result": "correct"},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [b["name"] for b in body["badgesAwarded"]] == ["first_review"]

    body = client.post(
        "/api/flashcards/review",
        json={"speciesId": species.id, "result": "incorrect"},
        headers=headers,
    ).json()
    assert body["success"] is True
    assert body["badgesAwarded"] == []


def test_invalid_review_payload_returns_envelope(client, db_session):
    user = create_user(db_session)

    response = client.post(
        "/api/flashcards/review",
        json={"speciesId": 1, "result": "maybe"},
        headers=auth_headers(user),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Invalid request"
    assert body["message"]


def test_review_storage_failure_envelope(client, db_session, monkeypatch):
    user = create_user(db_session)

    def _boom(self, species_id, result):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(FlashcardService, "submit_review", _boom)

    response = client.post(
        "/api/flashcards/review",
        json={"speciesId": 1, "result": "correct"},
        headers=auth_headers(user),
    )

    body = response.json()
    assert body["success"] is False
    assert body["badgesAwarded"] == []
    assert body["message"] == "Failed to submit review"
    assert "disk full" in body["error"]


def test_species_for_session(client, db_session):
    user = create_user(db_session)
    for _ in range(4):
        create_species(db_session)

    body = client.get("/api/flashcards/species", headers=auth_headers(user)).json()

    assert len(body) == 4
    assert set(body[0]) == {"id", "scientificName", "eBirdId", "defaultPhoto", "defaultAudio"}
    assert body[0]["defaultPhoto"] is None


def test_progress_and_badges(client, db_session):
    create_badge(db_session)
    user = create_user(db_session)
    species = create_species(db_session)
    headers = auth_headers(user)
    client.post("/api/flashcards/review", json={"speciesId": species.id, "result": "correct"}, headers=headers)

    progress = client.get("/api/flashcards/progress", headers=headers).json()
    assert progress == {"totalSpecies": 1, "masteredSpecies": 0, "accuracy": 100}

    badges = client.get("/api/flashcards/badges", headers=headers).json()
    assert len(badges) == 1
    assert badges[0]["name"] == "first_review"
    assert badges[0]["earned"] is True
    assert badges[0]["earnedAt"] is not None


def test_session_start_and_complete(client, db_session):
    user = create_user(db_session)
    headers = auth_headers(user)

    response = client.post("/api/flashcards/session", json={"speciesIds": [1, 2, 3]}, headers=headers)
    assert response.status_code == 200
    session_id = response.json()["sessionId"]
    assert isinstance(session_id, str)

    complete_url = f"/api/flashcards/session/{session_id}/complete"
    body = client.post(complete_url, json={"correctAnswers": 2, "incorrectAnswers": 1}, headers=headers).json()
    assert body["sessionId"] == session_id
    assert body["totalCards"] == 3
    assert body["speciesIds"] == [1, 2, 3]

    response = client.post(complete_url, json={"correctAnswers": 2, "incorrectAnswers": 1}, headers=headers)
    assert response.status_code == 409
    assert response.json()["detail"] == "session_already_completed"


def test_unexpected_review_error_is_reported_in_envelope(client, db_session, monkeypatch):
    user = create_user(db_session)

    def _boom(self, species_id, result):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(FlashcardService, "submit_review", _boom)

    response = client.post(
        "/api/flashcards/review",
        json={"speciesId": 1, "result": "correct"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": False,
        "badgesAwarded": [],
        "error": "unexpected",
        "message": "Failed to submit review",
    }


def test_species_for_session_carries_default_media(client, db_session):
    user = create_user(db_session)
    species = create_species(db_session)
    create_media(db_session, species, MediaType.PHOTO, url="https://cdn.example.org/kiskadee.jpg",
                 contributor="Ana Pérez", is_default=True)
    create_media(db_session, species, MediaType.AUDIO, url="https://cdn.example.org/kiskadee.mp3",
                 is_default=True)

    body = client.get("/api/flashcards/species", headers=auth_headers(user)).json()

    assert body[0]["defaultPhoto"]["url"] == "https://cdn.example.org/kiskadee.jpg"
    assert body[0]["defaultPhoto"]["mediaType"] == "photo"
    assert body[0]["defaultPhoto"]["contributor"] == "Ana Pérez"
    assert body[0]["defaultAudio"]["url"] == "https://cdn.example.org/kiskadee.mp3"


def test_species_for_session_requires_authentication(client):
    response = client.get("/api/flashcards/species")

    assert response.status_code == 401
