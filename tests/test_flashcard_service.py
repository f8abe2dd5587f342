import pytest
from sqlalchemy.exc import OperationalError

from birdguide.models.analytics.event_model import Event, EventType
from birdguide.models.flashcard.flashcard_review_model import FlashcardReview, ReviewResult
from birdguide.models.flashcard.flashcard_session_model import FlashcardSession
from birdguide.models.progress.user_species_progress_model import UserSpeciesProgress
from birdguide.services import badge_service
from birdguide.services.flashcard_service import FlashcardError, FlashcardService, round_percentage
from tests.utils import create_badge, create_species, create_user


def test_submit_review_writes_review_progress_and_events(db_session):
    create_badge(db_session)
    user = create_user(db_session)
    species = create_species(db_session)

    FlashcardService(db_session, user).submit_review(species.id, ReviewResult.CORRECT)

    review = db_session.query(FlashcardReview).one()
    assert review.user_id == user.id
    assert review.species_id == species.id
    assert review.result == ReviewResult.CORRECT
    assert review.reviewed_at is not None

    progress = db_session.query(UserSpeciesProgress).one()
    assert progress.times_seen == 1
    assert progress.times_correct == 1

    events = db_session.query(Event).order_by(Event.id).all()
    assert [e.event_type for e in events] == [EventType.BADGE_EARNED, EventType.FLASHCARD_REVIEW]
    assert events[-1].data == {"speciesId": species.id, "result": "correct"}


def test_identical_submissions_are_not_deduplicated(db_session):
    user = create_user(db_session)
    species = create_species(db_session)
    service = FlashcardService(db_session, user)

    service.submit_review(species.id, ReviewResult.INCORRECT)
    service.submit_review(species.id, ReviewResult.INCORRECT)

    assert db_session.query(FlashcardReview).count() == 2
    assert db_session.query(UserSpeciesProgress).one().times_seen == 2


def test_failure_rolls_back_whole_review(db_session, monkeypatch):
    user = create_user(db_session)
    species = create_species(db_session)

    def _boom(db, user_id):
        raise OperationalError("SELECT 1", {}, Exception("database is gone"))

    monkeypatch.setattr(badge_service, "check_and_award_badges", _boom)

    with pytest.raises(OperationalError):
        FlashcardService(db_session, user).submit_review(species.id, ReviewResult.CORRECT)

    assert db_session.query(FlashcardReview).count() == 0
    assert db_session.query(UserSpeciesProgress).count() == 0
    assert db_session.query(Event).count() == 0


def test_mastering_species_logs_event(db_session):
    user = create_user(db_session)
    species = create_species(db_session)
    service = FlashcardService(db_session, user)

    for _ in range(8):
        service.submit_review(species.id, ReviewResult.CORRECT)

    mastered = db_session.query(Event).filter(Event.event_type == EventType.SPECIES_MASTERED).all()
    assert len(mastered) == 1
    assert mastered[0].data == {"speciesId": species.id}


def test_species_for_session_is_limited(db_session):
    user = create_user(db_session)
    for _ in range(12):
        create_species(db_session)

    picked = FlashcardService(db_session, user).get_species_for_session()
    assert len(picked) == 10
    assert len({s.id for s in picked}) == 10

    picked = FlashcardService(db_session, user, session_size=3).get_species_for_session()
    assert len(picked) == 3


def test_progress_summary_rounds_half_up(db_session):
    user = create_user(db_session)
    other = create_user(db_session)
    species = [create_species(db_session) for _ in range(3)]
    db_session.add_all(
        [
            UserSpeciesProgress(user_id=user.id, species_id=species[0].id, times_seen=20, times_correct=20,
                                accuracy=1.0, mastery_level=5, is_mastered=True),
            UserSpeciesProgress(user_id=user.id, species_id=species[1].id, times_seen=20, times_correct=13,
                                accuracy=0.65, mastery_level=1, is_mastered=False),
            UserSpeciesProgress(user_id=other.id, species_id=species[2].id, times_seen=5, times_correct=0,
                                accuracy=0.0, mastery_level=1, is_mastered=False),
        ]
    )
    db_session.commit()

    summary = FlashcardService(db_session, user).get_progress_summary()

    assert summary.total_species == 2
    assert summary.mastered_species == 1
    # 33 / 40 = 82.5 %
    assert summary.accuracy == 83


def test_progress_summary_without_reviews(db_session):
    user = create_user(db_session)

    summary = FlashcardService(db_session, user).get_progress_summary()

    assert (summary.total_species, summary.mastered_species, summary.accuracy) == (0, 0, 0)


def test_round_percentage():
    assert round_percentage(1, 3) == 33
    assert round_percentage(2, 3) == 67
    assert round_percentage(1, 8) == 13
    assert round_percentage(0, 5) == 0


def test_list_badges_reports_earned_status(db_session):
    first = create_badge(db_session)
    create_badge(db_session, name="streak_3", title="Racha", description="Tres días seguidos.")
    create_badge(db_session, name="retired", is_active=False)
    user = create_user(db_session)
    species = create_species(db_session)
    service = FlashcardService(db_session, user)
    service.submit_review(species.id, ReviewResult.CORRECT)

    badges = {b.name: b for b in service.list_badges()}

    assert set(badges) == {"first_review", "streak_3"}
    assert badges["first_review"].earned is True
    assert badges["first_review"].earned_at is not None
    assert badges["first_review"].id == first.id
    assert badges["streak_3"].earned is False
    assert badges["streak_3"].earned_at is None


def test_session_lifecycle(db_session):
    user = create_user(db_session)
    service = FlashcardService(db_session, user)

    session = service.start_session([3, 1, 2])
    assert session.species_ids == [3, 1, 2]

    started = db_session.query(Event).filter(Event.event_type == EventType.SESSION_STARTED).one()
    assert started.data == {"sessionId": session.id, "speciesCount": 3}

    summary = service.complete_session(session.id, correct_answers=7, incorrect_answers=3)
    assert summary.session_id == str(session.id)
    assert summary.total_cards == 10
    assert summary.accuracy == pytest.approx(0.7)
    assert summary.duration is not None and summary.duration >= 0
    assert summary.completed_at is not None

    assert db_session.query(Event).filter(Event.event_type == EventType.SESSION_COMPLETED).count() == 1

    with pytest.raises(FlashcardError) as exc:
        service.complete_session(session.id, correct_answers=1, incorrect_answers=0)
    assert exc.value.code == "session_already_completed"
    assert exc.value.status_code == 409


def test_empty_session_has_no_accuracy(db_session):
    user = create_user(db_session)
    service = FlashcardService(db_session, user)
    session = service.start_session([])

    summary = service.complete_session(session.id, correct_answers=0, incorrect_answers=0)

    assert summary.total_cards == 0
    assert summary.accuracy is None


def test_cannot_complete_someone_elses_session(db_session):
    owner = create_user(db_session)
    intruder = create_user(db_session)
    session = FlashcardService(db_session, owner).start_session([1])

    with pytest.raises(FlashcardError) as exc:
        FlashcardService(db_session, intruder).complete_session(session.id, 1, 0)
    assert exc.value.status_code == 404

    assert db_session.get(FlashcardSession, session.id).completed_at is None
