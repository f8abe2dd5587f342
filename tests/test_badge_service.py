from birdguide.crud import review_crud
from birdguide.gamification.badge_rules import BADGE_CATALOGUE, BADGE_CRITERIA
from birdguide.models.analytics.event_model import Event, EventType
from birdguide.models.flashcard.flashcard_review_model import ReviewResult
from birdguide.models.user.badge_model import UserBadge
from birdguide.services import badge_service
from birdguide.services.flashcard_service import FlashcardService
from tests.utils import create_badge, create_species, create_user


def test_first_review_awards_badge_once(db_session):
    badge = create_badge(db_session)
    user = create_user(db_session)
    species_a = create_species(db_session)
    species_b = create_species(db_session)
    service = FlashcardService(db_session, user)

    first = service.submit_review(species_a.id, ReviewResult.CORRECT)
    second = service.submit_review(species_b.id, ReviewResult.INCORRECT)

    assert [b.name for b in first] == ["first_review"]
    assert first[0].id == badge.id
    assert second == []
    assert db_session.query(UserBadge).filter_by(user_id=user.id).count() == 1


def test_check_is_idempotent(db_session):
    create_badge(db_session)
    user = create_user(db_session)
    species = create_species(db_session)
    review_crud.create_review(db_session, user.id, species.id, ReviewResult.CORRECT)

    awarded = badge_service.check_and_award_badges(db_session, user.id)
    awarded_again = badge_service.check_and_award_badges(db_session, user.id)
    db_session.commit()

    assert [b.name for b in awarded] == ["first_review"]
    assert awarded_again == []
    assert db_session.query(UserBadge).count() == 1

    events = db_session.query(Event).filter(Event.event_type == EventType.BADGE_EARNED).all()
    assert len(events) == 1
    assert events[0].data == {"badgeId": awarded[0].id, "badgeName": "first_review"}


def test_no_badge_when_not_seeded(db_session):
    user = create_user(db_session)
    species = create_species(db_session)

    awarded = FlashcardService(db_session, user).submit_review(species.id, ReviewResult.CORRECT)

    assert awarded == []
    assert db_session.query(UserBadge).count() == 0


def test_inactive_badge_is_not_awarded(db_session):
    create_badge(db_session, is_active=False)
    user = create_user(db_session)
    species = create_species(db_session)

    awarded = FlashcardService(db_session, user).submit_review(species.id, ReviewResult.CORRECT)

    assert awarded == []


def test_no_badge_after_first_review(db_session):
    user = create_user(db_session)
    species = create_species(db_session)
    service = FlashcardService(db_session, user)
    service.submit_review(species.id, ReviewResult.CORRECT)

    # Badge seedé après coup : le critère « première réponse » n'est plus rempli
    create_badge(db_session)
    awarded = service.submit_review(species.id, ReviewResult.CORRECT)

    assert awarded == []


def test_every_catalogued_badge_has_a_criterion():
    assert {badge.name for badge in BADGE_CATALOGUE} == set(BADGE_CRITERIA)
