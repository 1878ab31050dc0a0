"""
Tests for the user dictionary: adding, restoring, filtering, custom data,
statistics and flashcard reviews.
"""
from datetime import datetime, timedelta

import pytest

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import LearningStatus
from app.services import user_dictionary_service as service


class TestAddDefinition:

    def test_adds_new_entry(self, session, user, make_definition):
        definition = make_definition("apple")
        entry = service.add_definition_to_user_dictionary(session, user.id, definition.id, "ru", "en")
        assert entry.learning_status == LearningStatus.NOT_STARTED
        assert entry.definition_id == definition.id
        assert entry.deleted_at is None

    def test_duplicate_is_a_conflict(self, session, user, make_definition):
        definition = make_definition("apple")
        service.add_definition_to_user_dictionary(session, user.id, definition.id, "ru", "en")
        with pytest.raises(ConflictError, match="already in your dictionary"):
            service.add_definition_to_user_dictionary(session, user.id, definition.id, "ru", "en")

    def test_removed_entry_is_restored_with_progress(self, session, user, make_entry):
        entry = make_entry(user, "apple", review_count=4, progress=50)
        service.remove_from_user_dictionary(session, user.id, entry.id)

        restored = service.add_definition_to_user_dictionary(session, user.id, entry.definition_id, "ru", "en")
        assert restored.id == entry.id
        assert restored.deleted_at is None
        assert restored.review_count == 4

    def test_unknown_definition(self, session, user):
        with pytest.raises(NotFoundError):
            service.add_definition_to_user_dictionary(session, user.id, 999, "ru", "en")

    def test_unknown_language(self, session, user, make_definition):
        definition = make_definition("apple")
        with pytest.raises(ValidationError):
            service.add_definition_to_user_dictionary(session, user.id, definition.id, "xx", "en")


class TestOwnership:

    def test_other_users_entry_is_not_found(self, session, make_user, make_entry):
        owner = make_user()
        stranger = make_user()
        entry = make_entry(owner)
        with pytest.raises(NotFoundError):
            service.get_entry(session, stranger.id, entry.id)

    def test_removed_entry_is_hidden(self, session, user, make_entry):
        entry = make_entry(user)
        service.remove_from_user_dictionary(session, user.id, entry.id)
        with pytest.raises(NotFoundError):
            service.get_entry(session, user.id, entry.id)
        assert service.get_entry(session, user.id, entry.id, include_deleted=True).id == entry.id


class TestListing:

    def test_items_carry_word_data(self, session, user, make_entry):
        make_entry(user, "apple")
        page = service.get_user_dictionary(session, user.id)
        assert page.total_count == 1
        item = page.items[0]
        assert item.word == "apple"
        assert item.phonetic == "/apple/"

    def test_filters_by_status_and_favorite(self, session, user, make_entry):
        make_entry(user, "apple", learning_status=LearningStatus.LEARNED)
        make_entry(user, "pear", is_favorite=True)
        make_entry(user, "plum")

        learned = service.get_user_dictionary(session, user.id, learning_status=[LearningStatus.LEARNED])
        assert [i.word for i in learned.items] == ["apple"]

        favorites = service.get_user_dictionary(session, user.id, is_favorite=True)
        assert [i.word for i in favorites.items] == ["pear"]

    def test_search_matches_notes(self, session, user, make_entry):
        make_entry(user, "apple", custom_notes="crunchy fruit")
        make_entry(user, "pear")
        page = service.get_user_dictionary(session, user.id, search="crunchy")
        assert [i.word for i in page.items] == ["apple"]

    def test_needs_review(self, session, user, make_entry):
        make_entry(user, "apple", next_review_due=datetime.utcnow() - timedelta(days=1))
        make_entry(user, "pear", next_review_due=datetime.utcnow() + timedelta(days=3))
        page = service.get_user_dictionary(session, user.id, needs_review=True)
        assert [i.word for i in page.items] == ["apple"]

    def test_pagination(self, session, user, make_entry):
        for word in ("apple", "pear", "plum"):
            make_entry(user, word)
        page = service.get_user_dictionary(session, user.id, sort_by="definition", sort_order="asc", page=2, page_size=2)
        assert page.total_pages == 2
        assert page.has_previous is True
        assert page.has_next is False
        assert [i.word for i in page.items] == ["plum"]

    def test_invalid_sort_field(self, session, user):
        with pytest.raises(ValidationError):
            service.get_user_dictionary(session, user.id, sort_by="password")

    def test_page_size_limit(self, session, user):
        with pytest.raises(ValidationError):
            service.get_user_dictionary(session, user.id, page_size=101)


class TestUpdates:

    def test_learning_status_sets_timestamps(self, session, user, make_entry):
        entry = make_entry(user)
        updated = service.update_learning_status(session, user.id, entry.id, LearningStatus.LEARNED, progress=100)
        assert updated.learning_status == LearningStatus.LEARNED
        assert updated.time_word_was_learned is not None
        assert updated.time_word_was_started_to_learn is None
        assert updated.review_count == 1
        assert updated.progress == 100

    def test_learned_again_after_relapse(self, session, user, make_entry, monkeypatch):
        entry = make_entry(user)
        clock = iter(datetime(2026, 3, day) for day in (1, 2, 3))

        class FakeDatetime(datetime):
            @classmethod
            def utcnow(cls):
                return next(clock)

        monkeypatch.setattr(service, "datetime", FakeDatetime)

        service.update_learning_status(session, user.id, entry.id, LearningStatus.LEARNED)
        relapsed = service.update_learning_status(session, user.id, entry.id, LearningStatus.IN_PROGRESS)
        assert relapsed.time_word_was_started_to_learn == datetime(2026, 3, 2)
        assert relapsed.time_word_was_learned == datetime(2026, 3, 1)

        learned = service.update_learning_status(session, user.id, entry.id, LearningStatus.LEARNED)
        assert learned.time_word_was_learned == datetime(2026, 3, 3)
        assert learned.time_word_was_started_to_learn == datetime(2026, 3, 2)

    def test_started_to_learn_is_kept(self, session, user, make_entry):
        entry = make_entry(user)
        first = service.update_learning_status(session, user.id, entry.id, LearningStatus.IN_PROGRESS)
        started = first.time_word_was_started_to_learn
        assert started is not None
        service.update_learning_status(session, user.id, entry.id, LearningStatus.DIFFICULT)
        again = service.update_learning_status(session, user.id, entry.id, LearningStatus.IN_PROGRESS)
        assert again.time_word_was_started_to_learn == started

    def test_toggle_favorite(self, session, user, make_entry):
        entry = make_entry(user)
        assert service.toggle_favorite(session, user.id, entry.id).is_favorite is True
        assert service.toggle_favorite(session, user.id, entry.id).is_favorite is False

    def test_custom_data_marks_modified(self, session, user, make_entry):
        entry = make_entry(user)
        updated = service.update_custom_data(
            session, user.id, entry.id, {"custom_notes": "remember me", "custom_phonetic": None}
        )
        assert updated.custom_notes == "remember me"
        assert updated.is_modified is True

    def test_custom_phonetic_overrides_word_phonetic(self, session, user, make_entry):
        entry = make_entry(user)
        service.update_custom_data(session, user.id, entry.id, {"custom_phonetic": "/ˈæp.əl/"})
        assert service.get_user_dictionary_item(session, user.id, entry.id).phonetic == "/ˈæp.əl/"


class TestStats:

    def test_counts_by_status(self, session, user, make_entry):
        make_entry(user, "apple", learning_status=LearningStatus.LEARNED, mastery_score=90, is_favorite=True)
        make_entry(user, "pear", learning_status=LearningStatus.IN_PROGRESS, mastery_score=30)
        removed = make_entry(user, "plum")
        service.remove_from_user_dictionary(session, user.id, removed.id)

        stats = service.get_user_dictionary_stats(session, user.id)
        assert stats.total_words == 2
        assert stats.favorites == 1
        assert stats.average_mastery == 60
        assert stats.by_status["learned"] == 1
        assert stats.by_status["inProgress"] == 1
        assert stats.by_status["difficult"] == 0


class TestRecordReview:

    def test_correct_answer_raises_srs_level(self, session, user, make_entry):
        entry = make_entry(user)
        reviewed = service.record_review(session, user.id, entry.id, True, response_time_ms=3000)
        assert reviewed.srs_level == 1
        assert reviewed.srs_interval == 3
        assert reviewed.correct_streak == 1
        assert reviewed.last_srs_success is True
        assert reviewed.learning_status == LearningStatus.IN_PROGRESS

    def test_wrong_answer_lowers_srs_level(self, session, user, make_entry):
        entry = make_entry(user, srs_level=3, correct_streak=4)
        reviewed = service.record_review(session, user.id, entry.id, False)
        assert reviewed.srs_level == 2
        assert reviewed.correct_streak == 0
        assert reviewed.amount_of_mistakes == 1

    def test_srs_level_bounds(self, session, user, make_entry):
        low = make_entry(user, "apple")
        high = make_entry(user, "pear", srs_level=5)
        assert service.record_review(session, user.id, low.id, False).srs_level == 0
        assert service.record_review(session, user.id, high.id, True).srs_level == 5

    def test_three_correct_reviews_learn_the_word(self, session, user, make_entry):
        entry = make_entry(user)
        for _ in range(3):
            reviewed = service.record_review(session, user.id, entry.id, True, response_time_ms=2000)
        assert reviewed.learning_status == LearningStatus.LEARNED
        assert reviewed.time_word_was_learned is not None


class TestUserDictionaryApi:

    def test_add_and_list(self, client, user, make_definition):
        definition = make_definition("apple")
        response = client.post(
            f"/api/v1/user-dictionary?user_id={user.id}",
            json={"definition_id": definition.id, "base_language_code": "ru", "target_language_code": "en"},
        )
        assert response.status_code == 201
        assert response.json()["word"] == "apple"

        response = client.get(f"/api/v1/user-dictionary?user_id={user.id}")
        assert response.status_code == 200
        assert response.json()["total_count"] == 1

    def test_duplicate_returns_409(self, client, user, make_entry):
        entry = make_entry(user)
        response = client.post(
            f"/api/v1/user-dictionary?user_id={user.id}",
            json={"definition_id": entry.definition_id, "base_language_code": "ru", "target_language_code": "en"},
        )
        assert response.status_code == 409
        assert response.json()["type"] == "ConflictError"
