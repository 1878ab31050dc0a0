"""
Tests for typing practice sessions.
"""
from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from app.core.exceptions import NotFoundError, ValidationError
from app.models import LearningMistake, LearningStatus, UserSessionItem
from app.services import list_service, practice_service, user_list_service


@pytest.fixture
def entries(user, make_entry):
    return {word: make_entry(user, word) for word in ("apple", "pear", "plum")}


@pytest.fixture
def practice(session, user, entries):
    return practice_service.create_practice_session(session, user.id)


class TestCreateSession:

    def test_needs_three_words(self, session, user, make_entry):
        make_entry(user, "apple")
        make_entry(user, "pear")
        with pytest.raises(ValidationError, match="Need at least 3 words, found 2"):
            practice_service.create_practice_session(session, user.id)

    def test_picks_words_with_settings(self, practice):
        assert practice.total_words == 3
        assert {w.word for w in practice.words} == {"apple", "pear", "plum"}
        assert practice.difficulty_settings.words_per_session == 10
        assert practice.time_limit == 900

    def test_least_recently_reviewed_first(self, session, user, entries):
        practice_service.validate_typing(
            session, user.id,
            practice_service.create_practice_session(session, user.id).session_id,
            entries["apple"].id, "apple",
        )
        practice = practice_service.create_practice_session(session, user.id, words_count=3)
        assert practice.words[-1].word == "apple"

    def test_status_filter(self, session, user, make_entry):
        for word in ("apple", "pear", "plum"):
            make_entry(user, word, learning_status=LearningStatus.DIFFICULT)
        make_entry(user, "fig", learning_status=LearningStatus.LEARNED)
        practice = practice_service.create_practice_session(
            session, user.id, include_statuses=[LearningStatus.DIFFICULT]
        )
        assert "fig" not in [w.word for w in practice.words]

    def test_restricted_to_a_custom_list(self, session, user, entries, make_entry):
        make_entry(user, "fig")
        user_list = user_list_service.create_custom_user_list(session, user.id, {
            "name": "Orchard", "base_language_code": "ru", "target_language_code": "en",
        })
        for entry in entries.values():
            user_list_service.add_word_to_user_list(session, user.id, user_list.id, entry.id)
        practice = practice_service.create_practice_session(session, user.id, user_list_id=user_list.id)
        assert {w.word for w in practice.words} == {"apple", "pear", "plum"}

    def test_restricted_to_an_inherited_list(self, session, user, entries, make_entry, category):
        word_list = list_service.create_list_with_words(session, {
            "name": "Fruit",
            "category_id": category.id,
            "base_language_code": "ru",
            "target_language_code": "en",
            "is_public": True,
            "definition_ids": [entries["apple"].definition_id, entries["pear"].definition_id],
        })
        user_list = user_list_service.add_list_to_user_collection(session, user.id, word_list.id, "ru", "en")
        fig = make_entry(user, "fig")
        make_entry(user, "kiwi")
        user_list_service.add_word_to_user_list(session, user.id, user_list.id, fig.id)

        practice = practice_service.create_practice_session(session, user.id, user_list_id=user_list.id)
        assert {w.word for w in practice.words} == {"apple", "pear", "fig"}


class TestValidateTyping:

    def test_fast_correct_answer(self, session, user, entries, practice):
        result = practice_service.validate_typing(
            session, user.id, practice.session_id, entries["apple"].id, " Apple", response_time_ms=3000
        )
        assert result.is_correct is True
        assert result.points_earned == 15
        assert result.feedback == "Perfect! Great speed!"
        assert result.correct_streak == 1
        assert result.learning_status == LearningStatus.IN_PROGRESS

    def test_correct_answer_without_timing(self, session, user, entries, practice):
        result = practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apple")
        assert result.feedback == "Correct!"

    def test_close_answer(self, session, user, entries, practice):
        result = practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "appxx")
        assert result.partial_credit is True
        assert result.points_earned == 5
        assert result.feedback == "Close! (60% accuracy)"

    def test_wrong_answer_records_mistake(self, session, user, entries, practice):
        result = practice_service.validate_typing(session, user.id, practice.session_id, entries["pear"].id, "zzzz")
        assert result.is_correct is False
        assert result.points_earned == -2
        assert result.feedback == 'Incorrect. The correct spelling is: "pear"'
        assert result.learning_status == LearningStatus.DIFFICULT

        mistake = session.exec(select(LearningMistake)).one()
        assert mistake.incorrect_value == "zzzz"
        assert mistake.user_dictionary_id == entries["pear"].id
        assert mistake.mistake_data["correct_value"] == "pear"
        assert mistake.word_id is not None

    def test_second_attempt_reuses_session_item(self, session, user, entries, practice):
        practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apel")
        practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apple")
        item = session.exec(select(UserSessionItem)).one()
        assert item.attempts_count == 2
        assert item.is_correct is True

        progress = practice_service.get_session_progress(session, user.id, practice.session_id)
        assert progress.words_studied == 1
        assert progress.correct_answers == 1
        assert progress.incorrect_answers == 1

    def test_other_users_session(self, session, make_user, entries, practice):
        stranger = make_user()
        with pytest.raises(NotFoundError):
            practice_service.validate_typing(session, stranger.id, practice.session_id, entries["apple"].id, "apple")


class TestCompleteSession:

    def test_summary_and_achievements(self, session, user, entries, practice):
        practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apple")
        practice_service.validate_typing(session, user.id, practice.session_id, entries["pear"].id, "zzzz")
        practice_service.validate_typing(session, user.id, practice.session_id, entries["plum"].id, "plum")

        result = practice_service.complete_practice_session(session, user.id, practice.session_id)
        assert result.accuracy == 67
        assert result.score == 77
        assert result.words_studied == 3
        assert result.correct_answers == 2
        assert result.incorrect_answers == 1
        assert result.achievements == ['Speed Demon!']

        progress = practice_service.get_session_progress(session, user.id, practice.session_id)
        assert progress.is_completed is True

    def test_cannot_complete_twice(self, session, user, practice):
        practice_service.complete_practice_session(session, user.id, practice.session_id)
        with pytest.raises(ValidationError, match="already completed"):
            practice_service.complete_practice_session(session, user.id, practice.session_id)

    def test_no_answers_after_completion(self, session, user, entries, practice):
        practice_service.complete_practice_session(session, user.id, practice.session_id)
        with pytest.raises(ValidationError):
            practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apple")

    def test_history_newest_first(self, session, user, entries):
        first = practice_service.create_practice_session(session, user.id)
        second = practice_service.create_practice_session(session, user.id)
        history = practice_service.get_session_history(session, user.id)
        assert history.total_count == 2
        assert [s.id for s in history.sessions] == [second.session_id, first.session_id]


class TestCancelAndResume:

    def test_cancel_keeps_answers_without_score(self, session, user, entries, practice):
        practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apple")
        progress = practice_service.cancel_practice_session(session, user.id, practice.session_id)
        assert progress.is_completed is True
        assert progress.is_cancelled is True
        assert progress.words_studied == 1

        history = practice_service.get_session_history(session, user.id)
        assert history.sessions[0].score is None
        assert history.sessions[0].end_time is not None

    def test_cancelled_session_is_closed(self, session, user, entries, practice):
        practice_service.cancel_practice_session(session, user.id, practice.session_id)
        with pytest.raises(ValidationError):
            practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apple")
        with pytest.raises(ValidationError):
            practice_service.complete_practice_session(session, user.id, practice.session_id)
        with pytest.raises(ValidationError):
            practice_service.cancel_practice_session(session, user.id, practice.session_id)

    def test_completed_session_is_not_cancelled(self, session, user, practice):
        practice_service.complete_practice_session(session, user.id, practice.session_id)
        progress = practice_service.get_session_progress(session, user.id, practice.session_id)
        assert progress.is_cancelled is False

    def test_resume_lists_answered_entries(self, session, user, entries, practice):
        practice_service.validate_typing(session, user.id, practice.session_id, entries["pear"].id, "pear")
        practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "zzz")
        resumed = practice_service.resume_practice_session(session, user.id, practice.session_id)
        assert resumed.answered_user_dictionary_ids == [entries["pear"].id, entries["apple"].id]
        assert resumed.progress.words_studied == 2
        assert resumed.progress.correct_answers == 1

    def test_ended_session_cannot_be_resumed(self, session, user, practice):
        practice_service.complete_practice_session(session, user.id, practice.session_id)
        with pytest.raises(ValidationError, match="already completed"):
            practice_service.resume_practice_session(session, user.id, practice.session_id)

    def test_other_users_session_cannot_be_cancelled(self, session, make_user, practice):
        with pytest.raises(NotFoundError):
            practice_service.cancel_practice_session(session, make_user().id, practice.session_id)


class TestSpacedRepetition:

    def test_typing_moves_srs_level(self, session, user, entries, practice):
        practice_service.validate_typing(session, user.id, practice.session_id, entries["apple"].id, "apple")
        practice_service.validate_typing(session, user.id, practice.session_id, entries["pear"].id, "zzzz")

        session.refresh(entries["apple"])
        session.refresh(entries["pear"])
        assert entries["apple"].srs_level == 1
        assert entries["apple"].srs_interval == 3
        assert entries["apple"].last_srs_success is True
        assert entries["apple"].next_srs_review > datetime.utcnow() + timedelta(days=2)
        assert entries["pear"].srs_level == 0
        assert entries["pear"].last_srs_success is False

    def test_due_queue_order(self, session, user, make_entry):
        now = datetime.utcnow()
        make_entry(user, "pear", next_srs_review=now - timedelta(days=1))
        make_entry(user, "plum")
        make_entry(user, "apple", next_srs_review=now - timedelta(days=3))
        make_entry(user, "fig", next_srs_review=now + timedelta(days=5))
        removed = make_entry(user, "kiwi", next_srs_review=now - timedelta(days=9))
        removed.deleted_at = now
        session.add(removed)
        session.commit()

        due = practice_service.get_words_for_srs_review(session, user.id)
        assert [w.word for w in due] == ["apple", "pear", "plum"]
        assert practice_service.get_words_for_srs_review(session, user.id, limit=1)[0].word == "apple"

    def test_statistics(self, session, user, make_entry, monkeypatch):
        now = datetime(2026, 3, 10, 12, 0)

        class FixedDatetime(datetime):
            @classmethod
            def utcnow(cls):
                return now

        monkeypatch.setattr(practice_service, "datetime", FixedDatetime)
        make_entry(user, "apple", next_srs_review=now - timedelta(hours=1), srs_level=2, srs_interval=7,
                   mastery_score=80)
        make_entry(user, "pear", next_srs_review=now + timedelta(hours=2))
        make_entry(user, "plum", next_srs_review=now + timedelta(days=1))
        make_entry(user, "fig")
        make_entry(user, "kiwi", next_srs_review=now + timedelta(days=5))

        stats = practice_service.get_srs_statistics(session, user.id)
        assert stats.total_words == 5
        assert stats.never_reviewed == 1
        assert stats.overdue_words == 1
        assert stats.due_today == 1
        assert stats.due_tomorrow == 1
        assert stats.level_distribution == {0: 4, 2: 1}
        assert stats.average_interval == 1.4
        assert stats.average_mastery == 16


class TestPracticeApi:

    def test_full_round(self, client, user, entries):
        response = client.post(f"/api/v1/practice/sessions?user_id={user.id}", json={"difficulty_level": 1})
        assert response.status_code == 201, response.text
        body = response.json()
        assert body["difficulty_settings"]["words_per_session"] == 5

        session_id = body["session_id"]
        word = body["words"][0]
        response = client.post(
            f"/api/v1/practice/sessions/{session_id}/validate?user_id={user.id}",
            json={"user_dictionary_id": word["user_dictionary_id"], "user_input": word["word"]},
        )
        assert response.status_code == 200
        assert response.json()["is_correct"] is True

        response = client.post(f"/api/v1/practice/sessions/{session_id}/complete?user_id={user.id}")
        assert response.status_code == 200
        assert response.json()["accuracy"] == 100

    def test_invalid_difficulty_level(self, client, user):
        response = client.post(f"/api/v1/practice/sessions?user_id={user.id}", json={"difficulty_level": 9})
        assert response.status_code == 422

    def test_cancel_and_srs_endpoints(self, client, user, entries):
        session_id = client.post(f"/api/v1/practice/sessions?user_id={user.id}", json={}).json()["session_id"]
        response = client.post(f"/api/v1/practice/sessions/{session_id}/cancel?user_id={user.id}")
        assert response.status_code == 200
        assert response.json()["is_cancelled"] is True
        response = client.get(f"/api/v1/practice/sessions/{session_id}/resume?user_id={user.id}")
        assert response.status_code == 400

        due = client.get(f"/api/v1/practice/srs/due?user_id={user.id}").json()
        assert {w["word"] for w in due} == {"apple", "pear", "plum"}
        stats = client.get(f"/api/v1/practice/srs/statistics?user_id={user.id}").json()
        assert stats["never_reviewed"] == 3
