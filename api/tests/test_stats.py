"""
Tests for user statistics and learning analytics.
"""
from datetime import date, datetime, timedelta

from app.models import LearningMistake, UserLearningSession
from app.services import practice_service, stats_service
from app.services.dictionary_service import get_definition_word_info


class TestStreak:

    def test_counts_back_from_today(self):
        today = date(2024, 3, 10)
        days = [today, today - timedelta(days=1), today - timedelta(days=2), today - timedelta(days=5)]
        assert stats_service.calculate_streak(days, today) == 3

    def test_streak_ending_yesterday_still_counts(self):
        today = date(2024, 3, 10)
        assert stats_service.calculate_streak([date(2024, 3, 9), date(2024, 3, 8)], today) == 2

    def test_broken_streak(self):
        assert stats_service.calculate_streak([date(2024, 3, 7)], date(2024, 3, 10)) == 0

    def test_no_sessions(self):
        assert stats_service.calculate_streak([], date(2024, 3, 10)) == 0


def play_session(session, user, entries, answers):
    practice = practice_service.create_practice_session(session, user.id)
    for word, typed in answers:
        practice_service.validate_typing(session, user.id, practice.session_id, entries[word].id, typed)
    return practice_service.complete_practice_session(session, user.id, practice.session_id)


class TestUserStatistics:

    def test_empty_history(self, session, user):
        stats = stats_service.get_user_statistics(session, user.id)
        assert stats.total_sessions == 0
        assert stats.overall_accuracy == 0
        assert stats.average_session_score == 0
        assert stats.current_streak_days == 0

    def test_totals_over_sessions(self, session, user, make_entry):
        entries = {word: make_entry(user, word) for word in ("apple", "pear", "plum")}
        play_session(session, user, entries, [("apple", "apple"), ("pear", "pear")])
        play_session(session, user, entries, [("plum", "zzzz"), ("apple", "apple")])
        practice_service.create_practice_session(session, user.id)

        stats = stats_service.get_user_statistics(session, user.id)
        assert stats.total_sessions == 3
        assert stats.completed_sessions == 2
        assert stats.total_correct_answers == 3
        assert stats.total_incorrect_answers == 1
        assert stats.overall_accuracy == 75
        # scores 100 and 60
        assert stats.average_session_score == 80
        assert stats.current_streak_days == 1
        assert stats.dictionary.total_words == 3


class TestLearningAnalytics:

    def test_days_without_sessions_are_zero_filled(self, session, user):
        session.add(UserLearningSession(
            user_id=user.id,
            start_time=datetime.utcnow() - timedelta(days=2),
            words_studied=4,
            correct_answers=3,
            incorrect_answers=1,
        ))
        session.commit()

        analytics = stats_service.get_learning_analytics(session, user.id, days=7)
        assert len(analytics.daily_activity) == 7
        assert analytics.daily_activity[-1].day == datetime.utcnow().date()

        busy = [d for d in analytics.daily_activity if d.sessions]
        assert len(busy) == 1
        assert busy[0].words_studied == 4
        assert busy[0].accuracy == 75

    def test_old_sessions_are_left_out(self, session, user):
        session.add(UserLearningSession(user_id=user.id, start_time=datetime.utcnow() - timedelta(days=40)))
        session.commit()
        analytics = stats_service.get_learning_analytics(session, user.id, days=30)
        assert sum(d.sessions for d in analytics.daily_activity) == 0

    def test_frequent_mistakes(self, session, user, make_definition):
        apple = make_definition("apple")
        pear = make_definition("pear")
        word_ids = {}
        for definition in (apple, pear):
            word_ids[definition.id] = get_definition_word_info(session, [definition.id])[definition.id]['word_id']

        for typed in ("aple", "appel"):
            session.add(LearningMistake(
                user_id=user.id, word_id=word_ids[apple.id], definition_id=apple.id,
                type="spelling", incorrect_value=typed,
            ))
        session.add(LearningMistake(
            user_id=user.id, word_id=word_ids[pear.id], definition_id=pear.id,
            type="spelling", incorrect_value="pera",
        ))
        session.commit()

        mistakes = stats_service.get_learning_analytics(session, user.id).frequent_mistakes
        assert [(m.word, m.mistakes) for m in mistakes] == [("apple", 2), ("pear", 1)]
        assert mistakes[0].last_incorrect_value == "appel"

    def test_mistakes_without_a_linked_word(self, session, user, make_definition):
        pear = make_definition("pear")
        pear_word_id = get_definition_word_info(session, [pear.id])[pear.id]['word_id']
        session.add(LearningMistake(
            user_id=user.id, word_id=pear_word_id, definition_id=pear.id,
            type="spelling", incorrect_value="pera",
        ))
        session.add(LearningMistake(
            user_id=user.id, definition_id=pear.id, type="spelling", incorrect_value="peer",
            mistake_data={"correct_value": "pear"},
        ))
        for typed in ("fgi", "fiig"):
            session.add(LearningMistake(
                user_id=user.id, type="spelling", incorrect_value=typed, mistake_data={"correct_value": "fig"},
            ))
        session.add(LearningMistake(
            user_id=user.id, type="spelling", incorrect_value="kiwy", context='"kiwi" a small brown fruit',
        ))
        session.commit()

        mistakes = stats_service.get_learning_analytics(session, user.id).frequent_mistakes
        assert [(m.word, m.mistakes) for m in mistakes] == [("fig", 2), ("pear", 2), ("kiwi", 1)]
        assert mistakes[1].word_id == pear_word_id
        assert mistakes[1].last_incorrect_value == "peer"
        assert mistakes[0].word_id is None


class TestStatsApi:

    def test_statistics(self, client, user):
        response = client.get(f"/api/v1/stats?user_id={user.id}")
        assert response.status_code == 200
        assert response.json()["total_sessions"] == 0

    def test_unknown_user(self, client):
        response = client.get("/api/v1/stats?user_id=999")
        assert response.status_code == 404
        assert response.json()["type"] == "NotFoundError"

    def test_analytics_range(self, client, user):
        response = client.get(f"/api/v1/stats/analytics?user_id={user.id}&days=400")
        assert response.status_code == 422
