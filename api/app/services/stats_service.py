"""
Statistics service: progress summaries built from the user's dictionary,
practice sessions and recorded mistakes.
"""
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import case, func
from sqlmodel import Session, select

from app.models import LearningMistake, UserLearningSession, Word
from app.schemas.stats import DailyActivity, FrequentMistake, LearningAnalytics, UserStatistics
from app.services import learning_metrics
from app.services.user_dictionary_service import get_user_dictionary_stats
from app.services.user_service import get_user
from app.utils.text_utils import extract_word_text

logger = logging.getLogger(__name__)

TOP_MISTAKES_LIMIT = 10


def calculate_streak(session_days: Iterable[date], today: Optional[date] = None) -> int:
    """
    Consecutive days with at least one session, counted back from today.

    A streak still counts when the last session was yesterday.
    """
    days = set(session_days)
    today = today or datetime.utcnow().date()
    current = today if today in days else today - timedelta(days=1)
    streak = 0
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def get_user_statistics(session: Session, user_id: int) -> UserStatistics:
    get_user(session, user_id)
    sessions = session.exec(
        select(UserLearningSession).where(UserLearningSession.user_id == user_id)
    ).all()

    completed = [s for s in sessions if s.end_time is not None]
    correct = sum(s.correct_answers for s in sessions)
    incorrect = sum(s.incorrect_answers for s in sessions)
    scores = [s.score for s in completed if s.score is not None]

    return UserStatistics(
        dictionary=get_user_dictionary_stats(session, user_id),
        total_sessions=len(sessions),
        completed_sessions=len(completed),
        total_words_studied=sum(s.words_studied for s in sessions),
        total_correct_answers=correct,
        total_incorrect_answers=incorrect,
        overall_accuracy=learning_metrics.calculate_accuracy(correct, correct + incorrect),
        average_session_score=round(sum(scores) / len(scores), 2) if scores else 0,
        current_streak_days=calculate_streak(s.start_time.date() for s in sessions),
        total_study_time=sum(s.duration or 0 for s in sessions),
    )


def get_learning_analytics(session: Session, user_id: int, days: int = 30) -> LearningAnalytics:
    """
    Daily activity over the last ``days`` days and the most frequent mistakes.

    Days without a session are included with zero counts.
    """
    get_user(session, user_id)
    today = datetime.utcnow().date()
    start_day = today - timedelta(days=days - 1)
    since = datetime.combine(start_day, datetime.min.time())

    sessions = session.exec(
        select(UserLearningSession).where(
            UserLearningSession.user_id == user_id,
            UserLearningSession.start_time >= since,
        )
    ).all()

    per_day = defaultdict(lambda: {'sessions': 0, 'words_studied': 0, 'correct': 0, 'incorrect': 0})
    for practice in sessions:
        bucket = per_day[practice.start_time.date()]
        bucket['sessions'] += 1
        bucket['words_studied'] += practice.words_studied
        bucket['correct'] += practice.correct_answers
        bucket['incorrect'] += practice.incorrect_answers

    daily_activity = []
    for offset in range(days):
        day = start_day + timedelta(days=offset)
        bucket = per_day.get(day, {'sessions': 0, 'words_studied': 0, 'correct': 0, 'incorrect': 0})
        daily_activity.append(DailyActivity(
            day=day,
            sessions=bucket['sessions'],
            words_studied=bucket['words_studied'],
            correct_answers=bucket['correct'],
            incorrect_answers=bucket['incorrect'],
            accuracy=learning_metrics.calculate_accuracy(
                bucket['correct'], bucket['correct'] + bucket['incorrect']
            ),
        ))

    return LearningAnalytics(
        days=days,
        daily_activity=daily_activity,
        frequent_mistakes=get_frequent_mistakes(session, user_id),
    )


def _mistake_word_text(mistake: LearningMistake) -> str:
    """The word a mistake was made on when it is not linked to a words row."""
    data = mistake.mistake_data or {}
    return data.get('correct_value') or extract_word_text(mistake.context or "")


def get_frequent_mistakes(session: Session, user_id: int, limit: int = TOP_MISTAKES_LIMIT) -> List[FrequentMistake]:
    """
    The words the user got wrong most often.

    Mistakes without a linked word are named after the answer they
    expected and counted together with linked words of the same text.
    """
    # Unlinked mistakes stay one row each; they are merged by text below
    unlinked = case((LearningMistake.word_id.is_(None), LearningMistake.id), else_=None)
    rows = session.exec(
        select(LearningMistake.word_id, Word.word, func.count(), func.max(LearningMistake.id))
        .outerjoin(Word, Word.id == LearningMistake.word_id)
        .where(LearningMistake.user_id == user_id)
        .group_by(LearningMistake.word_id, Word.word, unlinked)
    ).all()

    # word text -> [word_id, mistakes, last mistake id]
    grouped: Dict[str, list] = {}
    for word_id, word, count, last_mistake_id in rows:
        if word is None:
            word = _mistake_word_text(session.get(LearningMistake, last_mistake_id))
        bucket = grouped.setdefault(word, [word_id, 0, last_mistake_id])
        bucket[0] = bucket[0] or word_id
        bucket[1] += count
        bucket[2] = max(bucket[2], last_mistake_id)

    ranked = sorted(grouped.items(), key=lambda item: (-item[1][1], item[0]))[:limit]
    frequent_mistakes = []
    for word, (word_id, count, last_mistake_id) in ranked:
        last = session.get(LearningMistake, last_mistake_id)
        frequent_mistakes.append(FrequentMistake(
            word_id=word_id,
            word=word,
            mistakes=count,
            last_incorrect_value=last.incorrect_value if last else None,
        ))
    return frequent_mistakes
