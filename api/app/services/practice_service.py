"""
Practice service: typing practice sessions over a user's dictionary.
"""
import logging
import math
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.exceptions import NotFoundError, ValidationError
from app.models import (
    Definition,
    LearningMistake,
    LearningStatus,
    ListWord,
    SessionType,
    UserDictionary,
    UserLearningSession,
    UserSessionItem,
)
from app.schemas.practice import (
    DifficultySettings,
    PracticeSessionResponse,
    PracticeWord,
    SessionCompletionResponse,
    SessionHistoryItem,
    SessionHistoryPage,
    SessionProgressResponse,
    SessionResumeResponse,
    SrsStatistics,
    ValidateTypingResponse,
)
from app.services import learning_metrics
from app.services.dictionary_service import get_definition_word_info
from app.services.user_dictionary_service import apply_srs_result, apply_status_timestamps, get_entry
from app.services.user_list_service import (
    get_definition_translations,
    get_list_definition_ids,
    get_user_list_or_404,
)
from app.services.user_service import get_user
from app.utils.text_utils import extract_word_text

logger = logging.getLogger(__name__)

MISTAKE_TYPE_SPELLING = "spelling"


def get_practice_session_or_404(session: Session, user_id: int, session_id: int) -> UserLearningSession:
    practice = session.get(UserLearningSession, session_id)
    if not practice or practice.user_id != user_id:
        raise NotFoundError(f"Session {session_id} not found")
    return practice


def _word_text(session: Session, definition: Definition) -> str:
    """The word a definition belongs to, or a best guess from its text."""
    info = get_definition_word_info(session, [definition.id]).get(definition.id)
    if info and info.get('word'):
        return info['word']
    return extract_word_text(definition.definition)


def build_practice_words(session: Session, rows: List[tuple], base_language_code: str) -> List[PracticeWord]:
    """Turn (UserDictionary, Definition) rows into practice words with their translations."""
    definition_ids = [definition.id for _, definition in rows]
    info = get_definition_word_info(session, definition_ids)
    translations = get_definition_translations(session, definition_ids, base_language_code)

    words = []
    for entry, definition in rows:
        word_info = info.get(definition.id, {})
        words.append(PracticeWord(
            user_dictionary_id=entry.id,
            definition_id=definition.id,
            word=word_info.get('word') or extract_word_text(definition.definition),
            definition=entry.custom_definition_base or definition.definition,
            part_of_speech=word_info.get('part_of_speech'),
            phonetic=entry.custom_phonetic or word_info.get('phonetic'),
            image_url=word_info.get('image_url'),
            audio_url=word_info.get('audio_url'),
            learning_status=entry.learning_status,
            progress=entry.progress,
            correct_streak=entry.correct_streak,
            srs_level=entry.srs_level,
            next_srs_review=entry.next_srs_review,
            translations=translations.get(definition.id, []),
        ))
    return words


def create_practice_session(
    session: Session,
    user_id: int,
    user_list_id: Optional[int] = None,
    list_id: Optional[int] = None,
    difficulty_level: int = learning_metrics.DEFAULT_DIFFICULTY_LEVEL,
    words_count: Optional[int] = None,
    include_statuses: Optional[List[LearningStatus]] = None,
) -> PracticeSessionResponse:
    """
    Pick practice words and open a session.

    Words least recently reviewed come first, then the weakest ones by
    progress and streak.

    Args:
        session: Database session
        user_id: Practising user
        user_list_id: Restrict to the words of one of the user's lists
        list_id: Restrict to the definitions of a list
        difficulty_level: 1-5, see learning_metrics.DIFFICULTY_LEVELS
        words_count: Words to practise; defaults to the level's words per session
        include_statuses: Only entries with these learning statuses

    Returns:
        The session id, its words and the difficulty settings

    Raises:
        ValidationError: If fewer than MIN_WORDS_FOR_SESSION words qualify
    """
    user = get_user(session, user_id)
    settings = learning_metrics.get_difficulty_settings(difficulty_level)
    target_count = learning_metrics.clamp_words_count(words_count, difficulty_level)

    statement = (
        select(UserDictionary, Definition)
        .join(Definition, Definition.id == UserDictionary.definition_id)
        .where(UserDictionary.user_id == user_id, UserDictionary.deleted_at.is_(None))
    )
    if user_list_id:
        user_list = get_user_list_or_404(session, user_id, user_list_id)
        statement = statement.where(UserDictionary.definition_id.in_(  # type: ignore
            get_list_definition_ids(session, user_list)
        ))
    if list_id:
        statement = statement.where(UserDictionary.definition_id.in_(  # type: ignore
            select(ListWord.definition_id).where(ListWord.list_id == list_id)
        ))
    if include_statuses:
        statement = statement.where(UserDictionary.learning_status.in_(include_statuses))  # type: ignore

    candidates = session.exec(
        statement.order_by(
            UserDictionary.last_reviewed_at.is_(None).desc(),
            UserDictionary.last_reviewed_at.asc(),
            UserDictionary.progress.asc(),
            UserDictionary.correct_streak.asc(),
        ).limit(target_count * 2)
    ).all()

    if len(candidates) < learning_metrics.MIN_WORDS_FOR_SESSION:
        raise ValidationError(
            f"Insufficient words for practice. Need at least "
            f"{learning_metrics.MIN_WORDS_FOR_SESSION} words, found {len(candidates)}."
        )

    selected = candidates[:target_count]

    practice = UserLearningSession(
        user_id=user_id,
        user_list_id=user_list_id,
        list_id=list_id,
        session_type=SessionType.PRACTICE,
    )
    session.add(practice)
    session.commit()
    session.refresh(practice)
    logger.info(f"User {user_id} started practice session {practice.id} with {len(selected)} words")

    words = build_practice_words(session, selected, user.base_language_code)
    return PracticeSessionResponse(
        session_id=practice.id,
        words=words,
        total_words=len(words),
        difficulty_settings=DifficultySettings(**settings),
        time_limit=learning_metrics.DEFAULT_SESSION_TIME_LIMIT,
    )


def _feedback(is_correct: bool, partial_credit: bool, accuracy: int, points: int, correct_word: str) -> str:
    if is_correct:
        if points > learning_metrics.POINTS_PER_CORRECT_ANSWER:
            return "Perfect! Great speed!"
        return "Correct!"
    if partial_credit:
        return f"Close! ({accuracy}% accuracy)"
    return f'Incorrect. The correct spelling is: "{correct_word}"'


def validate_typing(
    session: Session,
    user_id: int,
    session_id: int,
    user_dictionary_id: int,
    user_input: str,
    response_time_ms: Optional[int] = None,
) -> ValidateTypingResponse:
    """
    Check a typed answer and apply it to the entry and the session.

    Raises:
        NotFoundError: If the session or the entry is not the user's
        ValidationError: If the session is already completed
    """
    practice = get_practice_session_or_404(session, user_id, session_id)
    if practice.end_time is not None:
        raise ValidationError("Session already completed")

    entry = get_entry(session, user_id, user_dictionary_id)
    definition = session.get(Definition, entry.definition_id)
    correct_word = _word_text(session, definition)

    is_correct, accuracy, partial_credit = learning_metrics.is_typing_approximately_correct(
        user_input, correct_word
    )
    points = learning_metrics.calculate_points(is_correct, partial_credit, response_time_ms)
    now = datetime.utcnow()
    was_learned = entry.learning_status == LearningStatus.LEARNED

    entry.review_count += 1
    if is_correct:
        entry.correct_streak += 1
    else:
        entry.correct_streak = 0
        entry.amount_of_mistakes += 1
    apply_srs_result(entry, is_correct, now)

    response_seconds = (
        response_time_ms / 1000 if response_time_ms is not None else learning_metrics.TYPING_TIME_LIMIT
    )
    entry.mastery_score = learning_metrics.calculate_mastery_score(
        accuracy, entry.correct_streak, response_seconds, entry.review_count
    )
    status = learning_metrics.determine_learning_status(
        entry.correct_streak, entry.review_count, entry.correct_streak, entry.mastery_score
    )
    apply_status_timestamps(entry, status, now)
    entry.progress = min(accuracy, 100)
    entry.last_reviewed_at = now
    entry.next_review_due = learning_metrics.calculate_next_review_date(entry.review_count, accuracy, now)
    entry.updated_at = now
    session.add(entry)

    item = session.exec(
        select(UserSessionItem).where(
            UserSessionItem.session_id == practice.id,
            UserSessionItem.user_dictionary_id == entry.id,
        )
    ).first()
    if item:
        item.attempts_count += 1
        item.is_correct = is_correct
        item.response_time = response_time_ms
    else:
        item = UserSessionItem(
            session_id=practice.id,
            user_dictionary_id=entry.id,
            is_correct=is_correct,
            response_time=response_time_ms,
        )
        practice.words_studied += 1
    session.add(item)

    if is_correct:
        practice.correct_answers += 1
    else:
        practice.incorrect_answers += 1
        info = get_definition_word_info(session, [definition.id]).get(definition.id, {})
        session.add(LearningMistake(
            user_id=user_id,
            word_id=info.get('word_id'),
            word_details_id=info.get('word_details_id'),
            definition_id=definition.id,
            user_dictionary_id=entry.id,
            type=MISTAKE_TYPE_SPELLING,
            incorrect_value=user_input,
            context=definition.definition,
            mistake_data={
                'correct_value': correct_word,
                'accuracy': accuracy,
                'partial_credit': partial_credit,
                'response_time_ms': response_time_ms,
            },
        ))
    if status == LearningStatus.LEARNED and not was_learned:
        practice.words_learned += 1
    session.add(practice)

    session.commit()
    session.refresh(entry)

    return ValidateTypingResponse(
        is_correct=is_correct,
        accuracy=accuracy,
        partial_credit=partial_credit,
        points_earned=points,
        correct_word=correct_word,
        feedback=_feedback(is_correct, partial_credit, accuracy, points, correct_word),
        learning_status=entry.learning_status,
        mastery_score=entry.mastery_score,
        correct_streak=entry.correct_streak,
    )


def complete_practice_session(session: Session, user_id: int, session_id: int) -> SessionCompletionResponse:
    practice = get_practice_session_or_404(session, user_id, session_id)
    if practice.end_time is not None:
        raise ValidationError("Session already completed")

    now = datetime.utcnow()
    time_spent = int((now - practice.start_time).total_seconds())
    total = practice.correct_answers + practice.incorrect_answers
    accuracy, score = learning_metrics.calculate_session_score(practice.correct_answers, total, time_spent)

    practice.end_time = now
    practice.duration = time_spent
    practice.score = score
    practice.completion_percentage = accuracy
    session.add(practice)
    session.commit()
    session.refresh(practice)
    logger.info(f"Practice session {session_id} completed: accuracy {accuracy}%, score {score}")

    return SessionCompletionResponse(
        session_id=practice.id,
        accuracy=accuracy,
        score=score,
        time_spent=time_spent,
        words_studied=practice.words_studied,
        words_learned=practice.words_learned,
        correct_answers=practice.correct_answers,
        incorrect_answers=practice.incorrect_answers,
        achievements=learning_metrics.session_achievements(accuracy, practice.words_learned, time_spent),
    )


def get_session_progress(session: Session, user_id: int, session_id: int) -> SessionProgressResponse:
    practice = get_practice_session_or_404(session, user_id, session_id)
    end = practice.end_time or datetime.utcnow()
    elapsed = int((end - practice.start_time).total_seconds())
    total = practice.correct_answers + practice.incorrect_answers
    return SessionProgressResponse(
        session_id=practice.id,
        words_studied=practice.words_studied,
        correct_answers=practice.correct_answers,
        incorrect_answers=practice.incorrect_answers,
        accuracy=learning_metrics.calculate_accuracy(practice.correct_answers, total),
        time_elapsed=elapsed,
        time_remaining=max(0, learning_metrics.DEFAULT_SESSION_TIME_LIMIT - elapsed),
        is_completed=practice.end_time is not None,
        is_cancelled=practice.end_time is not None and practice.score is None,
    )


def get_session_history(session: Session, user_id: int, page: int = 1, page_size: int = 20) -> SessionHistoryPage:
    statement = select(UserLearningSession).where(UserLearningSession.user_id == user_id)
    total_count = session.exec(select(func.count()).select_from(statement.subquery())).one()
    sessions = session.exec(
        statement.order_by(UserLearningSession.start_time.desc(), UserLearningSession.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()
    return SessionHistoryPage(
        sessions=[SessionHistoryItem.model_validate(s) for s in sessions],
        total_count=total_count,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total_count / page_size) if page_size else 0,
    )


def cancel_practice_session(session: Session, user_id: int, session_id: int) -> SessionProgressResponse:
    """
    Close a session without scoring it.

    Answers already given stay recorded on the entries. A cancelled
    session has an end time but no score.

    Raises:
        ValidationError: If the session has already ended
    """
    practice = get_practice_session_or_404(session, user_id, session_id)
    if practice.end_time is not None:
        raise ValidationError("Session already completed")

    now = datetime.utcnow()
    practice.end_time = now
    practice.duration = int((now - practice.start_time).total_seconds())
    session.add(practice)
    session.commit()
    session.refresh(practice)
    logger.info(f"Practice session {session_id} cancelled after {practice.words_studied} words")
    return get_session_progress(session, user_id, session_id)


def resume_practice_session(session: Session, user_id: int, session_id: int) -> SessionResumeResponse:
    """Pick an open session up again: its progress so far and the ids of the entries already answered."""
    practice = get_practice_session_or_404(session, user_id, session_id)
    if practice.end_time is not None:
        raise ValidationError("Session already completed")

    answered = session.exec(
        select(UserSessionItem.user_dictionary_id)
        .where(UserSessionItem.session_id == practice.id)
        .order_by(UserSessionItem.created_at, UserSessionItem.id)
    ).all()
    return SessionResumeResponse(
        session_type=practice.session_type,
        user_list_id=practice.user_list_id,
        list_id=practice.list_id,
        answered_user_dictionary_ids=list(answered),
        progress=get_session_progress(session, user_id, session_id),
    )


def _srs_due_filter(user_id: int, now: datetime) -> tuple:
    return (
        UserDictionary.user_id == user_id,
        UserDictionary.deleted_at.is_(None),
        or_(UserDictionary.next_srs_review.is_(None), UserDictionary.next_srs_review <= now),
    )


def get_words_for_srs_review(session: Session, user_id: int, limit: int = 20) -> List[PracticeWord]:
    """
    Entries due for a spaced-repetition review.

    Overdue entries come first, oldest due date first, then entries never
    reviewed. Ties go to the lower SRS level.
    """
    user = get_user(session, user_id)
    rows = session.exec(
        select(UserDictionary, Definition)
        .join(Definition, Definition.id == UserDictionary.definition_id)
        .where(*_srs_due_filter(user_id, datetime.utcnow()))
        .order_by(
            UserDictionary.next_srs_review.is_(None).asc(),
            UserDictionary.next_srs_review.asc(),
            UserDictionary.srs_level.asc(),
            UserDictionary.id.asc(),
        )
        .limit(limit)
    ).all()
    return build_practice_words(session, rows, user.base_language_code)


def get_srs_statistics(session: Session, user_id: int) -> SrsStatistics:
    """Counts of due entries and how the user's dictionary spreads over SRS levels."""
    get_user(session, user_id)
    now = datetime.utcnow()
    end_of_today = datetime.combine(now.date(), time.max)
    end_of_tomorrow = end_of_today + timedelta(days=1)

    entries = session.exec(
        select(UserDictionary).where(UserDictionary.user_id == user_id, UserDictionary.deleted_at.is_(None))
    ).all()
    scheduled = [e.next_srs_review for e in entries if e.next_srs_review is not None]

    level_distribution: Dict[int, int] = {}
    for entry in entries:
        level_distribution[entry.srs_level] = level_distribution.get(entry.srs_level, 0) + 1

    total = len(entries)
    return SrsStatistics(
        total_words=total,
        never_reviewed=total - len(scheduled),
        overdue_words=sum(1 for due in scheduled if due <= now),
        due_today=sum(1 for due in scheduled if now < due <= end_of_today),
        due_tomorrow=sum(1 for due in scheduled if end_of_today < due <= end_of_tomorrow),
        level_distribution=level_distribution,
        average_interval=round(sum(e.srs_interval for e in entries) / total, 2) if total else 0,
        average_mastery=round(sum(e.mastery_score for e in entries) / total, 2) if total else 0,
    )
