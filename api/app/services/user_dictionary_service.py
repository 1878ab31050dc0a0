"""
User dictionary service: a user's personal collection of definitions and
the learning progress recorded on each entry.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import Definition, Language, LearningStatus, UserDictionary
from app.schemas.user_dictionary import (
    UserDictionaryItem,
    UserDictionaryPage,
    UserDictionaryStats,
)
from app.services import learning_metrics
from app.services.dictionary_service import get_definition_or_404, get_definition_word_info
from app.services.user_service import get_user

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'created_at': UserDictionary.created_at,
    'updated_at': UserDictionary.updated_at,
    'last_reviewed_at': UserDictionary.last_reviewed_at,
    'next_review_due': UserDictionary.next_review_due,
    'mastery_score': UserDictionary.mastery_score,
    'progress': UserDictionary.progress,
    'review_count': UserDictionary.review_count,
    'learning_status': UserDictionary.learning_status,
    'definition': Definition.definition,
}


def get_entry(session: Session, user_id: int, user_dictionary_id: int, include_deleted: bool = False) -> UserDictionary:
    """Fetch an entry of the user's dictionary, raising NotFoundError for other users' entries."""
    entry = session.get(UserDictionary, user_dictionary_id)
    if not entry or entry.user_id != user_id or (entry.deleted_at is not None and not include_deleted):
        raise NotFoundError(f"User dictionary entry {user_dictionary_id} not found")
    return entry


def apply_status_timestamps(entry: UserDictionary, status: LearningStatus, now: datetime):
    """
    Set the learning status and stamp its transitions.

    Learning starts with the first move to inProgress. Every move into
    learned from another status stamps the learned time again.
    """
    if status == LearningStatus.IN_PROGRESS and entry.time_word_was_started_to_learn is None:
        entry.time_word_was_started_to_learn = now
    if status == LearningStatus.LEARNED and entry.learning_status != LearningStatus.LEARNED:
        entry.time_word_was_learned = now
    entry.learning_status = status


def apply_srs_result(entry: UserDictionary, is_correct: bool, now: datetime):
    """Move the spaced-repetition level one step up or down and schedule the next SRS review."""
    intervals = learning_metrics.SPACED_REPETITION_INTERVALS
    if is_correct:
        entry.srs_level = min(entry.srs_level + 1, len(intervals) - 1)
    else:
        entry.srs_level = max(entry.srs_level - 1, 0)
    entry.srs_interval = intervals[entry.srs_level]
    entry.last_srs_success = is_correct
    entry.next_srs_review = now + timedelta(days=entry.srs_interval)


def add_definition_to_user_dictionary(
    session: Session,
    user_id: int,
    definition_id: int,
    base_language_code: str,
    target_language_code: str,
) -> UserDictionary:
    """
    Add a definition to the user's dictionary.

    A previously removed entry is restored with its progress intact.

    Raises:
        NotFoundError: If the user or definition does not exist
        ConflictError: If the definition is already in the user's dictionary
    """
    get_user(session, user_id)
    get_definition_or_404(session, definition_id)
    for code in (base_language_code, target_language_code):
        if not session.get(Language, code):
            raise ValidationError(f"Invalid language code: {code}")

    entry = session.exec(
        select(UserDictionary).where(
            UserDictionary.user_id == user_id,
            UserDictionary.definition_id == definition_id,
        )
    ).first()
    if entry and entry.deleted_at is None:
        raise ConflictError("Word is already in your dictionary")

    now = datetime.utcnow()
    if entry:
        entry.deleted_at = None
        entry.updated_at = now
        logger.info(f"Restored user dictionary entry {entry.id} for user {user_id}")
    else:
        entry = UserDictionary(
            user_id=user_id,
            definition_id=definition_id,
            base_language_code=base_language_code,
            target_language_code=target_language_code,
            learning_status=LearningStatus.NOT_STARTED,
        )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def build_items(session: Session, rows: List[tuple]) -> List[UserDictionaryItem]:
    """Turn (UserDictionary, Definition) rows into items enriched with word data."""
    info = get_definition_word_info(session, [definition.id for _, definition in rows])
    items = []
    for entry, definition in rows:
        word_info = info.get(definition.id, {})
        items.append(UserDictionaryItem(
            id=entry.id,
            definition_id=definition.id,
            definition=definition.definition,
            word=word_info.get('word'),
            word_id=word_info.get('word_id'),
            part_of_speech=word_info.get('part_of_speech'),
            phonetic=entry.custom_phonetic or word_info.get('phonetic'),
            image_url=word_info.get('image_url'),
            audio_url=word_info.get('audio_url'),
            base_language_code=entry.base_language_code,
            target_language_code=entry.target_language_code,
            custom_definition_base=entry.custom_definition_base,
            custom_definition_target=entry.custom_definition_target,
            custom_phonetic=entry.custom_phonetic,
            custom_notes=entry.custom_notes,
            custom_tags=entry.custom_tags,
            custom_difficulty_level=entry.custom_difficulty_level,
            is_favorite=entry.is_favorite,
            is_modified=entry.is_modified,
            learning_status=entry.learning_status,
            progress=entry.progress,
            mastery_score=entry.mastery_score,
            review_count=entry.review_count,
            amount_of_mistakes=entry.amount_of_mistakes,
            correct_streak=entry.correct_streak,
            last_reviewed_at=entry.last_reviewed_at,
            next_review_due=entry.next_review_due,
            time_word_was_started_to_learn=entry.time_word_was_started_to_learn,
            time_word_was_learned=entry.time_word_was_learned,
            srs_level=entry.srs_level,
            srs_interval=entry.srs_interval,
            created_at=entry.created_at,
        ))
    return items


def get_user_dictionary_item(session: Session, user_id: int, user_dictionary_id: int) -> UserDictionaryItem:
    entry = get_entry(session, user_id, user_dictionary_id)
    definition = session.get(Definition, entry.definition_id)
    return build_items(session, [(entry, definition)])[0]


def get_user_dictionary(
    session: Session,
    user_id: int,
    learning_status: Optional[List[LearningStatus]] = None,
    search: Optional[str] = None,
    is_favorite: Optional[bool] = None,
    is_modified: Optional[bool] = None,
    needs_review: Optional[bool] = None,
    sort_by: str = 'created_at',
    sort_order: str = 'desc',
    page: int = 1,
    page_size: int = 20,
) -> UserDictionaryPage:
    """
    Page through the user's dictionary.

    Args:
        learning_status: Only entries in one of these statuses
        search: Substring of the definition, custom definitions or notes
        needs_review: Only entries whose next review is due
        sort_by: One of SORT_FIELDS
        sort_order: 'asc' or 'desc'
    """
    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")
    if sort_order not in ('asc', 'desc'):
        raise ValidationError("sort_order must be 'asc' or 'desc'")
    if page < 1 or page_size < 1 or page_size > 100:
        raise ValidationError("Page must be >= 1 and page size between 1 and 100")

    statement = (
        select(UserDictionary, Definition)
        .join(Definition, Definition.id == UserDictionary.definition_id)
        .where(UserDictionary.user_id == user_id, UserDictionary.deleted_at.is_(None))
    )
    if learning_status:
        statement = statement.where(UserDictionary.learning_status.in_(learning_status))  # type: ignore
    if search:
        pattern = f"%{search.strip()}%"
        statement = statement.where(or_(
            Definition.definition.ilike(pattern),
            UserDictionary.custom_definition_base.ilike(pattern),
            UserDictionary.custom_definition_target.ilike(pattern),
            UserDictionary.custom_notes.ilike(pattern),
        ))
    if is_favorite is not None:
        statement = statement.where(UserDictionary.is_favorite == is_favorite)
    if is_modified is not None:
        statement = statement.where(UserDictionary.is_modified == is_modified)
    if needs_review:
        statement = statement.where(UserDictionary.next_review_due <= datetime.utcnow())

    total_count = session.exec(select(func.count()).select_from(statement.subquery())).one()

    column = SORT_FIELDS[sort_by]
    order = column.asc() if sort_order == 'asc' else column.desc()
    rows = session.exec(
        statement.order_by(order, UserDictionary.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()

    total_pages = math.ceil(total_count / page_size)
    return UserDictionaryPage(
        items=build_items(session, rows),
        total_count=total_count,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


def update_learning_status(
    session: Session,
    user_id: int,
    user_dictionary_id: int,
    learning_status: LearningStatus,
    progress: Optional[float] = None,
    mastery_score: Optional[float] = None,
    next_review_due: Optional[datetime] = None,
) -> UserDictionary:
    entry = get_entry(session, user_id, user_dictionary_id)
    now = datetime.utcnow()

    apply_status_timestamps(entry, learning_status, now)
    if progress is not None:
        entry.progress = progress
    if mastery_score is not None:
        entry.mastery_score = mastery_score
    if next_review_due is not None:
        entry.next_review_due = next_review_due
    entry.last_reviewed_at = now
    entry.review_count += 1
    entry.updated_at = now

    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def toggle_favorite(session: Session, user_id: int, user_dictionary_id: int) -> UserDictionary:
    entry = get_entry(session, user_id, user_dictionary_id)
    entry.is_favorite = not entry.is_favorite
    entry.updated_at = datetime.utcnow()
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def update_custom_data(session: Session, user_id: int, user_dictionary_id: int, data: Dict[str, Any]) -> UserDictionary:
    """Store the user's own definitions, phonetic, notes, tags or difficulty."""
    entry = get_entry(session, user_id, user_dictionary_id)
    for field, value in data.items():
        if value is not None:
            setattr(entry, field, value)
    entry.is_modified = True
    entry.updated_at = datetime.utcnow()
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def remove_from_user_dictionary(session: Session, user_id: int, user_dictionary_id: int) -> UserDictionary:
    entry = get_entry(session, user_id, user_dictionary_id)
    entry.deleted_at = datetime.utcnow()
    session.add(entry)
    session.commit()
    session.refresh(entry)
    logger.info(f"Removed user dictionary entry {user_dictionary_id} for user {user_id}")
    return entry


def get_user_dictionary_stats(session: Session, user_id: int) -> UserDictionaryStats:
    active = (UserDictionary.user_id == user_id, UserDictionary.deleted_at.is_(None))

    rows = session.exec(
        select(UserDictionary.learning_status, func.count()).where(*active).group_by(UserDictionary.learning_status)
    ).all()
    by_status = {status.value: 0 for status in LearningStatus}
    by_status.update({status.value: count for status, count in rows})

    favorites = session.exec(
        select(func.count()).select_from(UserDictionary).where(*active, UserDictionary.is_favorite.is_(True))
    ).one()
    needs_review = session.exec(
        select(func.count()).select_from(UserDictionary).where(
            *active, UserDictionary.next_review_due <= datetime.utcnow()
        )
    ).one()
    average_mastery = session.exec(select(func.avg(UserDictionary.mastery_score)).where(*active)).one()

    return UserDictionaryStats(
        total_words=sum(by_status.values()),
        favorites=favorites,
        needs_review=needs_review,
        average_mastery=round(float(average_mastery or 0), 2),
        by_status=by_status,
    )


def record_review(
    session: Session,
    user_id: int,
    user_dictionary_id: int,
    is_correct: bool,
    response_time_ms: Optional[int] = None,
) -> UserDictionary:
    """
    Apply a flashcard answer to an entry.

    Updates the streak, mistakes, mastery and learning status, moves the
    spaced-repetition level one step up (correct) or down (wrong) and
    schedules the next review.
    """
    entry = get_entry(session, user_id, user_dictionary_id)
    now = datetime.utcnow()

    entry.review_count += 1
    if is_correct:
        entry.correct_streak += 1
    else:
        entry.correct_streak = 0
        entry.amount_of_mistakes += 1
    apply_srs_result(entry, is_correct, now)

    correct_attempts = max(entry.review_count - entry.amount_of_mistakes, 0)
    accuracy = learning_metrics.calculate_accuracy(correct_attempts, entry.review_count)
    response_seconds = (
        response_time_ms / 1000 if response_time_ms is not None else learning_metrics.TYPING_TIME_LIMIT
    )
    entry.mastery_score = learning_metrics.calculate_mastery_score(
        accuracy, entry.correct_streak, response_seconds, entry.review_count
    )
    status = learning_metrics.determine_learning_status(
        correct_attempts, entry.review_count, entry.correct_streak, entry.mastery_score
    )
    apply_status_timestamps(entry, status, now)

    entry.progress = min(accuracy, 100)
    entry.next_review_due = learning_metrics.calculate_next_review_date(entry.review_count, accuracy, now)
    entry.last_reviewed_at = now
    entry.updated_at = now

    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry
