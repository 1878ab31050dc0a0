"""
User service for business logic related to user operations.
"""
import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.models import (
    Language,
    LearningMistake,
    LearningStatus,
    User,
    UserDictionary,
    UserLearningSession,
    UserList,
    UserListWord,
    UserRole,
    UserSessionItem,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _ensure_language(session: Session, code: str):
    if not session.get(Language, code):
        raise ValidationError(f"Invalid language code: {code}")


def get_user(session: Session, user_id: int, include_deleted: bool = False) -> User:
    user = session.get(User, user_id)
    if not user or (user.deleted_at is not None and not include_deleted):
        raise NotFoundError(f"User with id {user_id} not found")
    return user


def require_admin(session: Session, user_id: int) -> User:
    """Return the user if it is an active admin, otherwise raise AuthorizationError."""
    user = session.get(User, user_id)
    if not user or user.deleted_at is not None or not user.is_admin:
        raise AuthorizationError("Admin access required")
    return user


def register_user(
    session: Session,
    email: str,
    password: str,
    base_language_code: str,
    target_language_code: str,
    name: Optional[str] = None,
) -> User:
    """
    Create a new user account.

    Args:
        session: Database session
        email: Unique email address
        password: Plain password, at least 6 characters
        base_language_code: Language the user already speaks
        target_language_code: Language the user is learning

    Returns:
        The created user

    Raises:
        ValidationError: If the password is too short or a language is unknown
        ConflictError: If the email is already registered
    """
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    email = email.strip().lower()
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise ConflictError("Email already exists")

    _ensure_language(session, base_language_code)
    _ensure_language(session, target_language_code)

    user = User(
        name=name,
        email=email,
        password=User.hash_password(password),
        base_language_code=base_language_code,
        target_language_code=target_language_code,
        role=UserRole.USER,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Registered user {user.id} ({email})")
    return user


def login_user(session: Session, email: str, password: str) -> User:
    """Check credentials and record the login time."""
    user = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if not user or not user.verify_password(password):
        raise AuthenticationError("Invalid email or password")
    if user.deleted_at is not None:
        raise AuthenticationError("This account has been deleted")

    user.last_login = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def update_profile(session: Session, user_id: int, data: Dict[str, Any]) -> User:
    """Update name, languages and profile picture; None values are left unchanged."""
    user = get_user(session, user_id)

    for code_field in ('base_language_code', 'target_language_code'):
        if data.get(code_field):
            _ensure_language(session, data[code_field])

    for field in ('name', 'base_language_code', 'target_language_code', 'profile_picture_url'):
        value = data.get(field)
        if value is not None:
            setattr(user, field, value)

    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def update_settings(
    session: Session,
    user_id: int,
    settings: Optional[Dict[str, Any]] = None,
    study_preferences: Optional[Dict[str, Any]] = None,
) -> User:
    """Merge the given keys into the stored settings and study preferences."""
    user = get_user(session, user_id)
    if settings:
        user.settings = {**(user.settings or {}), **settings}
    if study_preferences:
        user.study_preferences = {**(user.study_preferences or {}), **study_preferences}
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def list_users(
    session: Session,
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    include_deleted: bool = False,
    page: int = 1,
    page_size: int = 20,
) -> Dict[str, Any]:
    """Paginated user listing for the admin area."""
    statement = select(User)
    if search:
        pattern = f"%{search.strip()}%"
        statement = statement.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    if role:
        statement = statement.where(User.role == role)
    if not include_deleted:
        statement = statement.where(User.deleted_at.is_(None))

    total_count = session.exec(select(func.count()).select_from(statement.subquery())).one()
    users = session.exec(
        statement.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()

    return {
        'users': users,
        'total_count': total_count,
        'page': page,
        'page_size': page_size,
        'total_pages': math.ceil(total_count / page_size) if page_size else 0,
    }


def get_user_with_stats(session: Session, user_id: int) -> Dict[str, Any]:
    """A user with counts of its dictionary entries by learning status."""
    user = get_user(session, user_id, include_deleted=True)
    rows = session.exec(
        select(UserDictionary.learning_status, func.count())
        .where(UserDictionary.user_id == user_id, UserDictionary.deleted_at.is_(None))
        .group_by(UserDictionary.learning_status)
    ).all()
    by_status = {status.value: count for status, count in rows}
    lists_count = session.exec(
        select(func.count()).select_from(UserList).where(
            UserList.user_id == user_id, UserList.deleted_at.is_(None)
        )
    ).one()
    return {
        'user': user,
        'total_words': sum(by_status.values()),
        'learned_words': by_status.get(LearningStatus.LEARNED.value, 0),
        'words_by_status': by_status,
        'lists_count': lists_count,
    }


def update_user_role(session: Session, user_id: int, role: UserRole) -> User:
    user = get_user(session, user_id, include_deleted=True)
    user.role = role
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Changed role of user {user_id} to {role.value}")
    return user


def soft_delete_user(session: Session, user_id: int) -> User:
    user = get_user(session, user_id)
    user.deleted_at = datetime.utcnow()
    user.status = "deleted"
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Soft-deleted user {user_id}")
    return user


def restore_user(session: Session, user_id: int) -> User:
    user = get_user(session, user_id, include_deleted=True)
    if user.deleted_at is None:
        raise ValidationError(f"User {user_id} is not deleted")
    user.deleted_at = None
    user.status = "active"
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Restored user {user_id}")
    return user


def delete_user_data(
    session: Session,
    user_id: int
) -> Dict[str, Any]:
    """
    Delete all learning data of a user.

    This function deletes in the correct order to respect foreign key constraints:
    1. Session items and learning sessions
    2. Learning mistakes
    3. User list words and user lists
    4. User dictionary entries

    Args:
        session: Database session
        user_id: The user ID whose data should be deleted

    Returns:
        Dict with counts of deleted items per table

    Raises:
        NotFoundError: If user not found
    """
    # Verify user exists
    if not session.get(User, user_id):
        raise NotFoundError(f"User with id {user_id} not found")

    learning_sessions = session.exec(
        select(UserLearningSession).where(UserLearningSession.user_id == user_id)
    ).all()
    session_ids = [s.id for s in learning_sessions]

    items = []
    if session_ids:
        items = session.exec(
            select(UserSessionItem).where(UserSessionItem.session_id.in_(session_ids))  # type: ignore
        ).all()
    for item in items:
        session.delete(item)
    session.flush()
    for learning_session in learning_sessions:
        session.delete(learning_session)

    mistakes = session.exec(select(LearningMistake).where(LearningMistake.user_id == user_id)).all()
    for mistake in mistakes:
        session.delete(mistake)

    user_lists = session.exec(select(UserList).where(UserList.user_id == user_id)).all()
    user_list_ids = [ul.id for ul in user_lists]
    list_words = []
    if user_list_ids:
        list_words = session.exec(
            select(UserListWord).where(UserListWord.user_list_id.in_(user_list_ids))  # type: ignore
        ).all()
    for list_word in list_words:
        session.delete(list_word)
    session.flush()
    for user_list in user_lists:
        session.delete(user_list)

    entries = session.exec(select(UserDictionary).where(UserDictionary.user_id == user_id)).all()
    session.flush()
    for entry in entries:
        session.delete(entry)

    session.commit()

    counts = {
        'session_items_deleted': len(items),
        'sessions_deleted': len(learning_sessions),
        'mistakes_deleted': len(mistakes),
        'user_list_words_deleted': len(list_words),
        'user_lists_deleted': len(user_lists),
        'user_dictionary_deleted': len(entries),
    }
    logger.info(f"Deleted user data for user {user_id}: {counts}")
    return counts
