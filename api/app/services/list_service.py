"""
List service: categories and curated word lists.
"""
import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import Category, Definition, DifficultyLevel, ListWord, UserList, WordList
from app.schemas.lists import (
    ListDetailsResponse,
    ListResponse,
    ListsPage,
    ListWordItem,
)
from app.services.dictionary_service import get_definition_word_info

logger = logging.getLogger(__name__)


# ============================================================================
# Categories
# ============================================================================

DEFAULT_CATEGORIES = [
    ('General Vocabulary', 'Common words for everyday use'),
    ('Business & Work', 'Professional and workplace vocabulary'),
    ('Travel & Tourism', 'Words related to travel and tourism'),
    ('Food & Cooking', 'Culinary vocabulary and cooking terms'),
    ('Science & Technology', 'Technical and scientific terminology'),
    ('Arts & Culture', 'Words related to arts, culture, and entertainment'),
    ('Sports & Health', 'Sports, fitness, and health-related vocabulary'),
    ('Academic', 'Educational and academic vocabulary'),
]


def seed_default_categories(session: Session) -> int:
    """Create the default categories that do not exist yet; returns how many were created."""
    existing = set(session.exec(select(Category.name)).all())
    created = 0
    for name, description in DEFAULT_CATEGORIES:
        if name in existing:
            continue
        session.add(Category(name=name, description=description))
        created += 1
        logger.info(f"Created category: {name}")
    session.commit()
    return created


def get_categories(session: Session) -> List[Category]:
    return session.exec(select(Category).order_by(Category.name)).all()


def create_category(session: Session, name: str, description: Optional[str] = None) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required")
    if session.exec(select(Category).where(Category.name == name)).first():
        raise ConflictError(f"Category '{name}' already exists")
    category = Category(name=name, description=description)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


# ============================================================================
# Lists
# ============================================================================

def get_list_or_404(session: Session, list_id: int, include_deleted: bool = False) -> WordList:
    word_list = session.get(WordList, list_id)
    if not word_list or (word_list.deleted_at is not None and not include_deleted):
        raise NotFoundError(f"List with id {list_id} not found")
    return word_list


def build_list_response(word_list: WordList, category_name: Optional[str] = None, in_collection: bool = False) -> ListResponse:
    return ListResponse(
        id=word_list.id,
        name=word_list.name,
        description=word_list.description,
        category_id=word_list.category_id,
        category_name=category_name,
        base_language_code=word_list.base_language_code,
        target_language_code=word_list.target_language_code,
        is_public=word_list.is_public,
        tags=word_list.tags,
        cover_image_url=word_list.cover_image_url,
        difficulty_level=word_list.difficulty_level,
        word_count=word_list.word_count,
        learned_word_count=word_list.learned_word_count,
        created_at=word_list.created_at,
        updated_at=word_list.updated_at,
        deleted_at=word_list.deleted_at,
        is_in_user_collection=in_collection,
    )


def _ensure_definitions_exist(session: Session, definition_ids: List[int]):
    found = set(session.exec(
        select(Definition.id).where(Definition.id.in_(definition_ids))  # type: ignore
    ).all())
    missing = [d for d in definition_ids if d not in found]
    if missing:
        raise NotFoundError(f"Definitions not found: {', '.join(str(m) for m in missing)}")


def create_list_with_words(session: Session, data: Dict[str, Any]) -> WordList:
    """
    Create a list and its words in one transaction.

    Args:
        session: Database session
        data: List fields plus 'definition_ids' in display order

    Returns:
        The created list

    Raises:
        ValidationError: If the name or the definitions are missing
        NotFoundError: If the category or a definition does not exist
        ConflictError: If the category already has a list with that name
    """
    name = (data.get('name') or "").strip()
    if not name:
        raise ValidationError("List name is required")
    definition_ids = list(dict.fromkeys(data.get('definition_ids') or []))
    if not definition_ids:
        raise ValidationError("A list needs at least one word")
    if not session.get(Category, data.get('category_id')):
        raise NotFoundError(f"Category with id {data.get('category_id')} not found")
    if session.exec(
        select(WordList).where(WordList.name == name, WordList.category_id == data['category_id'])
    ).first():
        raise ConflictError(f"List '{name}' already exists in this category")
    _ensure_definitions_exist(session, definition_ids)

    try:
        word_list = WordList(
            name=name,
            description=data.get('description'),
            category_id=data['category_id'],
            base_language_code=data.get('base_language_code'),
            target_language_code=data.get('target_language_code'),
            is_public=bool(data.get('is_public')),
            tags=data.get('tags'),
            cover_image_url=data.get('cover_image_url'),
            difficulty_level=data.get('difficulty_level'),
            word_count=len(definition_ids),
        )
        session.add(word_list)
        session.flush()
        for index, definition_id in enumerate(definition_ids, start=1):
            session.add(ListWord(list_id=word_list.id, definition_id=definition_id, order_index=index))
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(word_list)
    logger.info(f"Created list {word_list.id} '{name}' with {len(definition_ids)} words")
    return word_list


def _count_list_words(session: Session, list_id: int) -> int:
    return session.exec(select(func.count()).select_from(ListWord).where(ListWord.list_id == list_id)).one()


def add_words_to_list(session: Session, list_id: int, definition_ids: List[int]) -> Dict[str, int]:
    """Append definitions to a list, skipping those already in it."""
    word_list = get_list_or_404(session, list_id)
    _ensure_definitions_exist(session, definition_ids)

    existing = set(session.exec(select(ListWord.definition_id).where(ListWord.list_id == list_id)).all())
    max_order = session.exec(select(func.max(ListWord.order_index)).where(ListWord.list_id == list_id)).one() or 0

    added = 0
    for definition_id in dict.fromkeys(definition_ids):
        if definition_id in existing:
            continue
        max_order += 1
        session.add(ListWord(list_id=list_id, definition_id=definition_id, order_index=max_order))
        added += 1
    session.flush()

    word_list.word_count = _count_list_words(session, list_id)
    word_list.updated_at = datetime.utcnow()
    session.add(word_list)
    session.commit()
    return {'added': added, 'skipped': len(set(definition_ids)) - added, 'word_count': word_list.word_count}


def remove_words_from_list(session: Session, list_id: int, definition_ids: List[int]) -> Dict[str, int]:
    word_list = get_list_or_404(session, list_id)
    rows = session.exec(
        select(ListWord).where(
            ListWord.list_id == list_id,
            ListWord.definition_id.in_(definition_ids),  # type: ignore
        )
    ).all()
    for row in rows:
        session.delete(row)
    session.flush()

    word_list.word_count = _count_list_words(session, list_id)
    word_list.updated_at = datetime.utcnow()
    session.add(word_list)
    session.commit()
    return {'removed': len(rows), 'word_count': word_list.word_count}


def fetch_all_lists(
    session: Session,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    language_code: Optional[str] = None,
    difficulty_level: Optional[DifficultyLevel] = None,
    is_public: Optional[bool] = None,
    include_deleted: bool = False,
    page: int = 1,
    page_size: int = 20,
    user_id: Optional[int] = None,
) -> ListsPage:
    """
    Filtered, paginated lists.

    When ``user_id`` is given, each list is flagged if the user already has
    an active copy of it.
    """
    statement = select(WordList, Category.name).join(Category, Category.id == WordList.category_id)
    if search:
        pattern = f"%{search.strip()}%"
        statement = statement.where(or_(WordList.name.ilike(pattern), WordList.description.ilike(pattern)))
    if category_id:
        statement = statement.where(WordList.category_id == category_id)
    if language_code:
        statement = statement.where(or_(
            WordList.base_language_code == language_code,
            WordList.target_language_code == language_code,
        ))
    if difficulty_level:
        statement = statement.where(WordList.difficulty_level == difficulty_level)
    if is_public is not None:
        statement = statement.where(WordList.is_public == is_public)
    if not include_deleted:
        statement = statement.where(WordList.deleted_at.is_(None))

    total_count = session.exec(select(func.count()).select_from(statement.subquery())).one()
    rows = session.exec(
        statement.order_by(WordList.created_at.desc(), WordList.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()

    owned = set()
    if user_id and rows:
        owned = set(session.exec(
            select(UserList.list_id).where(
                UserList.user_id == user_id,
                UserList.deleted_at.is_(None),
                UserList.list_id.in_([word_list.id for word_list, _ in rows]),  # type: ignore
            )
        ).all())

    return ListsPage(
        lists=[build_list_response(word_list, name, word_list.id in owned) for word_list, name in rows],
        total_count=total_count,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total_count / page_size) if page_size else 0,
    )


def get_available_public_lists(session: Session, user_id: int, **filters) -> ListsPage:
    filters.pop('is_public', None)
    filters.pop('include_deleted', None)
    return fetch_all_lists(session, is_public=True, include_deleted=False, user_id=user_id, **filters)


def get_list_words(session: Session, list_id: int) -> List[ListWordItem]:
    rows = session.exec(
        select(ListWord, Definition)
        .join(Definition, Definition.id == ListWord.definition_id)
        .where(ListWord.list_id == list_id)
        .order_by(ListWord.order_index)
    ).all()
    info = get_definition_word_info(session, [definition.id for _, definition in rows])
    return [
        ListWordItem(
            definition_id=definition.id,
            definition=definition.definition,
            order_index=list_word.order_index,
            **{key: info.get(definition.id, {}).get(key) for key in (
                'word', 'word_id', 'part_of_speech', 'phonetic', 'image_url', 'audio_url'
            )},
        )
        for list_word, definition in rows
    ]


def get_list_details(session: Session, list_id: int) -> ListDetailsResponse:
    word_list = get_list_or_404(session, list_id, include_deleted=True)
    category = session.get(Category, word_list.category_id)
    return ListDetailsResponse(
        list=build_list_response(word_list, category.name if category else None),
        words=get_list_words(session, list_id),
    )


def update_list(session: Session, list_id: int, data: Dict[str, Any]) -> WordList:
    word_list = get_list_or_404(session, list_id)
    if data.get('category_id') and not session.get(Category, data['category_id']):
        raise NotFoundError(f"Category with id {data['category_id']} not found")
    if data.get('name') is not None:
        data['name'] = data['name'].strip()
        if not data['name']:
            raise ValidationError("List name is required")
    for field, value in data.items():
        if value is not None:
            setattr(word_list, field, value)
    word_list.updated_at = datetime.utcnow()
    session.add(word_list)
    session.commit()
    session.refresh(word_list)
    return word_list


def delete_list(session: Session, list_id: int) -> WordList:
    word_list = get_list_or_404(session, list_id)
    word_list.deleted_at = datetime.utcnow()
    session.add(word_list)
    session.commit()
    session.refresh(word_list)
    logger.info(f"Soft-deleted list {list_id}")
    return word_list


def restore_list(session: Session, list_id: int) -> WordList:
    word_list = get_list_or_404(session, list_id, include_deleted=True)
    if word_list.deleted_at is None:
        raise ValidationError(f"List {list_id} is not deleted")
    word_list.deleted_at = None
    word_list.updated_at = datetime.utcnow()
    session.add(word_list)
    session.commit()
    session.refresh(word_list)
    return word_list
