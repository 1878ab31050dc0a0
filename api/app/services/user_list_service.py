"""
User list service: lists in a user's collection, either inherited from a
public list or created by the user.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import (
    Definition,
    DefinitionTranslation,
    Language,
    LearningStatus,
    ListWord,
    Translation,
    UserDictionary,
    UserList,
    UserListWord,
    WordList,
)
from app.schemas.user_lists import UserListResponse, UserListsResponse, UserListWordItem
from app.services.dictionary_service import get_definition_word_info
from app.services.list_service import get_list_or_404
from app.services.user_dictionary_service import get_entry
from app.services.user_service import get_user

logger = logging.getLogger(__name__)

CUSTOM_FIELDS = (
    'custom_name_of_list',
    'custom_description_of_list',
    'custom_cover_image_url',
    'custom_difficulty',
)


def get_user_list_or_404(session: Session, user_id: int, user_list_id: int) -> UserList:
    user_list = session.get(UserList, user_list_id)
    if not user_list or user_list.user_id != user_id or user_list.deleted_at is not None:
        raise NotFoundError(f"User list {user_list_id} not found")
    return user_list


def get_list_definition_ids(session: Session, user_list: UserList) -> List[int]:
    """
    Definitions of a user list.

    Custom lists hold only their own words. Inherited lists hold the
    source list's definitions followed by any words the user added.
    """
    own_ids = list(session.exec(
        select(UserDictionary.definition_id)
        .join(UserListWord, UserListWord.user_dictionary_id == UserDictionary.id)
        .where(UserListWord.user_list_id == user_list.id)
        .order_by(UserListWord.order_index)
    ).all())
    if user_list.list_id is None:
        return own_ids
    source_ids = list(session.exec(
        select(ListWord.definition_id).where(ListWord.list_id == user_list.list_id).order_by(ListWord.order_index)
    ).all())
    in_source = set(source_ids)
    return source_ids + [d for d in own_ids if d not in in_source]


def _counts(session: Session, user_list: UserList) -> Tuple[int, int]:
    definition_ids = get_list_definition_ids(session, user_list)
    if not definition_ids:
        return 0, 0
    learned = session.exec(
        select(func.count()).select_from(UserDictionary).where(
            UserDictionary.user_id == user_list.user_id,
            UserDictionary.deleted_at.is_(None),
            UserDictionary.learning_status == LearningStatus.LEARNED,
            UserDictionary.definition_id.in_(definition_ids),  # type: ignore
        )
    ).one()
    return len(definition_ids), learned


def build_user_list_response(session: Session, user_list: UserList, source: Optional[WordList] = None) -> UserListResponse:
    """Custom values win over the source list's values."""
    if source is None and user_list.list_id is not None:
        source = session.get(WordList, user_list.list_id)
    word_count, learned = _counts(session, user_list)
    return UserListResponse(
        id=user_list.id,
        list_id=user_list.list_id,
        name=user_list.custom_name_of_list or (source.name if source else "") or "Untitled list",
        description=user_list.custom_description_of_list or (source.description if source else None),
        cover_image_url=user_list.custom_cover_image_url or (source.cover_image_url if source else None),
        difficulty=user_list.custom_difficulty or (source.difficulty_level if source else None),
        base_language_code=user_list.base_language_code,
        target_language_code=user_list.target_language_code,
        is_custom=user_list.list_id is None,
        is_modified=user_list.is_modified,
        word_count=word_count,
        learned_word_count=learned,
        progress=round(learned / word_count * 100, 2) if word_count else 0,
        created_at=user_list.created_at,
        updated_at=user_list.updated_at,
    )


def get_user_lists(
    session: Session,
    user_id: int,
    search: Optional[str] = None,
    include_custom: bool = True,
    include_inherited: bool = True,
) -> UserListsResponse:
    statement = select(UserList).where(UserList.user_id == user_id, UserList.deleted_at.is_(None))
    if not include_custom:
        statement = statement.where(UserList.list_id.is_not(None))
    if not include_inherited:
        statement = statement.where(UserList.list_id.is_(None))
    user_lists = session.exec(statement.order_by(UserList.created_at.desc(), UserList.id.desc())).all()

    source_ids = [ul.list_id for ul in user_lists if ul.list_id]
    sources = {}
    if source_ids:
        sources = {wl.id: wl for wl in session.exec(select(WordList).where(WordList.id.in_(source_ids))).all()}  # type: ignore

    lists = [build_user_list_response(session, ul, sources.get(ul.list_id)) for ul in user_lists]
    if search:
        needle = search.strip().lower()
        lists = [
            item for item in lists
            if needle in item.name.lower() or needle in (item.description or "").lower()
        ]
    return UserListsResponse(lists=lists, total_count=len(lists))


def _ensure_languages(session: Session, *codes: str):
    for code in codes:
        if not session.get(Language, code):
            raise ValidationError(f"Invalid language code: {code}")


def add_list_to_user_collection(
    session: Session,
    user_id: int,
    list_id: int,
    base_language_code: str,
    target_language_code: str,
) -> UserList:
    """
    Add a public list to the user's collection.

    Raises:
        NotFoundError: If the list does not exist, is deleted or is not public
        ConflictError: If the user already has it
    """
    get_user(session, user_id)
    word_list = get_list_or_404(session, list_id)
    if not word_list.is_public:
        raise NotFoundError(f"List with id {list_id} not found")
    _ensure_languages(session, base_language_code, target_language_code)

    user_list = session.exec(
        select(UserList).where(UserList.user_id == user_id, UserList.list_id == list_id)
    ).first()
    if user_list and user_list.deleted_at is None:
        raise ConflictError("List is already in your collection")

    now = datetime.utcnow()
    if user_list:
        user_list.deleted_at = None
        user_list.updated_at = now
    else:
        user_list = UserList(
            user_id=user_id,
            list_id=list_id,
            base_language_code=base_language_code,
            target_language_code=target_language_code,
        )
    session.add(user_list)
    session.commit()
    session.refresh(user_list)
    logger.info(f"User {user_id} added list {list_id} to their collection")
    return user_list


def remove_list_from_user_collection(session: Session, user_id: int, user_list_id: int) -> UserList:
    user_list = get_user_list_or_404(session, user_id, user_list_id)
    user_list.deleted_at = datetime.utcnow()
    session.add(user_list)
    session.commit()
    session.refresh(user_list)
    return user_list


def create_custom_user_list(session: Session, user_id: int, data: Dict[str, Any]) -> UserList:
    get_user(session, user_id)
    name = (data.get('name') or "").strip()
    if not name:
        raise ValidationError("List name is required")
    _ensure_languages(session, data['base_language_code'], data['target_language_code'])

    user_list = UserList(
        user_id=user_id,
        list_id=None,
        base_language_code=data['base_language_code'],
        target_language_code=data['target_language_code'],
        is_modified=True,
        custom_name_of_list=name,
        custom_description_of_list=data.get('description'),
        custom_cover_image_url=data.get('cover_image_url'),
        custom_difficulty=data.get('difficulty'),
    )
    session.add(user_list)
    session.commit()
    session.refresh(user_list)
    return user_list


def update_user_list(session: Session, user_id: int, user_list_id: int, data: Dict[str, Any]) -> UserList:
    """Set custom fields; an empty string resets the field to the source list's value."""
    user_list = get_user_list_or_404(session, user_id, user_list_id)
    for field in CUSTOM_FIELDS:
        if field not in data or data[field] is None:
            continue
        value = data[field]
        setattr(user_list, field, None if value == "" else value)
    user_list.is_modified = True
    user_list.updated_at = datetime.utcnow()
    session.add(user_list)
    session.commit()
    session.refresh(user_list)
    return user_list


def add_word_to_user_list(session: Session, user_id: int, user_list_id: int, user_dictionary_id: int) -> UserListWord:
    user_list = get_user_list_or_404(session, user_id, user_list_id)
    entry = get_entry(session, user_id, user_dictionary_id)

    if session.get(UserListWord, (user_list.id, user_dictionary_id)):
        raise ConflictError("Word is already in this list")
    if user_list.list_id is not None and session.get(ListWord, (user_list.list_id, entry.definition_id)):
        raise ConflictError("Word is already in this list")

    max_order = session.exec(
        select(func.max(UserListWord.order_index)).where(UserListWord.user_list_id == user_list.id)
    ).one() or 0
    list_word = UserListWord(
        user_list_id=user_list.id,
        user_dictionary_id=user_dictionary_id,
        order_index=max_order + 1,
    )
    session.add(list_word)
    user_list.updated_at = datetime.utcnow()
    session.add(user_list)
    session.commit()
    session.refresh(list_word)
    return list_word


def remove_word_from_user_list(session: Session, user_id: int, user_list_id: int, user_dictionary_id: int):
    user_list = get_user_list_or_404(session, user_id, user_list_id)
    list_word = session.get(UserListWord, (user_list.id, user_dictionary_id))
    if not list_word:
        raise NotFoundError("Word is not in this list")
    session.delete(list_word)
    session.commit()


def get_definition_translations(session: Session, definition_ids: List[int], language_code: str) -> Dict[int, List[str]]:
    if not definition_ids:
        return {}
    rows = session.exec(
        select(DefinitionTranslation.definition_id, Translation.content)
        .join(Translation, Translation.id == DefinitionTranslation.translation_id)
        .where(
            DefinitionTranslation.definition_id.in_(definition_ids),  # type: ignore
            Translation.language_code == language_code,
        )
    ).all()
    result = defaultdict(list)
    for definition_id, content in rows:
        result[definition_id].append(content)
    return result


def get_user_list_words(session: Session, user_id: int, user_list_id: int) -> List[UserListWordItem]:
    """
    Words of a user list with the user's learning fields.

    Custom lists read their own words. Inherited lists read the source
    list's definitions, attach the user's entry when there is one and
    then append the words the user added.
    """
    user_list = get_user_list_or_404(session, user_id, user_list_id)

    own_rows = session.exec(
        select(UserListWord.order_index, Definition, UserDictionary)
        .join(UserDictionary, UserDictionary.id == UserListWord.user_dictionary_id)
        .join(Definition, Definition.id == UserDictionary.definition_id)
        .where(UserListWord.user_list_id == user_list.id)
        .order_by(UserListWord.order_index)
    ).all()

    if user_list.list_id is None:
        rows = own_rows
    else:
        rows = session.exec(
            select(ListWord.order_index, Definition, UserDictionary)
            .join(Definition, Definition.id == ListWord.definition_id)
            .outerjoin(
                UserDictionary,
                (UserDictionary.definition_id == Definition.id)
                & (UserDictionary.user_id == user_id)
                & (UserDictionary.deleted_at.is_(None)),
            )
            .where(ListWord.list_id == user_list.list_id)
            .order_by(ListWord.order_index)
        ).all()
        # Words the user added follow the source list's words
        last_index = max((order_index for order_index, _, _ in rows), default=0)
        in_source = {definition.id for _, definition, _ in rows}
        rows = list(rows) + [
            (last_index + order_index, definition, entry)
            for order_index, definition, entry in own_rows
            if definition.id not in in_source
        ]

    definition_ids = [definition.id for _, definition, _ in rows]
    info = get_definition_word_info(session, definition_ids)
    translations = get_definition_translations(session, definition_ids, user_list.base_language_code)

    items = []
    for order_index, definition, entry in rows:
        word_info = info.get(definition.id, {})
        items.append(UserListWordItem(
            definition_id=definition.id,
            definition=definition.definition,
            order_index=order_index,
            word=word_info.get('word'),
            word_id=word_info.get('word_id'),
            part_of_speech=word_info.get('part_of_speech'),
            phonetic=word_info.get('phonetic'),
            image_url=word_info.get('image_url'),
            audio_url=word_info.get('audio_url'),
            user_dictionary_id=entry.id if entry else None,
            learning_status=entry.learning_status if entry else None,
            progress=entry.progress if entry else None,
            mastery_score=entry.mastery_score if entry else None,
            review_count=entry.review_count if entry else None,
            last_reviewed_at=entry.last_reviewed_at if entry else None,
            translations=translations.get(definition.id, []),
        ))
    return items


def reorder_user_list_words(
    session: Session,
    user_id: int,
    user_list_id: int,
    orders: List[Tuple[int, int]],
) -> int:
    """Apply (user_dictionary_id, order_index) pairs to a custom list's words."""
    user_list = get_user_list_or_404(session, user_id, user_list_id)
    updated = 0
    for user_dictionary_id, order_index in orders:
        list_word = session.get(UserListWord, (user_list.id, user_dictionary_id))
        if not list_word:
            raise NotFoundError(f"Word {user_dictionary_id} is not in this list")
        list_word.order_index = order_index
        session.add(list_word)
        updated += 1
    user_list.updated_at = datetime.utcnow()
    session.add(user_list)
    session.commit()
    return updated
