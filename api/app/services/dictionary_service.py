"""
Dictionary service for searching words and curating dictionary content.
"""
import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import (
    Audio,
    Definition,
    DefinitionAudio,
    DefinitionExample,
    DefinitionRelationship,
    DefinitionTranslation,
    ExampleAudio,
    ExampleTranslation,
    Image,
    ListWord,
    PartOfSpeech,
    RelationshipType,
    SourceType,
    Translation,
    UserDictionary,
    Word,
    WordDefinition,
    WordDetails,
    WordDetailsAudio,
    WordDetailsRelationship,
    WordToWordRelationship,
)
from app.schemas.dictionary import (
    DefinitionResponse,
    DictionaryWordRow,
    DictionaryWordsResponse,
    ExampleResponse,
    RelationshipResponse,
    SearchResponse,
    SearchResultItem,
    WordDetailsResponse,
    WordFullResponse,
    WordResponse,
)
from app.services.ingestion_service import add_relationship, upsert_word, upsert_word_details
from app.utils.text_utils import normalize_search_query

logger = logging.getLogger(__name__)


# ============================================================================
# Lookup Helpers
# ============================================================================

def get_word_or_404(session: Session, word_id: int) -> Word:
    word = session.get(Word, word_id)
    if not word:
        raise NotFoundError(f"Word with id {word_id} not found")
    return word


def get_word_details_or_404(session: Session, word_details_id: int) -> WordDetails:
    details = session.get(WordDetails, word_details_id)
    if not details:
        raise NotFoundError(f"Word details with id {word_details_id} not found")
    return details


def get_definition_or_404(session: Session, definition_id: int) -> Definition:
    definition = session.get(Definition, definition_id)
    if not definition:
        raise NotFoundError(f"Definition with id {definition_id} not found")
    return definition


def get_primary_audio_urls(session: Session, word_details_ids: Iterable[int]) -> Dict[int, str]:
    """Map word details id to its audio url, preferring the primary file."""
    ids = list(set(word_details_ids))
    if not ids:
        return {}
    rows = session.exec(
        select(WordDetailsAudio.word_details_id, WordDetailsAudio.is_primary, Audio.url)
        .join(Audio, Audio.id == WordDetailsAudio.audio_id)
        .where(WordDetailsAudio.word_details_id.in_(ids))  # type: ignore
    ).all()
    urls: Dict[int, str] = {}
    for details_id, is_primary, url in rows:
        if is_primary or details_id not in urls:
            urls[details_id] = url
    return urls


def get_image_urls(session: Session, image_ids: Iterable[Optional[int]]) -> Dict[int, str]:
    ids = list({i for i in image_ids if i})
    if not ids:
        return {}
    images = session.exec(select(Image).where(Image.id.in_(ids))).all()  # type: ignore
    return {image.id: image.url for image in images}


def get_example_counts(session: Session, definition_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(set(definition_ids))
    if not ids:
        return {}
    rows = session.exec(
        select(DefinitionExample.definition_id, func.count())
        .where(DefinitionExample.definition_id.in_(ids))  # type: ignore
        .group_by(DefinitionExample.definition_id)
    ).all()
    return dict(rows)


def get_definition_word_info(session: Session, definition_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
    """
    Resolve definitions to the word entry they belong to.

    The primary link wins when a definition is shared by several entries.

    Returns:
        Map of definition id to word, part of speech, phonetic, image and audio
    """
    ids = list(set(definition_ids))
    if not ids:
        return {}
    rows = session.exec(
        select(WordDefinition, WordDetails, Word, Definition)
        .join(WordDetails, WordDetails.id == WordDefinition.word_details_id)
        .join(Word, Word.id == WordDetails.word_id)
        .join(Definition, Definition.id == WordDefinition.definition_id)
        .where(WordDefinition.definition_id.in_(ids))  # type: ignore
    ).all()

    audio_urls = get_primary_audio_urls(session, [details.id for _, details, _, _ in rows])
    image_urls = get_image_urls(session, [definition.image_id for _, _, _, definition in rows])

    info: Dict[int, Dict[str, Any]] = {}
    for link, details, word, definition in rows:
        if definition.id in info and not link.is_primary:
            continue
        info[definition.id] = {
            'word_id': word.id,
            'word': word.word,
            'word_details_id': details.id,
            'part_of_speech': details.part_of_speech,
            'phonetic': details.phonetic or word.phonetic_general,
            'image_url': image_urls.get(definition.image_id),
            'audio_url': audio_urls.get(details.id),
        }
    return info


# ============================================================================
# Search
# ============================================================================

def search_words(
    session: Session,
    query: str,
    language_code: str,
    user_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 10,
) -> SearchResponse:
    """
    Search words of a language by substring and expand them to their definitions.

    Args:
        session: Database session
        query: Text to look for (case-insensitive)
        language_code: Language of the words
        user_id: When given, results are flagged with the user's dictionary state
        page: Page number (1-based) over matching words
        page_size: Words per page

    Returns:
        SearchResponse with one item per definition of the matching words
    """
    normalized = normalize_search_query(query)
    if not normalized:
        return SearchResponse(results=[], total_count=0, page=page, page_size=page_size, total_pages=0)

    statement = select(Word).where(
        Word.language_code == language_code,
        func.lower(Word.word).contains(normalized, autoescape=True),
    )
    total_count = session.exec(select(func.count()).select_from(statement.subquery())).one()
    words = session.exec(
        statement.order_by(Word.frequency_general.is_(None), Word.frequency_general, Word.word)
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()

    word_ids = [w.id for w in words]
    rows = []
    if word_ids:
        rows = session.exec(
            select(WordDetails, WordDefinition, Definition)
            .join(WordDefinition, WordDefinition.word_details_id == WordDetails.id)
            .join(Definition, Definition.id == WordDefinition.definition_id)
            .where(WordDetails.word_id.in_(word_ids))  # type: ignore
            .order_by(WordDetails.id, WordDefinition.is_primary.desc(), Definition.id)
        ).all()

    definition_ids = [definition.id for _, _, definition in rows]
    audio_urls = get_primary_audio_urls(session, [details.id for details, _, _ in rows])
    image_urls = get_image_urls(session, [definition.image_id for _, _, definition in rows])
    example_counts = get_example_counts(session, definition_ids)

    user_entries: Dict[int, UserDictionary] = {}
    if user_id and definition_ids:
        entries = session.exec(
            select(UserDictionary).where(
                UserDictionary.user_id == user_id,
                UserDictionary.definition_id.in_(definition_ids),  # type: ignore
                UserDictionary.deleted_at.is_(None),
            )
        ).all()
        user_entries = {entry.definition_id: entry for entry in entries}

    details_by_word = defaultdict(list)
    for details, link, definition in rows:
        details_by_word[details.word_id].append((details, definition))

    results = []
    for word in words:
        for details, definition in details_by_word[word.id]:
            entry = user_entries.get(definition.id)
            results.append(SearchResultItem(
                word_id=word.id,
                word=word.word,
                word_details_id=details.id,
                definition_id=definition.id,
                definition=definition.definition,
                part_of_speech=details.part_of_speech,
                variant=details.variant,
                phonetic=details.phonetic or word.phonetic_general,
                frequency=details.frequency,
                source=details.source,
                image_url=image_urls.get(definition.image_id),
                audio_url=audio_urls.get(details.id),
                examples_count=example_counts.get(definition.id, 0),
                is_in_user_dictionary=entry is not None,
                user_dictionary_id=entry.id if entry else None,
                user_learning_status=entry.learning_status if entry else None,
            ))

    return SearchResponse(
        results=results,
        total_count=total_count,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total_count / page_size) if page_size else 0,
    )


# ============================================================================
# Word Details
# ============================================================================

def _translations_by_owner(session: Session, link_model, owner_column: str, owner_ids: List[int]) -> Dict[int, List[str]]:
    if not owner_ids:
        return {}
    column = getattr(link_model, owner_column)
    rows = session.exec(
        select(column, Translation.content)
        .join(Translation, Translation.id == link_model.translation_id)
        .where(column.in_(owner_ids))
    ).all()
    result = defaultdict(list)
    for owner_id, content in rows:
        result[owner_id].append(content)
    return result


def _example_audio_urls(session: Session, example_ids: List[int]) -> Dict[int, str]:
    if not example_ids:
        return {}
    rows = session.exec(
        select(ExampleAudio.example_id, Audio.url)
        .join(Audio, Audio.id == ExampleAudio.audio_id)
        .where(ExampleAudio.example_id.in_(example_ids))  # type: ignore
    ).all()
    return {example_id: url for example_id, url in rows}


def _build_definition_response(
    definition: Definition,
    is_primary: bool,
    examples: List[DefinitionExample],
    image_urls: Dict[int, str],
    definition_translations: Dict[int, List[str]],
    example_translations: Dict[int, List[str]],
    example_audio: Dict[int, str],
) -> DefinitionResponse:
    return DefinitionResponse(
        id=definition.id,
        definition=definition.definition,
        source=definition.source,
        language_code=definition.language_code,
        subject_status_labels=definition.subject_status_labels,
        general_labels=definition.general_labels,
        grammatical_note=definition.grammatical_note,
        usage_note=definition.usage_note,
        is_in_short_def=definition.is_in_short_def,
        is_primary=is_primary,
        image_id=definition.image_id,
        image_url=image_urls.get(definition.image_id),
        translations=definition_translations.get(definition.id, []),
        examples=[
            ExampleResponse(
                id=example.id,
                example=example.example,
                grammatical_note=example.grammatical_note,
                source_of_example=example.source_of_example,
                translations=example_translations.get(example.id, []),
                audio_url=example_audio.get(example.id),
            )
            for example in examples
        ],
    )


def get_word_details(session: Session, word_id: int) -> WordFullResponse:
    """
    Load a word with its entries, definitions, examples, media and relationships.

    Raises:
        NotFoundError: If the word does not exist
    """
    word = get_word_or_404(session, word_id)
    details_list = session.exec(
        select(WordDetails).where(WordDetails.word_id == word.id).order_by(WordDetails.id)
    ).all()
    details_ids = [d.id for d in details_list]

    links = []
    if details_ids:
        links = session.exec(
            select(WordDefinition, Definition)
            .join(Definition, Definition.id == WordDefinition.definition_id)
            .where(WordDefinition.word_details_id.in_(details_ids))  # type: ignore
            .order_by(WordDefinition.is_primary.desc(), Definition.id)
        ).all()
    definition_ids = [definition.id for _, definition in links]

    examples_by_definition = defaultdict(list)
    if definition_ids:
        for example in session.exec(
            select(DefinitionExample)
            .where(DefinitionExample.definition_id.in_(definition_ids))  # type: ignore
            .order_by(DefinitionExample.id)
        ).all():
            examples_by_definition[example.definition_id].append(example)
    example_ids = [e.id for examples in examples_by_definition.values() for e in examples]

    image_urls = get_image_urls(session, [definition.image_id for _, definition in links])
    definition_translations = _translations_by_owner(session, DefinitionTranslation, 'definition_id', definition_ids)
    example_translations = _translations_by_owner(session, ExampleTranslation, 'example_id', example_ids)
    example_audio = _example_audio_urls(session, example_ids)

    audio_by_details = defaultdict(list)
    if details_ids:
        for details_id, url in session.exec(
            select(WordDetailsAudio.word_details_id, Audio.url)
            .join(Audio, Audio.id == WordDetailsAudio.audio_id)
            .where(WordDetailsAudio.word_details_id.in_(details_ids))  # type: ignore
            .order_by(WordDetailsAudio.is_primary.desc())
        ).all():
            audio_by_details[details_id].append(url)

    definitions_by_details = defaultdict(list)
    for link, definition in links:
        definitions_by_details[link.word_details_id].append(
            _build_definition_response(
                definition,
                link.is_primary,
                examples_by_definition[definition.id],
                image_urls,
                definition_translations,
                example_translations,
                example_audio,
            )
        )

    details_responses = [
        WordDetailsResponse(
            id=details.id,
            part_of_speech=details.part_of_speech,
            variant=details.variant,
            gender=details.gender,
            phonetic=details.phonetic,
            forms=details.forms,
            frequency=details.frequency,
            is_plural=details.is_plural,
            source=details.source,
            audio_urls=audio_by_details[details.id],
            definitions=definitions_by_details[details.id],
        )
        for details in details_list
    ]

    return WordFullResponse(
        word=WordResponse.model_validate(word),
        details=details_responses,
        relationships=get_relationships(session, word, details_ids, definition_ids),
    )


def get_relationships(
    session: Session,
    word: Word,
    details_ids: List[int],
    definition_ids: List[int],
) -> List[RelationshipResponse]:
    """Outgoing and incoming relationships at all three levels, with the other word's text."""
    relationships: List[RelationshipResponse] = []

    word_links = session.exec(
        select(WordToWordRelationship).where(
            or_(WordToWordRelationship.from_word_id == word.id, WordToWordRelationship.to_word_id == word.id)
        ).order_by(WordToWordRelationship.order_index)
    ).all()
    other_word_ids = {
        link.to_word_id if link.from_word_id == word.id else link.from_word_id for link in word_links
    }

    details_links = []
    if details_ids:
        details_links = session.exec(
            select(WordDetailsRelationship).where(
                or_(
                    WordDetailsRelationship.from_word_details_id.in_(details_ids),  # type: ignore
                    WordDetailsRelationship.to_word_details_id.in_(details_ids),  # type: ignore
                )
            ).order_by(WordDetailsRelationship.order_index)
        ).all()
    other_details_ids = set()
    for link in details_links:
        other_details_ids.add(link.from_word_details_id)
        other_details_ids.add(link.to_word_details_id)

    definition_links = []
    if definition_ids:
        definition_links = session.exec(
            select(DefinitionRelationship).where(
                or_(
                    DefinitionRelationship.from_definition_id.in_(definition_ids),  # type: ignore
                    DefinitionRelationship.to_definition_id.in_(definition_ids),  # type: ignore
                )
            )
        ).all()
    other_definition_ids = set()
    for link in definition_links:
        other_definition_ids.add(link.from_definition_id)
        other_definition_ids.add(link.to_definition_id)

    word_texts = {}
    if other_word_ids:
        word_texts = {
            w.id: w.word for w in session.exec(select(Word).where(Word.id.in_(other_word_ids))).all()  # type: ignore
        }
    details_texts = {}
    if other_details_ids:
        details_texts = dict(session.exec(
            select(WordDetails.id, Word.word)
            .join(Word, Word.id == WordDetails.word_id)
            .where(WordDetails.id.in_(other_details_ids))  # type: ignore
        ).all())
    definition_texts = {
        definition_id: info['word']
        for definition_id, info in get_definition_word_info(session, other_definition_ids).items()
    }

    for link in word_links:
        other = link.to_word_id if link.from_word_id == word.id else link.from_word_id
        relationships.append(RelationshipResponse(
            level="word", from_id=link.from_word_id, to_id=link.to_word_id, type=link.type,
            related_word=word_texts.get(other), description=link.description, order_index=link.order_index,
        ))
    for link in details_links:
        other = link.to_word_details_id if link.from_word_details_id in details_ids else link.from_word_details_id
        relationships.append(RelationshipResponse(
            level="details", from_id=link.from_word_details_id, to_id=link.to_word_details_id, type=link.type,
            related_word=details_texts.get(other), description=link.description, order_index=link.order_index,
        ))
    for link in definition_links:
        other = link.to_definition_id if link.from_definition_id in definition_ids else link.from_definition_id
        relationships.append(RelationshipResponse(
            level="definition", from_id=link.from_definition_id, to_id=link.to_definition_id, type=link.type,
            related_word=definition_texts.get(other), description=link.description, order_index=link.order_index,
        ))
    return relationships


# ============================================================================
# Admin Table
# ============================================================================

def fetch_dictionary_words(
    session: Session,
    language_code: str,
    part_of_speech: Optional[PartOfSpeech] = None,
    source: Optional[SourceType] = None,
    has_image: Optional[bool] = None,
    has_audio: Optional[bool] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> DictionaryWordsResponse:
    """
    Rows of the admin dictionary table, one per definition of each word entry.

    Entries without definitions still get one row so they can be curated.
    """
    if page < 1 or page_size < 1 or page_size > 100:
        raise ValidationError("Page must be >= 1 and page size between 1 and 100")

    audio_exists = (
        select(WordDetailsAudio.word_details_id)
        .where(WordDetailsAudio.word_details_id == WordDetails.id)
        .exists()
    )
    statement = (
        select(Word, WordDetails, Definition)
        .join(WordDetails, WordDetails.word_id == Word.id)
        .outerjoin(WordDefinition, WordDefinition.word_details_id == WordDetails.id)
        .outerjoin(Definition, Definition.id == WordDefinition.definition_id)
        .where(Word.language_code == language_code)
    )
    if part_of_speech:
        statement = statement.where(WordDetails.part_of_speech == part_of_speech)
    if source:
        statement = statement.where(WordDetails.source == source)
    if has_image is True:
        statement = statement.where(Definition.image_id.is_not(None))
    elif has_image is False:
        statement = statement.where(Definition.image_id.is_(None))
    if has_audio is True:
        statement = statement.where(audio_exists)
    elif has_audio is False:
        statement = statement.where(~audio_exists)
    if search:
        statement = statement.where(func.lower(Word.word).contains(search.strip().lower(), autoescape=True))

    total_count = session.exec(select(func.count()).select_from(statement.subquery())).one()
    rows = session.exec(
        statement.order_by(Word.word, WordDetails.id, Definition.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()

    audio_urls = get_primary_audio_urls(session, [details.id for _, details, _ in rows])
    image_urls = get_image_urls(session, [d.image_id for _, _, d in rows if d])

    items = [
        DictionaryWordRow(
            word_id=word.id,
            word=word.word,
            word_details_id=details.id,
            part_of_speech=details.part_of_speech,
            variant=details.variant,
            source=details.source,
            frequency_general=word.frequency_general,
            frequency=details.frequency,
            definition_id=definition.id if definition else None,
            definition=definition.definition if definition else None,
            image_id=definition.image_id if definition else None,
            image_url=image_urls.get(definition.image_id) if definition else None,
            has_audio=details.id in audio_urls,
        )
        for word, details, definition in rows
    ]
    return DictionaryWordsResponse(
        items=items,
        total_count=total_count,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total_count / page_size),
    )


# ============================================================================
# Admin Curation
# ============================================================================

def _apply_updates(instance, data: Dict[str, Any]):
    for field, value in data.items():
        if value is not None:
            setattr(instance, field, value)


def update_word(session: Session, word_id: int, data: Dict[str, Any]) -> Word:
    word = get_word_or_404(session, word_id)
    new_text = data.get('word')
    if new_text and new_text != word.word:
        duplicate = session.exec(
            select(Word).where(Word.word == new_text, Word.language_code == word.language_code)
        ).first()
        if duplicate:
            raise ConflictError(f"Word '{new_text}' already exists in {word.language_code}")
    _apply_updates(word, data)
    word.updated_at = datetime.utcnow()
    session.add(word)
    session.commit()
    session.refresh(word)
    return word


def update_word_details(session: Session, word_details_id: int, data: Dict[str, Any]) -> WordDetails:
    details = get_word_details_or_404(session, word_details_id)
    _apply_updates(details, data)
    session.add(details)
    session.commit()
    session.refresh(details)
    return details


def create_definition(session: Session, word_details_id: int, data: Dict[str, Any]) -> Definition:
    """Create a definition in the word's language and link it to the entry."""
    details = get_word_details_or_404(session, word_details_id)
    word = session.get(Word, details.word_id)
    text = data['definition'].strip()
    source = data.get('source') or SourceType.ADMIN

    existing = session.exec(
        select(Definition).where(
            Definition.definition == text,
            Definition.language_code == word.language_code,
            Definition.source == source,
        )
    ).first()
    definition = existing or Definition(definition=text, language_code=word.language_code, source=source)
    for field in ('subject_status_labels', 'general_labels', 'grammatical_note', 'usage_note'):
        if data.get(field) is not None:
            setattr(definition, field, data[field])
    session.add(definition)
    session.flush()

    link = session.get(WordDefinition, (details.id, definition.id))
    if link is None:
        link = WordDefinition(word_details_id=details.id, definition_id=definition.id)
    link.is_primary = bool(data.get('is_primary'))
    session.add(link)
    session.commit()
    session.refresh(definition)
    return definition


def update_definition(session: Session, definition_id: int, data: Dict[str, Any]) -> Definition:
    definition = get_definition_or_404(session, definition_id)
    _apply_updates(definition, data)
    definition.updated_at = datetime.utcnow()
    session.add(definition)
    session.commit()
    session.refresh(definition)
    return definition


def _delete_example_rows(session: Session, example_ids: List[int]):
    if not example_ids:
        return
    for model in (ExampleAudio, ExampleTranslation):
        for row in session.exec(select(model).where(model.example_id.in_(example_ids))).all():  # type: ignore
            session.delete(row)
    session.flush()
    for example in session.exec(
        select(DefinitionExample).where(DefinitionExample.id.in_(example_ids))  # type: ignore
    ).all():
        session.delete(example)


def _delete_definition_rows(session: Session, definition: Definition):
    """Remove a definition with its examples, links and media."""
    in_use = session.exec(
        select(func.count()).select_from(UserDictionary).where(UserDictionary.definition_id == definition.id)
    ).one()
    if in_use:
        raise ConflictError(f"Definition {definition.id} is used in {in_use} user dictionaries")

    example_ids = session.exec(
        select(DefinitionExample.id).where(DefinitionExample.definition_id == definition.id)
    ).all()
    _delete_example_rows(session, list(example_ids))

    for model in (WordDefinition, DefinitionAudio, DefinitionTranslation, ListWord):
        for row in session.exec(select(model).where(model.definition_id == definition.id)).all():
            session.delete(row)
    for row in session.exec(
        select(DefinitionRelationship).where(
            or_(
                DefinitionRelationship.from_definition_id == definition.id,
                DefinitionRelationship.to_definition_id == definition.id,
            )
        )
    ).all():
        session.delete(row)
    session.flush()
    session.delete(definition)


def delete_definition(session: Session, definition_id: int):
    definition = get_definition_or_404(session, definition_id)
    _delete_definition_rows(session, definition)
    session.commit()
    logger.info(f"Deleted definition {definition_id}")


def add_example(session: Session, definition_id: int, data: Dict[str, Any]) -> DefinitionExample:
    definition = get_definition_or_404(session, definition_id)
    text = data['example'].strip()
    existing = session.exec(
        select(DefinitionExample).where(
            DefinitionExample.definition_id == definition.id,
            DefinitionExample.example == text,
        )
    ).first()
    if existing:
        raise ConflictError("Example already exists for this definition")
    example = DefinitionExample(
        definition_id=definition.id,
        example=text,
        language_code=definition.language_code,
        grammatical_note=data.get('grammatical_note'),
        source_of_example=data.get('source_of_example'),
    )
    session.add(example)
    session.commit()
    session.refresh(example)
    return example


def update_example(session: Session, example_id: int, data: Dict[str, Any]) -> DefinitionExample:
    example = session.get(DefinitionExample, example_id)
    if not example:
        raise NotFoundError(f"Example with id {example_id} not found")
    _apply_updates(example, data)
    session.add(example)
    session.commit()
    session.refresh(example)
    return example


def delete_example(session: Session, example_id: int):
    if not session.get(DefinitionExample, example_id):
        raise NotFoundError(f"Example with id {example_id} not found")
    _delete_example_rows(session, [example_id])
    session.commit()


RELATIONSHIP_LEVELS = {
    'word': (Word, WordToWordRelationship),
    'details': (WordDetails, WordDetailsRelationship),
    'definition': (Definition, DefinitionRelationship),
}


def create_relationship(
    session: Session,
    level: str,
    from_id: int,
    to_id: int,
    relationship_type: RelationshipType,
    description: Optional[str] = None,
    order_index: Optional[int] = None,
):
    if level not in RELATIONSHIP_LEVELS:
        raise ValidationError(f"Unknown relationship level: {level}")
    if from_id == to_id:
        raise ValidationError("A relationship needs two different ends")
    owner_model = RELATIONSHIP_LEVELS[level][0]
    for owner_id in (from_id, to_id):
        if not session.get(owner_model, owner_id):
            raise NotFoundError(f"{owner_model.__name__} with id {owner_id} not found")

    relationship = add_relationship(session, level, from_id, to_id, relationship_type, description, order_index)
    session.commit()
    return relationship


def delete_relationship(session: Session, level: str, from_id: int, to_id: int, relationship_type: RelationshipType):
    if level not in RELATIONSHIP_LEVELS:
        raise ValidationError(f"Unknown relationship level: {level}")
    model = RELATIONSHIP_LEVELS[level][1]
    relationship = session.get(model, (from_id, to_id, relationship_type))
    if not relationship:
        raise NotFoundError("Relationship not found")
    session.delete(relationship)
    session.commit()


def delete_word(session: Session, word_id: int) -> Dict[str, int]:
    """
    Delete a word with its entries, links and the definitions only it uses.

    Definitions still linked to another word entry are kept.
    """
    word = get_word_or_404(session, word_id)
    details_list = session.exec(select(WordDetails).where(WordDetails.word_id == word.id)).all()
    details_ids = [d.id for d in details_list]
    deleted_definitions = 0

    if details_ids:
        links = session.exec(
            select(WordDefinition).where(WordDefinition.word_details_id.in_(details_ids))  # type: ignore
        ).all()
        definition_ids = {link.definition_id for link in links}
        for link in links:
            session.delete(link)
        session.flush()

        for definition_id in definition_ids:
            still_linked = session.exec(
                select(WordDefinition).where(WordDefinition.definition_id == definition_id)
            ).first()
            if still_linked:
                continue
            _delete_definition_rows(session, session.get(Definition, definition_id))
            deleted_definitions += 1

        for row in session.exec(
            select(WordDetailsAudio).where(WordDetailsAudio.word_details_id.in_(details_ids))  # type: ignore
        ).all():
            session.delete(row)
        for row in session.exec(
            select(WordDetailsRelationship).where(
                or_(
                    WordDetailsRelationship.from_word_details_id.in_(details_ids),  # type: ignore
                    WordDetailsRelationship.to_word_details_id.in_(details_ids),  # type: ignore
                )
            )
        ).all():
            session.delete(row)
        session.flush()
        for details in details_list:
            session.delete(details)

    for row in session.exec(
        select(WordToWordRelationship).where(
            or_(WordToWordRelationship.from_word_id == word.id, WordToWordRelationship.to_word_id == word.id)
        )
    ).all():
        session.delete(row)
    session.flush()
    session.delete(word)
    session.commit()

    logger.info(f"Deleted word {word_id}: {len(details_list)} entries, {deleted_definitions} definitions")
    return {'word_details_deleted': len(details_list), 'definitions_deleted': deleted_definitions}


def add_manual_forms(session: Session, word_details_id: int, forms: List[Dict[str, Any]]) -> List[WordDetails]:
    """
    Attach inflected forms to a word entry.

    Each form gets its own word and entry (in the base entry's part of
    speech unless given) and is linked with the form's relationship type
    plus a word-level related link.
    """
    base_details = get_word_details_or_404(session, word_details_id)
    base_word = session.get(Word, base_details.word_id)

    created = []
    try:
        for form in forms:
            text = form['word'].strip()
            if not text or text == base_word.word:
                continue
            form_word = upsert_word(session, text, base_word.language_code)
            form_details = upsert_word_details(
                session,
                form_word,
                form.get('part_of_speech') or base_details.part_of_speech,
                source=SourceType.ADMIN,
            )
            add_relationship(session, 'details', base_details.id, form_details.id, form['relationship_type'])
            add_relationship(session, 'word', base_word.id, form_word.id, RelationshipType.RELATED)
            created.append(form_details)
        session.commit()
    except Exception:
        session.rollback()
        raise

    for details in created:
        session.refresh(details)
    logger.info(f"Added {len(created)} manual forms to word details {word_details_id}")
    return created
