"""
Ingestion service: persists parsed dictionary entries.

Parsers (Merriam-Webster, Ordnet) turn API responses into ParsedWord
objects; this module upserts them into words, word details, definitions,
examples, audio and relationships inside one transaction per entry.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Tuple

from sqlmodel import Session, select

from app.models import (
    Audio,
    Definition,
    DefinitionExample,
    DefinitionRelationship,
    PartOfSpeech,
    RelationshipType,
    SourceType,
    Word,
    WordDefinition,
    WordDetails,
    WordDetailsAudio,
    WordDetailsRelationship,
    WordToWordRelationship,
)
from app.schemas.ingestion import (
    IngestionResult,
    ParsedDefinition,
    ParsedExample,
    ParsedSubWord,
    ParsedWord,
)
from app.services.frequency_service import (
    fetch_word_frequency,
    get_general_frequency,
    get_part_of_speech_frequency,
)

logger = logging.getLogger(__name__)


RELATIONSHIP_DESCRIPTIONS = {
    RelationshipType.SYNONYM: 'Synonym relationship',
    RelationshipType.ANTONYM: 'Antonym relationship',
    RelationshipType.RELATED: 'Related term',
    RelationshipType.PAST_TENSE_EN: 'Past tense form',
    RelationshipType.PAST_PARTICIPLE_EN: 'Past participle form',
    RelationshipType.PRESENT_PARTICIPLE_EN: 'Present participle form',
    RelationshipType.THIRD_PERSON_EN: 'Third person singular form',
    RelationshipType.PLURAL_EN: 'Plural form',
    RelationshipType.STEM: 'Stem relationship',
    RelationshipType.PHRASAL_VERB: 'Phrasal verb',
    RelationshipType.PHRASE: 'Phrase',
    RelationshipType.VARIANT_FORM_PHRASAL_VERB_EN: 'Variant form of phrasal verb',
}


def get_relationship_description(relationship_type: RelationshipType) -> Optional[str]:
    return RELATIONSHIP_DESCRIPTIONS.get(relationship_type)


def lookup_frequencies(word: str, language_code: str, part_of_speech: Optional[PartOfSpeech]) -> Tuple[Optional[int], Optional[int]]:
    """Return (general rank, part-of-speech rank) for a word, or Nones."""
    data = fetch_word_frequency(word, language_code)
    pos_value = part_of_speech.value if part_of_speech else None
    return get_general_frequency(data), get_part_of_speech_frequency(data, pos_value)


def upsert_word(
    session: Session,
    text: str,
    language_code: str,
    phonetic: Optional[str] = None,
    etymology: Optional[str] = None,
    source_entity_id: Optional[str] = None,
    is_highlighted: bool = False,
    frequency: Optional[int] = None,
) -> Word:
    """Create the word or refresh its metadata; keyed on (word, language)."""
    word = session.exec(
        select(Word).where(Word.word == text, Word.language_code == language_code)
    ).first()

    if word is None:
        word = Word(word=text, language_code=language_code)
    word.phonetic_general = phonetic or word.phonetic_general
    word.etymology = etymology or word.etymology
    word.source_entity_id = source_entity_id or word.source_entity_id
    word.is_highlighted = is_highlighted or word.is_highlighted
    if frequency is not None:
        word.frequency_general = frequency
    word.updated_at = datetime.utcnow()

    session.add(word)
    session.flush()
    return word


def upsert_word_details(
    session: Session,
    word: Word,
    part_of_speech: Optional[PartOfSpeech],
    variant: str = "",
    source: Optional[SourceType] = None,
    phonetic: Optional[str] = None,
    gender=None,
    forms: Optional[List[str]] = None,
    is_plural: bool = False,
    frequency: Optional[int] = None,
) -> WordDetails:
    """Create or update the entry of a word for one part of speech and variant."""
    part_of_speech = part_of_speech or PartOfSpeech.UNDEFINED
    variant = variant or ""
    details = session.exec(
        select(WordDetails).where(
            WordDetails.word_id == word.id,
            WordDetails.part_of_speech == part_of_speech,
            WordDetails.variant == variant,
        )
    ).first()

    if details is None:
        details = WordDetails(word_id=word.id, part_of_speech=part_of_speech, variant=variant)
    details.source = source or details.source
    details.phonetic = phonetic or details.phonetic
    details.gender = gender or details.gender
    details.forms = forms or details.forms
    details.is_plural = is_plural or details.is_plural
    if frequency is not None:
        details.frequency = frequency

    session.add(details)
    session.flush()
    return details


def link_audio(
    session: Session,
    word_details: WordDetails,
    audio_urls: Iterable[str],
    language_code: str,
    source: Optional[SourceType] = None,
    is_primary: bool = True,
) -> List[Audio]:
    """Upsert audio by (url, language) and link it; the first file becomes primary."""
    linked = []
    for index, url in enumerate(audio_urls):
        audio = session.exec(
            select(Audio).where(Audio.url == url, Audio.language_code == language_code)
        ).first()
        if audio is None:
            audio = Audio(url=url, language_code=language_code, source=source)
            session.add(audio)
            session.flush()

        link = session.get(WordDetailsAudio, (word_details.id, audio.id))
        if link is None:
            link = WordDetailsAudio(word_details_id=word_details.id, audio_id=audio.id)
        link.is_primary = is_primary and index == 0
        session.add(link)
        linked.append(audio)
    session.flush()
    return linked


def upsert_example(
    session: Session,
    definition: Definition,
    parsed: ParsedExample,
    language_code: str,
) -> Optional[DefinitionExample]:
    if not parsed.example:
        return None
    example = session.exec(
        select(DefinitionExample).where(
            DefinitionExample.definition_id == definition.id,
            DefinitionExample.example == parsed.example,
        )
    ).first()
    if example is None:
        example = DefinitionExample(
            definition_id=definition.id,
            example=parsed.example,
            language_code=language_code,
        )
    example.grammatical_note = parsed.grammatical_note
    example.source_of_example = parsed.source_of_example
    session.add(example)
    return example


def upsert_definition(
    session: Session,
    word_details: WordDetails,
    parsed: ParsedDefinition,
    language_code: str,
    source: SourceType,
    is_primary: bool = False,
) -> Definition:
    """Upsert a definition on (text, language, source), link it and save its examples."""
    definition = session.exec(
        select(Definition).where(
            Definition.definition == parsed.definition,
            Definition.language_code == language_code,
            Definition.source == source,
        )
    ).first()
    if definition is None:
        definition = Definition(
            definition=parsed.definition,
            language_code=language_code,
            source=source,
        )
    definition.subject_status_labels = parsed.subject_status_labels
    definition.general_labels = parsed.general_labels
    definition.grammatical_note = parsed.grammatical_note
    definition.usage_note = parsed.usage_note
    definition.is_in_short_def = parsed.is_in_short_def
    definition.updated_at = datetime.utcnow()
    session.add(definition)
    session.flush()

    link = session.get(WordDefinition, (word_details.id, definition.id))
    if link is None:
        link = WordDefinition(word_details_id=word_details.id, definition_id=definition.id)
    link.is_primary = is_primary
    session.add(link)

    for parsed_example in parsed.examples:
        upsert_example(session, definition, parsed_example, language_code)

    session.flush()
    return definition


def add_relationship(
    session: Session,
    level: str,
    from_id: int,
    to_id: int,
    relationship_type: RelationshipType,
    description: Optional[str] = None,
    order_index: Optional[int] = None,
):
    """
    Create a relationship if it does not exist yet.

    Args:
        level: 'word', 'details' or 'definition'
        from_id: Id of the source row at that level
        to_id: Id of the target row at that level
        relationship_type: Type of the link

    Returns:
        The existing or newly created relationship row
    """
    if description is None:
        description = get_relationship_description(relationship_type)

    if level == "word":
        model = WordToWordRelationship
        key = dict(from_word_id=from_id, to_word_id=to_id, type=relationship_type)
    elif level == "details":
        model = WordDetailsRelationship
        key = dict(from_word_details_id=from_id, to_word_details_id=to_id, type=relationship_type)
    elif level == "definition":
        model = DefinitionRelationship
        key = dict(from_definition_id=from_id, to_definition_id=to_id, type=relationship_type)
    else:
        raise ValueError(f"Unknown relationship level: {level}")

    statement = select(model)
    for column, value in key.items():
        statement = statement.where(getattr(model, column) == value)
    existing = session.exec(statement).first()
    if existing:
        return existing

    relationship = model(**key, description=description, order_index=order_index)
    session.add(relationship)
    return relationship


def _save_sub_word(
    session: Session,
    parsed: ParsedWord,
    main_word: Word,
    main_details: WordDetails,
    sub_word: ParsedSubWord,
    order_index: int,
    lookup_frequency: bool,
):
    if sub_word.word == main_word.word and sub_word.part_of_speech == main_details.part_of_speech:
        return

    general_rank, pos_rank = (None, None)
    if lookup_frequency:
        general_rank, pos_rank = lookup_frequencies(sub_word.word, parsed.language_code, sub_word.part_of_speech)

    word = upsert_word(
        session,
        sub_word.word,
        parsed.language_code,
        phonetic=sub_word.phonetic,
        frequency=general_rank,
    )
    details = upsert_word_details(
        session,
        word,
        sub_word.part_of_speech,
        variant=sub_word.variant,
        source=parsed.source,
        phonetic=sub_word.phonetic,
        is_plural=sub_word.is_plural,
        frequency=pos_rank,
    )
    if sub_word.audio_urls:
        link_audio(session, details, sub_word.audio_urls, parsed.language_code, parsed.source)

    for index, parsed_definition in enumerate(sub_word.definitions):
        upsert_definition(
            session, details, parsed_definition, parsed.language_code, parsed.source, is_primary=index == 0
        )

    for relation in sub_word.relations:
        if relation.level == "word":
            if word.id == main_word.id:
                continue
            pair = (word.id, main_word.id) if relation.reverse else (main_word.id, word.id)
        else:
            pair = (details.id, main_details.id) if relation.reverse else (main_details.id, details.id)
        add_relationship(session, relation.level, pair[0], pair[1], relation.type, order_index=order_index)


def save_parsed_word(session: Session, parsed: ParsedWord, lookup_frequency: bool = True) -> WordDetails:
    """
    Persist a parsed entry with its definitions, audio and sub-words.

    Everything is written in one transaction; on error it is rolled back
    and the exception propagates.

    Returns:
        The WordDetails of the main entry
    """
    try:
        frequency = parsed.frequency
        pos_rank = None
        if lookup_frequency and frequency is None:
            frequency, pos_rank = lookup_frequencies(parsed.word, parsed.language_code, parsed.part_of_speech)

        word = upsert_word(
            session,
            parsed.word,
            parsed.language_code,
            phonetic=parsed.phonetic,
            etymology=parsed.etymology,
            source_entity_id=parsed.source_entity_id,
            is_highlighted=parsed.is_highlighted,
            frequency=frequency,
        )
        details = upsert_word_details(
            session,
            word,
            parsed.part_of_speech,
            variant=parsed.variant,
            source=parsed.source,
            phonetic=parsed.phonetic,
            gender=parsed.gender,
            forms=parsed.forms,
            frequency=pos_rank,
        )
        if parsed.audio_urls:
            link_audio(session, details, parsed.audio_urls, parsed.language_code, parsed.source)

        for index, parsed_definition in enumerate(parsed.definitions):
            upsert_definition(
                session, details, parsed_definition, parsed.language_code, parsed.source, is_primary=index == 0
            )

        for order_index, sub_word in enumerate(parsed.sub_words, start=1):
            _save_sub_word(session, parsed, word, details, sub_word, order_index, lookup_frequency)

        session.commit()
        session.refresh(details)
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Saved '{parsed.word}' ({parsed.part_of_speech.value}) from {parsed.source.value}: "
        f"{len(parsed.definitions)} definitions, {len(parsed.sub_words)} sub-words"
    )
    return details


def process_all(
    session: Session,
    entries: Iterable[Any],
    parser: Callable[[Any], List[ParsedWord]],
    lookup_frequency: bool = True,
) -> IngestionResult:
    """
    Parse and save many raw entries; a failing entry or word is logged and skipped.

    Args:
        session: Database session
        entries: Raw API entries
        parser: Turns one raw entry into parsed words

    Returns:
        Counts of saved and failed words
    """
    saved = 0
    failed = 0
    errors = []
    for entry in entries:
        try:
            parsed_words = parser(entry)
        except Exception as e:
            failed += 1
            errors.append(str(e))
            logger.error(f"Failed to parse dictionary entry: {e}", exc_info=True)
            continue

        # Each word commits on its own; a failing word is skipped and the rest still save
        for parsed in parsed_words:
            try:
                save_parsed_word(session, parsed, lookup_frequency=lookup_frequency)
                saved += 1
            except Exception as e:
                failed += 1
                errors.append(f"{parsed.word}: {e}")
                logger.error(f"Failed to save word '{parsed.word}': {e}", exc_info=True)
    logger.info(f"Dictionary ingestion finished: {saved} saved, {failed} failed")
    return IngestionResult(saved=saved, failed=failed, errors=errors)
