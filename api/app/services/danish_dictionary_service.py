"""
Danish dictionary (Ordnet) entry parser.

An Ordnet object describes one headword with its definitions, inflected
forms, stems, fixed expressions, synonyms and antonyms, plus optional
variants that are entries of their own.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlmodel import Session

from app.models.enums import PartOfSpeech, RelationshipType, SourceType
from app.schemas.ingestion import (
    IngestionResult,
    ParsedDefinition,
    ParsedExample,
    ParsedRelation,
    ParsedSubWord,
    ParsedWord,
)
from app.services.ingestion_service import process_all
from app.utils.danish_utils import (
    extract_general_labels,
    extract_grammatical_note,
    extract_subject_status_labels,
    extract_usage_note,
    format_example_source,
    map_danish_gender,
    map_danish_pos,
    map_stem_pos,
    transform_danish_forms,
)

logger = logging.getLogger(__name__)

LANGUAGE_CODE = 'da'
SOURCE = SourceType.DANISH_DICTIONARY
BASE_FORM_AUDIO_LABEL = 'grundform'


def _examples(examples: Optional[List[str]], sources: Optional[List[Any]]) -> List[ParsedExample]:
    sources = sources or []
    parsed = []
    for index, example in enumerate(examples or []):
        if not example:
            continue
        source = sources[index] if index < len(sources) else None
        parsed.append(ParsedExample(example=example, source_of_example=format_example_source(source)))
    return parsed


def _definition(data: Dict[str, Any], text: Optional[str] = None) -> Optional[ParsedDefinition]:
    text = (text if text is not None else data.get('definition')) or ""
    text = text.strip()
    if not text:
        return None
    labels = data.get('labels') or {}
    return ParsedDefinition(
        definition=text,
        subject_status_labels=extract_subject_status_labels(labels),
        general_labels=extract_general_labels(labels),
        grammatical_note=extract_grammatical_note(labels),
        usage_note=extract_usage_note(labels),
        examples=_examples(data.get('examples'), data.get('sources') or data.get('sourceOfExample')),
    )


def _related() -> ParsedRelation:
    return ParsedRelation(type=RelationshipType.RELATED, level="word")


def _form_sub_words(word_data: Dict[str, Any], base_word: str, part_of_speech: PartOfSpeech) -> List[ParsedSubWord]:
    """Inflected forms share the part of speech of the base word."""
    pos_terms = [p for p in word_data.get('partOfSpeech') or [] if isinstance(p, str)]
    contextual_forms = word_data.get('contextual_forms')
    forms = transform_danish_forms(
        base_word,
        pos_terms,
        forms=word_data.get('forms') or [],
        contextual_forms=contextual_forms if isinstance(contextual_forms, dict) else {},
        audio=word_data.get('audio') or [],
    )
    sub_words = []
    for form in forms:
        relations = [ParsedRelation(type=t) for t in form.relationship_types]
        relations.append(_related())
        sub_words.append(ParsedSubWord(
            word=form.word,
            part_of_speech=part_of_speech,
            phonetic=form.phonetic,
            is_plural=RelationshipType.PLURAL_DA in form.relationship_types
            or RelationshipType.PLURAL_DEFINITE_DA in form.relationship_types,
            audio_urls=form.audio_urls,
            relations=relations,
        ))
    return sub_words


def _stem_sub_words(stems: Optional[List[Dict[str, Any]]]) -> List[ParsedSubWord]:
    sub_words = []
    for stem in stems or []:
        text = (stem.get('stem') or '').strip()
        if not text:
            continue
        sub_words.append(ParsedSubWord(
            word=text,
            part_of_speech=map_stem_pos(stem.get('partOfSpeech')),
            relations=[ParsedRelation(type=RelationshipType.STEM, level="word"), _related()],
        ))
    return sub_words


def _thesaurus_sub_words(data: Dict[str, Any], base_word: str, part_of_speech: PartOfSpeech) -> List[ParsedSubWord]:
    sub_words = []
    for key, relationship_type in (('synonyms', RelationshipType.SYNONYM), ('antonyms', RelationshipType.ANTONYM)):
        for text in data.get(key) or []:
            if not text or text == base_word:
                continue
            sub_words.append(ParsedSubWord(
                word=text,
                part_of_speech=part_of_speech,
                relations=[ParsedRelation(type=relationship_type)],
            ))
    return sub_words


def _expression_sub_words(expressions: Optional[List[Dict[str, Any]]]) -> List[ParsedSubWord]:
    sub_words = []
    for expression in expressions or []:
        text = (expression.get('expression') or '').strip()
        if not text:
            continue
        definition = _definition(expression)
        sub_words.append(ParsedSubWord(
            word=text,
            part_of_speech=PartOfSpeech.PHRASE,
            definitions=[definition] if definition else [],
            relations=[ParsedRelation(type=RelationshipType.PHRASE), _related()],
        ))
    return sub_words


def parse_danish_entry(data: Dict[str, Any]) -> ParsedWord:
    """
    Parse a single Ordnet entry (the top-level object or one of its variants).

    Raises:
        ValueError: If the entry has no word
    """
    word_data = data.get('word') or {}
    base_word = (word_data.get('word') or '').strip()
    if not base_word:
        raise ValueError("Danish dictionary entry has no word")

    pos_terms = word_data.get('partOfSpeech') or []
    part_of_speech = map_danish_pos(pos_terms[0] if pos_terms else None)
    gender = map_danish_gender(pos_terms[1]) if len(pos_terms) > 1 else None
    variant = word_data.get('variant') or ''

    base_audio = [
        audio['audio_url']
        for audio in word_data.get('audio') or []
        if audio.get('word') == BASE_FORM_AUDIO_LABEL and audio.get('audio_url')
    ]

    definitions = []
    seen = set()
    for item in data.get('definition') or []:
        definition = _definition(item)
        if definition and definition.definition not in seen:
            seen.add(definition.definition)
            definitions.append(definition)

    sub_words = []
    sub_words.extend(_form_sub_words(word_data, base_word, part_of_speech))
    sub_words.extend(_stem_sub_words(data.get('stems')))
    sub_words.extend(_thesaurus_sub_words(data, base_word, part_of_speech))
    sub_words.extend(_expression_sub_words(data.get('fixed_expressions')))

    return ParsedWord(
        word=base_word,
        language_code=LANGUAGE_CODE,
        source=SOURCE,
        part_of_speech=part_of_speech,
        variant=variant,
        phonetic=word_data.get('phonetic') or None,
        gender=gender,
        forms=[f for f in word_data.get('forms') or [] if f] or None,
        etymology=word_data.get('etymology') or None,
        source_entity_id=f"{SOURCE.value}-{base_word}-{part_of_speech.value}-{variant}",
        stems=[s.get('stem') for s in data.get('stems') or [] if s.get('stem')],
        audio_urls=base_audio[:1],
        definitions=definitions,
        sub_words=sub_words,
    )


def parse_danish_object(data: Dict[str, Any]) -> List[ParsedWord]:
    """
    Parse an Ordnet object into the words it describes.

    The object itself is parsed when it carries a word; every entry of
    ``variants`` is parsed as a separate word.
    """
    if data.get('error'):
        raise ValueError(f"Danish dictionary returned an error: {data['error']}")

    parsed = []
    if (data.get('word') or {}).get('word'):
        parsed.append(parse_danish_entry(data))
    for variant in data.get('variants') or []:
        if variant:
            parsed.append(parse_danish_entry(variant))
    return parsed


def ingest_danish_objects(
    session: Session,
    objects: List[Dict[str, Any]],
    lookup_frequency: bool = True,
) -> IngestionResult:
    """Save the words of many Ordnet objects; failures are counted per object."""
    logger.info(f"Ingesting {len(objects)} Danish dictionary objects")
    return process_all(session, objects, parse_danish_object, lookup_frequency=lookup_frequency)
