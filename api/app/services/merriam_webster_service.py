"""
Merriam-Webster dictionary client and entry parser.

Entries of the Learner's and Intermediate dictionaries are turned into
ParsedWord objects (main entry plus sub-words for variants, inflections,
run-ons, phrasal verbs, synonyms and antonyms) and saved through the
ingestion service.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Set, Tuple

import requests
from sqlmodel import Session

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
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
from app.utils.text_utils import (
    cleanup_definition_text,
    cleanup_example_text,
    format_with_bc,
    get_string_from_array,
    strip_markup,
)

logger = logging.getLogger(__name__)


MW_BASE_URL = "https://www.dictionaryapi.com/api/v3/references"
MW_AUDIO_URL = "https://media.merriam-webster.com/audio/prons/en/us/mp3/{folder}/{name}.mp3"

DICTIONARY_PATHS = {
    'learners': 'learners',
    'intermediate': 'sd3',
}

SOURCE_MAP = {
    'learners': SourceType.MERRIAM_LEARNERS,
    'int_dict': SourceType.MERRIAM_INTERMEDIATE,
}

POS_MAP = {
    'noun': PartOfSpeech.NOUN,
    'verb': PartOfSpeech.VERB,
    'phrasal verb': PartOfSpeech.PHRASAL_VERB,
    'adjective': PartOfSpeech.ADJECTIVE,
    'adverb': PartOfSpeech.ADVERB,
    'pronoun': PartOfSpeech.PRONOUN,
    'preposition': PartOfSpeech.PREPOSITION,
    'conjunction': PartOfSpeech.CONJUNCTION,
    'interjection': PartOfSpeech.INTERJECTION,
}

# Cross-reference labels, checked in order ("past tense" is a prefix of the first one)
CROSS_REFERENCE_LABELS = [
    ('past tense and past participle', 'Past tense and past participle of', RelationshipType.PAST_TENSE_EN),
    ('past participle', 'Past participle of', RelationshipType.PAST_PARTICIPLE_EN),
    ('past tense', 'Past tense of', RelationshipType.PAST_TENSE_EN),
    ('present participle', 'Present participle of', RelationshipType.PRESENT_PARTICIPLE_EN),
    ('third person singular', 'Third person singular of', RelationshipType.THIRD_PERSON_EN),
    ('less common spelling of', 'Less common spelling of', RelationshipType.ALTERNATIVE_SPELLING),
]

CROSS_REFERENCE_SUFFIX = re.compile(r":\d+$")


def fetch_entries(word: str, dictionary_type: str = "learners") -> List[Dict[str, Any]]:
    """
    Fetch the raw entries of a word from the Merriam-Webster API.

    Args:
        word: Word to look up
        dictionary_type: 'learners' or 'intermediate'

    Returns:
        The dictionary entries of the response

    Raises:
        ValidationError: If the dictionary type is unknown
        ExternalServiceError: If the API key is missing or the request fails
        NotFoundError: If the word is unknown (with suggestions when the API offers them)
    """
    path = DICTIONARY_PATHS.get(dictionary_type)
    if path is None:
        raise ValidationError(f"Unknown dictionary type: {dictionary_type}")

    api_key = (
        settings.dictionary_learners_api_key
        if dictionary_type == 'learners'
        else settings.dictionary_intermediate_api_key
    )
    if not api_key:
        raise ExternalServiceError(f"Merriam-Webster {dictionary_type} API key not configured")

    url = f"{MW_BASE_URL}/{path}/json/{requests.utils.quote(word)}"
    try:
        response = requests.get(url, params={'key': api_key}, timeout=10)
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Merriam-Webster request for '{word}' failed: {e}")
        raise ExternalServiceError(f"Dictionary API request failed: {e}") from e

    if not isinstance(data, list) or not data:
        raise NotFoundError("No results found.")

    if all(isinstance(item, str) for item in data):
        raise NotFoundError(f"Word not found. Did you mean: {', '.join(data)}?")

    return [item for item in data if isinstance(item, dict)]


def map_part_of_speech(fl: Optional[str]) -> PartOfSpeech:
    return POS_MAP.get((fl or "").strip().lower(), PartOfSpeech.UNDEFINED)


def build_audio_url(audio: str) -> str:
    return MW_AUDIO_URL.format(folder=audio[0], name=audio)


def collect_audio_urls(*pronunciation_lists: Optional[List[Dict[str, Any]]]) -> List[str]:
    urls = []
    for pronunciations in pronunciation_lists:
        for pronunciation in pronunciations or []:
            audio = (pronunciation.get('sound') or {}).get('audio')
            if audio:
                url = build_audio_url(audio)
                if url not in urls:
                    urls.append(url)
    return urls


def get_phonetic(*pronunciation_lists: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """First IPA or MW transcription of the first pronunciation in the given lists."""
    for pronunciations in pronunciation_lists:
        if pronunciations:
            first = pronunciations[0]
            phonetic = first.get('ipa') or first.get('mw')
            if phonetic:
                return phonetic
    return None


def process_etymology(et: Optional[List[Any]]) -> Optional[str]:
    if not et:
        return None
    texts = [item[1] for item in et if len(item) > 1 and item[0] == 'text' and isinstance(item[1], str)]
    etymology = strip_markup(" ".join(texts))
    return etymology or None


def clean_headword(text: Optional[str]) -> str:
    return (text or "").replace('*', '').strip()


def get_short_definitions(entry: Dict[str, Any]) -> Set[str]:
    """Cleaned short definitions, preferring the app short definitions."""
    app_shortdef = (entry.get('meta') or {}).get('app-shortdef') or {}
    if isinstance(app_shortdef, dict) and isinstance(app_shortdef.get('def'), list):
        return {cleanup_definition_text(text) for text in app_shortdef['def'] if text}
    return {
        cleanup_definition_text(format_with_bc(text))
        for text in entry.get('shortdef') or []
        if text
    }


def _vis_examples(vis: List[Dict[str, Any]], note: Optional[str]) -> List[ParsedExample]:
    examples = []
    for item in vis or []:
        text = cleanup_example_text(item.get('t'))
        if text:
            examples.append(ParsedExample(example=text, grammatical_note=note or None))
    return examples


def _process_nested_examples(
    items: List[Any],
    parent_note: Optional[str],
    examples: List[ParsedExample],
    usage_texts: List[str],
):
    """Walk a 'uns' block: text items become usage notes, vis items examples under them."""
    usage_text = None
    for item in items or []:
        if not isinstance(item, list) or not item:
            continue
        if isinstance(item[0], str) and len(item) > 1:
            item_type, content = item[0], item[1]
            if item_type == 'text' and isinstance(content, str):
                usage_text = cleanup_example_text(content)
                if usage_text:
                    usage_texts.append(usage_text)
            elif item_type == 'vis':
                note = usage_text or ""
                if parent_note:
                    note = f"{note} ({parent_note})" if note else parent_note
                examples.extend(_vis_examples(content, note))
        else:
            _process_nested_examples(item, parent_note, examples, usage_texts)


def _deduplicate_examples(examples: List[ParsedExample]) -> List[ParsedExample]:
    """Keep one example per text, preferring the one with a grammatical note."""
    unique: Dict[str, ParsedExample] = {}
    for example in examples:
        existing = unique.get(example.example)
        if existing is None or (not existing.grammatical_note and example.grammatical_note):
            unique[example.example] = example
    return list(unique.values())


def extract_examples(dt: List[Any]) -> Tuple[List[ParsedExample], Optional[str]]:
    """
    Collect the examples and usage notes of a definition text block.

    Args:
        dt: The 'dt' list of a sense

    Returns:
        Tuple of (examples, usage note formatted as "1: text; 2: text")
    """
    examples: List[ParsedExample] = []
    usage_texts: List[str] = []
    wsgram = None

    for item in dt or []:
        if not isinstance(item, list) or len(item) < 2:
            continue
        item_type, content = item[0], item[1]
        if item_type == 'wsgram':
            wsgram = content
        elif item_type == 'vis':
            examples.extend(_vis_examples(content, wsgram))
        elif item_type == 'uns':
            for uns_item in content or []:
                _process_nested_examples(uns_item, wsgram, examples, usage_texts)
        elif item_type == 'snote':
            snote_text = None
            for snote_type, snote_content in content or []:
                if snote_type == 't':
                    snote_text = cleanup_example_text(snote_content)
                    if snote_text:
                        usage_texts.append(snote_text)
                elif snote_type == 'vis':
                    note = get_string_from_array([wsgram, snote_text])
                    examples.extend(_vis_examples(snote_content, note))

    usage_note = None
    if usage_texts:
        usage_note = "; ".join(f"{index + 1}: {text}" for index, text in enumerate(usage_texts))
    return _deduplicate_examples(examples), usage_note


def _join(values: Optional[List[str]]) -> Optional[str]:
    if not values:
        return None
    return ", ".join(values)


def _iter_senses(sseq_item: List[Any]):
    """Yield (type, data) pairs of an sseq item, unwrapping bs and pseq."""
    for element in sseq_item or []:
        if not isinstance(element, list) or len(element) < 2:
            continue
        sense_type, data = element[0], element[1]
        if sense_type == 'bs' and isinstance(data, dict) and data.get('sense'):
            yield 'sense', data['sense']
        elif sense_type == 'pseq':
            yield from _iter_senses(data)
        else:
            yield sense_type, data


def parse_senses(
    definition_blocks: Optional[List[Dict[str, Any]]],
    entry_gram: Optional[str] = None,
    main_labels: Optional[str] = None,
    short_definitions: Optional[Set[str]] = None,
) -> List[ParsedDefinition]:
    """
    Turn the 'def' blocks of an entry (or a run-on phrase) into definitions.

    A 'sen' element carries labels for the sense that follows it. Cross
    references and duplicate texts are skipped.
    """
    short_definitions = short_definitions or set()
    definitions: List[ParsedDefinition] = []
    seen: Set[str] = set()

    for block in definition_blocks or []:
        for sseq_item in block.get('sseq') or []:
            current_sen = None
            for sense_type, sense in _iter_senses(sseq_item):
                if sense_type == 'sen':
                    current_sen = sense
                    continue
                if sense_type not in ('sense', 'sdsense') or not isinstance(sense, dict):
                    continue
                dt = sense.get('dt')
                if not dt:
                    continue

                sen = current_sen or sense.get('sen') or {}
                current_sen = None

                raw_text = next(
                    (
                        item[1] for item in dt
                        if len(item) > 1 and item[0] == 'text'
                        and isinstance(item[1], str) and not item[1].startswith('{dx}')
                    ),
                    None,
                )
                text = cleanup_example_text(raw_text) if raw_text else ""
                has_notes = any(item[0] in ('uns', 'snote') for item in dt if item)
                if not text and not has_notes:
                    continue

                examples, usage_note = extract_examples(dt)
                if not text:
                    text = usage_note or ""
                if not text or text in seen:
                    continue
                seen.add(text)

                phrasal = sense.get('sphrasev') or {}
                definitions.append(ParsedDefinition(
                    definition=text,
                    subject_status_labels=get_string_from_array([
                        _join(sen.get('sls')),
                        _join(phrasal.get('phsls')) or _join(sense.get('sls')),
                    ]),
                    general_labels=get_string_from_array([
                        _join(sen.get('lbs')),
                        main_labels,
                        _join(sense.get('lbs')),
                    ]),
                    grammatical_note=get_string_from_array([
                        entry_gram,
                        sen.get('bnote'),
                        sen.get('sgram'),
                        sense.get('sgram'),
                        sense.get('bnote'),
                    ]),
                    usage_note=usage_note,
                    is_in_short_def=cleanup_definition_text(text) in short_definitions,
                    examples=examples,
                ))
    return definitions


def _related(level: str = "word") -> ParsedRelation:
    return ParsedRelation(type=RelationshipType.RELATED, level=level)


def _variant_sub_words(entry, main_word, part_of_speech) -> List[ParsedSubWord]:
    sub_words = []
    for variant in entry.get('vrs') or []:
        text = clean_headword(variant.get('va'))
        if not text or text == main_word:
            continue
        label = variant.get('vl')
        definition = f'Variant form of "{main_word} + {label}"' if label else f'Variant form of "{main_word}"'
        sub_words.append(ParsedSubWord(
            word=text,
            part_of_speech=part_of_speech,
            phonetic=get_phonetic(variant.get('prs')),
            audio_urls=collect_audio_urls(variant.get('prs')),
            definitions=[ParsedDefinition(definition=definition)],
            relations=[
                _related(),
                ParsedRelation(type=RelationshipType.ALTERNATIVE_SPELLING),
            ],
        ))
    return sub_words


def _cross_references(entry, part_of_speech) -> Tuple[List[ParsedDefinition], List[ParsedSubWord], Optional[str]]:
    """
    Handle 'cxs' entries such as "past tense of go".

    The definition belongs to the main entry; the base word becomes a
    sub-word linked back to the main word.
    """
    definitions = []
    sub_words = []
    base_word = None
    for cross_reference in entry.get('cxs') or []:
        targets = cross_reference.get('cxtis') or []
        if not targets or not targets[0].get('cxt'):
            continue
        base = CROSS_REFERENCE_SUFFIX.sub('', targets[0]['cxt']).strip()
        label = (cross_reference.get('cxl') or '').lower()
        match = next((item for item in CROSS_REFERENCE_LABELS if item[0] in label), None)
        if match is None:
            continue
        _, prefix, relationship_type = match
        definitions.append(ParsedDefinition(definition=f"{prefix} {{it}}{base}{{/it}}"))
        base_word = base_word or base
        sub_words.append(ParsedSubWord(
            word=base,
            part_of_speech=part_of_speech,
            relations=[
                ParsedRelation(type=relationship_type, reverse=True),
                _related(),
            ],
        ))
    return definitions, sub_words, base_word


def _verb_inflection(form: str, label: str, main_word: str) -> Optional[Tuple[RelationshipType, str]]:
    if form.endswith('s'):
        return RelationshipType.THIRD_PERSON_EN, f"Third person singular form of the verb {{it}}{main_word}{{/it}}"
    if form.endswith('ing'):
        return RelationshipType.PRESENT_PARTICIPLE_EN, f"Present participle form of the verb {{it}}{main_word}{{/it}}"
    if form.endswith('ed'):
        return RelationshipType.PAST_TENSE_EN, f"Past tense and past participle form of the verb {{it}}{main_word}{{/it}}"
    if label in ('past', 'past tense'):
        return RelationshipType.PAST_TENSE_EN, f"Past tense form of the verb {{it}}{main_word}{{/it}}"
    if label == 'past participle':
        return RelationshipType.PAST_PARTICIPLE_EN, f"Past participle form of the verb {{it}}{main_word}{{/it}}"
    return None


def _inflection_sub_words(entry, main_word, part_of_speech) -> List[ParsedSubWord]:
    sub_words = []
    for inflection in entry.get('ins') or []:
        form = clean_headword(inflection.get('if'))
        if not form or form == main_word:
            continue
        label = (inflection.get('il') or '').strip().lower()

        if part_of_speech == PartOfSpeech.VERB:
            match = _verb_inflection(form, label, main_word)
            if match is None:
                continue
            relationship_type, definition = match
            is_plural = False
        elif part_of_speech == PartOfSpeech.NOUN and label == 'plural':
            relationship_type = RelationshipType.PLURAL_EN
            definition = f"Plural form of {{it}}{main_word}{{/it}}"
            is_plural = True
        else:
            continue

        sub_words.append(ParsedSubWord(
            word=form,
            part_of_speech=part_of_speech,
            is_plural=is_plural,
            phonetic=get_phonetic(inflection.get('prs')),
            audio_urls=collect_audio_urls(inflection.get('prs')),
            definitions=[ParsedDefinition(definition=definition)],
            relations=[ParsedRelation(type=relationship_type), _related()],
        ))
    return sub_words


def _run_on_sub_words(entry, main_word) -> List[ParsedSubWord]:
    """Undefined run-ons ('uros'), e.g. 'quickly' under 'quick'."""
    sub_words = []
    for uro in entry.get('uros') or []:
        text = clean_headword(uro.get('ure'))
        if not text or text == main_word:
            continue
        examples = []
        for item in uro.get('utxt') or []:
            if len(item) > 1 and item[0] == 'vis':
                examples.extend(_vis_examples(item[1], None))
        sub_words.append(ParsedSubWord(
            word=text,
            part_of_speech=map_part_of_speech(uro.get('fl')),
            phonetic=get_phonetic(uro.get('prs')),
            audio_urls=collect_audio_urls(uro.get('prs')),
            definitions=[ParsedDefinition(
                definition=f"Form of {{it}}{main_word}{{/it}}",
                grammatical_note=uro.get('gram'),
                examples=_deduplicate_examples(examples),
            )],
            relations=[_related(), ParsedRelation(type=RelationshipType.STEM, level="word")],
        ))
    return sub_words


def _phrase_variants(sense: Dict[str, Any]) -> List[str]:
    variants = []
    for source in ((sense.get('phrasev') or []), ((sense.get('sphrasev') or {}).get('phrs') or [])):
        for phrase in source:
            if isinstance(phrase, dict) and phrase.get('pva'):
                variants.append(phrase['pva'].rstrip('*'))
    return variants


def _defined_run_on_sub_words(entry, main_word) -> List[ParsedSubWord]:
    """Defined run-ons ('dros'): phrasal verbs and phrases with their own senses."""
    sub_words = []
    entry_gram = entry.get('gram')
    for dro in entry.get('dros') or []:
        text = clean_headword(dro.get('drp'))
        if not text or text == main_word:
            continue
        definitions = parse_senses(dro.get('def'), entry_gram)

        if dro.get('gram') == 'phrasal verb':
            sub_words.append(ParsedSubWord(
                word=text,
                part_of_speech=PartOfSpeech.PHRASAL_VERB,
                definitions=definitions,
                relations=[ParsedRelation(type=RelationshipType.PHRASAL_VERB), _related()],
            ))
            variants = []
            for block in dro.get('def') or []:
                for sseq_item in block.get('sseq') or []:
                    for _, sense in _iter_senses(sseq_item):
                        if isinstance(sense, dict):
                            variants.extend(_phrase_variants(sense))
            for variant in dict.fromkeys(variants):
                if variant == text:
                    continue
                sub_words.append(ParsedSubWord(
                    word=variant,
                    part_of_speech=PartOfSpeech.PHRASAL_VERB,
                    definitions=definitions,
                    relations=[
                        ParsedRelation(type=RelationshipType.VARIANT_FORM_PHRASAL_VERB_EN),
                        _related(),
                    ],
                ))
        else:
            sub_words.append(ParsedSubWord(
                word=text,
                part_of_speech=PartOfSpeech.PHRASE,
                definitions=definitions,
                relations=[_related(), ParsedRelation(type=RelationshipType.PHRASE)],
            ))
    return sub_words


def _thesaurus_sub_words(entry, main_word, part_of_speech) -> List[ParsedSubWord]:
    meta = entry.get('meta') or {}
    sub_words = []
    for key, relationship_type in (('syns', RelationshipType.SYNONYM), ('ants', RelationshipType.ANTONYM)):
        for group in meta.get(key) or []:
            for word in group or []:
                text = strip_markup(word)
                if not text or text == main_word:
                    continue
                sub_words.append(ParsedSubWord(
                    word=text,
                    part_of_speech=part_of_speech,
                    relations=[ParsedRelation(type=relationship_type)],
                ))
    return sub_words


def parse_entry(entry: Dict[str, Any]) -> ParsedWord:
    """
    Parse one Merriam-Webster entry.

    Args:
        entry: A dictionary entry from the API response

    Returns:
        The main word with its definitions and sub-words

    Raises:
        ValueError: If the entry has no headword
    """
    meta = entry.get('meta') or {}
    hwi = entry.get('hwi') or {}
    main_word = clean_headword(hwi.get('hw'))
    if not main_word:
        raise ValueError(f"Entry {meta.get('id')} has no headword")

    entry_id = meta.get('id') or main_word
    variant = entry_id.split(':')[1] if ':' in entry_id else ''
    source = SOURCE_MAP.get(meta.get('src'), SourceType.USER)
    part_of_speech = map_part_of_speech(entry.get('fl'))

    prs = hwi.get('prs') or entry.get('prs')
    altprs = hwi.get('altprs') or entry.get('altprs')

    definitions = parse_senses(
        entry.get('def'),
        entry_gram=entry.get('gram'),
        main_labels=_join(entry.get('lbs')),
        short_definitions=get_short_definitions(entry),
    )
    cross_definitions, cross_sub_words, base_word = _cross_references(entry, part_of_speech)
    definitions.extend(cross_definitions)

    sub_words = []
    sub_words.extend(_variant_sub_words(entry, main_word, part_of_speech))
    sub_words.extend(cross_sub_words)
    sub_words.extend(_inflection_sub_words(entry, main_word, part_of_speech))
    sub_words.extend(_run_on_sub_words(entry, main_word))
    sub_words.extend(_defined_run_on_sub_words(entry, main_word))
    sub_words.extend(_thesaurus_sub_words(entry, main_word, part_of_speech))

    return ParsedWord(
        word=main_word,
        language_code='en',
        source=source,
        part_of_speech=part_of_speech,
        variant=variant,
        phonetic=get_phonetic(prs, altprs),
        etymology=base_word or process_etymology(entry.get('et')),
        source_entity_id=f"{source.value}-{entry_id}-{meta.get('uuid')}",
        is_highlighted=meta.get('highlight') == 'yes',
        stems=list(meta.get('stems') or []),
        audio_urls=collect_audio_urls(prs, altprs),
        definitions=definitions,
        sub_words=sub_words,
    )


def ingest_word(
    session: Session,
    word: str,
    dictionary_type: str = "learners",
    lookup_frequency: bool = True,
) -> IngestionResult:
    """Fetch a word from Merriam-Webster and save every entry returned."""
    entries = fetch_entries(word, dictionary_type)
    logger.info(f"Fetched {len(entries)} Merriam-Webster entries for '{word}'")
    return process_all(session, entries, lambda entry: [parse_entry(entry)], lookup_frequency=lookup_frequency)
