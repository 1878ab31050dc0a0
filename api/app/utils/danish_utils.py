"""
Helpers for Danish dictionary (Ordnet) entries: part-of-speech mapping,
label extraction and inflected form generation.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from app.models.enums import PartOfSpeech, Gender, RelationshipType


DANISH_POS_MAP = {
    'substantiv': PartOfSpeech.NOUN,
    'verbum': PartOfSpeech.VERB,
    'adjektiv': PartOfSpeech.ADJECTIVE,
    'adj. pl.': PartOfSpeech.ADJECTIVE,
    'adverbium': PartOfSpeech.ADVERB,
    'pronomen': PartOfSpeech.PRONOUN,
    'præposition': PartOfSpeech.PREPOSITION,
    'konjunktion': PartOfSpeech.CONJUNCTION,
    'interjektion': PartOfSpeech.INTERJECTION,
    'talord': PartOfSpeech.NUMERAL,
    'talord (mængdetal)': PartOfSpeech.NUMERAL,
    'talord (ordenstal)': PartOfSpeech.NUMERAL,
    'artikel': PartOfSpeech.ARTICLE,
    'udråbsord': PartOfSpeech.EXCLAMATION,
    'forkortelse': PartOfSpeech.ABBREVIATION,
    'suffiks': PartOfSpeech.SUFFIX,
}

DANISH_GENDER_MAP = {
    'fælleskøn': Gender.COMMON,
    'intetkøn': Gender.NEUTER,
}

# Abbreviations used on stem entries
STEM_POS_MAP = {
    'sb.': PartOfSpeech.NOUN,
    'vb.': PartOfSpeech.VERB,
    'adj.': PartOfSpeech.ADJECTIVE,
    'adv.': PartOfSpeech.ADVERB,
    'præp.': PartOfSpeech.PREPOSITION,
    'konj.': PartOfSpeech.CONJUNCTION,
    'pron.': PartOfSpeech.PRONOUN,
    'interj.': PartOfSpeech.INTERJECTION,
    'num.': PartOfSpeech.NUMERAL,
}

SUBJECT_DOMAINS = [
    'MEDICIN', 'JURA', 'TEKNIK', 'KEMI', 'MATEMATIK', 'MUSIK', 'SPORT',
    'BOTANIK', 'ZOOLOGI', 'ØKONOMI', 'POLITIK', 'RELIGION', 'MILITÆR',
    'LITTERATUR', 'ASTRONOMI', 'GASTRONOMI', 'SØFART',
]

# Audio entries of an Ordnet word are labelled with the form they pronounce
FORM_AUDIO_LABELS = {
    RelationshipType.PLURAL_DA: 'pluralis',
    RelationshipType.PRESENT_TENSE_DA: 'præsens',
    RelationshipType.PAST_TENSE_DA: 'præteritum',
    RelationshipType.PAST_PARTICIPLE_DA: 'præteritum participium',
}


def map_danish_pos(term: Optional[str]) -> PartOfSpeech:
    """Map an Ordnet part-of-speech term to PartOfSpeech."""
    if not term:
        return PartOfSpeech.UNDEFINED
    return DANISH_POS_MAP.get(term.lower().strip(), PartOfSpeech.UNDEFINED)


def map_danish_gender(term: Optional[str]) -> Optional[Gender]:
    if not term:
        return None
    return DANISH_GENDER_MAP.get(term.lower().strip())


def map_stem_pos(abbreviation: Optional[str]) -> PartOfSpeech:
    if not abbreviation:
        return PartOfSpeech.UNDEFINED
    return STEM_POS_MAP.get(abbreviation.lower().strip(), PartOfSpeech.UNDEFINED)


def _label_text(value) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "; ".join(value)
    return None


def extract_subject_status_labels(labels: Optional[Dict]) -> Optional[str]:
    if not labels:
        return None
    # Ordnet sends flag labels as "" so presence of the key is what counts
    subject_labels = [key for key in labels if key in SUBJECT_DOMAINS or key == 'slang']
    return "; ".join(subject_labels) or None


def extract_general_labels(labels: Optional[Dict]) -> Optional[str]:
    if not labels:
        return None
    general_labels = []
    if 'talemåde' in labels:
        general_labels.append('talemåde (idiom/proverb)')
    if labels.get('Forkortelse'):
        general_labels.append('forkortelse (abbreviation)')
    return "; ".join(general_labels) or None


def extract_grammatical_note(labels: Optional[Dict]) -> Optional[str]:
    if not labels or not labels.get('grammatik'):
        return None
    return _label_text(labels['grammatik'])


def extract_usage_note(labels: Optional[Dict]) -> Optional[str]:
    if not labels:
        return None
    usage_notes = []
    if labels.get('SPROGBRUG'):
        usage_notes.append(_label_text(labels['SPROGBRUG']) or 'SPROGBRUG')
    if 'overført' in labels:
        usage_notes.append('overført (figurative/metaphorical usage)')
    return "; ".join(usage_notes) or None


def format_example_source(source: Optional[Dict]) -> Optional[str]:
    """Render an Ordnet citation as '{bc}short {it}..{/it} {bc}full {it}..{/it}'."""
    if not isinstance(source, dict) or 'short' not in source or 'full' not in source:
        return None
    return f"{{bc}}short {{it}}{source['short']}{{/it}} {{bc}}full {{it}}{source['full']}{{/it}}"


def apply_ending(base_word: str, ending: Optional[str]) -> str:
    """
    Build an inflected form from an Ordnet ending.

    '-en' appends to the base, '..ere' replaces the word with 'ere', and
    any other text is already the full form.
    """
    if not ending:
        return base_word
    if not ending.startswith('-'):
        if ending.startswith('..'):
            return ending[2:]
        return ending
    return base_word + ending[1:]


class DanishForm(BaseModel):
    """An inflected form of a Danish word and how it relates to the base word."""
    word: str
    relationship_types: List[RelationshipType] = Field(default_factory=list)
    phonetic: Optional[str] = None
    audio_urls: List[str] = Field(default_factory=list)


def _noun_forms(base_word: str, forms: List[str]) -> List[tuple]:
    types = [
        RelationshipType.DEFINITE_FORM_DA,
        RelationshipType.PLURAL_DA,
        RelationshipType.PLURAL_DEFINITE_DA,
    ]
    return [
        (apply_ending(base_word, form), types[index])
        for index, form in enumerate(forms[:3])
        if form
    ]


def _contextual_noun_forms(base_word: str, contextual_forms: Dict[str, List[str]]) -> List[tuple]:
    result = []
    for entries in contextual_forms.values():
        for index, entry in enumerate(entries or []):
            if not entry:
                continue
            related = apply_ending(base_word, entry)
            if entry in ('-en', '-et') or (entry.endswith(('-en', '-et')) and '/' not in entry):
                result.append((related, RelationshipType.DEFINITE_FORM_DA))
            elif entry == '-' and index == 1:
                result.append((base_word, RelationshipType.PLURAL_DA))
            elif entry in ('-e', '-er') or (entry.endswith(('-e', '-er')) and index == 1):
                result.append((related, RelationshipType.PLURAL_DA))
            elif entry in ('-ene', '-erne') or (entry.endswith(('-ene', '-erne')) and index == 2):
                result.append((related, RelationshipType.PLURAL_DEFINITE_DA))
    return result


def _adjective_forms(base_word: str, forms: List[str]) -> List[tuple]:
    if len(forms) >= 3:
        types = [
            RelationshipType.COMPARATIVE_DA,
            RelationshipType.SUPERLATIVE_DA,
            RelationshipType.ADJECTIVE_NEUTER_DA,
        ]
        return [(apply_ending(base_word, f), types[i]) for i, f in enumerate(forms[:3]) if f]
    return [
        (apply_ending(base_word, f), RelationshipType.COMPARATIVE_DA if i == 0 else RelationshipType.SUPERLATIVE_DA)
        for i, f in enumerate(forms)
        if f
    ]


def _verb_forms(base_word: str, forms: List[str]) -> List[tuple]:
    types = [
        RelationshipType.PRESENT_TENSE_DA,
        RelationshipType.PAST_TENSE_DA,
        RelationshipType.PAST_PARTICIPLE_DA,
        RelationshipType.IMPERATIVE_DA,
    ]
    limit = 4 if len(forms) >= 4 else 3
    return [(apply_ending(base_word, f), types[i]) for i, f in enumerate(forms[:limit]) if f]


def _find_audio(audio: List[Dict], label: str) -> List[Dict]:
    return [a for a in audio if a.get('word') == label and a.get('audio_url')]


def transform_danish_forms(
    base_word: str,
    part_of_speech: List[str],
    forms: Optional[List[str]] = None,
    contextual_forms: Optional[Dict[str, List[str]]] = None,
    audio: Optional[List[Dict]] = None,
) -> List[DanishForm]:
    """
    Expand the forms of a Danish entry into related words.

    Forms are grouped by their text, so one word can carry several
    relationship types (e.g. a plural that equals the definite form).
    Forms identical to the base word are dropped.
    """
    forms = forms or []
    contextual_forms = contextual_forms or {}
    audio = audio or []

    if 'substantiv' in part_of_speech:
        if forms:
            pairs = _noun_forms(base_word, forms)
        else:
            pairs = _contextual_noun_forms(base_word, contextual_forms)
    elif 'adjektiv' in part_of_speech:
        pairs = _adjective_forms(base_word, forms)
    elif 'verbum' in part_of_speech:
        pairs = _verb_forms(base_word, forms)
    else:
        pairs = []

    grouped: Dict[str, DanishForm] = {}
    for related_word, relationship_type in pairs:
        if not related_word or related_word == base_word:
            continue
        entry = grouped.setdefault(related_word, DanishForm(word=related_word))
        if relationship_type not in entry.relationship_types:
            entry.relationship_types.append(relationship_type)

    for entry in grouped.values():
        matched: List[Dict] = []
        if RelationshipType.PLURAL_DEFINITE_DA in entry.relationship_types:
            matched = []
        else:
            for relationship_type in entry.relationship_types:
                label = FORM_AUDIO_LABELS.get(relationship_type)
                if label:
                    matched = _find_audio(audio, label)
                    if matched:
                        break
            if not matched:
                for label, values in contextual_forms.items():
                    if entry.word in (values or []):
                        matched = _find_audio(audio, label)
                        break
        if matched:
            entry.audio_urls = [a['audio_url'] for a in matched]
            entry.phonetic = matched[0].get('phonetic_audio') or None

    return list(grouped.values())
