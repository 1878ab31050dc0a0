"""
Tests for Ordnet (Danish dictionary) parsing, form generation and ingestion.
"""
import pytest
from sqlmodel import select

from app.models import (
    Definition,
    DefinitionExample,
    Gender,
    PartOfSpeech,
    RelationshipType,
    SourceType,
    Word,
    WordDetails,
    WordDetailsAudio,
    WordDetailsRelationship,
    WordToWordRelationship,
)
from app.services.danish_dictionary_service import (
    ingest_danish_objects,
    parse_danish_entry,
    parse_danish_object,
)
from app.utils.danish_utils import (
    apply_ending,
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


def make_hus_object():
    return {
        "word": {
            "word": "hus",
            "partOfSpeech": ["substantiv", "intetkøn"],
            "forms": ["-et", "-e", "-ene"],
            "phonetic": "[ˈhuˀs]",
            "etymology": "norrønt hús",
            "audio": [
                {"word": "grundform", "audio_url": "https://ordnet.dk/audio/hus.mp3"},
                {"word": "pluralis", "audio_url": "https://ordnet.dk/audio/huse.mp3", "phonetic_audio": "[ˈhuːsə]"},
            ],
        },
        "definition": [
            {
                "definition": "bygning som mennesker bor i",
                "labels": {"grammatik": "ofte i bestemt form"},
                "examples": ["de købte et hus på landet"],
                "sources": [{"short": "Pol", "full": "Politiken, 2010"}],
            },
            {"definition": "bygning som mennesker bor i"},
            {"definition": "husstand; familie", "labels": {"overført": True}},
        ],
        "stems": [{"stem": "husere", "partOfSpeech": "vb."}],
        "synonyms": ["bolig", "hus"],
        "antonyms": [],
        "fixed_expressions": [
            {"expression": "holde hus", "definition": "være sparsommelig", "labels": {"talemåde": ""}},
        ],
    }


class TestMappings:

    def test_part_of_speech(self):
        assert map_danish_pos("Substantiv") == PartOfSpeech.NOUN
        assert map_danish_pos("suffiks") == PartOfSpeech.SUFFIX
        assert map_danish_pos("ukendt") == PartOfSpeech.UNDEFINED
        assert map_danish_pos(None) == PartOfSpeech.UNDEFINED

    def test_gender(self):
        assert map_danish_gender("fælleskøn") == Gender.COMMON
        assert map_danish_gender("intetkøn") == Gender.NEUTER
        assert map_danish_gender("") is None

    def test_stem_abbreviations(self):
        assert map_stem_pos("sb.") == PartOfSpeech.NOUN
        assert map_stem_pos("vb.") == PartOfSpeech.VERB
        assert map_stem_pos("xyz") == PartOfSpeech.UNDEFINED


class TestLabels:

    def test_subject_domains_and_slang(self):
        assert extract_subject_status_labels({"MEDICIN": True, "slang": ""}) == "MEDICIN; slang"

    def test_empty_string_domain_counts(self):
        assert extract_subject_status_labels({"JURA": "", "MEDICIN": True}) == "JURA; MEDICIN"
        assert extract_subject_status_labels({"grammatik": "", "overført": ""}) is None

    def test_empty_string_flags(self):
        assert extract_general_labels({"talemåde": ""}) == "talemåde (idiom/proverb)"
        assert extract_usage_note({"overført": ""}) == "overført (figurative/metaphorical usage)"

    def test_idiom_label(self):
        assert extract_general_labels({"talemåde": True}) == "talemåde (idiom/proverb)"

    def test_grammar_list_is_joined(self):
        assert extract_grammatical_note({"grammatik": ["a", "b"]}) == "a; b"

    def test_usage_notes(self):
        labels = {"SPROGBRUG": "uformelt", "overført": True}
        assert extract_usage_note(labels) == "uformelt; overført (figurative/metaphorical usage)"

    def test_no_labels(self):
        assert extract_subject_status_labels({}) is None
        assert extract_usage_note(None) is None

    def test_example_source(self):
        assert format_example_source({"short": "Pol", "full": "Politiken"}) == (
            "{bc}short {it}Pol{/it} {bc}full {it}Politiken{/it}"
        )
        assert format_example_source({"short": "Pol"}) is None


class TestForms:

    def test_apply_ending(self):
        assert apply_ending("hus", "-et") == "huset"
        assert apply_ending("god", "..bedre") == "bedre"
        assert apply_ending("gå", "gik") == "gik"
        assert apply_ending("hus", None) == "hus"

    def test_noun_forms(self):
        forms = transform_danish_forms("hus", ["substantiv"], forms=["-et", "-e", "-ene"])
        assert [(f.word, f.relationship_types) for f in forms] == [
            ("huset", [RelationshipType.DEFINITE_FORM_DA]),
            ("huse", [RelationshipType.PLURAL_DA]),
            ("husene", [RelationshipType.PLURAL_DEFINITE_DA]),
        ]

    def test_form_equal_to_base_word_is_dropped(self):
        forms = transform_danish_forms("mus", ["substantiv"], forms=["-en", "-", "-ene"])
        assert [f.word for f in forms] == ["musen", "musene"]

    def test_plural_gets_its_audio(self):
        audio = [{"word": "pluralis", "audio_url": "https://ordnet.dk/audio/huse.mp3", "phonetic_audio": "[x]"}]
        forms = transform_danish_forms("hus", ["substantiv"], forms=["-et", "-e", "-ene"], audio=audio)
        plural = next(f for f in forms if f.word == "huse")
        assert plural.audio_urls == ["https://ordnet.dk/audio/huse.mp3"]
        assert plural.phonetic == "[x]"

    def test_verb_forms(self):
        forms = transform_danish_forms("løbe", ["verbum"], forms=["-r", "løb", "-t"])
        assert [(f.word, f.relationship_types[0]) for f in forms] == [
            ("løber", RelationshipType.PRESENT_TENSE_DA),
            ("løb", RelationshipType.PAST_TENSE_DA),
            ("løbet", RelationshipType.PAST_PARTICIPLE_DA),
        ]

    def test_adjective_forms(self):
        forms = transform_danish_forms("stor", ["adjektiv"], forms=["-t", "-e"])
        assert [(f.word, f.relationship_types[0]) for f in forms] == [
            ("stort", RelationshipType.COMPARATIVE_DA),
            ("store", RelationshipType.SUPERLATIVE_DA),
        ]

    def test_contextual_noun_forms(self):
        forms = transform_danish_forms(
            "bil", ["substantiv"], contextual_forms={"bestemt form": ["-en"], "flertal": ["x", "-er"]}
        )
        assert ("bilen", [RelationshipType.DEFINITE_FORM_DA]) in [(f.word, f.relationship_types) for f in forms]
        assert ("biler", [RelationshipType.PLURAL_DA]) in [(f.word, f.relationship_types) for f in forms]


class TestParseEntry:

    def test_main_entry(self):
        parsed = parse_danish_entry(make_hus_object())
        assert parsed.word == "hus"
        assert parsed.language_code == "da"
        assert parsed.source == SourceType.DANISH_DICTIONARY
        assert parsed.part_of_speech == PartOfSpeech.NOUN
        assert parsed.gender == Gender.NEUTER
        assert parsed.phonetic == "[ˈhuˀs]"
        assert parsed.audio_urls == ["https://ordnet.dk/audio/hus.mp3"]
        assert parsed.source_entity_id == "danish_dictionary-hus-noun-"
        assert parsed.stems == ["husere"]

    def test_definitions_are_deduplicated_with_labels(self):
        definitions = parse_danish_entry(make_hus_object()).definitions
        assert [d.definition for d in definitions] == ["bygning som mennesker bor i", "husstand; familie"]
        assert definitions[0].grammatical_note == "ofte i bestemt form"
        assert definitions[0].examples[0].source_of_example == (
            "{bc}short {it}Pol{/it} {bc}full {it}Politiken, 2010{/it}"
        )
        assert definitions[1].usage_note == "overført (figurative/metaphorical usage)"

    def test_sub_words(self):
        sub_words = {s.word: s for s in parse_danish_entry(make_hus_object()).sub_words}
        assert set(sub_words) == {"huset", "huse", "husene", "husere", "bolig", "holde hus"}
        assert sub_words["huse"].is_plural is True
        assert sub_words["huset"].is_plural is False
        assert sub_words["husere"].part_of_speech == PartOfSpeech.VERB
        assert sub_words["bolig"].relations[0].type == RelationshipType.SYNONYM

        expression = sub_words["holde hus"]
        assert expression.part_of_speech == PartOfSpeech.PHRASE
        assert expression.definitions[0].general_labels == "talemåde (idiom/proverb)"

    def test_entry_without_word(self):
        with pytest.raises(ValueError):
            parse_danish_entry({"word": {}})


class TestParseObject:

    def test_variants_become_separate_words(self):
        data = make_hus_object()
        data["variants"] = [{"word": {"word": "hus", "variant": "2", "partOfSpeech": ["verbum"]}}]
        parsed = parse_danish_object(data)
        assert [(p.word, p.variant, p.part_of_speech) for p in parsed] == [
            ("hus", "", PartOfSpeech.NOUN),
            ("hus", "2", PartOfSpeech.VERB),
        ]

    def test_error_object_raises(self):
        with pytest.raises(ValueError):
            parse_danish_object({"error": "not found"})


class TestIngestion:

    def test_saves_words_forms_and_relationships(self, session):
        result = ingest_danish_objects(session, [make_hus_object()], lookup_frequency=False)
        assert result.saved == 1
        assert result.failed == 0

        hus = session.exec(select(Word).where(Word.word == "hus", Word.language_code == "da")).one()
        details = session.exec(select(WordDetails).where(WordDetails.word_id == hus.id)).one()
        assert details.gender == Gender.NEUTER
        assert details.forms == ["-et", "-e", "-ene"]
        assert hus.source_entity_id == "danish_dictionary-hus-noun-"

        huse = session.exec(select(Word).where(Word.word == "huse")).one()
        huse_details = session.exec(select(WordDetails).where(WordDetails.word_id == huse.id)).one()
        assert huse_details.is_plural is True
        relation = session.exec(
            select(WordDetailsRelationship).where(
                WordDetailsRelationship.from_word_details_id == details.id,
                WordDetailsRelationship.to_word_details_id == huse_details.id,
            )
        ).one()
        assert relation.type == RelationshipType.PLURAL_DA

        related = session.exec(
            select(WordToWordRelationship).where(
                WordToWordRelationship.from_word_id == hus.id,
                WordToWordRelationship.to_word_id == huse.id,
            )
        ).all()
        assert [r.type for r in related] == [RelationshipType.RELATED]

        audio_links = session.exec(
            select(WordDetailsAudio).where(WordDetailsAudio.word_details_id == details.id)
        ).all()
        assert len(audio_links) == 1 and audio_links[0].is_primary

        definitions = session.exec(select(Definition).where(Definition.language_code == "da")).all()
        assert {d.definition for d in definitions} >= {"bygning som mennesker bor i", "være sparsommelig"}
        examples = session.exec(select(DefinitionExample)).all()
        assert [e.example for e in examples] == ["de købte et hus på landet"]

    def test_ingesting_twice_does_not_duplicate(self, session):
        ingest_danish_objects(session, [make_hus_object()], lookup_frequency=False)
        ingest_danish_objects(session, [make_hus_object()], lookup_frequency=False)
        assert len(session.exec(select(Word).where(Word.word == "hus")).all()) == 1
        assert len(session.exec(select(DefinitionExample)).all()) == 1

    def test_failing_object_is_counted(self, session):
        result = ingest_danish_objects(session, [{"error": "no match"}, make_hus_object()], lookup_frequency=False)
        assert result.saved == 1
        assert result.failed == 1
        assert "no match" in result.errors[0]
