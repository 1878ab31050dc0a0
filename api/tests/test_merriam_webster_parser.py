"""
Tests for parsing Merriam-Webster Learner's entries and fetching them.
"""
import pytest
import requests

from app.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from app.models import PartOfSpeech, RelationshipType, SourceType
from app.services import merriam_webster_service
from app.services.merriam_webster_service import (
    extract_examples,
    fetch_entries,
    parse_entry,
    parse_senses,
)


def make_run_entry():
    return {
        "meta": {
            "id": "run:1",
            "uuid": "abc-123",
            "src": "learners",
            "highlight": "yes",
            "stems": ["run", "runs", "running", "ran"],
            "app-shortdef": {"def": ["{bc}to move with quick steps"]},
            "syns": [["sprint", "dash"]],
            "ants": [["walk"]],
        },
        "hwi": {
            "hw": "run",
            "prs": [{"ipa": "ˈrʌn", "sound": {"audio": "run00001"}}],
        },
        "fl": "verb",
        "gram": "no obj",
        "ins": [
            {"if": "runs"},
            {"if": "ran", "il": "past tense"},
            {"if": "run*ning"},
        ],
        "def": [{
            "sseq": [
                [["sense", {
                    "sn": "1",
                    "dt": [
                        ["text", "{bc}to move with quick steps"],
                        ["vis", [{"t": "The children {it}ran{/it} home."}, {"t": "She runs every day."}]],
                    ],
                }]],
                [["sense", {
                    "sn": "2",
                    "sgram": "T",
                    "dt": [
                        ["text", "{bc}to manage something"],
                        ["wsgram", "+ obj"],
                        ["vis", [{"t": "He {it}runs{/it} a small business."}]],
                    ],
                }]],
                [["sense", {
                    "sn": "3",
                    "dt": [["text", "{dx}see also {dxt|race||}{/dx}"]],
                }]],
                [["sense", {
                    "sn": "4",
                    "dt": [["text", "{bc}to move with quick steps"]],
                }]],
            ],
        }],
        "uros": [
            {"ure": "run*ner", "fl": "noun", "utxt": [["vis", [{"t": "a fast {it}runner{/it}"}]]]},
        ],
        "dros": [
            {
                "drp": "run into",
                "gram": "phrasal verb",
                "def": [{
                    "sseq": [[["sense", {
                        "dt": [["text", "{bc}to meet by chance"]],
                        "phrasev": [{"pva": "run into*"}, {"pva": "bump into"}],
                    }]]],
                }],
            },
            {
                "drp": "in the long run",
                "def": [{"sseq": [[["sense", {"dt": [["text", "{bc}after a long period"]]}]]]}],
            },
        ],
    }


class TestParseEntry:

    def test_main_word_metadata(self):
        parsed = parse_entry(make_run_entry())
        assert parsed.word == "run"
        assert parsed.language_code == "en"
        assert parsed.variant == "1"
        assert parsed.source == SourceType.MERRIAM_LEARNERS
        assert parsed.part_of_speech == PartOfSpeech.VERB
        assert parsed.phonetic == "ˈrʌn"
        assert parsed.is_highlighted is True
        assert parsed.stems == ["run", "runs", "running", "ran"]
        assert parsed.source_entity_id == "merriam_learners-run:1-abc-123"
        assert parsed.audio_urls == ["https://media.merriam-webster.com/audio/prons/en/us/mp3/r/run00001.mp3"]

    def test_definitions_skip_cross_references_and_duplicates(self):
        parsed = parse_entry(make_run_entry())
        texts = [d.definition for d in parsed.definitions]
        assert texts == ["{bc}to move with quick steps", "{bc}to manage something"]

    def test_short_definition_flag(self):
        first, second = parse_entry(make_run_entry()).definitions
        assert first.is_in_short_def is True
        assert second.is_in_short_def is False

    def test_grammatical_notes_are_joined(self):
        _, second = parse_entry(make_run_entry()).definitions
        assert second.grammatical_note == "no obj | T"
        assert second.examples[0].example == "He {it}runs{/it} a small business."
        assert second.examples[0].grammatical_note == "+ obj"

    def test_examples_kept_in_order(self):
        first = parse_entry(make_run_entry()).definitions[0]
        assert [e.example for e in first.examples] == ["The children {it}ran{/it} home.", "She runs every day."]

    def test_verb_inflections(self):
        sub_words = {s.word: s for s in parse_entry(make_run_entry()).sub_words}
        assert sub_words["runs"].relations[0].type == RelationshipType.THIRD_PERSON_EN
        assert sub_words["ran"].relations[0].type == RelationshipType.PAST_TENSE_EN
        assert sub_words["running"].relations[0].type == RelationshipType.PRESENT_PARTICIPLE_EN
        assert sub_words["running"].definitions[0].definition == (
            "Present participle form of the verb {it}run{/it}"
        )

    def test_undefined_run_on_is_a_stem(self):
        runner = next(s for s in parse_entry(make_run_entry()).sub_words if s.word == "runner")
        assert runner.part_of_speech == PartOfSpeech.NOUN
        assert runner.definitions[0].definition == "Form of {it}run{/it}"
        assert runner.definitions[0].examples[0].example == "a fast {it}runner{/it}"
        assert RelationshipType.STEM in [r.type for r in runner.relations]

    def test_phrasal_verb_and_its_variants(self):
        sub_words = parse_entry(make_run_entry()).sub_words
        run_into = next(s for s in sub_words if s.word == "run into")
        assert run_into.part_of_speech == PartOfSpeech.PHRASAL_VERB
        assert run_into.definitions[0].definition == "{bc}to meet by chance"
        assert run_into.relations[0].type == RelationshipType.PHRASAL_VERB

        bump_into = next(s for s in sub_words if s.word == "bump into")
        assert bump_into.relations[0].type == RelationshipType.VARIANT_FORM_PHRASAL_VERB_EN
        # the starred copy of the headword is not a variant
        assert len([s for s in sub_words if s.word == "run into"]) == 1

    def test_other_defined_run_on_is_a_phrase(self):
        phrase = next(s for s in parse_entry(make_run_entry()).sub_words if s.word == "in the long run")
        assert phrase.part_of_speech == PartOfSpeech.PHRASE
        assert RelationshipType.PHRASE in [r.type for r in phrase.relations]

    def test_synonyms_and_antonyms(self):
        sub_words = parse_entry(make_run_entry()).sub_words
        synonyms = [s.word for s in sub_words if s.relations[0].type == RelationshipType.SYNONYM]
        antonyms = [s.word for s in sub_words if s.relations[0].type == RelationshipType.ANTONYM]
        assert synonyms == ["sprint", "dash"]
        assert antonyms == ["walk"]

    def test_missing_headword_raises(self):
        with pytest.raises(ValueError):
            parse_entry({"meta": {"id": "x"}, "hwi": {}})

    def test_intermediate_source(self):
        entry = make_run_entry()
        entry["meta"]["src"] = "int_dict"
        assert parse_entry(entry).source == SourceType.MERRIAM_INTERMEDIATE


class TestCrossReferenceEntry:

    def make_went_entry(self):
        return {
            "meta": {"id": "went", "uuid": "u-1", "src": "learners"},
            "hwi": {"hw": "went"},
            "fl": "verb",
            "cxs": [{"cxl": "past tense of", "cxtis": [{"cxt": "go:1"}]}],
        }

    def test_definition_points_to_base_word(self):
        parsed = parse_entry(self.make_went_entry())
        assert [d.definition for d in parsed.definitions] == ["Past tense of {it}go{/it}"]
        assert parsed.etymology == "go"

    def test_base_word_linked_in_reverse(self):
        base = parse_entry(self.make_went_entry()).sub_words[0]
        assert base.word == "go"
        assert base.relations[0].type == RelationshipType.PAST_TENSE_EN
        assert base.relations[0].reverse is True


class TestNounEntry:

    def test_plural_and_variant_spelling(self):
        entry = {
            "meta": {"id": "colour", "uuid": "u-2", "src": "learners"},
            "hwi": {"hw": "col*our"},
            "fl": "noun",
            "vrs": [{"va": "color", "vl": "US"}],
            "ins": [{"if": "col*ours", "il": "plural"}],
        }
        sub_words = {s.word: s for s in parse_entry(entry).sub_words}

        plural = sub_words["colours"]
        assert plural.is_plural is True
        assert plural.relations[0].type == RelationshipType.PLURAL_EN

        variant = sub_words["color"]
        assert variant.definitions[0].definition == 'Variant form of "colour + US"'
        assert RelationshipType.ALTERNATIVE_SPELLING in [r.type for r in variant.relations]


class TestSenses:

    def test_usage_note_used_when_sense_has_no_text(self):
        blocks = [{"sseq": [[["sense", {"dt": [["uns", [[["text", "used to show surprise"]]]]]}]]]}]
        definitions = parse_senses(blocks)
        assert definitions[0].definition == "1: used to show surprise"
        assert definitions[0].usage_note == "1: used to show surprise"

    def test_usage_notes_are_numbered(self):
        dt = [
            ["text", "{bc}a thing"],
            ["uns", [[["text", "often plural"]], [["text", "informal"], ["vis", [{"t": "an example"}]]]]],
        ]
        examples, usage_note = extract_examples(dt)
        assert usage_note == "1: often plural; 2: informal"
        assert examples[0].example == "an example"
        assert examples[0].grammatical_note == "informal"

    def test_sense_labels(self):
        blocks = [{"sseq": [[
            ["sen", {"sls": ["British"]}],
            ["sense", {"lbs": ["informal"], "dt": [["text", "{bc}a lorry"]]}],
        ]]}]
        definition = parse_senses(blocks)[0]
        assert definition.subject_status_labels == "British"
        assert definition.general_labels == "informal"


class FakeResponse:

    def __init__(self, data, status_code=200):
        self.data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.data


class TestFetchEntries:

    @pytest.fixture(autouse=True)
    def api_key(self, monkeypatch):
        monkeypatch.setattr(merriam_webster_service.settings, "dictionary_learners_api_key", "test-key")

    def test_returns_dictionary_entries(self, monkeypatch):
        calls = []

        def fake_get(url, params=None, timeout=None):
            calls.append((url, params))
            return FakeResponse([make_run_entry()])

        monkeypatch.setattr(merriam_webster_service.requests, "get", fake_get)
        entries = fetch_entries("run")
        assert entries[0]["meta"]["id"] == "run:1"
        assert calls[0][0].endswith("/learners/json/run")
        assert calls[0][1] == {"key": "test-key"}

    def test_suggestions_raise_not_found(self, monkeypatch):
        monkeypatch.setattr(
            merriam_webster_service.requests, "get",
            lambda *args, **kwargs: FakeResponse(["rune", "rum"]),
        )
        with pytest.raises(NotFoundError, match="Did you mean: rune, rum"):
            fetch_entries("runn")

    def test_empty_response_raises_not_found(self, monkeypatch):
        monkeypatch.setattr(merriam_webster_service.requests, "get", lambda *args, **kwargs: FakeResponse([]))
        with pytest.raises(NotFoundError):
            fetch_entries("qwzx")

    def test_http_error_raises_external_service_error(self, monkeypatch):
        monkeypatch.setattr(
            merriam_webster_service.requests, "get",
            lambda *args, **kwargs: FakeResponse({}, status_code=500),
        )
        with pytest.raises(ExternalServiceError):
            fetch_entries("run")

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(merriam_webster_service.settings, "dictionary_learners_api_key", "")
        with pytest.raises(ExternalServiceError):
            fetch_entries("run")

    def test_unknown_dictionary(self):
        with pytest.raises(ValidationError):
            fetch_entries("run", "collegiate")
