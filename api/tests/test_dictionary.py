"""
Tests for saving parsed entries, dictionary search, word details and
admin curation.
"""
import pytest
import requests
from sqlmodel import select

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import (
    Audio,
    Definition,
    DefinitionExample,
    PartOfSpeech,
    RelationshipType,
    Word,
    WordDetails,
    WordDetailsRelationship,
    WordToWordRelationship,
)
from app.services import dictionary_service, frequency_service, ingestion_service
from app.services.danish_dictionary_service import parse_danish_object
from app.services.merriam_webster_service import parse_entry
from test_danish_parser import make_hus_object
from test_merriam_webster_parser import FakeResponse, make_run_entry


def word_by_text(session, text):
    return session.exec(select(Word).where(Word.word == text)).one()


@pytest.fixture
def run_word(session):
    ingestion_service.save_parsed_word(session, parse_entry(make_run_entry()), lookup_frequency=False)
    return word_by_text(session, "run")


class TestSaveParsedWord:

    def test_main_entry(self, session, run_word):
        details = session.exec(select(WordDetails).where(WordDetails.word_id == run_word.id)).all()
        assert [(d.part_of_speech, d.variant) for d in details] == [(PartOfSpeech.VERB, "1")]
        assert run_word.phonetic_general == "ˈrʌn"
        assert run_word.source_entity_id == "merriam_learners-run:1-abc-123"

        audio = session.exec(select(Audio)).all()
        assert [a.url for a in audio] == ["https://media.merriam-webster.com/audio/prons/en/us/mp3/r/run00001.mp3"]

    def test_inflection_is_linked_both_ways(self, session, run_word):
        ran = word_by_text(session, "ran")
        run_details = session.exec(select(WordDetails).where(WordDetails.word_id == run_word.id)).one()
        ran_details = session.exec(select(WordDetails).where(WordDetails.word_id == ran.id)).one()

        details_link = session.exec(
            select(WordDetailsRelationship).where(
                WordDetailsRelationship.from_word_details_id == run_details.id,
                WordDetailsRelationship.to_word_details_id == ran_details.id,
            )
        ).one()
        assert details_link.type == RelationshipType.PAST_TENSE_EN
        assert details_link.description == "Past tense form"

        word_link = session.exec(
            select(WordToWordRelationship).where(
                WordToWordRelationship.from_word_id == run_word.id,
                WordToWordRelationship.to_word_id == ran.id,
            )
        ).one()
        assert word_link.type == RelationshipType.RELATED

    def test_saving_again_updates_in_place(self, session, run_word):
        words = len(session.exec(select(Word)).all())
        definitions = len(session.exec(select(Definition)).all())
        examples = len(session.exec(select(DefinitionExample)).all())

        ingestion_service.save_parsed_word(session, parse_entry(make_run_entry()), lookup_frequency=False)

        assert len(session.exec(select(Word)).all()) == words
        assert len(session.exec(select(Definition)).all()) == definitions
        assert len(session.exec(select(DefinitionExample)).all()) == examples

    def test_failure_rolls_back(self, session):
        result = ingestion_service.process_all(
            session, [{"meta": {}, "hwi": {}}, make_run_entry()], lambda entry: [parse_entry(entry)],
            lookup_frequency=False,
        )
        assert result.saved == 1
        assert result.failed == 1

    def test_failing_variant_keeps_its_siblings(self, session, monkeypatch):
        data = make_hus_object()
        data["variants"] = [{"word": {"word": "hus", "variant": "2", "partOfSpeech": ["verbum"]}}]
        save = ingestion_service.save_parsed_word

        def save_unless_variant_two(session, parsed, **kwargs):
            if parsed.variant == "2":
                raise ValueError("broken variant")
            return save(session, parsed, **kwargs)

        monkeypatch.setattr(ingestion_service, "save_parsed_word", save_unless_variant_two)
        result = ingestion_service.process_all(session, [data], parse_danish_object, lookup_frequency=False)
        assert result.saved == 1
        assert result.failed == 1
        assert result.errors == ["hus: broken variant"]
        assert session.exec(select(Word).where(Word.word == "hus")).one().language_code == "da"

    def test_frequency_is_looked_up(self, session, monkeypatch):
        monkeypatch.setattr(
            ingestion_service, "fetch_word_frequency",
            lambda word, language_code: {
                "orderIndexGeneralWord": 120,
                "partOfSpeech": {"verb": {"orderIndexPartOfspeech": 15}},
            } if word == "run" else None,
        )
        details = ingestion_service.save_parsed_word(session, parse_entry(make_run_entry()))
        assert details.frequency == 15
        assert word_by_text(session, "run").frequency_general == 120


class TestFrequencyService:

    def test_disabled_without_url(self, monkeypatch):
        monkeypatch.setattr(frequency_service.settings, "frequency_api_url", "")
        assert frequency_service.fetch_word_frequency("run", "en") is None

    def test_error_item_is_none(self, monkeypatch):
        monkeypatch.setattr(frequency_service.settings, "frequency_api_url", "http://frequency.local")
        monkeypatch.setattr(
            frequency_service.requests, "post",
            lambda *args, **kwargs: FakeResponse([{"word": "run", "error": "not found"}]),
        )
        assert frequency_service.fetch_word_frequency("run", "en") is None

    def test_request_failure_is_none(self, monkeypatch):
        monkeypatch.setattr(frequency_service.settings, "frequency_api_url", "http://frequency.local")

        def fail(*args, **kwargs):
            raise requests.exceptions.ConnectionError("down")

        monkeypatch.setattr(frequency_service.requests, "post", fail)
        assert frequency_service.fetch_word_frequency("run", "en") is None

    def test_part_of_speech_rank(self):
        data = {"partOfSpeech": {"noun": {"orderIndexPartOfspeech": 7}}}
        assert frequency_service.get_part_of_speech_frequency(data, "noun") == 7
        assert frequency_service.get_part_of_speech_frequency(data, "verb") is None


class TestSearch:

    def test_one_result_per_definition(self, session, run_word):
        response = dictionary_service.search_words(session, "RUN", "en")
        run_results = [r for r in response.results if r.word == "run"]
        assert [r.definition for r in run_results] == ["{bc}to move with quick steps", "{bc}to manage something"]
        assert run_results[0].examples_count == 2
        assert run_results[0].audio_url.endswith("run00001.mp3")

    def test_results_flag_user_entries(self, session, user, make_entry):
        entry = make_entry(user, "apple")
        results = dictionary_service.search_words(session, "app", "en", user_id=user.id).results
        assert results[0].is_in_user_dictionary is True
        assert results[0].user_dictionary_id == entry.id

    def test_blank_query(self, session):
        assert dictionary_service.search_words(session, "  ", "en").total_count == 0

    @pytest.mark.parametrize("headword,query", [("well-being", "Well-Being"), ("don't", "don't"), ("don't", "on'")])
    def test_punctuation_is_part_of_the_match(self, session, make_definition, headword, query):
        make_definition(headword)
        results = dictionary_service.search_words(session, query, "en").results
        assert [r.word for r in results] == [headword]

    def test_wildcards_are_literal(self, session, make_definition):
        make_definition("apple")
        assert dictionary_service.search_words(session, "a%e", "en").total_count == 0
        assert dictionary_service.search_words(session, "app_e", "en").total_count == 0

    def test_other_language_not_matched(self, session, run_word):
        assert dictionary_service.search_words(session, "run", "da").total_count == 0


class TestWordDetails:

    def test_full_word(self, session, run_word):
        full = dictionary_service.get_word_details(session, run_word.id)
        assert full.word.word == "run"
        definitions = full.details[0].definitions
        assert definitions[0].is_primary is True
        assert [e.example for e in definitions[0].examples] == [
            "The children {it}ran{/it} home.", "She runs every day."
        ]
        related = {(r.level, r.type, r.related_word) for r in full.relationships}
        assert ("details", RelationshipType.PAST_TENSE_EN, "ran") in related
        assert ("details", RelationshipType.SYNONYM, "sprint") in related

    def test_missing_word(self, session):
        with pytest.raises(NotFoundError):
            dictionary_service.get_word_details(session, 12345)


class TestAdminCuration:

    def test_table_filters(self, session, run_word, make_definition):
        make_definition("apple")
        rows = dictionary_service.fetch_dictionary_words(session, "en", search="run", has_audio=True).items
        assert {r.word for r in rows} == {"run"}
        assert len(dictionary_service.fetch_dictionary_words(session, "en", search="apple", has_audio=True).items) == 0

    def test_page_size_limit(self, session):
        with pytest.raises(ValidationError):
            dictionary_service.fetch_dictionary_words(session, "en", page_size=500)

    def test_rename_to_existing_word(self, session, make_definition):
        make_definition("apple")
        make_definition("pear")
        pear = word_by_text(session, "pear")
        with pytest.raises(ConflictError):
            dictionary_service.update_word(session, pear.id, {"word": "apple"})

    def test_definition_in_use_cannot_be_deleted(self, session, user, make_entry):
        entry = make_entry(user, "apple")
        with pytest.raises(ConflictError):
            dictionary_service.delete_definition(session, entry.definition_id)

    def test_duplicate_example(self, session, make_definition):
        definition = make_definition("apple")
        dictionary_service.add_example(session, definition.id, {"example": "an apple a day"})
        with pytest.raises(ConflictError):
            dictionary_service.add_example(session, definition.id, {"example": " an apple a day "})

    def test_relationship_needs_two_ends(self, session, make_definition):
        make_definition("apple")
        apple = word_by_text(session, "apple")
        with pytest.raises(ValidationError):
            dictionary_service.create_relationship(session, "word", apple.id, apple.id, RelationshipType.SYNONYM)
        with pytest.raises(ValidationError):
            dictionary_service.create_relationship(session, "sentence", apple.id, 2, RelationshipType.SYNONYM)

    def test_manual_forms(self, session, make_definition):
        make_definition("apple")
        details = session.exec(select(WordDetails)).one()
        created = dictionary_service.add_manual_forms(session, details.id, [
            {"word": "apples", "relationship_type": RelationshipType.PLURAL_EN},
            {"word": "apple", "relationship_type": RelationshipType.PLURAL_EN},
        ])
        assert len(created) == 1
        assert created[0].part_of_speech == PartOfSpeech.NOUN

    def test_delete_word_keeps_shared_definitions(self, session, make_definition):
        definition = make_definition("apple")
        make_definition("pear")
        pear_details = session.exec(
            select(WordDetails).join(Word, Word.id == WordDetails.word_id).where(Word.word == "pear")
        ).one()
        dictionary_service.create_definition(
            session, pear_details.id, {"definition": definition.definition, "source": definition.source}
        )

        apple = word_by_text(session, "apple")
        result = dictionary_service.delete_word(session, apple.id)
        assert result == {'word_details_deleted': 1, 'definitions_deleted': 0}
        assert session.get(Definition, definition.id) is not None


class TestDictionaryApi:

    def test_search(self, client, run_word):
        response = client.get("/api/v1/dictionary/search?q=run&language_code=en")
        assert response.status_code == 200
        assert response.json()["total_count"] >= 1

    def test_search_needs_query(self, client):
        assert client.get("/api/v1/dictionary/search?language_code=en").status_code == 422

    def test_word_not_found(self, client):
        response = client.get("/api/v1/dictionary/words/999")
        assert response.status_code == 404
        assert response.json()["type"] == "NotFoundError"

    def test_ingest_danish(self, client, admin, monkeypatch):
        monkeypatch.setattr(frequency_service.settings, "frequency_api_url", "")
        response = client.post(
            f"/api/v1/admin/dictionary/ingest/danish?admin_id={admin.id}", json=[make_hus_object()]
        )
        assert response.status_code == 200, response.text
        assert response.json()["saved"] == 1
