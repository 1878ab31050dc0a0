"""
Tests for chunked batch processing of images and audio.
"""
import pytest

from app.core.exceptions import NotFoundError
from app.services import batch_service


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(batch_service.time, "sleep", calls.append)
    return calls


class TestProcessInChunks:

    def test_pauses_between_chunks_only(self, sleeps):
        result = batch_service.process_in_chunks(range(7), lambda item: item, chunk_size=3, delay_ms=500)
        assert result == {'processed': 7, 'succeeded': 7, 'failed': 0}
        assert sleeps == [0.5, 0.5]

    def test_failures_are_counted_and_skipped(self, sleeps):
        def handler(item):
            if item == 2:
                raise NotFoundError("missing")
            if item == 3:
                raise RuntimeError("boom")
            if item == 4:
                return None
            return item

        result = batch_service.process_in_chunks([1, 2, 3, 4, 5], handler, chunk_size=10, delay_ms=0)
        assert result == {'processed': 5, 'succeeded': 2, 'failed': 3}
        assert sleeps == []

    def test_defaults_come_from_settings(self, sleeps, monkeypatch):
        monkeypatch.setattr(batch_service.settings, "batch_chunk_size", 2)
        monkeypatch.setattr(batch_service.settings, "batch_delay_ms", 250)
        batch_service.process_in_chunks([1, 2, 3], lambda item: item)
        assert sleeps == [0.25]

    def test_empty_batch(self, sleeps):
        assert batch_service.process_in_chunks([], lambda item: item) == {'processed': 0, 'succeeded': 0, 'failed': 0}


class TestBatchGeneration:

    def test_images(self, session, make_definition, sleeps, monkeypatch):
        apple = make_definition("apple")
        pear = make_definition("pear")

        def fake_image(session, word, definition_id):
            return object() if definition_id == apple.id else None

        monkeypatch.setattr(batch_service.image_service, "get_or_create_definition_image", fake_image)
        result = batch_service.batch_generate_images(session, [apple.id, pear.id], chunk_size=1, delay_ms=100)
        assert result == {'processed': 2, 'succeeded': 1, 'failed': 1}
        assert sleeps == [0.1]

    def test_audio_failure_rolls_back_and_continues(self, session, sleeps, monkeypatch):
        seen = []

        def fake_audio(session, word_details_id, quality):
            seen.append((word_details_id, quality))
            if word_details_id == 1:
                raise NotFoundError("Word details 1 not found")
            return object()

        monkeypatch.setattr(batch_service.audio_service, "generate_audio_for_word_details", fake_audio)
        result = batch_service.batch_generate_audio(session, [1, 2], quality="standard", delay_ms=0)
        assert result == {'processed': 2, 'succeeded': 1, 'failed': 1}
        assert seen == [(1, "standard"), (2, "standard")]


class TestBatchApi:

    def test_image_batch_is_accepted(self, client, admin, monkeypatch):
        queued = []
        monkeypatch.setattr(batch_service, "run_image_batch", lambda ids: queued.append(ids))
        response = client.post(
            f"/api/v1/admin/media/batch/images?admin_id={admin.id}",
            json={"definition_ids": [1, 2, 3]},
        )
        assert response.status_code == 202, response.text
        assert queued == [[1, 2, 3]]
