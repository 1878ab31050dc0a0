"""
Batch generation of definition images and word audio.

Items are processed in fixed-size chunks with a pause between chunks to stay
under the external APIs' rate limits. A failing item is logged and skipped.
"""
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlmodel import Session

from app.core.config import settings
from app.core.database import engine
from app.core.exceptions import WordcraftException
from app.services import audio_service, image_service

logger = logging.getLogger(__name__)


def process_in_chunks(
    items: Iterable[Any],
    handler: Callable[[Any], Any],
    chunk_size: Optional[int] = None,
    delay_ms: Optional[int] = None,
) -> Dict[str, int]:
    """
    Call ``handler`` for every item, chunk by chunk.

    An item fails when the handler raises or returns None.

    Args:
        items: Items to process
        handler: Called once per item
        chunk_size: Items per chunk (settings.batch_chunk_size by default)
        delay_ms: Pause between chunks (settings.batch_delay_ms by default)

    Returns:
        Counts of processed, succeeded and failed items
    """
    items = list(items)
    chunk_size = chunk_size or settings.batch_chunk_size
    delay_ms = settings.batch_delay_ms if delay_ms is None else delay_ms
    result = {'processed': 0, 'succeeded': 0, 'failed': 0}

    chunks = [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]
    for index, chunk in enumerate(chunks, start=1):
        logger.info(f"Processing chunk {index}/{len(chunks)} ({len(chunk)} items)")
        for item in chunk:
            result['processed'] += 1
            try:
                outcome = handler(item)
            except Exception as e:
                logger.error(f"Batch item {item} failed: {str(e)}", exc_info=not isinstance(e, WordcraftException))
                result['failed'] += 1
                continue
            if outcome is None:
                logger.warning(f"Batch item {item} produced no result")
                result['failed'] += 1
            else:
                result['succeeded'] += 1
        if index < len(chunks) and delay_ms:
            time.sleep(delay_ms / 1000)

    logger.info(
        f"Batch finished: {result['succeeded']} succeeded, {result['failed']} failed "
        f"out of {result['processed']}"
    )
    return result


def batch_generate_images(
    session: Session,
    definition_ids: List[int],
    chunk_size: Optional[int] = None,
    delay_ms: Optional[int] = None,
) -> Dict[str, int]:
    """Find a Pexels picture for each definition that has none."""
    def handler(definition_id: int):
        try:
            return image_service.get_or_create_definition_image(session, None, definition_id)
        except Exception:
            session.rollback()
            raise

    return process_in_chunks(definition_ids, handler, chunk_size, delay_ms)


def batch_generate_audio(
    session: Session,
    word_details_ids: List[int],
    quality: str = "high",
    chunk_size: Optional[int] = None,
    delay_ms: Optional[int] = None,
) -> Dict[str, int]:
    """Synthesize and attach primary audio for each word entry."""
    def handler(word_details_id: int):
        try:
            return audio_service.generate_audio_for_word_details(session, word_details_id, quality)
        except Exception:
            session.rollback()
            raise

    return process_in_chunks(word_details_ids, handler, chunk_size, delay_ms)


def run_image_batch(definition_ids: List[int]):
    """Background-task entry point; opens its own session."""
    with Session(engine) as session:
        batch_generate_images(session, definition_ids)


def run_audio_batch(word_details_ids: List[int], quality: str = "high"):
    """Background-task entry point; opens its own session."""
    with Session(engine) as session:
        batch_generate_audio(session, word_details_ids, quality)
