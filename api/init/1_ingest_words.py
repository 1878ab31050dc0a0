"""
Script to fill the dictionary from a word list or a Danish dictionary dump.

Usage:
    python init/1_ingest_words.py words.txt [learners|intermediate]
    python init/1_ingest_words.py ordnet.json

A .txt file holds one English word per line, each fetched from
Merriam-Webster. A .json file holds a list of Ordnet objects.
"""
import sys
import json
import time
import logging
from pathlib import Path

# Add the api directory to Python path so we can import from app
script_dir = Path(__file__).parent
api_dir = script_dir.parent
sys.path.insert(0, str(api_dir))

from sqlmodel import Session
from app.core.config import settings
from app.core.database import engine
from app.core.exceptions import WordcraftException
from app.services.danish_dictionary_service import ingest_danish_objects
from app.services.merriam_webster_service import ingest_word

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def read_words(path: Path) -> list[str]:
    words = []
    for line in path.read_text(encoding='utf-8').splitlines():
        word = line.strip()
        if word and not word.startswith('#') and word not in words:
            words.append(word)
    return words


def ingest_word_file(path: Path, dictionary_type: str) -> tuple[int, int]:
    """Fetch every word of the file; requests are spaced by the batch delay."""
    words = read_words(path)
    logger.info(f"Ingesting {len(words)} words from {path}")
    saved = failed = 0
    with Session(engine) as session:
        for index, word in enumerate(words, start=1):
            try:
                result = ingest_word(session, word, dictionary_type)
                saved += result.saved
                failed += result.failed
                logger.info(f"[{index}/{len(words)}] {word}: {result.saved} saved, {result.failed} failed")
            except WordcraftException as e:
                failed += 1
                logger.warning(f"[{index}/{len(words)}] {word}: {e}")
            time.sleep(settings.batch_delay_ms / 1000)
    return saved, failed


def ingest_danish_file(path: Path) -> tuple[int, int]:
    objects = json.loads(path.read_text(encoding='utf-8'))
    if isinstance(objects, dict):
        objects = [objects]
    with Session(engine) as session:
        result = ingest_danish_objects(session, objects)
    for error in result.errors:
        logger.warning(error)
    return result.saved, result.failed


def main():
    if len(sys.argv) < 2:
        logger.error("Usage: 1_ingest_words.py <words.txt|ordnet.json> [learners|intermediate]")
        sys.exit(1)

    path = Path(sys.argv[1])
    if not path.exists():
        logger.error(f"File not found: {path}")
        sys.exit(1)

    if path.suffix == '.json':
        saved, failed = ingest_danish_file(path)
    else:
        dictionary_type = sys.argv[2] if len(sys.argv) > 2 else "learners"
        saved, failed = ingest_word_file(path, dictionary_type)
    logger.info(f"Done: {saved} saved, {failed} failed")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        logger.error("Error during ingestion: %s", e, exc_info=True)
        sys.exit(1)
