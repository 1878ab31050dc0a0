"""
Word frequency lookups against the external frequency service.

The service ranks words by how common they are, overall and per part of
speech. Lookups are best-effort: any failure yields None.
"""
import logging
from typing import Any, Dict, Optional

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)


def fetch_word_frequency(word: str, language_code: str) -> Optional[Dict[str, Any]]:
    """
    Fetch the frequency record for a single word.

    Args:
        word: The word to look up
        language_code: Language of the word (e.g., 'en', 'da')

    Returns:
        The frequency record, or None if the service is not configured,
        unreachable, or reports an error for the word
    """
    if not settings.frequency_api_url:
        return None

    try:
        response = requests.post(
            settings.frequency_api_url,
            json=[{"word": word, "languageCode": language_code}],
            timeout=10,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"Failed to fetch frequency for word '{word}': {e}")
        return None

    if not isinstance(data, list) or not data:
        return None

    item = data[0]
    if not isinstance(item, dict) or item.get("error") is not None:
        logger.warning(f"Frequency service returned an error for '{word}': {item}")
        return None
    return item


def get_general_frequency(frequency_data: Optional[Dict[str, Any]]) -> Optional[int]:
    if not frequency_data:
        return None
    return frequency_data.get("orderIndexGeneralWord")


def get_part_of_speech_frequency(
    frequency_data: Optional[Dict[str, Any]],
    part_of_speech: Optional[str],
) -> Optional[int]:
    if not frequency_data or not part_of_speech:
        return None
    pos_data = (frequency_data.get("partOfSpeech") or {}).get(part_of_speech)
    if not pos_data:
        return None
    return pos_data.get("orderIndexPartOfspeech")
