"""
Translation of definitions and examples through the Google Translate v2 REST API.
"""
import logging
from typing import Dict, List, Optional

import requests
from sqlmodel import Session, select

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, ValidationError
from app.models import (
    DefinitionExample,
    DefinitionTranslation,
    ExampleTranslation,
    Language,
    SourceType,
    Translation,
)
from app.services.dictionary_service import get_definition_or_404
from app.utils.text_utils import ensure_capitalized, strip_markup

logger = logging.getLogger(__name__)


class TranslationService:
    """Client for the Google Cloud Translation API (v2)."""

    BASE_URL = "https://translation.googleapis.com/language/translate/v2"

    # Internal language codes that differ from Google's
    LANGUAGE_CODE_MAPPING = {
        'zh': 'zh-CN',
    }

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key

    def _map_language_code(self, lang_code: str) -> str:
        return self.LANGUAGE_CODE_MAPPING.get(lang_code.lower(), lang_code.lower())

    def translate_text(self, text: str, target_language: str, source_language: Optional[str] = None) -> str:
        """
        Translate text.

        Args:
            text: Text to translate
            target_language: Target language code (e.g. 'da')
            source_language: Source language code; auto-detected when None

        Returns:
            Translated text

        Raises:
            ExternalServiceError: If the key is missing or the request fails
        """
        api_key = self.api_key or settings.google_translate_api_key
        if not api_key:
            raise ExternalServiceError("Google Translate API key not configured")

        params = {
            'key': api_key,
            'q': text,
            'target': self._map_language_code(target_language),
            'format': 'text',
        }
        if source_language:
            params['source'] = self._map_language_code(source_language)

        try:
            response = requests.post(self.BASE_URL, params=params, timeout=10)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            error_msg = f"Translation API request failed: {str(e)}"
            if getattr(e, 'response', None) is not None:
                error_msg += f" - Status: {e.response.status_code}"
            logger.error(error_msg)
            raise ExternalServiceError(error_msg)
        except ValueError as e:
            raise ExternalServiceError(f"Translation API returned invalid JSON: {str(e)}")

        try:
            translated = data['data']['translations'][0]['translatedText']
        except (KeyError, IndexError, TypeError):
            raise ExternalServiceError(f"Unexpected API response format: {data}")

        logger.info(f"Translated '{text[:50]}' from {source_language or 'auto'} to {target_language}")
        return translated


translation_service = TranslationService()


def _has_translation(session: Session, link_model, owner_column: str, owner_id: int, language_code: str) -> bool:
    return session.exec(
        select(Translation.id)
        .join(link_model, link_model.translation_id == Translation.id)
        .where(getattr(link_model, owner_column) == owner_id, Translation.language_code == language_code)
    ).first() is not None


def translate_definition(session: Session, definition_id: int, target_language: str) -> Dict[str, int]:
    """
    Machine-translate a definition and its examples into one language.

    Content that already has a translation in that language is skipped.

    Returns:
        Counts of translated definitions and examples
    """
    definition = get_definition_or_404(session, definition_id)
    target_language = target_language.lower()
    if not session.get(Language, target_language):
        raise ValidationError(f"Invalid language code: {target_language}")
    if definition.language_code == target_language:
        raise ValidationError("Target language is the definition's own language")

    result = {'definitions': 0, 'examples': 0}

    if not _has_translation(session, DefinitionTranslation, 'definition_id', definition.id, target_language):
        content = translation_service.translate_text(
            strip_markup(definition.definition), target_language, definition.language_code
        )
        translation = Translation(
            language_code=target_language,
            content=ensure_capitalized(content.strip()),
            source=SourceType.AI_GENERATED,
        )
        session.add(translation)
        session.flush()
        session.add(DefinitionTranslation(definition_id=definition.id, translation_id=translation.id))
        result['definitions'] += 1

    examples: List[DefinitionExample] = session.exec(
        select(DefinitionExample).where(DefinitionExample.definition_id == definition.id)
    ).all()
    for example in examples:
        if _has_translation(session, ExampleTranslation, 'example_id', example.id, target_language):
            continue
        content = translation_service.translate_text(
            strip_markup(example.example), target_language, example.language_code
        )
        translation = Translation(
            language_code=target_language,
            content=ensure_capitalized(content.strip()),
            source=SourceType.AI_GENERATED,
        )
        session.add(translation)
        session.flush()
        session.add(ExampleTranslation(example_id=example.id, translation_id=translation.id))
        result['examples'] += 1

    session.commit()
    logger.info(
        f"Translated definition {definition_id} into {target_language}: "
        f"{result['definitions']} definition, {result['examples']} examples"
    )
    return result
