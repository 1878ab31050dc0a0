"""
Audio service for text-to-speech generation using Google Cloud TTS.

Synthesized speech is cached in memory and every request is counted
against a per-quality free quota.
"""
import base64
import json
import logging
import os
import threading
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from google.cloud import texttospeech
from google.oauth2 import service_account
from sqlmodel import Session, select

from app.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from app.models import (
    Audio,
    DefinitionExample,
    ExampleAudio,
    SourceType,
    Word,
    WordDetails,
    WordDetailsAudio,
)
from app.utils.assets_utils import AUDIO_SUBDIRECTORY, asset_url, ensure_assets_directory

logger = logging.getLogger(__name__)

QUALITY_LEVELS: Dict[str, Dict[str, Any]] = {
    'standard': {'voice_type': 'Standard', 'cost_per_character': 0.000004, 'free_limit': 4_000_000},
    'high': {'voice_type': 'Neural2', 'cost_per_character': 0.000016, 'free_limit': 1_000_000},
    'premium': {'voice_type': 'Studio', 'cost_per_character': 0.00016, 'free_limit': 1_000_000},
}

# (voice name, gender) per language
VOICES: Dict[str, List[Tuple[str, str]]] = {
    'en': [
        ('en-US-Standard-C', 'FEMALE'),
        ('en-US-Standard-D', 'MALE'),
        ('en-US-Neural2-C', 'FEMALE'),
        ('en-US-Neural2-D', 'MALE'),
        ('en-US-Studio-O', 'FEMALE'),
        ('en-US-Studio-Q', 'MALE'),
    ],
    'da': [
        ('da-DK-Standard-A', 'FEMALE'),
        ('da-DK-Neural2-D', 'FEMALE'),
        ('da-DK-Wavenet-A', 'FEMALE'),
    ],
    'es': [('es-ES-Standard-A', 'FEMALE'), ('es-ES-Neural2-B', 'MALE')],
    'fr': [('fr-FR-Standard-A', 'FEMALE'), ('fr-FR-Neural2-B', 'MALE')],
    'de': [('de-DE-Standard-A', 'FEMALE'), ('de-DE-Neural2-B', 'MALE')],
    'ru': [('ru-RU-Standard-A', 'FEMALE'), ('ru-RU-Standard-B', 'MALE')],
}

TTS_LANGUAGE_CODES = {
    'en': 'en-US',
    'ru': 'ru-RU',
    'da': 'da-DK',
    'es': 'es-ES',
    'fr': 'fr-FR',
    'de': 'de-DE',
    'it': 'it-IT',
    'pt': 'pt-BR',
    'zh': 'cmn-CN',
    'ja': 'ja-JP',
    'ko': 'ko-KR',
    'ar': 'ar-XA',
}

DEFAULT_VOICES = {
    'en': 'en-US-Neural2-D',
    'ru': 'ru-RU-Standard-A',
    'da': 'da-DK-Neural2-D',
    'es': 'es-ES-Neural2-B',
    'fr': 'fr-FR-Neural2-B',
    'de': 'de-DE-Neural2-B',
    'it': 'it-IT-Neural2-F',
    'pt': 'pt-BR-Neural2-B',
    'zh': 'cmn-CN-Standard-A',
    'ja': 'ja-JP-Neural2-B',
    'ko': 'ko-KR-Neural2-A',
    'ar': 'ar-XA-Wavenet-A',
}

CACHE_TTL_SECONDS = 24 * 60 * 60
MAX_CACHE_SIZE = 100

# text/language/quality/gender -> (created timestamp, mp3 bytes)
_audio_cache: Dict[Tuple[str, str, str, Optional[str]], Tuple[float, bytes]] = {}
_usage_stats: Dict[str, Any] = {}
# Guards _audio_cache and _usage_stats; audio batches run as background tasks in worker threads
_lock = threading.RLock()


def reset_usage_stats() -> Dict[str, Any]:
    """Start a new accounting period with the full free quota."""
    with _lock:
        _usage_stats.clear()
        _usage_stats.update({
            'total_characters': 0,
            'characters_by_quality': {quality: 0 for quality in QUALITY_LEVELS},
            'estimated_cost': 0.0,
            'remaining_free_quota': {quality: level['free_limit'] for quality, level in QUALITY_LEVELS.items()},
            'last_reset': datetime.utcnow(),
        })
        return get_usage_stats()


def get_usage_stats() -> Dict[str, Any]:
    with _lock:
        if not _usage_stats:
            reset_usage_stats()
        return {
            **_usage_stats,
            'characters_by_quality': dict(_usage_stats['characters_by_quality']),
            'remaining_free_quota': dict(_usage_stats['remaining_free_quota']),
            'cache_size': len(_audio_cache),
        }


def _reserve_usage(quality: str, characters: int) -> float:
    """
    Charge characters against the quality's free quota before synthesis.

    Check and charge happen under one lock so concurrent requests cannot
    both pass the check on the last of the quota.

    Raises:
        ValidationError: If the remaining quota is smaller than the text
    """
    with _lock:
        if not _usage_stats:
            reset_usage_stats()
        remaining = _usage_stats['remaining_free_quota']
        if remaining[quality] < characters:
            raise ValidationError(
                f"Usage limit exceeded for {quality} quality. Consider using a lower quality level."
            )
        cost = characters * QUALITY_LEVELS[quality]['cost_per_character']
        _usage_stats['total_characters'] += characters
        _usage_stats['characters_by_quality'][quality] += characters
        _usage_stats['estimated_cost'] += cost
        remaining[quality] -= characters
        return cost


def _release_usage(quality: str, characters: int, cost: float):
    """Undo a reservation whose synthesis failed."""
    with _lock:
        _usage_stats['total_characters'] -= characters
        _usage_stats['characters_by_quality'][quality] -= characters
        _usage_stats['estimated_cost'] -= cost
        _usage_stats['remaining_free_quota'][quality] += characters


def _cache_get(key) -> Optional[bytes]:
    with _lock:
        entry = _audio_cache.get(key)
        if entry is None:
            return None
        created, audio = entry
        if time.time() - created > CACHE_TTL_SECONDS:
            del _audio_cache[key]
            return None
        return audio


def _cache_put(key, audio: bytes):
    now = time.time()
    with _lock:
        for stale in [k for k, (created, _) in _audio_cache.items() if now - created > CACHE_TTL_SECONDS]:
            del _audio_cache[stale]
        while len(_audio_cache) >= MAX_CACHE_SIZE:
            oldest = min(_audio_cache, key=lambda k: _audio_cache[k][0])
            del _audio_cache[oldest]
        _audio_cache[key] = (now, audio)


def clear_cache():
    with _lock:
        _audio_cache.clear()


def select_voice(language_code: str, quality: str, gender: Optional[str] = None) -> Tuple[str, str, Optional[str]]:
    """
    Pick a voice for a language and quality level.

    Returns:
        Tuple of (TTS language code, voice name, voice gender)
    """
    language_code = language_code.lower()
    tts_language = TTS_LANGUAGE_CODES.get(language_code, 'en-US')
    voices = VOICES.get(language_code)
    if not voices:
        return tts_language, DEFAULT_VOICES.get(language_code, 'en-US-Neural2-D'), None

    voice_type = QUALITY_LEVELS[quality]['voice_type']
    suitable = [v for v in voices if voice_type in v[0]] or voices
    if gender:
        for name, voice_gender in suitable:
            if voice_gender == gender.upper():
                return tts_language, name, voice_gender
        logger.warning(f"No {gender} voice for '{language_code}', using the default voice")
    name, voice_gender = suitable[0]
    return tts_language, name, voice_gender


def _get_tts_client():
    """
    Build a TTS client.

    Credentials come from GOOGLE_APPLICATION_CREDENTIALS_JSON (base64 service
    account JSON) when set, otherwise from GOOGLE_APPLICATION_CREDENTIALS or
    Application Default Credentials.
    """
    credentials = None
    credentials_json_b64 = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
    if credentials_json_b64:
        try:
            credentials_dict = json.loads(base64.b64decode(credentials_json_b64).decode('utf-8'))
            credentials = service_account.Credentials.from_service_account_info(credentials_dict)
            logger.info("Loaded credentials from GOOGLE_APPLICATION_CREDENTIALS_JSON")
        except (ValueError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load credentials from GOOGLE_APPLICATION_CREDENTIALS_JSON: {str(e)}")

    if not credentials and not os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
        logger.warning("GOOGLE_APPLICATION_CREDENTIALS not set. Attempting to use Application Default Credentials.")

    try:
        if credentials:
            return texttospeech.TextToSpeechClient(credentials=credentials)
        return texttospeech.TextToSpeechClient()
    except Exception as e:
        logger.error(f"Failed to initialize TTS client: {str(e)}")
        raise ExternalServiceError(f"Failed to initialize TTS client: {str(e)}")


def generate_speech(text: str, language_code: str, quality: str = "high", gender: Optional[str] = None) -> bytes:
    """
    Synthesize MP3 speech.

    Args:
        text: Text to speak
        language_code: Two-letter language code
        quality: 'standard', 'high' or 'premium'
        gender: Preferred voice gender (MALE/FEMALE), optional

    Returns:
        MP3 bytes

    Raises:
        ValidationError: For empty text, an unknown quality or an exhausted quota
        ExternalServiceError: If the TTS API fails
    """
    text = (text or "").strip()
    if not text:
        raise ValidationError("Text is required for speech generation")
    if quality not in QUALITY_LEVELS:
        raise ValidationError(f"Invalid quality level: {quality}")

    key = (text, language_code.lower(), quality, gender.upper() if gender else None)
    cached = _cache_get(key)
    if cached is not None:
        logger.info(f"Using cached audio for '{text[:50]}'")
        return cached

    cost = _reserve_usage(quality, len(text))

    tts_language, voice_name, voice_gender = select_voice(language_code, quality, gender)
    voice_params = {'language_code': tts_language, 'name': voice_name}
    if voice_gender:
        voice_params['ssml_gender'] = texttospeech.SsmlVoiceGender[voice_gender]

    logger.info(f"Generating audio for '{text[:50]}' in {tts_language} with voice {voice_name}")
    try:
        client = _get_tts_client()
        response = client.synthesize_speech(
            input=texttospeech.SynthesisInput(text=text),
            voice=texttospeech.VoiceSelectionParams(**voice_params),
            audio_config=texttospeech.AudioConfig(
                audio_encoding=texttospeech.AudioEncoding.MP3,
                speaking_rate=1.0,
                pitch=0.0,
            ),
        )
    except ExternalServiceError:
        _release_usage(quality, len(text), cost)
        raise
    except Exception as e:
        _release_usage(quality, len(text), cost)
        logger.error(f"Failed to generate audio with Google Cloud TTS: {str(e)}")
        raise ExternalServiceError(f"Failed to generate audio: {str(e)}")

    logger.info(f"Synthesized {len(text)} characters at {quality} quality (estimated cost ${cost:.6f})")
    _cache_put(key, response.audio_content)
    return response.audio_content


def _save_audio_file(filename: str, audio: bytes) -> str:
    directory = ensure_assets_directory(AUDIO_SUBDIRECTORY)
    (directory / filename).write_bytes(audio)
    logger.info(f"Saved audio to {directory / filename}")
    return asset_url(f"{AUDIO_SUBDIRECTORY}/{filename}")


def _upsert_tts_audio(session: Session, url: str, language_code: str) -> Audio:
    audio = session.exec(select(Audio).where(Audio.url == url, Audio.language_code == language_code)).first()
    if audio is None:
        audio = Audio(url=url, language_code=language_code, source=SourceType.AI_GENERATED, is_tts=True)
        session.add(audio)
        session.flush()
    return audio


def generate_audio_for_word_details(session: Session, word_details_id: int, quality: str = "high") -> Audio:
    """Synthesize the word of an entry and make it the entry's primary audio."""
    details = session.get(WordDetails, word_details_id)
    if not details:
        raise NotFoundError(f"Word details {word_details_id} not found")
    word = session.get(Word, details.word_id)

    audio_bytes = generate_speech(word.word, word.language_code, quality)
    url = _save_audio_file(f"word_details_{word_details_id}.mp3", audio_bytes)
    audio = _upsert_tts_audio(session, url, word.language_code)

    for link in session.exec(select(WordDetailsAudio).where(WordDetailsAudio.word_details_id == word_details_id)).all():
        link.is_primary = link.audio_id == audio.id
        session.add(link)
    if not session.get(WordDetailsAudio, (word_details_id, audio.id)):
        session.add(WordDetailsAudio(word_details_id=word_details_id, audio_id=audio.id, is_primary=True))
    session.commit()
    session.refresh(audio)
    return audio


def generate_audio_for_example(session: Session, example_id: int, quality: str = "standard") -> Audio:
    example = session.get(DefinitionExample, example_id)
    if not example:
        raise NotFoundError(f"Example {example_id} not found")

    audio_bytes = generate_speech(example.example, example.language_code, quality)
    url = _save_audio_file(f"example_{example_id}.mp3", audio_bytes)
    audio = _upsert_tts_audio(session, url, example.language_code)

    for link in session.exec(select(ExampleAudio).where(ExampleAudio.example_id == example_id)).all():
        link.is_primary = link.audio_id == audio.id
        session.add(link)
    if not session.get(ExampleAudio, (example_id, audio.id)):
        session.add(ExampleAudio(example_id=example_id, audio_id=audio.id, is_primary=True))
    session.commit()
    session.refresh(audio)
    return audio
