from pydantic_settings import BaseSettings
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Look for .env in api directory (parent of app directory), then current directory
api_dir = Path(__file__).parent.parent.parent
env_path = api_dir / ".env"

if env_path.exists():
    load_dotenv(env_path, override=True)
    _logger.info(f"Loaded .env file from: {env_path}")
else:
    current_env = Path(".env")
    if current_env.exists():
        load_dotenv(current_env, override=True)
        _logger.info(f"Loaded .env file from: {current_env.absolute()}")
    else:
        _logger.warning(f".env file not found at {env_path} or {current_env.absolute()}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = ""

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]

    # Google Cloud Translation API
    google_translate_api_key: str = ""

    # Pexels image search
    pexels_api_key: str = ""

    # Merriam-Webster dictionaries
    dictionary_learners_api_key: str = ""
    dictionary_intermediate_api_key: str = ""

    # Word frequency service (empty disables frequency lookups)
    frequency_api_url: str = ""

    # Assets storage path (set ASSETS_PATH env var for mounted volumes)
    assets_path: str = ""

    # Batch processing of images and audio
    batch_chunk_size: int = 5
    batch_delay_ms: int = 1000

    environment: str = "production"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        # Uppercase environment variables win over defaults
        env_fields = {
            "database_url": "DATABASE_URL",
            "google_translate_api_key": "GOOGLE_TRANSLATE_API_KEY",
            "pexels_api_key": "PEXELS_API_KEY",
            "dictionary_learners_api_key": "DICTIONARY_LEARNERS_API_KEY",
            "dictionary_intermediate_api_key": "DICTIONARY_INTERMEDIATE_API_KEY",
            "frequency_api_url": "FREQUENCY_API_URL",
            "assets_path": "ASSETS_PATH",
            "environment": "ENVIRONMENT",
        }
        for field_name, env_name in env_fields.items():
            if not kwargs.get(field_name) and os.getenv(env_name):
                kwargs[field_name] = os.getenv(env_name)
        super().__init__(**kwargs)


# Create settings instance
settings = Settings()

# Validate required DATABASE_URL
if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is required")
