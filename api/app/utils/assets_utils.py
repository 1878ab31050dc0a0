"""
Locations of generated media: uploaded definition images and synthesized audio.

Files live under the assets directory and are served by the /assets mount,
so a file at <assets>/audio/x.mp3 has the URL /assets/audio/x.mp3.
"""
import logging
from pathlib import Path
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

ASSETS_URL_PREFIX = "/assets/"
AUDIO_SUBDIRECTORY = "audio"
DEFINITION_IMAGES_SUBDIRECTORY = "images/definitions"


def get_assets_directory() -> Path:
    """
    Get the assets directory path.

    Uses ASSETS_PATH when set (mounted volumes), otherwise api/assets.
    """
    if settings.assets_path:
        return Path(settings.assets_path)
    # utils -> app -> api
    return Path(__file__).parent.parent.parent / "assets"


def ensure_assets_directory(subdirectory: Optional[str] = None) -> Path:
    """
    Create the assets directory, or one of its subdirectories, if missing.

    Args:
        subdirectory: Relative path inside the assets directory (e.g. "audio")

    Returns:
        Path to the created directory
    """
    directory = get_assets_directory()
    if subdirectory:
        directory = directory / subdirectory
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def asset_url(relative_path: str) -> str:
    return ASSETS_URL_PREFIX + relative_path.lstrip("/")


def asset_path_from_url(url: Optional[str]) -> Optional[Path]:
    """Local file behind an /assets/ URL; None for remote URLs."""
    if not url or not url.startswith(ASSETS_URL_PREFIX):
        return None
    return get_assets_directory() / url[len(ASSETS_URL_PREFIX):]


def delete_asset_file(url: Optional[str]) -> bool:
    """
    Delete the local file behind an /assets/ URL.

    Returns:
        True if a file was deleted
    """
    path = asset_path_from_url(url)
    if not path or not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        logger.warning(f"Failed to delete asset file {path}: {str(e)}")
        return False
    logger.info(f"Deleted asset file: {path}")
    return True
