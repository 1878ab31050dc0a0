"""
Pexels photo search client.

Failures never raise: searches come back empty and lookups return None,
so callers can fall through to other queries.
"""
import logging
from typing import Any, Dict, Optional

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

PEXELS_BASE_URL = "https://api.pexels.com/v1"
EMPTY_SEARCH = {"photos": [], "total_results": 0}


def _headers() -> Optional[Dict[str, str]]:
    if not settings.pexels_api_key:
        logger.warning("Pexels API key not configured")
        return None
    return {"Authorization": settings.pexels_api_key}


def search_photos(
    query: str,
    orientation: str = "portrait",
    size: str = "small",
    locale: str = "en-US",
    page: int = 1,
    per_page: int = 15,
) -> Dict[str, Any]:
    """
    Search Pexels photos.

    Returns:
        The Pexels search response, or an empty one on any error
    """
    headers = _headers()
    if not headers:
        return dict(EMPTY_SEARCH)

    params = {
        "query": query,
        "orientation": orientation,
        "size": size,
        "locale": locale,
        "page": page,
        "per_page": per_page,
    }
    try:
        response = requests.get(f"{PEXELS_BASE_URL}/search", headers=headers, params=params, timeout=10)
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"Pexels search for '{query}' failed: {str(e)}")
        return dict(EMPTY_SEARCH)

    if not isinstance(data, dict) or "error" in data:
        logger.warning(f"Pexels search for '{query}' returned an error: {data}")
        return dict(EMPTY_SEARCH)
    data.setdefault("photos", [])
    logger.info(f"Pexels search for '{query}' (page {page}) returned {len(data['photos'])} photos")
    return data


def get_photo(photo_id: int) -> Optional[Dict[str, Any]]:
    headers = _headers()
    if not headers:
        return None
    try:
        response = requests.get(f"{PEXELS_BASE_URL}/photos/{photo_id}", headers=headers, timeout=10)
        response.raise_for_status()
        return response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"Failed to fetch Pexels photo {photo_id}: {str(e)}")
        return None
