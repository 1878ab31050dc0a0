"""
Image service: definition pictures from Pexels and from uploads.
"""
import io
import logging
import random
import re
from typing import Any, Dict, List, Optional

from PIL import Image as PILImage, ImageOps
from sqlmodel import Session, select

from app.core.exceptions import ValidationError
from app.models import Definition, Image
from app.services import pexels_service
from app.services.dictionary_service import get_definition_or_404, get_definition_word_info
from app.utils.assets_utils import (
    DEFINITION_IMAGES_SUBDIRECTORY,
    asset_url,
    delete_asset_file,
    ensure_assets_directory,
)

logger = logging.getLogger(__name__)

UPLOAD_IMAGE_SIZE = 600
SEARCH_ATTEMPTS = 3
SEARCH_MAX_PAGE = 5
MAX_KEYWORDS = 5

STOP_WORDS = {
    'a', 'an', 'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of',
    'with', 'by', 'from', 'up', 'about', 'into', 'over', 'after', 'be', 'been',
    'being', 'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would', 'shall',
    'should', 'may', 'might', 'must', 'can', 'could', 'that', 'which', 'who',
    'whom', 'whose', 'when', 'where', 'why', 'how', 'all', 'any', 'both', 'each',
    'few', 'more', 'most', 'other', 'some', 'such', 'no', 'nor', 'not', 'only',
    'own', 'same', 'so', 'than', 'too', 'very', 'just', 'now', 'something',
    'someone', 'this', 'these', 'those', 'them', 'they', 'their', 'your',
}
SKIPPED_ABBREVIATIONS = {'eg', 'ie', 'etc'}


def crop_to_square_and_resize(img: PILImage.Image, target_size: int = UPLOAD_IMAGE_SIZE) -> PILImage.Image:
    """
    Center-crop an image to a square and resize it.

    Args:
        img: PIL image to process
        target_size: Side of the resulting square in pixels

    Returns:
        Square image of target_size x target_size
    """
    width, height = img.size
    crop_size = min(width, height)
    left = (width - crop_size) // 2
    top = (height - crop_size) // 2
    img = img.crop((left, top, left + crop_size, top + crop_size))
    return img.resize((target_size, target_size), PILImage.Resampling.LANCZOS)


def normalize_search_query(query: str) -> str:
    query = re.sub(r"[^\w\s]", "", query)
    return re.sub(r"\s+", " ", query).strip().lower()


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """Content words of a definition, in order of appearance."""
    keywords = []
    for token in re.split(r"[,.\s]+", (text or "").lower()):
        token = re.sub(r"[^\w]", "", token)
        if (
            len(token) <= 3
            or token in STOP_WORDS
            or token in SKIPPED_ABBREVIATIONS
            or token.isdigit()
            or token in keywords
        ):
            continue
        keywords.append(token)
    return keywords[:limit]


def build_search_query(word: str, part_of_speech: Optional[str], definition_text: str) -> str:
    parts = [word, part_of_speech or "", *extract_keywords(definition_text)]
    return normalize_search_query(" ".join(parts))


def create_from_pexels(session: Session, photo: Dict[str, Any], definition_id: Optional[int] = None) -> Optional[Image]:
    """
    Store a Pexels photo as an Image and attach it to a definition.

    Returns:
        The image, or None when the photo has no usable URL
    """
    url = (photo.get('src') or {}).get('original')
    if not url:
        logger.error(f"Pexels photo {photo.get('id')} has no original URL")
        return None
    description = photo.get('alt') or f"Photo by {photo.get('photographer') or 'unknown'}"

    image = session.exec(select(Image).where(Image.url == url)).first()
    if image:
        image.description = description
    else:
        image = Image(url=url, description=description)
    session.add(image)
    session.flush()

    if definition_id:
        definition = session.get(Definition, definition_id)
        if definition:
            definition.image_id = image.id
            session.add(definition)
        else:
            logger.warning(f"Definition {definition_id} not found, image {image.id} left unattached")

    session.commit()
    session.refresh(image)
    return image


def _search_random_pages(query: str) -> Optional[Dict[str, Any]]:
    for attempt in range(1, SEARCH_ATTEMPTS + 1):
        page = random.randint(1, SEARCH_MAX_PAGE)
        logger.info(f"Searching Pexels for '{query}', page {page} (attempt {attempt}/{SEARCH_ATTEMPTS})")
        photos = pexels_service.search_photos(query, size="medium", page=page, per_page=1).get('photos') or []
        if photos:
            return photos[0]
    return None


def get_or_create_definition_image(session: Session, word: Optional[str], definition_id: int) -> Optional[Image]:
    """
    Return the definition's image, searching Pexels for one if it has none.

    The search query is built from the word, its part of speech and keywords
    of the definition. When that finds nothing the bare word is tried.

    Returns:
        The image, or None when no photo was found
    """
    definition = get_definition_or_404(session, definition_id)
    if definition.image_id:
        image = session.get(Image, definition.image_id)
        if image:
            return image

    info = get_definition_word_info(session, [definition_id]).get(definition_id, {})
    word = word or info.get('word') or definition.definition.split(" ")[0]
    part_of_speech = info.get('part_of_speech')
    query = build_search_query(word, part_of_speech.value if part_of_speech else None, definition.definition)

    photo = _search_random_pages(query)
    if not photo:
        logger.info(f"No photos for '{query}', falling back to '{word}'")
        photo = _search_random_pages(normalize_search_query(word))
    if not photo:
        logger.warning(f"No photos found for definition {definition_id}")
        return None
    return create_from_pexels(session, photo, definition_id)


def process_uploaded_image(file_content: bytes) -> bytes:
    """
    Validate an upload, fix its EXIF orientation and turn it into a square JPEG.

    Raises:
        ValidationError: If the bytes are not a readable image
    """
    try:
        img = PILImage.open(io.BytesIO(file_content))
        img = ImageOps.exif_transpose(img)
        if img.mode != 'RGB':
            img = img.convert('RGB')
    except Exception as e:
        raise ValidationError(f"Invalid image file: {str(e)}")

    img = crop_to_square_and_resize(img, UPLOAD_IMAGE_SIZE)
    output = io.BytesIO()
    img.save(output, format="JPEG", quality=90)
    return output.getvalue()


def upload_definition_image(session: Session, definition_id: int, file_content: bytes) -> Image:
    definition = get_definition_or_404(session, definition_id)
    image_bytes = process_uploaded_image(file_content)

    directory = ensure_assets_directory(DEFINITION_IMAGES_SUBDIRECTORY)
    filename = f"{definition_id}.jpg"
    (directory / filename).write_bytes(image_bytes)
    url = asset_url(f"{DEFINITION_IMAGES_SUBDIRECTORY}/{filename}")
    logger.info(f"Saved uploaded image for definition {definition_id} to {directory / filename}")

    image = session.exec(select(Image).where(Image.url == url)).first()
    if image is None:
        image = Image(url=url, description=f"Uploaded image for definition {definition_id}")
        session.add(image)
        session.flush()
    definition.image_id = image.id
    session.add(definition)
    session.commit()
    session.refresh(image)
    return image


def remove_definition_image(session: Session, definition_id: int) -> bool:
    """
    Detach the definition's image; the image row and its file go too when
    no other definition uses them.

    Returns:
        True if the definition had an image
    """
    definition = get_definition_or_404(session, definition_id)
    if not definition.image_id:
        return False

    image = session.get(Image, definition.image_id)
    definition.image_id = None
    session.add(definition)
    session.flush()

    orphaned_url = None
    if image:
        still_used = session.exec(select(Definition.id).where(Definition.image_id == image.id)).first()
        if not still_used:
            orphaned_url = image.url
            session.delete(image)
    session.commit()

    # The file goes only once the rows are gone, so a failed commit leaves both
    if orphaned_url:
        delete_asset_file(orphaned_url)
    return True
