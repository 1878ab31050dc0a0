"""
Text utility functions.

Dictionary sources mark up their text with tokens in braces, e.g. ``{bc}``
(bold colon), ``{it}...{/it}`` (italics) or ``{dx}...{/dx}`` (cross reference).
"""
import re
from typing import Iterable, Optional

MARKUP_PATTERN = re.compile(r"{[^}]+}")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Example texts starting with these tokens are cross references, not examples
CROSS_REFERENCE_PREFIXES = ('{dx}', '{bc}{sx|', '{sx|')


def ensure_capitalized(text: str) -> str:
    """
    Ensure the first letter is capitalized while preserving the rest of the case.
    If text is empty, return as is.

    Args:
        text: The text to capitalize

    Returns:
        Text with first letter capitalized
    """
    if not text:
        return text
    return text[0].upper() + text[1:]


def strip_markup(text: Optional[str]) -> str:
    """Remove every {..} token and collapse whitespace."""
    if not text:
        return ""
    return WHITESPACE_PATTERN.sub(" ", MARKUP_PATTERN.sub("", text)).strip()


def cleanup_definition_text(text: Optional[str]) -> str:
    """
    Produce the plain form of a definition used to compare against short definitions.

    Cross references ({dx} at the start) yield an empty string.
    """
    if not isinstance(text, str):
        return strip_markup(str(text or ""))
    if text.startswith('{dx}'):
        return ""
    return strip_markup(text)


def cleanup_example_text(text: Optional[str]) -> str:
    """
    Trim an example or definition text, keeping its markup.

    Returns an empty string for cross references.
    """
    if not isinstance(text, str):
        return str(text or "").strip()
    if text.startswith(CROSS_REFERENCE_PREFIXES):
        return ""
    return text.strip()


def format_with_bc(text: Optional[str]) -> str:
    """Prefix each colon-separated part with {bc}, e.g. 'a: b' -> '{bc}a {bc}b'."""
    if not isinstance(text, str):
        return ""
    return " ".join(f"{{bc}}{part.strip()}" for part in text.split(":"))


def get_string_from_array(values: Optional[Iterable[Optional[str]]]) -> Optional[str]:
    """Join the non-empty values with ' | ', or return None when nothing is left."""
    if values is None:
        return None
    filtered = [v for v in values if v is not None and v.strip() != ""]
    if not filtered:
        return None
    return " | ".join(filtered)


def extract_word_text(definition: str) -> str:
    """
    Guess the headword from a definition text when no word is linked to it.

    Tries, in order: the first "quoted" text, the first (parenthesised) text,
    and the first token of the definition stripped of punctuation.
    """
    if not definition:
        return "word"

    quoted = re.search(r'"([^"]+)"', definition)
    if quoted:
        return quoted.group(1).strip()

    parenthesised = re.search(r"\(([^)]+)\)", definition)
    if parenthesised:
        return parenthesised.group(1).strip()

    parts = definition.split()
    if parts:
        first_word = re.sub(r"[^\w]", "", parts[0])
        if first_word:
            return first_word

    return "word"


def normalize_search_query(query: str) -> str:
    """Lowercase and collapse whitespace. Hyphens and apostrophes belong to headwords and are kept."""
    return WHITESPACE_PATTERN.sub(" ", query or "").strip().lower()
