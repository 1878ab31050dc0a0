"""
Intermediate shapes produced by dictionary parsers and consumed by the
ingestion service.
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from app.models.enums import PartOfSpeech, RelationshipType, SourceType, Gender


class ParsedExample(BaseModel):
    example: str
    grammatical_note: Optional[str] = None
    source_of_example: Optional[str] = None


class ParsedDefinition(BaseModel):
    definition: str
    subject_status_labels: Optional[str] = None
    general_labels: Optional[str] = None
    grammatical_note: Optional[str] = None
    usage_note: Optional[str] = None
    is_in_short_def: bool = False
    examples: List[ParsedExample] = Field(default_factory=list)


class ParsedRelation(BaseModel):
    """
    A link from the main word to a sub-word.

    'details' links the word entries (part of speech level), 'word' links
    the headwords themselves. ``reverse`` points the link from the
    sub-word back to the main word.
    """
    type: RelationshipType
    level: str = "details"
    reverse: bool = False


class ParsedSubWord(BaseModel):
    word: str
    part_of_speech: PartOfSpeech = PartOfSpeech.UNDEFINED
    variant: str = ""
    phonetic: Optional[str] = None
    is_plural: bool = False
    audio_urls: List[str] = Field(default_factory=list)
    definitions: List[ParsedDefinition] = Field(default_factory=list)
    relations: List[ParsedRelation] = Field(default_factory=list)


class ParsedWord(BaseModel):
    word: str
    language_code: str
    source: SourceType
    part_of_speech: PartOfSpeech = PartOfSpeech.UNDEFINED
    variant: str = ""
    phonetic: Optional[str] = None
    gender: Optional[Gender] = None
    forms: Optional[List[str]] = None
    etymology: Optional[str] = None
    source_entity_id: Optional[str] = None
    is_highlighted: bool = False
    frequency: Optional[int] = None
    stems: List[str] = Field(default_factory=list)
    audio_urls: List[str] = Field(default_factory=list)
    definitions: List[ParsedDefinition] = Field(default_factory=list)
    sub_words: List[ParsedSubWord] = Field(default_factory=list)


class IngestionResult(BaseModel):
    saved: int
    failed: int
    errors: List[str] = Field(default_factory=list)
