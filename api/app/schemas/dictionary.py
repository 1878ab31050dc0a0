"""
Schemas for dictionary search, word details and admin curation.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.models.enums import (
    Gender,
    LearningStatus,
    PartOfSpeech,
    RelationshipType,
    SourceType,
)


# ============================================================================
# Search
# ============================================================================

class SearchResultItem(BaseModel):
    """One definition of a word, as shown in search results."""
    word_id: int
    word: str
    word_details_id: int
    definition_id: int
    definition: str
    part_of_speech: PartOfSpeech
    variant: str = ""
    phonetic: Optional[str] = None
    frequency: Optional[int] = None
    source: Optional[SourceType] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    examples_count: int = 0
    is_in_user_dictionary: bool = False
    user_dictionary_id: Optional[int] = None
    user_learning_status: Optional[LearningStatus] = None


class SearchResponse(BaseModel):
    results: List[SearchResultItem]
    total_count: int
    page: int
    page_size: int
    total_pages: int


# ============================================================================
# Word details
# ============================================================================

class ExampleResponse(BaseModel):
    id: int
    example: str
    grammatical_note: Optional[str] = None
    source_of_example: Optional[str] = None
    translations: List[str] = Field(default_factory=list)
    audio_url: Optional[str] = None


class DefinitionResponse(BaseModel):
    id: int
    definition: str
    source: SourceType
    language_code: str
    subject_status_labels: Optional[str] = None
    general_labels: Optional[str] = None
    grammatical_note: Optional[str] = None
    usage_note: Optional[str] = None
    is_in_short_def: bool = False
    is_primary: bool = False
    image_id: Optional[int] = None
    image_url: Optional[str] = None
    translations: List[str] = Field(default_factory=list)
    examples: List[ExampleResponse] = Field(default_factory=list)


class WordDetailsResponse(BaseModel):
    id: int
    part_of_speech: PartOfSpeech
    variant: str = ""
    gender: Optional[Gender] = None
    phonetic: Optional[str] = None
    forms: Optional[List[str]] = None
    frequency: Optional[int] = None
    is_plural: bool = False
    source: Optional[SourceType] = None
    audio_urls: List[str] = Field(default_factory=list)
    definitions: List[DefinitionResponse] = Field(default_factory=list)


class RelationshipResponse(BaseModel):
    """A relationship, resolved to the text of the related word."""
    level: str
    from_id: int
    to_id: int
    type: RelationshipType
    related_word: Optional[str] = None
    description: Optional[str] = None
    order_index: Optional[int] = None


class WordResponse(BaseModel):
    id: int
    word: str
    language_code: str
    phonetic_general: Optional[str] = None
    frequency_general: Optional[int] = None
    is_highlighted: bool = False
    etymology: Optional[str] = None
    source_entity_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WordFullResponse(BaseModel):
    word: WordResponse
    details: List[WordDetailsResponse]
    relationships: List[RelationshipResponse]


# ============================================================================
# Admin table
# ============================================================================

class DictionaryWordRow(BaseModel):
    """A row of the admin dictionary table: one definition of a word entry."""
    word_id: int
    word: str
    word_details_id: int
    part_of_speech: PartOfSpeech
    variant: str = ""
    source: Optional[SourceType] = None
    frequency_general: Optional[int] = None
    frequency: Optional[int] = None
    definition_id: Optional[int] = None
    definition: Optional[str] = None
    image_id: Optional[int] = None
    image_url: Optional[str] = None
    has_audio: bool = False


class DictionaryWordsResponse(BaseModel):
    items: List[DictionaryWordRow]
    total_count: int
    page: int
    page_size: int
    total_pages: int


# ============================================================================
# Admin curation requests
# ============================================================================

class UpdateWordRequest(BaseModel):
    word: Optional[str] = Field(None, min_length=1)
    phonetic_general: Optional[str] = None
    frequency_general: Optional[int] = None
    is_highlighted: Optional[bool] = None
    etymology: Optional[str] = None


class UpdateWordDetailsRequest(BaseModel):
    part_of_speech: Optional[PartOfSpeech] = None
    variant: Optional[str] = None
    gender: Optional[Gender] = None
    phonetic: Optional[str] = None
    forms: Optional[List[str]] = None
    frequency: Optional[int] = None
    is_plural: Optional[bool] = None


class CreateDefinitionRequest(BaseModel):
    word_details_id: int
    definition: str = Field(..., min_length=1)
    source: SourceType = SourceType.ADMIN
    subject_status_labels: Optional[str] = None
    general_labels: Optional[str] = None
    grammatical_note: Optional[str] = None
    usage_note: Optional[str] = None
    is_primary: bool = False


class UpdateDefinitionRequest(BaseModel):
    definition: Optional[str] = Field(None, min_length=1)
    subject_status_labels: Optional[str] = None
    general_labels: Optional[str] = None
    grammatical_note: Optional[str] = None
    usage_note: Optional[str] = None
    is_in_short_def: Optional[bool] = None


class ExampleRequest(BaseModel):
    example: str = Field(..., min_length=1)
    grammatical_note: Optional[str] = None
    source_of_example: Optional[str] = None


class CreateRelationshipRequest(BaseModel):
    level: str = Field(..., description="'word', 'details' or 'definition'")
    from_id: int
    to_id: int
    type: RelationshipType
    description: Optional[str] = None
    order_index: Optional[int] = None


class ManualForm(BaseModel):
    word: str = Field(..., min_length=1)
    relationship_type: RelationshipType
    part_of_speech: Optional[PartOfSpeech] = None


class AddManualFormsRequest(BaseModel):
    forms: List[ManualForm] = Field(..., min_length=1)


class IngestWordRequest(BaseModel):
    word: str = Field(..., min_length=1)
    dictionary_type: str = Field("learners", description="'learners' or 'intermediate'")
