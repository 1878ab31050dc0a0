from pydantic import BaseModel, Field
from typing import List, Optional, Dict
from datetime import datetime

from app.models.enums import DifficultyLevel, LearningStatus, PartOfSpeech


class AddToUserDictionaryRequest(BaseModel):
    """Add a definition to the caller's dictionary."""
    definition_id: int
    base_language_code: str = Field(..., max_length=2)
    target_language_code: str = Field(..., max_length=2)


class UpdateLearningStatusRequest(BaseModel):
    learning_status: LearningStatus
    progress: Optional[float] = Field(None, ge=0, le=100)
    mastery_score: Optional[float] = Field(None, ge=0, le=100)
    next_review_due: Optional[datetime] = None


class UpdateCustomDataRequest(BaseModel):
    custom_definition_base: Optional[str] = None
    custom_definition_target: Optional[str] = None
    custom_phonetic: Optional[str] = None
    custom_notes: Optional[str] = None
    custom_tags: Optional[List[str]] = None
    custom_difficulty_level: Optional[DifficultyLevel] = None


class RecordReviewRequest(BaseModel):
    """A flashcard answer given outside of a practice session."""
    is_correct: bool
    response_time_ms: Optional[int] = Field(None, ge=0)


class UserDictionaryItem(BaseModel):
    """A user dictionary entry with the word it belongs to."""
    id: int
    definition_id: int
    definition: str
    word: Optional[str] = None
    word_id: Optional[int] = None
    part_of_speech: Optional[PartOfSpeech] = None
    phonetic: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    base_language_code: str
    target_language_code: str
    custom_definition_base: Optional[str] = None
    custom_definition_target: Optional[str] = None
    custom_phonetic: Optional[str] = None
    custom_notes: Optional[str] = None
    custom_tags: Optional[List[str]] = None
    custom_difficulty_level: Optional[DifficultyLevel] = None
    is_favorite: bool = False
    is_modified: bool = False
    learning_status: LearningStatus
    progress: float = 0
    mastery_score: float = 0
    review_count: int = 0
    amount_of_mistakes: int = 0
    correct_streak: int = 0
    last_reviewed_at: Optional[datetime] = None
    next_review_due: Optional[datetime] = None
    time_word_was_started_to_learn: Optional[datetime] = None
    time_word_was_learned: Optional[datetime] = None
    srs_level: int = 0
    srs_interval: int = 0
    created_at: datetime


class UserDictionaryPage(BaseModel):
    items: List[UserDictionaryItem]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class UserDictionaryStats(BaseModel):
    total_words: int
    favorites: int
    needs_review: int
    average_mastery: float
    by_status: Dict[str, int]
