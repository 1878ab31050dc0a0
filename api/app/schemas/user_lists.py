from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.models.enums import DifficultyLevel, LearningStatus, PartOfSpeech


class AddListToCollectionRequest(BaseModel):
    list_id: int
    base_language_code: str = Field(..., max_length=2)
    target_language_code: str = Field(..., max_length=2)


class CreateCustomListRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    base_language_code: str = Field(..., max_length=2)
    target_language_code: str = Field(..., max_length=2)
    cover_image_url: Optional[str] = None
    difficulty: Optional[DifficultyLevel] = None


class UpdateUserListRequest(BaseModel):
    """An empty string clears the custom value so the list's own value shows again."""
    custom_name_of_list: Optional[str] = None
    custom_description_of_list: Optional[str] = None
    custom_cover_image_url: Optional[str] = None
    custom_difficulty: Optional[DifficultyLevel] = None


class AddWordToUserListRequest(BaseModel):
    user_dictionary_id: int


class WordOrder(BaseModel):
    user_dictionary_id: int
    order_index: int


class ReorderWordsRequest(BaseModel):
    words: List[WordOrder] = Field(..., min_length=1)


class UserListResponse(BaseModel):
    id: int
    list_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    difficulty: Optional[DifficultyLevel] = None
    base_language_code: str
    target_language_code: str
    is_custom: bool
    is_modified: bool
    word_count: int
    learned_word_count: int
    progress: float
    created_at: datetime
    updated_at: datetime


class UserListsResponse(BaseModel):
    lists: List[UserListResponse]
    total_count: int


class UserListWordItem(BaseModel):
    definition_id: int
    definition: str
    order_index: int
    word: Optional[str] = None
    word_id: Optional[int] = None
    part_of_speech: Optional[PartOfSpeech] = None
    phonetic: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    user_dictionary_id: Optional[int] = None
    learning_status: Optional[LearningStatus] = None
    progress: Optional[float] = None
    mastery_score: Optional[float] = None
    review_count: Optional[int] = None
    last_reviewed_at: Optional[datetime] = None
    translations: List[str] = Field(default_factory=list)
