from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.models.enums import DifficultyLevel, PartOfSpeech


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CreateListRequest(BaseModel):
    """Create a list together with its words."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: int
    base_language_code: Optional[str] = Field(None, max_length=2)
    target_language_code: Optional[str] = Field(None, max_length=2)
    is_public: bool = False
    tags: Optional[List[str]] = None
    cover_image_url: Optional[str] = None
    difficulty_level: Optional[DifficultyLevel] = None
    definition_ids: List[int] = Field(..., min_length=1, description="Definitions in display order")


class UpdateListRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = None
    base_language_code: Optional[str] = Field(None, max_length=2)
    target_language_code: Optional[str] = Field(None, max_length=2)
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = None
    cover_image_url: Optional[str] = None
    difficulty_level: Optional[DifficultyLevel] = None


class ListWordsRequest(BaseModel):
    definition_ids: List[int] = Field(..., min_length=1)


class ListResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category_id: int
    category_name: Optional[str] = None
    base_language_code: Optional[str] = None
    target_language_code: Optional[str] = None
    is_public: bool
    tags: Optional[List[str]] = None
    cover_image_url: Optional[str] = None
    difficulty_level: Optional[DifficultyLevel] = None
    word_count: int
    learned_word_count: int = 0
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    is_in_user_collection: bool = False


class ListsPage(BaseModel):
    lists: List[ListResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class ListWordItem(BaseModel):
    definition_id: int
    definition: str
    order_index: int
    word: Optional[str] = None
    word_id: Optional[int] = None
    part_of_speech: Optional[PartOfSpeech] = None
    phonetic: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None


class ListDetailsResponse(BaseModel):
    list: ListResponse
    words: List[ListWordItem]
