from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from app.models.enums import LearningStatus, PartOfSpeech, SessionType


class CreatePracticeSessionRequest(BaseModel):
    """Start a typing practice. Candidates come from the user's dictionary,
    narrowed to a user list or a list when one is given."""
    user_list_id: Optional[int] = None
    list_id: Optional[int] = None
    difficulty_level: int = Field(3, ge=1, le=5)
    words_count: Optional[int] = Field(None, ge=1)
    include_statuses: Optional[List[LearningStatus]] = None


class DifficultySettings(BaseModel):
    words_per_session: int
    time_limit: int
    allow_partial_credit: bool
    show_hints: bool


class PracticeWord(BaseModel):
    user_dictionary_id: int
    definition_id: int
    word: str
    definition: str
    part_of_speech: Optional[PartOfSpeech] = None
    phonetic: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    learning_status: LearningStatus
    progress: float
    correct_streak: int
    srs_level: int = 0
    next_srs_review: Optional[datetime] = None
    translations: List[str] = Field(default_factory=list)


class PracticeSessionResponse(BaseModel):
    session_id: int
    words: List[PracticeWord]
    total_words: int
    difficulty_settings: DifficultySettings
    time_limit: int


class ValidateTypingRequest(BaseModel):
    user_dictionary_id: int
    user_input: str
    response_time_ms: Optional[int] = Field(None, ge=0)


class ValidateTypingResponse(BaseModel):
    is_correct: bool
    accuracy: int
    partial_credit: bool
    points_earned: int
    correct_word: str
    feedback: str
    learning_status: LearningStatus
    mastery_score: float
    correct_streak: int


class SessionCompletionResponse(BaseModel):
    session_id: int
    accuracy: int
    score: int
    time_spent: int
    words_studied: int
    words_learned: int
    correct_answers: int
    incorrect_answers: int
    achievements: List[str]


class SessionProgressResponse(BaseModel):
    session_id: int
    words_studied: int
    correct_answers: int
    incorrect_answers: int
    accuracy: int
    time_elapsed: int
    time_remaining: int
    is_completed: bool
    is_cancelled: bool = False


class SessionHistoryItem(BaseModel):
    id: int
    session_type: SessionType
    user_list_id: Optional[int] = None
    list_id: Optional[int] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None
    words_studied: int
    words_learned: int
    correct_answers: int
    incorrect_answers: int
    score: Optional[float] = None
    completion_percentage: Optional[float] = None

    class Config:
        from_attributes = True


class SessionHistoryPage(BaseModel):
    sessions: List[SessionHistoryItem]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class SessionResumeResponse(BaseModel):
    session_type: SessionType
    user_list_id: Optional[int] = None
    list_id: Optional[int] = None
    answered_user_dictionary_ids: List[int]
    progress: SessionProgressResponse


class SrsStatistics(BaseModel):
    """Due counts are disjoint: overdue (due by now), later today, tomorrow."""
    total_words: int
    never_reviewed: int
    overdue_words: int
    due_today: int
    due_tomorrow: int
    level_distribution: Dict[int, int]
    average_interval: float
    average_mastery: float
