from pydantic import BaseModel
from typing import List, Optional
from datetime import date

from app.schemas.user_dictionary import UserDictionaryStats


class UserStatistics(BaseModel):
    dictionary: UserDictionaryStats
    total_sessions: int
    completed_sessions: int
    total_words_studied: int
    total_correct_answers: int
    total_incorrect_answers: int
    overall_accuracy: int
    average_session_score: float
    current_streak_days: int
    total_study_time: int  # Seconds


class DailyActivity(BaseModel):
    day: date
    sessions: int
    words_studied: int
    correct_answers: int
    incorrect_answers: int
    accuracy: int


class FrequentMistake(BaseModel):
    word_id: Optional[int] = None
    word: str
    mistakes: int
    last_incorrect_value: Optional[str] = None


class LearningAnalytics(BaseModel):
    days: int
    daily_activity: List[DailyActivity]
    frequent_mistakes: List[FrequentMistake]
