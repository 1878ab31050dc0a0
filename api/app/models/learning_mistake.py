"""
LearningMistake model.
"""
from sqlmodel import SQLModel, Field, Column, JSON
from typing import Optional
from datetime import datetime


class LearningMistake(SQLModel, table=True):
    """LearningMistake table - wrong answers given while practising."""
    __tablename__ = "learning_mistakes"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    word_id: Optional[int] = Field(default=None, foreign_key="words.id")
    word_details_id: Optional[int] = Field(default=None, foreign_key="word_details.id")
    definition_id: Optional[int] = Field(default=None, foreign_key="definitions.id")
    user_dictionary_id: Optional[int] = Field(default=None, foreign_key="user_dictionary.id")
    type: str  # e.g. 'spelling'
    incorrect_value: Optional[str] = None
    context: Optional[str] = None
    mistake_data: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
