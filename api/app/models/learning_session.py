"""
Learning session models.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime

from app.models.enums import SessionType


class UserLearningSession(SQLModel, table=True):
    """UserLearningSession table - one practice or review run of a user."""
    __tablename__ = "user_learning_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    user_list_id: Optional[int] = Field(default=None, foreign_key="user_lists.id")
    list_id: Optional[int] = Field(default=None, foreign_key="lists.id")
    session_type: SessionType = Field(default=SessionType.PRACTICE)
    start_time: datetime = Field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None  # Set when the session is completed
    duration: Optional[int] = None  # Seconds
    words_studied: int = Field(default=0)
    words_learned: int = Field(default=0)
    correct_answers: int = Field(default=0)
    incorrect_answers: int = Field(default=0)
    score: Optional[float] = None
    completion_percentage: Optional[float] = None


class UserSessionItem(SQLModel, table=True):
    """UserSessionItem table - the answer for one word within a session."""
    __tablename__ = "user_session_items"
    __table_args__ = (
        UniqueConstraint("session_id", "user_dictionary_id", name="uq_user_session_items_session_entry"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="user_learning_sessions.id", index=True)
    user_dictionary_id: int = Field(foreign_key="user_dictionary.id")
    is_correct: bool = Field(default=False)
    response_time: Optional[int] = None  # Milliseconds
    attempts_count: int = Field(default=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
