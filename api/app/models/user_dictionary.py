"""
UserDictionary model.
"""
from sqlmodel import SQLModel, Field, Relationship, Column, JSON
from sqlalchemy import UniqueConstraint
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from app.models.enums import LearningStatus, DifficultyLevel

if TYPE_CHECKING:
    from app.models.user import User


class UserDictionary(SQLModel, table=True):
    """UserDictionary table - a definition in a user's personal collection, with progress."""
    __tablename__ = "user_dictionary"
    __table_args__ = (
        UniqueConstraint("user_id", "definition_id", name="uq_user_dictionary_user_definition"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    definition_id: int = Field(foreign_key="definitions.id", index=True)
    base_language_code: str = Field(foreign_key="languages.code")
    target_language_code: str = Field(foreign_key="languages.code")

    # Customisation
    custom_definition_base: Optional[str] = None
    custom_definition_target: Optional[str] = None
    custom_phonetic: Optional[str] = None
    custom_notes: Optional[str] = None
    custom_tags: Optional[list] = Field(default=None, sa_column=Column(JSON))
    custom_difficulty_level: Optional[DifficultyLevel] = None
    is_favorite: bool = Field(default=False)
    is_modified: bool = Field(default=False)

    # Learning progress
    learning_status: LearningStatus = Field(default=LearningStatus.NOT_STARTED, index=True)
    progress: float = Field(default=0)  # 0-100
    mastery_score: float = Field(default=0)  # 0-100
    review_count: int = Field(default=0)
    amount_of_mistakes: int = Field(default=0)
    correct_streak: int = Field(default=0)
    last_reviewed_at: Optional[datetime] = None
    time_word_was_started_to_learn: Optional[datetime] = None
    time_word_was_learned: Optional[datetime] = None
    next_review_due: Optional[datetime] = None

    # Spaced repetition
    srs_level: int = Field(default=0)
    srs_interval: int = Field(default=0)  # Days until next review
    last_srs_success: Optional[bool] = None
    next_srs_review: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    deleted_at: Optional[datetime] = None  # Soft delete marker

    # Relationships
    user: Optional["User"] = Relationship(back_populates="dictionary_entries")
