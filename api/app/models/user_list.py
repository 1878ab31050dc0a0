"""
UserList models.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime

from app.models.enums import DifficultyLevel


class UserList(SQLModel, table=True):
    """UserList table - a list in a user's collection, inherited from a public list or custom."""
    __tablename__ = "user_lists"
    __table_args__ = (
        UniqueConstraint("user_id", "list_id", name="uq_user_lists_user_list"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    list_id: Optional[int] = Field(default=None, foreign_key="lists.id")  # None for custom lists
    base_language_code: str = Field(foreign_key="languages.code")
    target_language_code: str = Field(foreign_key="languages.code")
    is_modified: bool = Field(default=False)
    custom_name_of_list: Optional[str] = None
    custom_description_of_list: Optional[str] = None
    custom_cover_image_url: Optional[str] = None
    custom_difficulty: Optional[DifficultyLevel] = None
    progress: float = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    deleted_at: Optional[datetime] = None  # Soft delete marker


class UserListWord(SQLModel, table=True):
    """UserListWord table - user dictionary entries of a user list, in display order."""
    __tablename__ = "user_list_words"

    user_list_id: int = Field(foreign_key="user_lists.id", primary_key=True)
    user_dictionary_id: int = Field(foreign_key="user_dictionary.id", primary_key=True)
    order_index: int = Field(default=0)
