"""
WordList models.
"""
from sqlmodel import SQLModel, Field, Relationship, Column, JSON
from sqlalchemy import UniqueConstraint
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from app.models.enums import DifficultyLevel

if TYPE_CHECKING:
    from app.models.category import Category


class WordList(SQLModel, table=True):
    """List table - curated list of definitions that users can add to their collection."""
    __tablename__ = "lists"
    __table_args__ = (
        UniqueConstraint("name", "category_id", name="uq_lists_name_category"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    category_id: int = Field(foreign_key="categories.id", index=True)
    base_language_code: Optional[str] = Field(default=None, foreign_key="languages.code")
    target_language_code: Optional[str] = Field(default=None, foreign_key="languages.code")
    is_public: bool = Field(default=False)
    tags: Optional[list] = Field(default=None, sa_column=Column(JSON))
    cover_image_url: Optional[str] = None
    difficulty_level: Optional[DifficultyLevel] = None
    word_count: int = Field(default=0)
    learned_word_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    deleted_at: Optional[datetime] = None  # Soft delete marker

    # Relationships
    category: Optional["Category"] = Relationship(back_populates="lists")


class ListWord(SQLModel, table=True):
    """ListWord table - definitions of a list, in display order."""
    __tablename__ = "list_words"

    list_id: int = Field(foreign_key="lists.id", primary_key=True)
    definition_id: int = Field(foreign_key="definitions.id", primary_key=True)
    order_index: int = Field(default=0)
