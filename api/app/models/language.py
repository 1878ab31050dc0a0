"""
Language model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.word import Word


class Language(SQLModel, table=True):
    """Language table - stores supported languages."""
    __tablename__ = "languages"

    code: str = Field(primary_key=True, max_length=2)  # e.g., 'en', 'da', 'ru'
    name: str  # English, Danish, Russian, etc.

    # Relationships
    words: List["Word"] = Relationship(back_populates="language")
