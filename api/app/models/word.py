"""
Word model.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from app.models.language import Language
    from app.models.word_details import WordDetails


class Word(SQLModel, table=True):
    """Word table - a headword in one language."""
    __tablename__ = "words"
    __table_args__ = (
        UniqueConstraint("word", "language_code", name="uq_words_word_language"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    word: str = Field(index=True)
    language_code: str = Field(foreign_key="languages.code", index=True)
    phonetic_general: Optional[str] = None  # IPA or dictionary pronunciation
    frequency_general: Optional[int] = None  # Rank in general frequency list (lower is more common)
    is_highlighted: bool = Field(default=False)
    etymology: Optional[str] = None
    source_entity_id: Optional[str] = None  # Identifier of the entry at its source
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    language: Optional["Language"] = Relationship(back_populates="words")
    details: List["WordDetails"] = Relationship(back_populates="word")
