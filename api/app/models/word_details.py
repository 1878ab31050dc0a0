"""
WordDetails model.
"""
from sqlmodel import SQLModel, Field, Relationship, Column, JSON
from sqlalchemy import UniqueConstraint
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from app.models.enums import PartOfSpeech, Gender, SourceType

if TYPE_CHECKING:
    from app.models.word import Word


class WordDetails(SQLModel, table=True):
    """WordDetails table - one part-of-speech entry of a word."""
    __tablename__ = "word_details"
    __table_args__ = (
        UniqueConstraint("word_id", "part_of_speech", "variant", name="uq_word_details_word_pos_variant"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    word_id: int = Field(foreign_key="words.id", index=True)
    part_of_speech: PartOfSpeech = Field(default=PartOfSpeech.UNDEFINED)
    variant: str = Field(default="")  # Homograph number, e.g. '2' for 'bank:2'
    gender: Optional[Gender] = None
    phonetic: Optional[str] = None
    forms: Optional[list] = Field(default=None, sa_column=Column(JSON))  # Raw inflected forms
    frequency: Optional[int] = None  # Rank within the part of speech
    is_plural: bool = Field(default=False)
    source: Optional[SourceType] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    word: Optional["Word"] = Relationship(back_populates="details")
