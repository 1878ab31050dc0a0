"""
Definition models.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

from app.models.enums import SourceType

if TYPE_CHECKING:
    from app.models.definition_example import DefinitionExample


class Definition(SQLModel, table=True):
    """Definition table - a sense text, shared by the word entries it links to."""
    __tablename__ = "definitions"
    __table_args__ = (
        UniqueConstraint("definition", "language_code", "source", name="uq_definitions_text_language_source"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    definition: str  # May carry {it}/{bc} markup from the source dictionary
    language_code: str = Field(foreign_key="languages.code", index=True)
    source: SourceType = Field(default=SourceType.USER)
    image_id: Optional[int] = Field(default=None, foreign_key="images.id")
    subject_status_labels: Optional[str] = None  # e.g. 'medicine | British'
    general_labels: Optional[str] = None  # e.g. 'informal'
    grammatical_note: Optional[str] = None  # e.g. 'count | plural'
    usage_note: Optional[str] = None
    is_in_short_def: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    examples: List["DefinitionExample"] = Relationship(back_populates="definition")


class WordDefinition(SQLModel, table=True):
    """WordDefinition table - links word entries to definitions."""
    __tablename__ = "word_definitions"

    word_details_id: int = Field(foreign_key="word_details.id", primary_key=True)
    definition_id: int = Field(foreign_key="definitions.id", primary_key=True)
    is_primary: bool = Field(default=False)
