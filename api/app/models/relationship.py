"""
Relationship models between words, word entries and definitions.
"""
from sqlmodel import SQLModel, Field
from typing import Optional

from app.models.enums import RelationshipType


class WordToWordRelationship(SQLModel, table=True):
    """Word-level links (e.g. 'run' related to 'ran')."""
    __tablename__ = "word_to_word_relationships"

    from_word_id: int = Field(foreign_key="words.id", primary_key=True)
    to_word_id: int = Field(foreign_key="words.id", primary_key=True)
    type: RelationshipType = Field(primary_key=True)
    description: Optional[str] = None
    order_index: Optional[int] = None


class WordDetailsRelationship(SQLModel, table=True):
    """Entry-level links, e.g. the noun 'child' has plural 'children'."""
    __tablename__ = "word_details_relationships"

    from_word_details_id: int = Field(foreign_key="word_details.id", primary_key=True)
    to_word_details_id: int = Field(foreign_key="word_details.id", primary_key=True)
    type: RelationshipType = Field(primary_key=True)
    description: Optional[str] = None
    order_index: Optional[int] = None


class DefinitionRelationship(SQLModel, table=True):
    """Sense-level links, e.g. synonymous definitions."""
    __tablename__ = "definition_relationships"

    from_definition_id: int = Field(foreign_key="definitions.id", primary_key=True)
    to_definition_id: int = Field(foreign_key="definitions.id", primary_key=True)
    type: RelationshipType = Field(primary_key=True)
    description: Optional[str] = None
    order_index: Optional[int] = None
