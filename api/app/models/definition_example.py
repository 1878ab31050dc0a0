"""
DefinitionExample model.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.definition import Definition


class DefinitionExample(SQLModel, table=True):
    """DefinitionExample table - usage examples of a definition."""
    __tablename__ = "definition_examples"
    __table_args__ = (
        UniqueConstraint("definition_id", "example", name="uq_definition_examples_definition_example"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    definition_id: int = Field(foreign_key="definitions.id", index=True)
    example: str
    language_code: str = Field(foreign_key="languages.code")
    grammatical_note: Optional[str] = None  # e.g. '+ obj'
    source_of_example: Optional[str] = None  # Citation, kept in dictionary markup

    # Relationships
    definition: Optional["Definition"] = Relationship(back_populates="examples")
