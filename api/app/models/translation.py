"""
Translation models.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from app.models.enums import SourceType


class Translation(SQLModel, table=True):
    """Translation table - translated text of a definition or example."""
    __tablename__ = "translations"

    id: Optional[int] = Field(default=None, primary_key=True)
    language_code: str = Field(foreign_key="languages.code", index=True)
    content: str
    source: SourceType = Field(default=SourceType.AI_GENERATED)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class DefinitionTranslation(SQLModel, table=True):
    """Links translations to definitions."""
    __tablename__ = "definition_translations"

    definition_id: int = Field(foreign_key="definitions.id", primary_key=True)
    translation_id: int = Field(foreign_key="translations.id", primary_key=True)


class ExampleTranslation(SQLModel, table=True):
    """Links translations to definition examples."""
    __tablename__ = "example_translations"

    example_id: int = Field(foreign_key="definition_examples.id", primary_key=True)
    translation_id: int = Field(foreign_key="translations.id", primary_key=True)
