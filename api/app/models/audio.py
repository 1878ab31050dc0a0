"""
Audio models.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime

from app.models.enums import SourceType


class Audio(SQLModel, table=True):
    """Audio table - pronunciation recordings and synthesized speech."""
    __tablename__ = "audio"
    __table_args__ = (
        UniqueConstraint("url", "language_code", name="uq_audio_url_language"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    url: str  # Remote URL or /assets/audio/... for generated files
    language_code: str = Field(foreign_key="languages.code")
    source: Optional[SourceType] = None
    is_tts: bool = Field(default=False)  # Generated by text-to-speech
    created_at: datetime = Field(default_factory=datetime.utcnow)


class WordDetailsAudio(SQLModel, table=True):
    """Links audio to word entries."""
    __tablename__ = "word_details_audio"

    word_details_id: int = Field(foreign_key="word_details.id", primary_key=True)
    audio_id: int = Field(foreign_key="audio.id", primary_key=True)
    is_primary: bool = Field(default=False)


class DefinitionAudio(SQLModel, table=True):
    """Links audio to definitions."""
    __tablename__ = "definition_audio"

    definition_id: int = Field(foreign_key="definitions.id", primary_key=True)
    audio_id: int = Field(foreign_key="audio.id", primary_key=True)
    is_primary: bool = Field(default=False)


class ExampleAudio(SQLModel, table=True):
    """Links audio to definition examples."""
    __tablename__ = "example_audio"

    example_id: int = Field(foreign_key="definition_examples.id", primary_key=True)
    audio_id: int = Field(foreign_key="audio.id", primary_key=True)
    is_primary: bool = Field(default=False)
