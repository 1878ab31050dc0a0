"""
Image model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Image(SQLModel, table=True):
    """Image table - pictures illustrating definitions."""
    __tablename__ = "images"

    id: Optional[int] = Field(default=None, primary_key=True)
    url: str = Field(unique=True)  # Pexels URL or /assets/images/... for uploads
    description: Optional[str] = None  # Alt text
    created_at: datetime = Field(default_factory=datetime.utcnow)
