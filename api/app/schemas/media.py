from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.models.enums import SourceType


class ImageResponse(BaseModel):
    id: int
    url: str
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AudioResponse(BaseModel):
    id: int
    url: str
    language_code: str
    source: Optional[SourceType] = None
    is_tts: bool
    created_at: datetime

    class Config:
        from_attributes = True


class AttachPexelsPhotoRequest(BaseModel):
    """A photo object as returned by the Pexels search endpoint."""
    photo: Dict[str, Any]


class GenerateAudioRequest(BaseModel):
    quality: str = Field("high", pattern="^(standard|high|premium)$")


class BatchImagesRequest(BaseModel):
    definition_ids: List[int] = Field(..., min_length=1)


class BatchAudioRequest(BaseModel):
    word_details_ids: List[int] = Field(..., min_length=1)
    quality: str = Field("high", pattern="^(standard|high|premium)$")


class BatchAcceptedResponse(BaseModel):
    message: str
    count: int
