from typing import List

from pydantic import BaseModel


class LanguageResponse(BaseModel):
    code: str
    name: str
    word_count: int = 0

    class Config:
        from_attributes = True


class LanguagesResponse(BaseModel):
    """Supported languages ordered by code, with how many headwords each has."""
    languages: List[LanguageResponse]
    total_count: int
