"""
Dictionary endpoints: search and word details.
"""
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import Optional

from app.core.database import get_session
from app.schemas.dictionary import SearchResponse, WordFullResponse
from app.services import dictionary_service

router = APIRouter(prefix="/dictionary", tags=["dictionary"])


@router.get("/search", response_model=SearchResponse)
async def search_words(
    q: str = Query(..., min_length=1, description="Word or prefix to search for"),
    language_code: str = Query(..., max_length=2),
    user_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session)
):
    """
    Search words in a language.

    When user_id is given, each result tells whether its definitions are
    already in that user's dictionary.
    """
    return dictionary_service.search_words(
        session, q, language_code, user_id=user_id, page=page, page_size=page_size
    )


@router.get("/words/{word_id}", response_model=WordFullResponse)
async def get_word_details(
    word_id: int,
    session: Session = Depends(get_session)
):
    """Get a word with its entries, definitions, examples, audio and relationships."""
    return dictionary_service.get_word_details(session, word_id)
