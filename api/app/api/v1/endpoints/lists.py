"""
Public list endpoints: categories and curated lists users can pick from.
"""
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import List, Optional

from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.models import DifficultyLevel
from app.schemas.lists import CategoryResponse, ListDetailsResponse, ListsPage
from app.services import list_service

router = APIRouter(prefix="/lists", tags=["lists"])


@router.get("/categories", response_model=List[CategoryResponse])
async def get_categories(
    session: Session = Depends(get_session)
):
    return [CategoryResponse.model_validate(c) for c in list_service.get_categories(session)]


@router.get("", response_model=ListsPage)
async def get_public_lists(
    user_id: Optional[int] = None,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    language_code: Optional[str] = Query(None, max_length=2),
    difficulty_level: Optional[DifficultyLevel] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session)
):
    """Public lists; with user_id, lists already in that user's collection are flagged."""
    return list_service.get_available_public_lists(
        session,
        user_id,
        search=search,
        category_id=category_id,
        language_code=language_code,
        difficulty_level=difficulty_level,
        page=page,
        page_size=page_size,
    )


@router.get("/{list_id}", response_model=ListDetailsResponse)
async def get_public_list(
    list_id: int,
    session: Session = Depends(get_session)
):
    word_list = list_service.get_list_or_404(session, list_id)
    if not word_list.is_public:
        raise NotFoundError(f"List with id {list_id} not found")
    return list_service.get_list_details(session, list_id)
