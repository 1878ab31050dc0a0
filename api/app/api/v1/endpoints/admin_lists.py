"""
Admin list endpoints: categories and curated word lists.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import Dict, Optional

from app.api.v1.dependencies import get_admin_user
from app.core.database import get_session
from app.models import Category, DifficultyLevel
from app.schemas.lists import (
    CategoryResponse,
    CreateCategoryRequest,
    CreateListRequest,
    ListDetailsResponse,
    ListResponse,
    ListsPage,
    ListWordsRequest,
    UpdateListRequest,
)
from app.services import list_service

router = APIRouter(
    prefix="/admin/lists",
    tags=["admin-lists"],
    dependencies=[Depends(get_admin_user)],
)


def _list_response(session: Session, word_list) -> ListResponse:
    category = session.get(Category, word_list.category_id)
    return list_service.build_list_response(word_list, category.name if category else None)


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    request: CreateCategoryRequest,
    session: Session = Depends(get_session)
):
    category = list_service.create_category(session, request.name, request.description)
    return CategoryResponse.model_validate(category)


@router.get("", response_model=ListsPage)
async def get_all_lists(
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    language_code: Optional[str] = Query(None, max_length=2),
    difficulty_level: Optional[DifficultyLevel] = None,
    is_public: Optional[bool] = None,
    include_deleted: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session)
):
    """Every list, private and soft-deleted ones included on request."""
    return list_service.fetch_all_lists(
        session,
        search=search,
        category_id=category_id,
        language_code=language_code,
        difficulty_level=difficulty_level,
        is_public=is_public,
        include_deleted=include_deleted,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=ListResponse, status_code=status.HTTP_201_CREATED)
async def create_list(
    request: CreateListRequest,
    session: Session = Depends(get_session)
):
    word_list = list_service.create_list_with_words(session, request.model_dump())
    return _list_response(session, word_list)


@router.get("/{list_id}", response_model=ListDetailsResponse)
async def get_list(
    list_id: int,
    session: Session = Depends(get_session)
):
    return list_service.get_list_details(session, list_id)


@router.put("/{list_id}", response_model=ListResponse)
async def update_list(
    list_id: int,
    request: UpdateListRequest,
    session: Session = Depends(get_session)
):
    word_list = list_service.update_list(session, list_id, request.model_dump(exclude_unset=True))
    return _list_response(session, word_list)


@router.delete("/{list_id}", response_model=ListResponse)
async def delete_list(
    list_id: int,
    session: Session = Depends(get_session)
):
    """Soft delete; copies already in user collections are kept."""
    word_list = list_service.delete_list(session, list_id)
    return _list_response(session, word_list)


@router.post("/{list_id}/restore", response_model=ListResponse)
async def restore_list(
    list_id: int,
    session: Session = Depends(get_session)
):
    word_list = list_service.restore_list(session, list_id)
    return _list_response(session, word_list)


@router.post("/{list_id}/words")
async def add_words_to_list(
    list_id: int,
    request: ListWordsRequest,
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    return list_service.add_words_to_list(session, list_id, request.definition_ids)


@router.delete("/{list_id}/words")
async def remove_words_from_list(
    list_id: int,
    request: ListWordsRequest,
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    return list_service.remove_words_from_list(session, list_id, request.definition_ids)
