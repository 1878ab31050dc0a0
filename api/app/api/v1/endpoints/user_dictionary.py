"""
User dictionary endpoints: the caller's own word collection and progress.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import List, Optional

from app.core.database import get_session
from app.models import LearningStatus
from app.schemas.user_dictionary import (
    AddToUserDictionaryRequest,
    RecordReviewRequest,
    UpdateCustomDataRequest,
    UpdateLearningStatusRequest,
    UserDictionaryItem,
    UserDictionaryPage,
    UserDictionaryStats,
)
from app.services import user_dictionary_service

router = APIRouter(prefix="/user-dictionary", tags=["user-dictionary"])


@router.get("", response_model=UserDictionaryPage)
async def get_user_dictionary(
    user_id: int,
    learning_status: Optional[List[LearningStatus]] = Query(None),
    search: Optional[str] = None,
    is_favorite: Optional[bool] = None,
    is_modified: Optional[bool] = None,
    needs_review: Optional[bool] = None,
    sort_by: str = Query("created_at", description="Field to sort by, e.g. created_at, progress or next_review_due"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session)
):
    return user_dictionary_service.get_user_dictionary(
        session,
        user_id,
        learning_status=learning_status,
        search=search,
        is_favorite=is_favorite,
        is_modified=is_modified,
        needs_review=needs_review,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=UserDictionaryItem, status_code=status.HTTP_201_CREATED)
async def add_to_user_dictionary(
    user_id: int,
    request: AddToUserDictionaryRequest,
    session: Session = Depends(get_session)
):
    """Add a definition to the caller's dictionary."""
    entry = user_dictionary_service.add_definition_to_user_dictionary(
        session,
        user_id,
        request.definition_id,
        request.base_language_code,
        request.target_language_code,
    )
    return user_dictionary_service.get_user_dictionary_item(session, user_id, entry.id)


@router.get("/stats", response_model=UserDictionaryStats)
async def get_user_dictionary_stats(
    user_id: int,
    session: Session = Depends(get_session)
):
    return user_dictionary_service.get_user_dictionary_stats(session, user_id)


@router.get("/{user_dictionary_id}", response_model=UserDictionaryItem)
async def get_user_dictionary_item(
    user_dictionary_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    return user_dictionary_service.get_user_dictionary_item(session, user_id, user_dictionary_id)


@router.put("/{user_dictionary_id}/status", response_model=UserDictionaryItem)
async def update_learning_status(
    user_dictionary_id: int,
    user_id: int,
    request: UpdateLearningStatusRequest,
    session: Session = Depends(get_session)
):
    user_dictionary_service.update_learning_status(
        session,
        user_id,
        user_dictionary_id,
        request.learning_status,
        progress=request.progress,
        mastery_score=request.mastery_score,
        next_review_due=request.next_review_due,
    )
    return user_dictionary_service.get_user_dictionary_item(session, user_id, user_dictionary_id)


@router.post("/{user_dictionary_id}/favorite", response_model=UserDictionaryItem)
async def toggle_favorite(
    user_dictionary_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    user_dictionary_service.toggle_favorite(session, user_id, user_dictionary_id)
    return user_dictionary_service.get_user_dictionary_item(session, user_id, user_dictionary_id)


@router.put("/{user_dictionary_id}/custom", response_model=UserDictionaryItem)
async def update_custom_data(
    user_dictionary_id: int,
    user_id: int,
    request: UpdateCustomDataRequest,
    session: Session = Depends(get_session)
):
    """Set the caller's own definition, phonetic, notes, tags or difficulty."""
    user_dictionary_service.update_custom_data(
        session, user_id, user_dictionary_id, request.model_dump(exclude_unset=True)
    )
    return user_dictionary_service.get_user_dictionary_item(session, user_id, user_dictionary_id)


@router.post("/{user_dictionary_id}/review", response_model=UserDictionaryItem)
async def record_review(
    user_dictionary_id: int,
    user_id: int,
    request: RecordReviewRequest,
    session: Session = Depends(get_session)
):
    """Record a flashcard answer and reschedule the word."""
    user_dictionary_service.record_review(
        session, user_id, user_dictionary_id, request.is_correct, request.response_time_ms
    )
    return user_dictionary_service.get_user_dictionary_item(session, user_id, user_dictionary_id)


@router.delete("/{user_dictionary_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_user_dictionary(
    user_dictionary_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    user_dictionary_service.remove_from_user_dictionary(session, user_id, user_dictionary_id)
    return None
