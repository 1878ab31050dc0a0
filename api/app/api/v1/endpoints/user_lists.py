"""
User list endpoints: lists in the caller's collection.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import Dict, List, Optional

from app.core.database import get_session
from app.schemas.user_lists import (
    AddListToCollectionRequest,
    AddWordToUserListRequest,
    CreateCustomListRequest,
    ReorderWordsRequest,
    UpdateUserListRequest,
    UserListResponse,
    UserListsResponse,
    UserListWordItem,
)
from app.services import user_list_service

router = APIRouter(prefix="/user-lists", tags=["user-lists"])


@router.get("", response_model=UserListsResponse)
async def get_user_lists(
    user_id: int,
    search: Optional[str] = None,
    include_custom: bool = True,
    include_inherited: bool = True,
    session: Session = Depends(get_session)
):
    return user_list_service.get_user_lists(
        session, user_id, search=search, include_custom=include_custom, include_inherited=include_inherited
    )


@router.post("", response_model=UserListResponse, status_code=status.HTTP_201_CREATED)
async def add_list_to_collection(
    user_id: int,
    request: AddListToCollectionRequest,
    session: Session = Depends(get_session)
):
    """Copy a public list into the caller's collection."""
    user_list = user_list_service.add_list_to_user_collection(
        session, user_id, request.list_id, request.base_language_code, request.target_language_code
    )
    return user_list_service.build_user_list_response(session, user_list)


@router.post("/custom", response_model=UserListResponse, status_code=status.HTTP_201_CREATED)
async def create_custom_list(
    user_id: int,
    request: CreateCustomListRequest,
    session: Session = Depends(get_session)
):
    user_list = user_list_service.create_custom_user_list(session, user_id, request.model_dump())
    return user_list_service.build_user_list_response(session, user_list)


@router.put("/{user_list_id}", response_model=UserListResponse)
async def update_user_list(
    user_list_id: int,
    user_id: int,
    request: UpdateUserListRequest,
    session: Session = Depends(get_session)
):
    user_list = user_list_service.update_user_list(
        session, user_id, user_list_id, request.model_dump(exclude_unset=True)
    )
    return user_list_service.build_user_list_response(session, user_list)


@router.delete("/{user_list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_list_from_collection(
    user_list_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    user_list_service.remove_list_from_user_collection(session, user_id, user_list_id)
    return None


@router.get("/{user_list_id}/words", response_model=List[UserListWordItem])
async def get_user_list_words(
    user_list_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    return user_list_service.get_user_list_words(session, user_id, user_list_id)


@router.post("/{user_list_id}/words", status_code=status.HTTP_201_CREATED)
async def add_word_to_user_list(
    user_list_id: int,
    user_id: int,
    request: AddWordToUserListRequest,
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    list_word = user_list_service.add_word_to_user_list(
        session, user_id, user_list_id, request.user_dictionary_id
    )
    return {
        'user_list_id': list_word.user_list_id,
        'user_dictionary_id': list_word.user_dictionary_id,
        'order_index': list_word.order_index,
    }


@router.delete("/{user_list_id}/words/{user_dictionary_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_word_from_user_list(
    user_list_id: int,
    user_dictionary_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    user_list_service.remove_word_from_user_list(session, user_id, user_list_id, user_dictionary_id)
    return None


@router.put("/{user_list_id}/words/order")
async def reorder_user_list_words(
    user_list_id: int,
    user_id: int,
    request: ReorderWordsRequest,
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    updated = user_list_service.reorder_user_list_words(
        session, user_id, user_list_id, [(w.user_dictionary_id, w.order_index) for w in request.words]
    )
    return {'updated': updated}
