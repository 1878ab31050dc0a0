"""
Practice endpoints: typing practice sessions.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.database import get_session
from app.schemas.practice import (
    CreatePracticeSessionRequest,
    PracticeSessionResponse,
    PracticeWord,
    SessionCompletionResponse,
    SessionHistoryPage,
    SessionProgressResponse,
    SessionResumeResponse,
    SrsStatistics,
    ValidateTypingRequest,
    ValidateTypingResponse,
)
from app.services import practice_service

router = APIRouter(prefix="/practice", tags=["practice"])


@router.post("/sessions", response_model=PracticeSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_practice_session(
    user_id: int,
    request: CreatePracticeSessionRequest,
    session: Session = Depends(get_session)
):
    """Start a session with the words the caller reviewed least recently."""
    return practice_service.create_practice_session(
        session,
        user_id,
        user_list_id=request.user_list_id,
        list_id=request.list_id,
        difficulty_level=request.difficulty_level,
        words_count=request.words_count,
        include_statuses=request.include_statuses,
    )


@router.get("/sessions", response_model=SessionHistoryPage)
async def get_session_history(
    user_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session)
):
    return practice_service.get_session_history(session, user_id, page=page, page_size=page_size)


@router.post("/sessions/{session_id}/validate", response_model=ValidateTypingResponse)
async def validate_typing(
    session_id: int,
    user_id: int,
    request: ValidateTypingRequest,
    session: Session = Depends(get_session)
):
    """Check a typed word and update the caller's progress on it."""
    return practice_service.validate_typing(
        session,
        user_id,
        session_id,
        request.user_dictionary_id,
        request.user_input,
        request.response_time_ms,
    )


@router.post("/sessions/{session_id}/complete", response_model=SessionCompletionResponse)
async def complete_practice_session(
    session_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    return practice_service.complete_practice_session(session, user_id, session_id)


@router.get("/sessions/{session_id}/progress", response_model=SessionProgressResponse)
async def get_session_progress(
    session_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    return practice_service.get_session_progress(session, user_id, session_id)


@router.post("/sessions/{session_id}/cancel", response_model=SessionProgressResponse)
async def cancel_practice_session(
    session_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    """End a session without a score. Answers already given are kept."""
    return practice_service.cancel_practice_session(session, user_id, session_id)


@router.get("/sessions/{session_id}/resume", response_model=SessionResumeResponse)
async def resume_practice_session(
    session_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    return practice_service.resume_practice_session(session, user_id, session_id)


@router.get("/srs/due", response_model=List[PracticeWord])
async def get_words_for_srs_review(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session)
):
    """Entries whose spaced-repetition review is due, or that were never reviewed."""
    return practice_service.get_words_for_srs_review(session, user_id, limit=limit)


@router.get("/srs/statistics", response_model=SrsStatistics)
async def get_srs_statistics(
    user_id: int,
    session: Session = Depends(get_session)
):
    return practice_service.get_srs_statistics(session, user_id)
