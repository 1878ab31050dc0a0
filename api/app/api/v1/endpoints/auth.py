from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import Any, Dict

from app.core.database import get_session
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UpdateSettingsRequest,
    UserResponse,
)
from app.services import user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    session: Session = Depends(get_session)
):
    """Register a new user."""
    user = user_service.register_user(
        session,
        email=register_data.email,
        password=register_data.password,
        base_language_code=register_data.base_language_code,
        target_language_code=register_data.target_language_code,
        name=register_data.name,
    )
    return AuthResponse(user=UserResponse.model_validate(user), message="Registration successful")


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    session: Session = Depends(get_session)
):
    """Login with email and password."""
    user = user_service.login_user(session, login_data.email, login_data.password)
    return AuthResponse(user=UserResponse.model_validate(user), message="Login successful")


@router.get("/me", response_model=UserResponse)
async def get_me(
    user_id: int,
    session: Session = Depends(get_session)
):
    return UserResponse.model_validate(user_service.get_user(session, user_id))


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    user_id: int,
    request: UpdateProfileRequest,
    session: Session = Depends(get_session)
):
    """Update name, languages or profile picture."""
    user = user_service.update_profile(session, user_id, request.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.put("/settings", response_model=UserResponse)
async def update_settings(
    user_id: int,
    request: UpdateSettingsRequest,
    session: Session = Depends(get_session)
):
    user = user_service.update_settings(session, user_id, request.settings, request.study_preferences)
    return UserResponse.model_validate(user)


@router.delete("/me/data")
async def delete_my_data(
    user_id: int,
    session: Session = Depends(get_session)
) -> Dict[str, Any]:
    """Delete the caller's learning data (dictionary, lists, sessions); the account stays."""
    return user_service.delete_user_data(session, user_id)
