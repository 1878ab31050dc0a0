from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.models.enums import UserRole


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class RegisterRequest(BaseModel):
    """Registration request schema."""
    name: Optional[str] = Field(None, max_length=200, description="Display name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=6, description="Password (minimum 6 characters)")
    base_language_code: str = Field(..., max_length=2, description="Language the user already speaks (e.g., 'en')")
    target_language_code: str = Field(..., max_length=2, description="Language being learned (e.g., 'da')")


class UserResponse(BaseModel):
    """User response schema (without password)."""
    id: int
    name: Optional[str] = None
    email: str
    base_language_code: str
    target_language_code: str
    role: UserRole
    status: str
    is_verified: bool = False
    profile_picture_url: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    study_preferences: Optional[Dict[str, Any]] = None
    created_at: datetime
    last_login: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UpdateProfileRequest(BaseModel):
    """Update profile request schema."""
    name: Optional[str] = Field(None, max_length=200)
    base_language_code: Optional[str] = Field(None, max_length=2)
    target_language_code: Optional[str] = Field(None, max_length=2)
    profile_picture_url: Optional[str] = None


class UpdateSettingsRequest(BaseModel):
    """Settings are merged into the stored JSON, not replaced."""
    settings: Optional[Dict[str, Any]] = None
    study_preferences: Optional[Dict[str, Any]] = None


class AuthResponse(BaseModel):
    """Authentication response schema."""
    user: UserResponse
    message: str


class AdminUsersResponse(BaseModel):
    users: List[UserResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class UpdateRoleRequest(BaseModel):
    role: UserRole = Field(..., description="New role for the user")
