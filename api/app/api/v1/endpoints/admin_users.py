"""
Admin user endpoints.
"""
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import Any, Dict, Optional

from app.api.v1.dependencies import get_admin_user
from app.core.database import get_session
from app.models import User, UserRole
from app.schemas.auth import AdminUsersResponse, UpdateRoleRequest, UserResponse
from app.services import user_service

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get("", response_model=AdminUsersResponse)
async def list_users(
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    include_deleted: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: User = Depends(get_admin_user),
    session: Session = Depends(get_session)
):
    result = user_service.list_users(
        session, search=search, role=role, include_deleted=include_deleted, page=page, page_size=page_size
    )
    result['users'] = [UserResponse.model_validate(u) for u in result['users']]
    return result


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    admin: User = Depends(get_admin_user),
    session: Session = Depends(get_session)
) -> Dict[str, Any]:
    """A user with counts of their dictionary words and lists."""
    result = user_service.get_user_with_stats(session, user_id)
    result['user'] = UserResponse.model_validate(result['user']).model_dump()
    return result


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    request: UpdateRoleRequest,
    admin: User = Depends(get_admin_user),
    session: Session = Depends(get_session)
):
    return UserResponse.model_validate(user_service.update_user_role(session, user_id, request.role))


@router.delete("/{user_id}", response_model=UserResponse)
async def delete_user(
    user_id: int,
    admin: User = Depends(get_admin_user),
    session: Session = Depends(get_session)
):
    """Soft delete; the account can be restored."""
    return UserResponse.model_validate(user_service.soft_delete_user(session, user_id))


@router.post("/{user_id}/restore", response_model=UserResponse)
async def restore_user(
    user_id: int,
    admin: User = Depends(get_admin_user),
    session: Session = Depends(get_session)
):
    return UserResponse.model_validate(user_service.restore_user(session, user_id))


@router.delete("/{user_id}/data")
async def delete_user_data(
    user_id: int,
    admin: User = Depends(get_admin_user),
    session: Session = Depends(get_session)
) -> Dict[str, int]:
    """Wipe a user's learning data, keeping the account."""
    return user_service.delete_user_data(session, user_id)
