"""
Shared endpoint dependencies.
"""
from fastapi import Depends, Query
from sqlmodel import Session

from app.core.database import get_session
from app.models import User
from app.services.user_service import require_admin


def get_admin_user(
    admin_id: int = Query(..., description="Id of the admin performing the request"),
    session: Session = Depends(get_session),
) -> User:
    """Resolve ``admin_id`` to an admin user; non-admins get 403."""
    return require_admin(session, admin_id)
