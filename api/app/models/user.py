"""
User model.
"""
from sqlmodel import SQLModel, Field, Relationship, Column, JSON
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
import hashlib

from app.models.enums import UserRole

if TYPE_CHECKING:
    from app.models.user_dictionary import UserDictionary


class User(SQLModel, table=True):
    """User table - stores accounts, language pair and preferences."""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None)  # Display name
    email: str = Field(unique=True, index=True)  # Email address
    password: str  # Hashed password
    base_language_code: str = Field(foreign_key="languages.code")  # Language the user knows
    target_language_code: str = Field(foreign_key="languages.code")  # Language being learned
    role: UserRole = Field(default=UserRole.USER)
    status: str = Field(default="active")  # active, suspended, deleted
    is_verified: bool = Field(default=False)
    profile_picture_url: Optional[str] = None
    settings: Optional[dict] = Field(default=None, sa_column=Column(JSON))  # UI preferences
    study_preferences: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None
    deleted_at: Optional[datetime] = None  # Soft delete marker

    # Relationships
    dictionary_entries: List["UserDictionary"] = Relationship(back_populates="user")

    @staticmethod
    def hash_password(password: str) -> str:
        """Simple password hashing using SHA256."""
        return hashlib.sha256(password.encode()).hexdigest()

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return self.password == self.hash_password(password)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
