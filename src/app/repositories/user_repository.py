from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update_password(self, user_id: UUID, password_hash: str) -> bool:
        """Replace the stored password hash. Returns True if the user existed."""
        pass

    @abstractmethod
    async def mark_email_verified(self, user_id: UUID, verified_at: datetime) -> bool:
        """Set email_verified_at if not already set"""
        pass

    @abstractmethod
    async def touch_last_login(self, user_id: UUID, logged_in_at: datetime) -> None:
        """Record the latest successful login"""
        pass
