from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import UserDevice


class IUserDeviceRepository(ABC):
    """UserDevice repository interface - application layer"""

    @abstractmethod
    async def get(self, user_id: UUID, device_token_hash: str) -> Optional[UserDevice]:
        """Get a trusted device of a user"""
        pass

    @abstractmethod
    async def trust(
        self,
        user_id: UUID,
        device_token_hash: str,
        user_agent: Optional[str],
        ip: Optional[str],
    ) -> UserDevice:
        """Insert or refresh a trusted device"""
        pass

    @abstractmethod
    async def touch(self, device: UserDevice) -> None:
        """Update last_seen_at of a trusted device"""
        pass
