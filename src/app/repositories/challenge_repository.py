from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID


class IChallengeRepository(ABC):
    """
    Storage contract shared by password resets and one-time codes.

    Records expose: id, user_id, code_hash, expires_at, attempt_count,
    consumed_at. State changes go through conditional updates only, so the
    returned booleans tell the caller whether it won the race.
    """

    @abstractmethod
    async def issue(
        self,
        user_id: UUID,
        purpose: str,
        code_hash: str,
        expires_at: datetime,
        token_hash: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Persist a fresh challenge record"""
        pass

    @abstractmethod
    async def find_by_token_hash(self, purpose: str, token_hash: str) -> Optional[Any]:
        """Latest record for (purpose, token_hash), whatever its state"""
        pass

    @abstractmethod
    async def find_latest_for_user(self, user_id: UUID, purpose: str) -> Optional[Any]:
        """Latest record for (user_id, purpose), whatever its state"""
        pass

    @abstractmethod
    async def supersede_active(self, user_id: UUID, purpose: str, now: datetime) -> int:
        """Mark every unconsumed record for (user_id, purpose) consumed. Returns count."""
        pass

    @abstractmethod
    async def increment_attempt(self, record_id: UUID, max_attempts: int) -> bool:
        """
        attempt_count += 1 where the record is unconsumed and below the cap.
        Returns True if a row was updated.
        """
        pass

    @abstractmethod
    async def consume(self, record_id: UUID, max_attempts: int, now: datetime) -> bool:
        """
        Set consumed_at where unconsumed, unexpired and below the cap.
        Returns True only for the single caller that consumed it.
        """
        pass
