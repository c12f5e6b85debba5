from abc import abstractmethod
from typing import Optional

from src.app.repositories.challenge_repository import IChallengeRepository
from src.domain.entities import PasswordReset


class IPasswordResetRepository(IChallengeRepository):
    """PasswordReset repository interface - application layer"""

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordReset]:
        """Get password reset by token hash"""
        pass
