from abc import ABC, abstractmethod
from datetime import datetime


class EmailSender(ABC):
    """Outbound email collaborator - delivers raw challenge secrets to users"""

    @abstractmethod
    async def send_email_verification(
        self, to: str, token: str, code: str, expires_at: datetime
    ) -> None:
        pass

    @abstractmethod
    async def send_password_reset(
        self, to: str, token: str, code: str, expires_at: datetime
    ) -> None:
        pass

    @abstractmethod
    async def send_login_challenge(
        self, to: str, token: str, code: str, expires_at: datetime
    ) -> None:
        pass
