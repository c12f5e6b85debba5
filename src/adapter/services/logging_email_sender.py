import logging
from datetime import datetime

from src.app.services.email_sender import EmailSender
from src.app.utils.redact import mask_email

logger = logging.getLogger(__name__)


class LoggingEmailSender(EmailSender):
    """
    EmailSender that only logs delivery.

    NOTE: Real delivery (SMTP / provider API) plugs in behind EmailSender.
    Secrets are never written to the log.
    """

    def __init__(self, app_name: str):
        self.app_name = app_name

    async def _deliver(self, kind: str, to: str, expires_at: datetime) -> None:
        logger.info(
            f"[{self.app_name}] {kind} email queued for {mask_email(to)}, "
            f"expires at {expires_at.isoformat()}"
        )

    async def send_email_verification(
        self, to: str, token: str, code: str, expires_at: datetime
    ) -> None:
        await self._deliver("email verification", to, expires_at)

    async def send_password_reset(
        self, to: str, token: str, code: str, expires_at: datetime
    ) -> None:
        await self._deliver("password reset", to, expires_at)

    async def send_login_challenge(
        self, to: str, token: str, code: str, expires_at: datetime
    ) -> None:
        await self._deliver("login verification", to, expires_at)
