"""
Request Password Reset Use Case

Issues a password reset challenge and emails the link token and code.
"""

import logging

from src.app.handlers.base import RequestContext
from src.app.services.challenge_service import ChallengeService
from src.app.services.email_sender import EmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.app.utils.redact import mask_email
from src.core.result import Result, Return
from src.domain.entities import AuditEvent, ChallengePurpose
from .dtos import StatusResponse
from .lookup import find_user

logger = logging.getLogger(__name__)

_SENT = StatusResponse(
    status="sent",
    message="If the account exists, a password reset email has been sent",
)


class RequestPasswordResetUseCase:
    """
    Use case for requesting a password reset.

    Business Rules:
    - Identifier is an email or a username
    - No account enumeration: unknown identifiers get the same response
    - Earlier active reset records of the user are superseded
    - Requesting ip/user agent are stored with the record
    """

    def __init__(self, uow: UnitOfWork, challenges: ChallengeService, email_sender: EmailSender):
        self.uow = uow
        self.challenges = challenges
        self.email_sender = email_sender

    async def execute(self, identifier: str, request: RequestContext) -> Result[StatusResponse]:
        async with self.uow:
            user = await find_user(self.uow, identifier)
            if user is None:
                logger.info("Password reset requested for unknown identifier")
                return Return.ok(_SENT)

            issued = await self.challenges.issue(
                self.uow,
                user.id,
                ChallengePurpose.password_reset,
                meta={"sent_to": user.email, "request": request.as_meta()},
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    profile_id=user.profile_id,
                    action="password_reset_requested",
                    event_metadata={"sent_to": mask_email(user.email)},
                )
            )
            await self.uow.commit()

        await self.email_sender.send_password_reset(
            to=user.email, token=issued.token, code=issued.code, expires_at=issued.expires_at
        )
        return Return.ok(_SENT)
