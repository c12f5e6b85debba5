"""
Request Email Verification Use Case

Re-issues the email verification challenge.
"""

from src.app.handlers.base import RequestContext
from src.app.services.challenge_service import ChallengeService
from src.app.services.email_sender import EmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Result, Return
from src.domain.entities import ChallengePurpose
from .dtos import StatusResponse

_SENT = StatusResponse(
    status="sent",
    message="If the account exists and is not verified, a verification email has been sent",
)


class RequestEmailVerificationUseCase:
    """
    Use case for re-sending email verification.

    Business Rules:
    - No email enumeration (same response for unknown or verified emails)
    - The previous verification challenge is superseded
    """

    def __init__(self, uow: UnitOfWork, challenges: ChallengeService, email_sender: EmailSender):
        self.uow = uow
        self.challenges = challenges
        self.email_sender = email_sender

    async def execute(self, email: str, request: RequestContext) -> Result[StatusResponse]:
        email = email.strip().lower()

        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if user is None or user.email_verified_at is not None:
                return Return.ok(_SENT)

            issued = await self.challenges.issue(
                self.uow,
                user.id,
                ChallengePurpose.email_verification,
                meta={"request": request.as_meta()},
            )
            await self.uow.commit()

        await self.email_sender.send_email_verification(
            to=user.email, token=issued.token, code=issued.code, expires_at=issued.expires_at
        )
        return Return.ok(_SENT)
