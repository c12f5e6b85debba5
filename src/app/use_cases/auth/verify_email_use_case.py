"""
Verify Email Use Case

Consumes an email verification challenge (link token + code).
"""

from src.app.services.challenge_service import ChallengeService
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Result, Return
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, ChallengePurpose
from .dtos import ChallengeCommand, StatusResponse


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token locates the challenge, code is checked against its hash
    - Challenge is consumed together with setting email_verified_at
    - Wrong codes count against the attempt cap
    """

    def __init__(self, uow: UnitOfWork, challenges: ChallengeService):
        self.uow = uow
        self.challenges = challenges

    async def execute(self, command: ChallengeCommand) -> Result[StatusResponse]:
        """
        Errors:
            - INVALID_TOKEN: unknown, consumed or wrong code
            - EXPIRED_TOKEN: challenge expired
            - TOO_MANY_REQUESTS: attempt cap reached
        """
        async with self.uow:
            validated = await self.challenges.validate(
                self.uow,
                ChallengePurpose.email_verification,
                command.code,
                token=command.token,
            )
            if validated.is_err():
                return Return.err(validated.error)

            user_id = validated.value.user_id
            await self.uow.users.mark_email_verified(user_id, utcnow())

            await self.uow.audit_events.create(
                AuditEvent(user_id=user_id, action="email_verified", event_metadata={})
            )
            await self.uow.commit()

        return Return.ok(StatusResponse(status="verified", message="Email successfully verified"))
