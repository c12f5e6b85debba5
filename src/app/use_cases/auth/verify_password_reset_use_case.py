"""
Verify Password Reset Use Case

Checks a reset token and code without consuming them, so a client can
confirm the code before asking for the new password.
"""

from src.app.services.challenge_service import ChallengeService
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Result, Return
from src.domain.entities import ChallengePurpose
from .dtos import ChallengeCommand, StatusResponse


class VerifyPasswordResetUseCase:
    def __init__(self, uow: UnitOfWork, challenges: ChallengeService):
        self.uow = uow
        self.challenges = challenges

    async def execute(self, command: ChallengeCommand) -> Result[StatusResponse]:
        async with self.uow:
            validated = await self.challenges.validate(
                self.uow,
                ChallengePurpose.password_reset,
                command.code,
                token=command.token,
                consume=False,
            )
            if validated.is_err():
                return Return.err(validated.error)

        return Return.ok(StatusResponse(status="valid", message="Reset code is valid"))
