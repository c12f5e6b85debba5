"""
Confirm Password Reset Use Case

Consumes a password reset challenge and sets the new password.
"""

import logging

import bcrypt

from src.app.services.challenge_service import ChallengeService
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Result, Return
from src.domain.entities import AuditEvent, ChallengePurpose
from .dtos import ResetPasswordCommand, ResetPasswordResponse

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token locates the reset record, code is checked against its hash
    - Record consumption and the password change commit together
    - Every session of the user is deleted afterwards; if that fails the
      password change stands and the response is "degraded"
    - Password is hashed with bcrypt (BCRYPT_ROUNDS)
    """

    def __init__(self, uow: UnitOfWork, challenges: ChallengeService, bcrypt_rounds: int = 12):
        self.uow = uow
        self.challenges = challenges
        self.bcrypt_rounds = bcrypt_rounds

    async def execute(self, command: ResetPasswordCommand) -> Result[ResetPasswordResponse]:
        """
        Errors:
            - INVALID_TOKEN: unknown, used, superseded or wrong code
            - EXPIRED_TOKEN: reset record expired
            - TOO_MANY_REQUESTS: attempt cap reached
        """
        async with self.uow:
            validated = await self.challenges.validate(
                self.uow,
                ChallengePurpose.password_reset,
                command.code,
                token=command.token,
            )
            if validated.is_err():
                return Return.err(validated.error)

            challenge = validated.value
            password_hash = bcrypt.hashpw(
                command.new_password.encode(), bcrypt.gensalt(self.bcrypt_rounds)
            )
            await self.uow.users.update_password(challenge.user_id, password_hash.decode())

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=challenge.user_id,
                    action="password_reset_confirmed",
                    event_metadata={"reset_id": str(challenge.record_id)},
                )
            )
            await self.uow.commit()

            try:
                deleted = await self.uow.sessions.delete_all_by_user_id(challenge.user_id)
                await self.uow.commit()
            except Exception as e:
                await self.uow.rollback()
                logger.error(
                    f"Password reset {challenge.record_id}: session cleanup failed "
                    f"({type(e).__name__})"
                )
                return Return.ok(
                    ResetPasswordResponse(
                        status="degraded",
                        message="Password has been reset",
                        alerts=["Existing sessions could not be signed out"],
                    )
                )

        logger.info(f"Password reset {challenge.record_id}: {deleted} session(s) removed")
        return Return.ok(
            ResetPasswordResponse(status="success", message="Password has been reset successfully")
        )
