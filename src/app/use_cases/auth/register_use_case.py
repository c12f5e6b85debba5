"""
Register Use Case

Creates an account and sends the email verification challenge.
"""

import bcrypt

from src.app.errors import Errors
from src.app.handlers.base import RequestContext
from src.app.services.challenge_service import ChallengeService
from src.app.services.email_sender import EmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Result, Return
from src.domain.entities import AuditEvent, ChallengePurpose, User
from .dtos import RegisterCommand, RegisterResponse


class RegisterUseCase:
    """
    Use case for self-service registration.

    Business Rules:
    - Email (lower-cased) and username must both be unused
    - The response does not say which of the two collided
    - Password hashed with bcrypt (BCRYPT_ROUNDS)
    - New users get DEFAULT_PROFILE_ID
    - An email_verification challenge (token + code) is issued and emailed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        challenges: ChallengeService,
        email_sender: EmailSender,
        config,
    ):
        self.uow = uow
        self.challenges = challenges
        self.email_sender = email_sender
        self.config = config

    async def execute(
        self, command: RegisterCommand, request: RequestContext
    ) -> Result[RegisterResponse]:
        email = str(command.email).strip().lower()
        username = command.username.strip()

        async with self.uow:
            by_email = await self.uow.users.get_by_email(email)
            by_username = await self.uow.users.get_by_username(username)
            if by_email is not None or by_username is not None:
                return Return.err(Errors.already_registered())

            password_hash = bcrypt.hashpw(
                command.password.encode(), bcrypt.gensalt(self.config.BCRYPT_ROUNDS)
            )
            user = await self.uow.users.create(
                User(
                    email=email,
                    username=username,
                    password_hash=password_hash.decode(),
                    profile_id=self.config.DEFAULT_PROFILE_ID,
                )
            )

            issued = await self.challenges.issue(
                self.uow,
                user.id,
                ChallengePurpose.email_verification,
                meta={"request": request.as_meta()},
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    profile_id=user.profile_id,
                    action="register",
                    event_metadata={"username": username},
                )
            )

            await self.uow.commit()

        await self.email_sender.send_email_verification(
            to=email, token=issued.token, code=issued.code, expires_at=issued.expires_at
        )

        return Return.ok(
            RegisterResponse(
                user_id=str(user.id),
                status="verification_sent",
                message="Account created, check your email to verify it",
            )
        )
