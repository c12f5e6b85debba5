"""
Login Use Case

Authenticates a user and opens a session, stepping up to an emailed code
when the login comes from an unrecognized device.
"""

import bcrypt

from src.app.errors import Errors
from src.app.handlers.base import RequestContext
from src.app.services.challenge_service import ChallengeService
from src.app.services.email_sender import EmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.app.utils.hashing import sha256_hex
from src.core.result import Result, Return
from src.domain.entities import AuditEvent, ChallengePurpose
from .dtos import LoginCommand, LoginResponse
from .lookup import find_user
from .session_issuer import open_session

_dummy_hash = None


def _dummy_password_hash() -> bytes:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(12))
    return _dummy_hash


class LoginUseCase:
    """
    Use case for user login.

    Business Rules:
    - Password is checked even for unknown users to keep timing uniform
    - Unknown user and wrong password return the same error
    - REQUIRE_EMAIL_VERIFICATION rejects unverified accounts
    - LOGIN_TWO_STEP_NEW_DEVICE: without a trusted device token a login
      challenge is emailed instead of opening a session
    - A session is created per login and the JWT references it
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

    async def execute(self, command: LoginCommand, request: RequestContext) -> Result[LoginResponse]:
        """
        Errors:
            - INVALID_CREDENTIALS: unknown identifier or wrong password
            - EMAIL_NOT_VERIFIED: verification required and missing
        """
        async with self.uow:
            user = await find_user(self.uow, command.identifier)

            if user is None:
                bcrypt.checkpw(command.password.encode(), _dummy_password_hash())
                return Return.err(Errors.invalid_credentials())

            if not bcrypt.checkpw(command.password.encode(), user.password_hash.encode()):
                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=user.id,
                        profile_id=user.profile_id,
                        action="login_failed",
                        event_metadata={"ip": request.ip},
                    )
                )
                await self.uow.commit()
                return Return.err(Errors.invalid_credentials())

            if self.config.REQUIRE_EMAIL_VERIFICATION and user.email_verified_at is None:
                return Return.err(Errors.email_not_verified())

            if self.config.LOGIN_TWO_STEP_NEW_DEVICE:
                device = None
                if command.device_token:
                    device = await self.uow.user_devices.get(
                        user.id, sha256_hex(command.device_token)
                    )

                if device is None:
                    issued = await self.challenges.issue(
                        self.uow,
                        user.id,
                        ChallengePurpose.login,
                        meta={"request": request.as_meta()},
                    )
                    await self.uow.commit()

                    await self.email_sender.send_login_challenge(
                        to=user.email,
                        token=issued.token,
                        code=issued.code,
                        expires_at=issued.expires_at,
                    )
                    return Return.ok(
                        LoginResponse(
                            status="verification_required",
                            challenge_token=issued.token,
                            challenge_expires_at=issued.expires_at,
                        )
                    )

                await self.uow.user_devices.touch(device)

            session, access_token = await open_session(
                self.uow, user, self.config.SESSION_TTL_DAYS, {"ip": request.ip}
            )
            await self.uow.commit()

        return Return.ok(
            LoginResponse(
                status="authenticated",
                access_token=access_token,
                session_id=str(session.id),
            )
        )
