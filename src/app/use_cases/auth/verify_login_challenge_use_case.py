"""
Verify Login Challenge Use Case

Completes a stepped-up login: consumes the login code, trusts the device
and opens the session.
"""

import secrets

from src.app.errors import Errors
from src.app.handlers.base import RequestContext
from src.app.services.challenge_service import ChallengeService
from src.app.services.unit_of_work import UnitOfWork
from src.app.utils.hashing import sha256_hex
from src.core.result import Result, Return
from src.domain.entities import ChallengePurpose
from .dtos import ChallengeCommand, LoginResponse
from .session_issuer import open_session


class VerifyLoginChallengeUseCase:
    def __init__(self, uow: UnitOfWork, challenges: ChallengeService, config):
        self.uow = uow
        self.challenges = challenges
        self.config = config

    async def execute(
        self, command: ChallengeCommand, request: RequestContext
    ) -> Result[LoginResponse]:
        async with self.uow:
            validated = await self.challenges.validate(
                self.uow, ChallengePurpose.login, command.code, token=command.token
            )
            if validated.is_err():
                return Return.err(validated.error)

            user = await self.uow.users.get_by_id(validated.value.user_id)
            if user is None:
                return Return.err(Errors.invalid_token())

            # Raw device token goes back to the client once; only its hash is stored
            device_token = secrets.token_urlsafe(32)
            await self.uow.user_devices.trust(
                user.id, sha256_hex(device_token), request.user_agent, request.ip
            )

            session, access_token = await open_session(
                self.uow,
                user,
                self.config.SESSION_TTL_DAYS,
                {"ip": request.ip, "new_device": True},
            )
            await self.uow.commit()

        return Return.ok(
            LoginResponse(
                status="authenticated",
                access_token=access_token,
                session_id=str(session.id),
                device_token=device_token,
            )
        )
