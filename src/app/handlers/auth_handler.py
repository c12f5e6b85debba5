"""
Auth business object

Registration, email verification and password recovery, reachable
through transaction codes. Request ip and user agent come from the
server-side HandlerContext; anything similar in params is ignored.
"""

from pydantic import BaseModel

from src.app.handlers.base import BusinessHandler, HandlerContext, HandlerResponse
from src.app.handlers.params import parse_params
from src.app.services.challenge_service import ChallengeService
from src.app.services.email_sender import EmailSender
from src.app.use_cases.auth import (
    ChallengeCommand,
    ConfirmPasswordResetUseCase,
    EmailCommand,
    IdentifierCommand,
    RegisterCommand,
    RegisterUseCase,
    RequestEmailVerificationUseCase,
    RequestPasswordResetUseCase,
    ResetPasswordCommand,
    VerifyEmailUseCase,
    VerifyPasswordResetUseCase,
)
from src.core.result import Result, Return
from src.domain.entities import BusinessObject


def _respond(result: Result[BaseModel], msg: str, code: int = 200) -> Result[HandlerResponse]:
    if result.is_err():
        return Return.err(result.error)
    return Return.ok(HandlerResponse(code=code, msg=msg, data=result.value.model_dump(mode="json")))


class AuthHandler(BusinessHandler):
    object_name = BusinessObject.auth

    def __init__(self, challenges: ChallengeService, email_sender: EmailSender, config):
        self.challenges = challenges
        self.email_sender = email_sender
        self.config = config

    async def register(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(RegisterCommand, params)
        if parsed.is_err():
            return Return.err(parsed.error)

        use_case = RegisterUseCase(ctx.uow, self.challenges, self.email_sender, self.config)
        result = await use_case.execute(parsed.value, ctx.request)
        return _respond(result, "Account created", code=201)

    async def request_email_verification(
        self, params, ctx: HandlerContext
    ) -> Result[HandlerResponse]:
        parsed = parse_params(EmailCommand, params, scalar_field="email")
        if parsed.is_err():
            return Return.err(parsed.error)

        use_case = RequestEmailVerificationUseCase(ctx.uow, self.challenges, self.email_sender)
        result = await use_case.execute(str(parsed.value.email), ctx.request)
        return _respond(result, "Verification requested")

    async def verify_email(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(ChallengeCommand, params)
        if parsed.is_err():
            return Return.err(parsed.error)

        result = await VerifyEmailUseCase(ctx.uow, self.challenges).execute(parsed.value)
        return _respond(result, "Email verified")

    async def request_password_reset(
        self, params, ctx: HandlerContext
    ) -> Result[HandlerResponse]:
        parsed = parse_params(IdentifierCommand, params, scalar_field="identifier")
        if parsed.is_err():
            return Return.err(parsed.error)

        use_case = RequestPasswordResetUseCase(ctx.uow, self.challenges, self.email_sender)
        result = await use_case.execute(parsed.value.identifier, ctx.request)
        return _respond(result, "Password reset requested")

    async def verify_password_reset(
        self, params, ctx: HandlerContext
    ) -> Result[HandlerResponse]:
        parsed = parse_params(ChallengeCommand, params)
        if parsed.is_err():
            return Return.err(parsed.error)

        result = await VerifyPasswordResetUseCase(ctx.uow, self.challenges).execute(parsed.value)
        return _respond(result, "Reset code verified")

    async def reset_password(self, params, ctx: HandlerContext) -> Result[HandlerResponse]:
        parsed = parse_params(ResetPasswordCommand, params)
        if parsed.is_err():
            return Return.err(parsed.error)

        use_case = ConfirmPasswordResetUseCase(
            ctx.uow, self.challenges, bcrypt_rounds=self.config.BCRYPT_ROUNDS
        )
        result = await use_case.execute(parsed.value)
        return _respond(result, "Password reset")

    operations = {
        "register": register,
        "requestEmailVerification": request_email_verification,
        "verifyEmail": verify_email,
        "requestPasswordReset": request_password_reset,
        "verifyPasswordReset": verify_password_reset,
        "resetPassword": reset_password,
    }
