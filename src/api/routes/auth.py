from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from src.api.error import raise_for_error
from src.app.handlers.base import Caller, RequestContext
from src.app.services.challenge_service import MAX_CODE_LENGTH, MIN_CODE_LENGTH
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    ChallengeCommand,
    LoginCommand,
    LoginResponse,
    LoginUseCase,
    LogoutUseCase,
    StatusResponse,
    VerifyLoginChallengeUseCase,
)
from src.depends import get_caller, get_request_context, get_unit_of_work, rate_limit

router = APIRouter(tags=["Authentication"])


class LoginRequest(BaseModel):
    """Login HTTP request payload"""

    identifier: str = Field(..., min_length=3, max_length=320, description="Email or username")
    password: str = Field(..., min_length=1, max_length=200)
    device_token: Optional[str] = Field(
        default=None, max_length=256, description="Token of a previously trusted device"
    )


class LoginVerifyRequest(BaseModel):
    token: str = Field(..., min_length=16, max_length=256, description="challenge_token from /login")
    code: str = Field(
        ..., min_length=MIN_CODE_LENGTH, max_length=MAX_CODE_LENGTH, description="Code sent by email"
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("login"))],
)
async def login(
    body: LoginRequest,
    request: Request,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Login with email or username.

    Returns an access token, or ``status="verification_required"`` with a
    challenge token when the device is not trusted and step-up is enabled.

    Raises:
        - 401 INVALID_CREDENTIALS: Wrong identifier or password
        - 403 EMAIL_NOT_VERIFIED: Email verification required
        - 429 TOO_MANY_REQUESTS: Too many login attempts from this ip
    """
    state = request.app.state
    command = LoginCommand(
        identifier=body.identifier, password=body.password, device_token=body.device_token
    )
    use_case = LoginUseCase(uow, state.challenges, state.email_sender, state.config)
    result = await use_case.execute(command, context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/login/verify",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("login/verify"))],
)
async def login_verify(
    body: LoginVerifyRequest,
    request: Request,
    context: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Complete a stepped-up login with the emailed code.

    Returns the access token and a device_token to send on later logins.

    Raises:
        - 400 INVALID_TOKEN: Unknown, used or wrong code
        - 410 EXPIRED_TOKEN: Challenge expired
        - 429 TOO_MANY_REQUESTS: Attempt cap reached or rate limit hit
    """
    state = request.app.state
    use_case = VerifyLoginChallengeUseCase(uow, state.challenges, state.config)
    result = await use_case.execute(ChallengeCommand(token=body.token, code=body.code), context)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/logout", response_model=StatusResponse)
async def logout(
    caller: Caller = Depends(get_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke the session behind the bearer token.

    Raises:
        - 401 LOGIN_REQUIRED: No valid bearer token
    """
    result = await LogoutUseCase(uow).execute(caller)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
