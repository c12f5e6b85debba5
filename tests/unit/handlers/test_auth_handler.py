"""
Unit tests for AuthHandler parameter handling
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.handlers.auth_handler import AuthHandler
from src.app.handlers.base import Caller, HandlerContext, RequestContext
from src.app.services.challenge_service import ChallengeService

CONFIG = SimpleNamespace(BCRYPT_ROUNDS=4, DEFAULT_PROFILE_ID=2)


@pytest.fixture
def handler():
    from config import ApplicationConfig

    email_sender = MagicMock()
    email_sender.send_email_verification = AsyncMock()
    email_sender.send_password_reset = AsyncMock()
    return AuthHandler(ChallengeService.from_config(ApplicationConfig), email_sender, CONFIG)


@pytest.fixture
def ctx(challenge_uow):
    challenge_uow.users = MagicMock()
    challenge_uow.users.get_by_email = AsyncMock(return_value=None)
    challenge_uow.users.get_by_username = AsyncMock(return_value=None)
    challenge_uow.users.create = AsyncMock(side_effect=lambda user: user)
    challenge_uow.audit_events = MagicMock()
    challenge_uow.audit_events.create = AsyncMock()
    return HandlerContext(
        uow=challenge_uow,
        caller=Caller(profile_id=2),
        request=RequestContext(ip="10.0.0.1", user_agent="pytest"),
    )


@pytest.mark.asyncio
async def test_register_returns_created(handler, ctx):
    result = await handler.register(
        {"email": "ada@example.com", "username": "ada", "password": "SecurePass123!"}, ctx
    )

    assert result.is_ok()
    assert result.value.code == 201
    assert result.value.data["status"] == "verification_sent"
    handler.email_sender.send_email_verification.assert_awaited_once()


@pytest.mark.asyncio
async def test_register_reports_every_invalid_field(handler, ctx):
    result = await handler.register({"email": "nope", "password": "x"}, ctx)

    assert result.error.code == "INVALID_PARAMETERS"
    fields = {alert.split(":")[0] for alert in result.error.alerts}
    assert fields == {"email", "username", "password"}
    # Submitted values are not echoed back
    assert not any("nope" in alert for alert in result.error.alerts)


@pytest.mark.asyncio
async def test_client_supplied_request_context_is_ignored(handler, ctx):
    from uuid import uuid4

    from src.domain.entities import User

    ctx.uow.users.get_by_username.return_value = User(
        id=uuid4(), email="ada@example.com", username="ada", password_hash="x", profile_id=2
    )

    result = await handler.request_password_reset(
        {"identifier": "ada", "request": {"ip": "6.6.6.6"}, "user_agent": "spoofed"}, ctx
    )

    assert result.is_ok()
    (record,) = ctx.uow.password_resets.records.values()
    assert record.meta["request"] == {"ip": "10.0.0.1", "user_agent": "pytest"}


@pytest.mark.asyncio
async def test_reset_password_with_unknown_token_is_invalid(handler, ctx):
    result = await handler.reset_password(
        {"token": "a" * 64, "code": "123456", "new_password": "NewSecurePass123!"}, ctx
    )

    assert result.error.code == "INVALID_TOKEN"


def test_operations_are_declared():
    assert set(AuthHandler.operations) == {
        "register",
        "requestEmailVerification",
        "verifyEmail",
        "requestPasswordReset",
        "verifyPasswordReset",
        "resetPassword",
    }
