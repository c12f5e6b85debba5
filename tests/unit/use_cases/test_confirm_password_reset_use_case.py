"""
Unit tests for ConfirmPasswordResetUseCase

Challenge state lives in in-memory stores; users, sessions and audit
events are mocked.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import bcrypt
import pytest

from src.app.services.challenge_service import ChallengePolicy, ChallengeService
from src.app.use_cases.auth import ConfirmPasswordResetUseCase, ResetPasswordCommand
from src.domain.entities import ChallengePurpose


@pytest.fixture
def challenges():
    return ChallengeService(
        policies={ChallengePurpose.password_reset: ChallengePolicy(900, 5)}
    )


@pytest.fixture
def uow(challenge_uow):
    challenge_uow.users = MagicMock()
    challenge_uow.users.update_password = AsyncMock(return_value=True)
    challenge_uow.sessions = MagicMock()
    challenge_uow.sessions.delete_all_by_user_id = AsyncMock(return_value=3)
    challenge_uow.audit_events = MagicMock()
    challenge_uow.audit_events.create = AsyncMock()
    return challenge_uow


@pytest.mark.asyncio
async def test_successful_password_reset(uow, challenges):
    # Arrange
    user_id = uuid4()
    issued = await challenges.issue(uow, user_id, ChallengePurpose.password_reset)
    command = ResetPasswordCommand(
        token=issued.token, code=issued.code, new_password="NewSecurePass123!"
    )

    # Act
    result = await ConfirmPasswordResetUseCase(uow, challenges, bcrypt_rounds=4).execute(command)

    # Assert
    assert result.is_ok()
    assert result.value.status == "success"
    assert result.value.alerts == []

    called_user_id, new_hash = uow.users.update_password.await_args.args
    assert called_user_id == user_id
    assert bcrypt.checkpw(b"NewSecurePass123!", new_hash.encode())

    uow.sessions.delete_all_by_user_id.assert_awaited_once_with(user_id)
    uow.audit_events.create.assert_awaited_once()
    assert uow.audit_events.create.await_args.args[0].action == "password_reset_confirmed"
    assert uow.commit.await_count == 2
    assert uow.password_resets.records[issued.record_id].consumed_at is not None


@pytest.mark.asyncio
async def test_session_cleanup_failure_is_degraded_success(uow, challenges):
    user_id = uuid4()
    issued = await challenges.issue(uow, user_id, ChallengePurpose.password_reset)
    uow.sessions.delete_all_by_user_id.side_effect = RuntimeError("sessions table locked")
    command = ResetPasswordCommand(
        token=issued.token, code=issued.code, new_password="NewSecurePass123!"
    )

    result = await ConfirmPasswordResetUseCase(uow, challenges, bcrypt_rounds=4).execute(command)

    assert result.is_ok()
    assert result.value.status == "degraded"
    assert result.value.alerts
    # Password change was committed before the cleanup attempt
    uow.users.update_password.assert_awaited_once()
    assert uow.commit.await_count == 1
    uow.rollback.assert_awaited()


@pytest.mark.asyncio
async def test_wrong_code_does_not_change_password(uow, challenges):
    issued = await challenges.issue(uow, uuid4(), ChallengePurpose.password_reset)
    wrong = "000000" if issued.code != "000000" else "111111"
    command = ResetPasswordCommand(token=issued.token, code=wrong, new_password="NewSecurePass123!")

    result = await ConfirmPasswordResetUseCase(uow, challenges, bcrypt_rounds=4).execute(command)

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"
    uow.users.update_password.assert_not_awaited()
    uow.sessions.delete_all_by_user_id.assert_not_awaited()
    assert uow.password_resets.records[issued.record_id].attempt_count == 1


@pytest.mark.asyncio
async def test_reset_link_works_only_once(uow, challenges):
    issued = await challenges.issue(uow, uuid4(), ChallengePurpose.password_reset)
    command = ResetPasswordCommand(
        token=issued.token, code=issued.code, new_password="NewSecurePass123!"
    )
    use_case = ConfirmPasswordResetUseCase(uow, challenges, bcrypt_rounds=4)

    first = await use_case.execute(command)
    second = await use_case.execute(command)

    assert first.is_ok()
    assert second.error.code == "INVALID_TOKEN"
    uow.users.update_password.assert_awaited_once()


def test_password_over_bcrypt_limit_is_rejected():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        ResetPasswordCommand(token="a" * 64, code="123456", new_password="é" * 40)
