"""
Unit tests for ChallengeService

Uses in-memory challenge stores with conditional-update semantics and an
injectable clock.
"""

import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from src.app.services.challenge_service import ChallengePolicy, ChallengeService
from src.app.utils.hashing import sha256_hex
from src.domain.entities import ChallengePurpose

NOW = datetime(2026, 1, 1, 12, 0, 0)


class Clock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def service(clock):
    return ChallengeService(
        policies={
            ChallengePurpose.password_reset: ChallengePolicy(ttl_seconds=900, max_attempts=5),
            ChallengePurpose.email_verification: ChallengePolicy(ttl_seconds=900, max_attempts=5),
            ChallengePurpose.login: ChallengePolicy(ttl_seconds=600, max_attempts=3),
        },
        code_length=6,
        code_charset="0123456789",
        token_bytes=32,
        clock=clock,
    )


def _wrong(code: str) -> str:
    return "000000" if code != "000000" else "111111"


@pytest.mark.asyncio
async def test_issue_persists_only_hashes(service, challenge_uow):
    user_id = uuid4()

    issued = await service.issue(challenge_uow, user_id, ChallengePurpose.password_reset)

    assert len(issued.code) == 6 and issued.code.isdigit()
    assert len(issued.token) == 64
    assert issued.expires_at == NOW + timedelta(seconds=900)

    record = challenge_uow.password_resets.records[issued.record_id]
    assert record.code_hash == sha256_hex(issued.code)
    assert record.token_hash == sha256_hex(issued.token)
    assert issued.code not in (record.code_hash, record.token_hash)
    assert record.attempt_count == 0
    # Purpose selects the store
    assert challenge_uow.one_time_codes.records == {}


@pytest.mark.asyncio
async def test_issue_does_not_commit(service, challenge_uow):
    await service.issue(challenge_uow, uuid4(), ChallengePurpose.login)

    challenge_uow.commit.assert_not_awaited()
    assert len(challenge_uow.one_time_codes.records) == 1


@pytest.mark.asyncio
async def test_correct_code_consumes_once(service, challenge_uow):
    user_id = uuid4()
    issued = await service.issue(challenge_uow, user_id, ChallengePurpose.password_reset)

    first = await service.validate(
        challenge_uow, ChallengePurpose.password_reset, issued.code, token=issued.token
    )
    second = await service.validate(
        challenge_uow, ChallengePurpose.password_reset, issued.code, token=issued.token
    )

    assert first.is_ok()
    assert first.value.user_id == user_id
    assert first.value.record_id == issued.record_id
    assert second.is_err()
    assert second.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_issue_supersedes_previous_challenge(service, challenge_uow):
    user_id = uuid4()
    old = await service.issue(challenge_uow, user_id, ChallengePurpose.password_reset)
    new = await service.issue(challenge_uow, user_id, ChallengePurpose.password_reset)

    stale = await service.validate(
        challenge_uow, ChallengePurpose.password_reset, old.code, token=old.token
    )
    fresh = await service.validate(
        challenge_uow, ChallengePurpose.password_reset, new.code, token=new.token
    )

    assert stale.error.code == "INVALID_TOKEN"
    assert fresh.is_ok()


@pytest.mark.asyncio
async def test_supersede_is_scoped_to_user_and_purpose(service, challenge_uow):
    user_id = uuid4()
    reset = await service.issue(challenge_uow, user_id, ChallengePurpose.email_verification)
    await service.issue(challenge_uow, user_id, ChallengePurpose.login)
    await service.issue(challenge_uow, uuid4(), ChallengePurpose.email_verification)

    result = await service.validate(
        challenge_uow, ChallengePurpose.email_verification, reset.code, token=reset.token
    )

    assert result.is_ok()


@pytest.mark.asyncio
async def test_five_wrong_codes_then_correct_code_is_too_many_requests(service, challenge_uow):
    issued = await service.issue(challenge_uow, uuid4(), ChallengePurpose.password_reset)

    for _ in range(5):
        result = await service.validate(
            challenge_uow,
            ChallengePurpose.password_reset,
            _wrong(issued.code),
            token=issued.token,
        )
        assert result.error.code == "INVALID_TOKEN"

    final = await service.validate(
        challenge_uow, ChallengePurpose.password_reset, issued.code, token=issued.token
    )

    assert final.error.code == "TOO_MANY_REQUESTS"
    assert challenge_uow.password_resets.records[issued.record_id].attempt_count == 5
    # Each wrong attempt is committed before the error is returned
    assert challenge_uow.commit.await_count == 5


@pytest.mark.asyncio
async def test_expired_challenge_rejects_correct_code(service, challenge_uow, clock):
    issued = await service.issue(challenge_uow, uuid4(), ChallengePurpose.email_verification)
    clock.advance(seconds=901)

    result = await service.validate(
        challenge_uow, ChallengePurpose.email_verification, issued.code, token=issued.token
    )

    assert result.error.code == "EXPIRED_TOKEN"
    assert challenge_uow.one_time_codes.records[issued.record_id].consumed_at is None


@pytest.mark.asyncio
async def test_expiry_is_checked_before_attempt_cap(service, challenge_uow, clock):
    issued = await service.issue(challenge_uow, uuid4(), ChallengePurpose.login)
    challenge_uow.one_time_codes.records[issued.record_id].attempt_count = 3
    clock.advance(minutes=11)

    result = await service.validate(
        challenge_uow, ChallengePurpose.login, issued.code, token=issued.token
    )

    assert result.error.code == "EXPIRED_TOKEN"


@pytest.mark.asyncio
async def test_verify_only_leaves_challenge_active(service, challenge_uow):
    issued = await service.issue(challenge_uow, uuid4(), ChallengePurpose.password_reset)

    checked = await service.validate(
        challenge_uow,
        ChallengePurpose.password_reset,
        issued.code,
        token=issued.token,
        consume=False,
    )
    used = await service.validate(
        challenge_uow, ChallengePurpose.password_reset, issued.code, token=issued.token
    )

    assert checked.is_ok()
    assert used.is_ok()


@pytest.mark.asyncio
async def test_locate_latest_by_user_without_token(service, challenge_uow):
    user_id = uuid4()
    issued = await service.issue(
        challenge_uow, user_id, ChallengePurpose.login, with_token=False, meta={"ip": "1.2.3.4"}
    )

    assert issued.token is None
    result = await service.validate(
        challenge_uow, ChallengePurpose.login, issued.code, user_id=user_id
    )

    assert result.is_ok()
    assert result.value.meta == {"ip": "1.2.3.4"}


@pytest.mark.asyncio
async def test_token_of_another_user_is_invalid(service, challenge_uow):
    issued = await service.issue(challenge_uow, uuid4(), ChallengePurpose.login)

    result = await service.validate(
        challenge_uow, ChallengePurpose.login, issued.code, token=issued.token, user_id=uuid4()
    )

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_unknown_token_is_invalid(service, challenge_uow):
    result = await service.validate(
        challenge_uow, ChallengePurpose.password_reset, "123456", token="f" * 64
    )

    assert result.error.code == "INVALID_TOKEN"
    challenge_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_concurrent_validation_has_exactly_one_winner(service, challenge_uow):
    issued = await service.issue(challenge_uow, uuid4(), ChallengePurpose.password_reset)

    results = await asyncio.gather(
        *[
            service.validate(
                challenge_uow, ChallengePurpose.password_reset, issued.code, token=issued.token
            )
            for _ in range(5)
        ]
    )

    winners = [r for r in results if r.is_ok()]
    losers = [r for r in results if r.is_err()]
    assert len(winners) == 1
    assert {r.error.code for r in losers} == {"INVALID_TOKEN"}


@pytest.mark.asyncio
async def test_validate_needs_token_or_user(service, challenge_uow):
    with pytest.raises(ValueError):
        await service.validate(challenge_uow, ChallengePurpose.login, "123456")


def test_generated_codes_follow_charset():
    service = ChallengeService(policies={}, code_length=8, code_charset="AB")

    code = service.generate_code()

    assert len(code) == 8
    assert set(code) <= {"A", "B"}


@pytest.mark.parametrize(
    "kwargs",
    [{"code_length": 3}, {"code_length": 13}, {"code_charset": ""}, {"token_bytes": 8}],
)
def test_invalid_policy_is_rejected(kwargs):
    with pytest.raises(ValueError):
        ChallengeService(policies={}, **kwargs)


def test_longest_allowed_code_passes_command_validation():
    from src.app.use_cases.auth.dtos import ChallengeCommand

    service = ChallengeService(policies={}, code_length=12)

    command = ChallengeCommand(token="t" * 64, code=service.generate_code())

    assert len(command.code) == 12
