"""
Challenge Service

Issues and validates short-lived, single-use secrets: password reset
links, email verification codes and login step-up codes.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional
from uuid import UUID

from src.app.errors import Errors
from src.app.repositories.challenge_repository import IChallengeRepository
from src.app.services.unit_of_work import UnitOfWork
from src.app.utils.hashing import hashes_match, sha256_hex
from src.core.result import Result, Return
from src.domain.base import utcnow
from src.domain.entities import ChallengePurpose

logger = logging.getLogger(__name__)

MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 12


@dataclass(frozen=True)
class ChallengePolicy:
    ttl_seconds: int
    max_attempts: int


@dataclass(frozen=True)
class IssuedChallenge:
    """Raw secrets are only ever held here, for delivery to the user"""

    record_id: UUID
    user_id: UUID
    purpose: ChallengePurpose
    code: str
    token: Optional[str]
    expires_at: datetime


@dataclass(frozen=True)
class ValidatedChallenge:
    record_id: UUID
    user_id: UUID
    purpose: ChallengePurpose
    meta: Dict[str, Any] = field(default_factory=dict)


class ChallengeService:
    """
    Challenge lifecycle shared by every purpose.

    Business Rules:
    - Issuing supersedes all active records for (user_id, purpose)
    - Only SHA-256 hashes are persisted; raw secrets are returned once
    - Validation order: missing/consumed -> INVALID_TOKEN, expired ->
      EXPIRED_TOKEN, attempt cap -> TOO_MANY_REQUESTS, then the secret check
    - A wrong secret increments attempt_count and is committed immediately
    - Consumption is a conditional update; only one caller can win it

    The service keeps no per-call state; the unit of work is passed to each
    call and the caller owns commit of issue/consume.
    """

    def __init__(
        self,
        policies: Mapping[ChallengePurpose, ChallengePolicy],
        code_length: int = 6,
        code_charset: str = "0123456789",
        token_bytes: int = 32,
        clock: Callable[[], datetime] = utcnow,
    ):
        if not MIN_CODE_LENGTH <= code_length <= MAX_CODE_LENGTH or not code_charset:
            raise ValueError(
                f"OTP code length must be {MIN_CODE_LENGTH}-{MAX_CODE_LENGTH} "
                "with a non-empty charset"
            )
        if token_bytes < 16:
            raise ValueError("Challenge tokens need at least 16 random bytes")
        self.policies = dict(policies)
        self.code_length = code_length
        self.code_charset = code_charset
        self.token_bytes = token_bytes
        self.clock = clock

    @classmethod
    def from_config(cls, config) -> "ChallengeService":
        return cls(
            policies={
                ChallengePurpose.password_reset: ChallengePolicy(
                    config.PASSWORD_RESET_TTL_SECONDS, config.PASSWORD_RESET_MAX_ATTEMPTS
                ),
                ChallengePurpose.email_verification: ChallengePolicy(
                    config.EMAIL_VERIFICATION_TTL_SECONDS,
                    config.EMAIL_VERIFICATION_MAX_ATTEMPTS,
                ),
                ChallengePurpose.login: ChallengePolicy(
                    config.LOGIN_CHALLENGE_TTL_SECONDS, config.LOGIN_CHALLENGE_MAX_ATTEMPTS
                ),
            },
            code_length=config.OTP_CODE_LENGTH,
            code_charset=config.OTP_CODE_CHARSET,
            token_bytes=config.CHALLENGE_TOKEN_BYTES,
        )

    def policy(self, purpose: ChallengePurpose) -> ChallengePolicy:
        return self.policies[ChallengePurpose(purpose)]

    def _store(self, uow: UnitOfWork, purpose: ChallengePurpose) -> IChallengeRepository:
        if purpose == ChallengePurpose.password_reset:
            return uow.password_resets
        return uow.one_time_codes

    def generate_code(self) -> str:
        return "".join(secrets.choice(self.code_charset) for _ in range(self.code_length))

    def generate_token(self) -> str:
        return secrets.token_hex(self.token_bytes)

    async def issue(
        self,
        uow: UnitOfWork,
        user_id: UUID,
        purpose: ChallengePurpose,
        *,
        with_token: bool = True,
        meta: Optional[Dict[str, Any]] = None,
    ) -> IssuedChallenge:
        """
        Supersede active challenges and persist a new one.

        Args:
            uow: Entered unit of work; the caller commits
            user_id: Subject of the challenge
            purpose: Challenge purpose (selects store and policy)
            with_token: Also generate a link token that locates the record
            meta: Opaque JSON stored alongside the record

        Returns:
            IssuedChallenge holding the raw code (and token)
        """
        purpose = ChallengePurpose(purpose)
        policy = self.policy(purpose)
        store = self._store(uow, purpose)
        now = self.clock()

        superseded = await store.supersede_active(user_id, purpose.value, now)
        if superseded:
            logger.info(f"Superseded {superseded} active {purpose.value} challenge(s)")

        code = self.generate_code()
        token = self.generate_token() if with_token else None
        expires_at = now + timedelta(seconds=policy.ttl_seconds)

        record = await store.issue(
            user_id=user_id,
            purpose=purpose.value,
            code_hash=sha256_hex(code),
            expires_at=expires_at,
            token_hash=sha256_hex(token) if token else None,
            meta=meta,
        )
        return IssuedChallenge(
            record_id=record.id,
            user_id=user_id,
            purpose=purpose,
            code=code,
            token=token,
            expires_at=expires_at,
        )

    async def validate(
        self,
        uow: UnitOfWork,
        purpose: ChallengePurpose,
        code: str,
        *,
        token: Optional[str] = None,
        user_id: Optional[UUID] = None,
        consume: bool = True,
    ) -> Result[ValidatedChallenge]:
        """
        Check a caller-supplied code against the stored challenge.

        The record is located by link token when given, otherwise by
        (user_id, purpose). With consume=False a correct code leaves the
        record active (used by "check before submit" steps).

        Errors:
            - INVALID_TOKEN: no record, already consumed, wrong code, lost race
            - EXPIRED_TOKEN: record past expires_at
            - TOO_MANY_REQUESTS: attempt cap reached
        """
        if token is None and user_id is None:
            raise ValueError("A challenge is located by token or by user_id")

        purpose = ChallengePurpose(purpose)
        policy = self.policy(purpose)
        store = self._store(uow, purpose)

        if token is not None:
            record = await store.find_by_token_hash(purpose.value, sha256_hex(token))
            if record is not None and user_id is not None and record.user_id != user_id:
                record = None
        else:
            record = await store.find_latest_for_user(user_id, purpose.value)

        now = self.clock()
        if record is None or record.consumed_at is not None:
            return Return.err(Errors.invalid_token())

        if record.expires_at <= now:
            return Return.err(Errors.expired_token())

        if record.attempt_count >= policy.max_attempts:
            return Return.err(Errors.too_many_requests())

        if not hashes_match(sha256_hex(code or ""), record.code_hash):
            counted = await store.increment_attempt(record.id, policy.max_attempts)
            # Durable regardless of what the caller does next
            await uow.commit()
            logger.info(
                f"Rejected {purpose.value} challenge {record.id} (attempt counted: {counted})"
            )
            return Return.err(Errors.invalid_token())

        meta = dict(getattr(record, "meta", None) or {})
        result = ValidatedChallenge(
            record_id=record.id, user_id=record.user_id, purpose=purpose, meta=meta
        )
        if not consume:
            return Return.ok(result)

        if not await store.consume(record.id, policy.max_attempts, now):
            logger.warning(f"{purpose.value} challenge {record.id} consumed concurrently")
            return Return.err(Errors.invalid_token())

        return Return.ok(result)
