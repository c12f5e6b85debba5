import asyncio
import copy
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from src.app.repositories.challenge_repository import IChallengeRepository


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


class FakeChallengeStore(IChallengeRepository):
    """
    In-memory challenge store with the same compare-and-set semantics as the
    SQL repositories. Reads yield to the event loop so concurrent callers can
    interleave between reading a record and consuming it.
    """

    def __init__(self):
        self.records: Dict[UUID, SimpleNamespace] = {}

    async def issue(
        self,
        user_id: UUID,
        purpose: str,
        code_hash: str,
        expires_at: datetime,
        token_hash: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ):
        record = SimpleNamespace(
            id=uuid4(),
            user_id=user_id,
            purpose=purpose,
            code_hash=code_hash,
            token_hash=token_hash,
            meta=meta or {},
            attempt_count=0,
            consumed_at=None,
            expires_at=expires_at,
            seq=len(self.records),
        )
        self.records[record.id] = record
        return copy.copy(record)

    async def find_by_token_hash(self, purpose: str, token_hash: str):
        found = None
        for record in self.records.values():
            if record.purpose == purpose and record.token_hash == token_hash:
                found = copy.copy(record)
        # Snapshot taken before yielding, like a row read ahead of a racing update
        await asyncio.sleep(0)
        return found

    async def find_latest_for_user(self, user_id: UUID, purpose: str):
        matching = [
            r for r in self.records.values() if r.user_id == user_id and r.purpose == purpose
        ]
        found = copy.copy(max(matching, key=lambda r: r.seq)) if matching else None
        await asyncio.sleep(0)
        return found

    async def supersede_active(self, user_id: UUID, purpose: str, now: datetime) -> int:
        count = 0
        for record in self.records.values():
            if record.user_id == user_id and record.purpose == purpose and record.consumed_at is None:
                record.consumed_at = now
                count += 1
        return count

    async def increment_attempt(self, record_id: UUID, max_attempts: int) -> bool:
        record = self.records.get(record_id)
        if record is None or record.consumed_at is not None or record.attempt_count >= max_attempts:
            return False
        record.attempt_count += 1
        return True

    async def consume(self, record_id: UUID, max_attempts: int, now: datetime) -> bool:
        record = self.records.get(record_id)
        if (
            record is None
            or record.consumed_at is not None
            or record.attempt_count >= max_attempts
            or record.expires_at <= now
        ):
            return False
        record.consumed_at = now
        return True


@pytest.fixture
def challenge_uow(mock_uow):
    """mock_uow whose challenge stores are in-memory fakes"""
    mock_uow.password_resets = FakeChallengeStore()
    mock_uow.one_time_codes = FakeChallengeStore()
    return mock_uow
