from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.one_time_code_repository import IOneTimeCodeRepository
from src.domain.entities import OneTimeCode


class OneTimeCodeRepository(IOneTimeCodeRepository):
    """OneTimeCode repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def issue(
        self,
        user_id: UUID,
        purpose: str,
        code_hash: str,
        expires_at: datetime,
        token_hash: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> OneTimeCode:
        otp = OneTimeCode(
            user_id=user_id,
            purpose=purpose,
            token_hash=token_hash,
            code_hash=code_hash,
            meta=meta or {},
            expires_at=expires_at,
        )
        self.session.add(otp)
        await self.session.flush()
        await self.session.refresh(otp)
        return otp

    async def find_by_token_hash(self, purpose: str, token_hash: str) -> Optional[OneTimeCode]:
        stmt = (
            select(OneTimeCode)
            .where(OneTimeCode.purpose == purpose, OneTimeCode.token_hash == token_hash)
            .order_by(OneTimeCode.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def find_latest_for_user(self, user_id: UUID, purpose: str) -> Optional[OneTimeCode]:
        stmt = (
            select(OneTimeCode)
            .where(OneTimeCode.user_id == user_id, OneTimeCode.purpose == purpose)
            .order_by(OneTimeCode.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def supersede_active(self, user_id: UUID, purpose: str, now: datetime) -> int:
        stmt = (
            update(OneTimeCode)
            .where(
                OneTimeCode.user_id == user_id,
                OneTimeCode.purpose == purpose,
                OneTimeCode.consumed_at.is_(None),
            )
            .values(consumed_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def increment_attempt(self, record_id: UUID, max_attempts: int) -> bool:
        stmt = (
            update(OneTimeCode)
            .where(
                OneTimeCode.id == record_id,
                OneTimeCode.consumed_at.is_(None),
                OneTimeCode.attempt_count < max_attempts,
            )
            .values(attempt_count=OneTimeCode.attempt_count + 1)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def consume(self, record_id: UUID, max_attempts: int, now: datetime) -> bool:
        stmt = (
            update(OneTimeCode)
            .where(
                OneTimeCode.id == record_id,
                OneTimeCode.consumed_at.is_(None),
                OneTimeCode.attempt_count < max_attempts,
                OneTimeCode.expires_at > now,
            )
            .values(consumed_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
