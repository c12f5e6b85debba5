from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.password_reset_repository import IPasswordResetRepository
from src.domain.entities import PasswordReset


class PasswordResetRepository(IPasswordResetRepository):
    """
    PasswordReset repository implementation using SQLModel.

    The purpose argument of the challenge contract is implied by the table
    and ignored here.
    """

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
    ) -> PasswordReset:
        meta = meta or {}
        request = meta.get("request") or {}
        reset = PasswordReset(
            user_id=user_id,
            token_hash=token_hash,
            code_hash=code_hash,
            sent_to=meta.get("sent_to", ""),
            expires_at=expires_at,
            request_ip=request.get("ip"),
            user_agent=request.get("user_agent"),
        )
        self.session.add(reset)
        await self.session.flush()
        await self.session.refresh(reset)
        return reset

    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordReset]:
        """Get password reset by token hash"""
        stmt = (
            select(PasswordReset)
            .where(PasswordReset.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_by_token_hash(self, purpose: str, token_hash: str) -> Optional[PasswordReset]:
        return await self.get_by_token_hash(token_hash)

    async def find_latest_for_user(self, user_id: UUID, purpose: str) -> Optional[PasswordReset]:
        stmt = (
            select(PasswordReset)
            .where(PasswordReset.user_id == user_id)
            .order_by(PasswordReset.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def supersede_active(self, user_id: UUID, purpose: str, now: datetime) -> int:
        stmt = (
            update(PasswordReset)
            .where(PasswordReset.user_id == user_id, PasswordReset.used_at.is_(None))
            .values(used_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def increment_attempt(self, record_id: UUID, max_attempts: int) -> bool:
        stmt = (
            update(PasswordReset)
            .where(
                PasswordReset.id == record_id,
                PasswordReset.used_at.is_(None),
                PasswordReset.attempt_count < max_attempts,
            )
            .values(attempt_count=PasswordReset.attempt_count + 1)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def consume(self, record_id: UUID, max_attempts: int, now: datetime) -> bool:
        stmt = (
            update(PasswordReset)
            .where(
                PasswordReset.id == record_id,
                PasswordReset.used_at.is_(None),
                PasswordReset.attempt_count < max_attempts,
                PasswordReset.expires_at > now,
            )
            .values(used_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
