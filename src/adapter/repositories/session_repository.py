from typing import Optional
from uuid import UUID

from sqlalchemy import bindparam, text
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.persistence.identifiers import quote_identifier
from src.app.repositories.session_repository import ISessionRepository
from src.domain.base import utcnow
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession, table_name: str = "sessions"):
        self.session = session
        self.table_name = table_name

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def revoke_by_id(self, session_id: UUID) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=utcnow())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def delete_all_by_user_id(self, user_id: UUID) -> int:
        """
        Delete every session row of a user.

        The session table is configurable, so this is the one statement built
        from raw SQL; both identifiers go through quote_identifier().
        """
        table = quote_identifier(self.table_name)
        column = quote_identifier("user_id")
        stmt = text(f"DELETE FROM {table} WHERE {column} = :user_id").bindparams(
            bindparam("user_id", type_=Session.__table__.c.user_id.type)
        )
        result = await self.session.execute(stmt, {"user_id": user_id})
        await self.session.flush()
        return result.rowcount
